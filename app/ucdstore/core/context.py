"""Shared state passed to every reconciliation operation."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from ucdstore.core.manifest import MANIFEST_FILENAME, read_manifest_or_default, write_manifest
from ucdstore.errors import VersionNotFoundError
from ucdstore.filters import PathFilter

if TYPE_CHECKING:
    from ucdstore.bridges.base import FileSystemBridge
    from ucdstore.client import RemoteFile
    from ucdstore.models.entry import FSEntry

logger = logging.getLogger(__name__)

# Well-known file kept at a version root that is never an expected file.
SNAPSHOT_FILENAME = "snapshot.json"


class ExpectedFiles(Protocol):
    async def expected_files(self, version: str) -> list[str]: ...


class FileSource(Protocol):
    async def get_file(self, version: str, path: str) -> RemoteFile: ...

    async def get_file_tree(self, version: str) -> list[FSEntry]: ...


@dataclass(frozen=True, slots=True)
class StoreContext:
    """Everything an operation needs to reconcile a store.

    Attributes:
        bridge: Storage the store lives in.
        resolver: Source of each version's expected files.
        client: Source of file contents for downloads.
        versions: Versions the store knows about.
        manifest_path: Bridge-relative path of the store manifest.
        path_filter: Include/exclude globs applied to version-relative paths.
    """

    bridge: FileSystemBridge
    resolver: ExpectedFiles
    client: FileSource
    versions: tuple[str, ...]
    manifest_path: str = MANIFEST_FILENAME
    path_filter: PathFilter = PathFilter()

    def resolve_versions(self, versions: Iterable[str] | None) -> list[str]:
        """Validate requested versions against the store's version set.

        Args:
            versions: Requested versions, or None for all known versions.

        Returns:
            Requested versions in order, without duplicates.

        Raises:
            VersionNotFoundError: If a requested version is unknown.
        """
        if versions is None:
            return list(self.versions)

        known = set(self.versions)
        resolved: list[str] = []
        for version in versions:
            if version not in known:
                raise VersionNotFoundError(version)
            if version not in resolved:
                resolved.append(version)
        return resolved

    async def track_versions(self, expected: Mapping[str, Iterable[str]]) -> None:
        """Add versions to the store manifest if the bridge can write."""
        if not expected or "write" not in self.bridge.capabilities:
            return
        manifest = await read_manifest_or_default(self.bridge, self.manifest_path)
        await write_manifest(self.bridge, manifest.track(expected), self.manifest_path)
        logger.info("Tracking versions: %s", ", ".join(sorted(expected)))

    async def untrack_versions(self, versions: Iterable[str]) -> None:
        """Remove versions from the store manifest if it exists."""
        versions = list(versions)
        if not versions or "write" not in self.bridge.capabilities:
            return
        if not await self.bridge.exists(self.manifest_path):
            return
        manifest = await read_manifest_or_default(self.bridge, self.manifest_path)
        if not any(version in manifest for version in versions):
            return
        await write_manifest(self.bridge, manifest.untrack(versions), self.manifest_path)
        logger.info("Untracked versions: %s", ", ".join(sorted(versions)))
