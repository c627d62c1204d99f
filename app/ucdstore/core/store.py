"""Store facade and factories.

UCDStore bundles a StoreContext with the reconciliation operations so that
callers (the CLI in particular) do not have to thread the context around.
"""

import logging
from collections.abc import Iterable
from pathlib import Path

from ucdstore.bridges.base import FileSystemBridge
from ucdstore.bridges.local import LocalBridge
from ucdstore.bridges.memory import MemoryBridge
from ucdstore.client import UCDClient
from ucdstore.config import StoreConfig
from ucdstore.core.analyze import analyze
from ucdstore.core.clean import clean
from ucdstore.core.context import StoreContext
from ucdstore.core.files import get_file, get_file_tree, list_files
from ucdstore.core.manifest import (
    MANIFEST_FILENAME,
    read_manifest_or_default,
    write_manifest,
)
from ucdstore.core.mirror import mirror
from ucdstore.core.repair import repair
from ucdstore.core.resolver import ExpectedSetResolver
from ucdstore.models.entry import FSEntry
from ucdstore.models.manifest import StoreManifest
from ucdstore.models.reports import AnalyzeResult, CleanResult, MirrorResult, RepairResult

logger = logging.getLogger(__name__)


class UCDStore:
    """A store of UCD versions held in a storage bridge.

    Example:
        >>> store = await create_local_store(StoreConfig(versions=["16.0.0"]))
        >>> [result] = await store.analyze()
        >>> result.is_complete
        False
    """

    def __init__(self, ctx: StoreContext, concurrency: int = 5) -> None:
        self.ctx = ctx
        self.concurrency = concurrency

    @property
    def bridge(self) -> FileSystemBridge:
        return self.ctx.bridge

    @property
    def versions(self) -> tuple[str, ...]:
        return self.ctx.versions

    async def analyze(
        self,
        versions: Iterable[str] | None = None,
        check_orphaned: bool = True,
    ) -> list[AnalyzeResult]:
        return await analyze(self.ctx, versions, check_orphaned=check_orphaned)

    async def mirror(
        self,
        versions: Iterable[str] | None = None,
        concurrency: int | None = None,
        force: bool = False,
        dry_run: bool = False,
    ) -> list[MirrorResult]:
        return await mirror(
            self.ctx,
            versions,
            concurrency=concurrency or self.concurrency,
            force=force,
            dry_run=dry_run,
        )

    async def clean(
        self,
        versions: Iterable[str] | None = None,
        concurrency: int | None = None,
        dry_run: bool = False,
    ) -> list[CleanResult]:
        return await clean(
            self.ctx,
            versions,
            dry_run=dry_run,
            concurrency=concurrency or self.concurrency,
        )

    async def repair(
        self,
        versions: Iterable[str] | None = None,
        concurrency: int | None = None,
        dry_run: bool = False,
    ) -> list[RepairResult]:
        return await repair(
            self.ctx,
            versions,
            concurrency=concurrency or self.concurrency,
            dry_run=dry_run,
        )

    async def init(
        self,
        versions: Iterable[str] | None = None,
        dry_run: bool = False,
    ) -> list[MirrorResult]:
        """Create the store: write an empty manifest and mirror the versions.

        Args:
            versions: Versions to mirror. All known versions if None.
            dry_run: Report what would be mirrored without writing anything.

        Returns:
            Mirror results, one per version.

        Raises:
            VersionNotFoundError: If a version is unknown. Nothing is written.
        """
        resolved = self.ctx.resolve_versions(versions)
        if not dry_run and not await self.bridge.exists(self.ctx.manifest_path):
            await write_manifest(self.bridge, StoreManifest(), self.ctx.manifest_path)
            logger.info("Created store manifest at %s", self.ctx.manifest_path)
        return await self.mirror(resolved, dry_run=dry_run)

    async def get_file(self, version: str, path: str, allow_api: bool = False) -> bytes:
        return await get_file(self.ctx, version, path, allow_api=allow_api)

    async def list_files(self, version: str, allow_api: bool = False) -> list[str]:
        return await list_files(self.ctx, version, allow_api=allow_api)

    async def get_file_tree(self, version: str, allow_api: bool = False) -> list[FSEntry]:
        return await get_file_tree(self.ctx, version, allow_api=allow_api)

    async def manifest(self) -> StoreManifest:
        """Read the store manifest, or an empty one if there is none."""
        return await read_manifest_or_default(self.bridge, self.ctx.manifest_path)

    async def tracked_versions(self) -> list[str]:
        """Versions recorded in the store manifest."""
        return (await self.manifest()).versions


async def create_store(
    bridge: FileSystemBridge,
    config: StoreConfig,
    client: UCDClient | None = None,
) -> UCDStore:
    """Build a store over a bridge.

    The version set is the configured versions followed by any other
    versions tracked in the store manifest. Operations then pick their
    versions from that set and reject anything outside it.

    Args:
        bridge: Storage for the store.
        config: Store configuration.
        client: API client. Built from the config if None.

    Returns:
        Ready-to-use UCDStore.

    Raises:
        InvalidManifestError: If the store manifest exists but is unusable.
    """
    client = client or UCDClient(config.client_config())
    manifest = await read_manifest_or_default(bridge, MANIFEST_FILENAME)
    version_set = dict.fromkeys([*config.versions, *manifest.versions])

    path_filter = config.path_filter()
    ctx = StoreContext(
        bridge=bridge,
        resolver=ExpectedSetResolver(client, path_filter),
        client=client,
        versions=tuple(version_set),
        path_filter=path_filter,
    )
    logger.debug("Created store over %s with versions %s", bridge.meta.name, ctx.versions)
    return UCDStore(ctx, concurrency=config.concurrency)


async def create_local_store(
    config: StoreConfig,
    store_path: Path | None = None,
    client: UCDClient | None = None,
) -> UCDStore:
    """Build a store on the local filesystem at config.store_path."""
    bridge = LocalBridge(store_path or config.store_path)
    return await create_store(bridge, config, client)


async def create_memory_store(
    config: StoreConfig,
    initial_files: dict[str, str | bytes] | None = None,
    client: UCDClient | None = None,
) -> UCDStore:
    """Build a store held entirely in memory."""
    bridge = MemoryBridge(initial_files=initial_files)
    return await create_store(bridge, config, client)
