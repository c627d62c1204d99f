"""In-memory storage bridge.

Files live in a flat dict keyed by normalized path. Directories are implicit:
a directory exists while at least one stored path lives below it, so mkdir is
a no-op and a directory vanishes with its last file.
"""

import logging
from collections.abc import Iterable, Mapping

from ucdstore.bridges.base import BridgeMetadata, FileSystemBridge
from ucdstore.errors import (
    BridgeFileNotFoundError,
    BridgeIsADirectoryError,
    PathTraversalError,
)
from ucdstore.models.entry import DirectoryEntry, FileEntry, FSEntry
from ucdstore.tree import normalize_path

logger = logging.getLogger(__name__)


class MemoryBridge(FileSystemBridge):
    """Bridge backed by a dictionary, mainly for tests and previews.

    Attributes:
        files: The underlying path to bytes mapping.
    """

    def __init__(
        self,
        initial_files: Mapping[str, str | bytes] | None = None,
        capabilities: Iterable[str] | None = None,
    ) -> None:
        """Initialize the bridge.

        Args:
            initial_files: Files to preload; text values are stored UTF-8 encoded.
            capabilities: Optional capabilities to declare (default: all).
        """
        super().__init__(capabilities)
        self.files: dict[str, bytes] = {}
        for path, content in (initial_files or {}).items():
            data = content.encode("utf-8") if isinstance(content, str) else content
            self.files[self._key(path)] = data

    @property
    def meta(self) -> BridgeMetadata:
        return BridgeMetadata(
            name="memory",
            description="In-memory bridge using a flat mapping for storage.",
        )

    @staticmethod
    def _key(path: str) -> str:
        try:
            return normalize_path(path)
        except ValueError as e:
            raise PathTraversalError("", path) from e

    def _prefix(self, path: str) -> str:
        key = self._key(path)
        return f"{key}/" if key else ""

    def _has_children(self, path: str) -> bool:
        prefix = self._prefix(path)
        return any(stored.startswith(prefix) for stored in self.files)

    async def read(self, path: str) -> bytes:
        key = self._key(path)
        if key in self.files:
            return self.files[key]
        if not key or self._has_children(path):
            raise BridgeIsADirectoryError(path)
        raise BridgeFileNotFoundError(path)

    async def exists(self, path: str) -> bool:
        key = self._key(path)
        if not key or key in self.files:
            return True
        return self._has_children(path)

    async def listdir(self, path: str, recursive: bool = False) -> list[FSEntry]:
        prefix = self._prefix(path)
        relative = sorted(
            stored[len(prefix):] for stored in self.files if stored.startswith(prefix)
        )
        if not recursive:
            return self._list_direct(relative)
        return self._build_tree(relative, "")

    @staticmethod
    def _list_direct(relative: list[str]) -> list[FSEntry]:
        entries: list[FSEntry] = []
        seen_dirs: set[str] = set()
        for rel in relative:
            head, sep, _ = rel.partition("/")
            if not sep:
                entries.append(FileEntry(name=head, path=head))
            elif head not in seen_dirs:
                seen_dirs.add(head)
                entries.append(DirectoryEntry(name=head, path=head))
        return entries

    def _build_tree(self, relative: list[str], base: str) -> list[FSEntry]:
        entries: list[FSEntry] = []
        groups: dict[str, list[str]] = {}
        for rel in relative:
            head, sep, rest = rel.partition("/")
            if not sep:
                entries.append(FileEntry(name=head, path=f"{base}{head}"))
            else:
                groups.setdefault(head, []).append(rest)

        for name, children in groups.items():
            dir_path = f"{base}{name}"
            entries.append(
                DirectoryEntry(
                    name=name,
                    path=dir_path,
                    children=tuple(self._build_tree(children, f"{dir_path}/")),
                )
            )
        return entries

    async def _write(self, path: str, data: bytes) -> None:
        key = self._key(path)
        if not key or path.endswith("/"):
            raise BridgeIsADirectoryError(path)
        self.files[key] = data
        logger.debug("Stored %d bytes at %s", len(data), key)

    async def _mkdir(self, path: str) -> None:
        # Directories are implicit.
        return None

    async def _rm(self, path: str, recursive: bool, force: bool) -> None:
        key = self._key(path)
        if key in self.files:
            del self.files[key]
            return

        if self._has_children(path):
            if recursive:
                prefix = self._prefix(path)
                for stored in [s for s in self.files if s.startswith(prefix)]:
                    del self.files[stored]
            return

        if not force:
            raise BridgeFileNotFoundError(path)
