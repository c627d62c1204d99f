"""Local filesystem storage bridge.

Every input path is resolved against the bridge's base directory and must
stay inside it. Blocking filesystem calls run in a worker thread so the
event loop stays responsive while many files are mirrored at once.
"""

import asyncio
import logging
import os
import re
import shutil
from collections.abc import Iterable
from pathlib import Path
from urllib.parse import unquote

from ucdstore.bridges.base import ROOT_PATHS, BridgeMetadata, FileSystemBridge
from ucdstore.errors import (
    BridgeFileNotFoundError,
    BridgeIsADirectoryError,
    InvalidArgumentError,
    PathTraversalError,
)
from ucdstore.models.entry import DirectoryEntry, FileEntry, FSEntry

logger = logging.getLogger(__name__)

MAX_DECODING_ITERATIONS = 10
CONTROL_CHARACTERS = re.compile(r"[\x00-\x1f\x7f-\x9f]")


def _decode_path(path: str) -> str:
    """URL-decode a path until it stops changing."""
    decoded = path
    for _ in range(MAX_DECODING_ITERATIONS):
        next_decoded = unquote(decoded)
        if next_decoded == decoded:
            return decoded
        decoded = next_decoded
    msg = f"Path is encoded too many times: {path}"
    raise InvalidArgumentError(msg)


def _is_within(path: str, base: str) -> bool:
    return path == base or path.startswith(base.rstrip(os.sep) + os.sep)


def resolve_safe_path(base_path: Path | str, input_path: str) -> Path:
    """Resolve a user-supplied path inside a base directory.

    Absolute inputs that already point inside the base are kept; other
    absolute inputs are treated as relative to the base.

    Args:
        base_path: Directory that bounds every resolved path.
        input_path: Path to resolve, possibly URL-encoded.

    Returns:
        Absolute, normalized path inside base_path.

    Raises:
        InvalidArgumentError: If the path contains control characters or
            cannot be decoded.
        PathTraversalError: If the path resolves outside base_path.
    """
    base = os.path.abspath(os.fspath(base_path))
    decoded = _decode_path(input_path).replace("\\", "/")

    if CONTROL_CHARACTERS.search(decoded):
        msg = "Invalid path format or contains illegal characters"
        raise InvalidArgumentError(msg)

    if os.path.isabs(decoded):
        absolute = os.path.normpath(decoded)
        if _is_within(absolute, base):
            return Path(absolute)
        decoded = decoded.lstrip("/")

    resolved = os.path.normpath(os.path.join(base, decoded))
    if not _is_within(resolved, base):
        raise PathTraversalError(base, input_path)
    return Path(resolved)


def _reject_trailing_slash(path: str, action: str) -> None:
    trimmed = path.strip()
    if trimmed.endswith("/") and trimmed not in ROOT_PATHS:
        msg = f"Cannot {action} file: path ends with '/'"
        raise InvalidArgumentError(msg)


class LocalBridge(FileSystemBridge):
    """Bridge over a directory on the local filesystem."""

    def __init__(
        self,
        base_path: Path | str,
        capabilities: Iterable[str] | None = None,
    ) -> None:
        """Initialize the bridge.

        Args:
            base_path: Root directory of the store. It does not need to exist yet.
            capabilities: Optional capabilities to declare (default: all).
        """
        super().__init__(capabilities)
        self._base_path = Path(os.path.abspath(os.fspath(base_path)))

    @property
    def base_path(self) -> Path:
        return self._base_path

    @property
    def meta(self) -> BridgeMetadata:
        return BridgeMetadata(
            name="local",
            description=f"Local filesystem bridge rooted at {self._base_path}",
        )

    def resolve(self, path: str) -> Path:
        """Resolve a bridge path to an absolute path inside the base directory."""
        return resolve_safe_path(self._base_path, path)

    async def read(self, path: str) -> bytes:
        _reject_trailing_slash(path, "read")
        target = self.resolve(path)
        return await asyncio.to_thread(self._read_sync, path, target)

    @staticmethod
    def _read_sync(path: str, target: Path) -> bytes:
        if target.is_dir():
            raise BridgeIsADirectoryError(path)
        try:
            return target.read_bytes()
        except FileNotFoundError as e:
            raise BridgeFileNotFoundError(path) from e

    async def exists(self, path: str) -> bool:
        if path.strip() in ROOT_PATHS:
            return True
        target = self.resolve(path)
        return await asyncio.to_thread(target.exists)

    async def listdir(self, path: str, recursive: bool = False) -> list[FSEntry]:
        target = self.resolve(path)
        return await asyncio.to_thread(self._listdir_sync, target, "", recursive)

    def _listdir_sync(self, target: Path, relative: str, recursive: bool) -> list[FSEntry]:
        if not target.is_dir():
            return []

        entries: list[FSEntry] = []
        for child in sorted(target.iterdir(), key=lambda p: p.name):
            child_path = f"{relative}{child.name}"
            if child.is_dir():
                children = (
                    self._listdir_sync(child, f"{child_path}/", recursive) if recursive else []
                )
                entries.append(
                    DirectoryEntry(name=child.name, path=child_path, children=tuple(children))
                )
            else:
                entries.append(FileEntry(name=child.name, path=child_path))
        return entries

    async def _write(self, path: str, data: bytes) -> None:
        _reject_trailing_slash(path, "write")
        target = self.resolve(path)
        await asyncio.to_thread(self._write_sync, target, data)
        logger.debug("Wrote %d bytes to %s", len(data), target)

    @staticmethod
    def _write_sync(target: Path, data: bytes) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)

    async def _mkdir(self, path: str) -> None:
        target = self.resolve(path)
        await asyncio.to_thread(target.mkdir, parents=True, exist_ok=True)

    async def _rm(self, path: str, recursive: bool, force: bool) -> None:
        target = self.resolve(path)
        await asyncio.to_thread(self._rm_sync, path, target, recursive, force)

    @staticmethod
    def _rm_sync(path: str, target: Path, recursive: bool, force: bool) -> None:
        if not target.exists():
            if force:
                return
            raise BridgeFileNotFoundError(path)

        if target.is_dir():
            if recursive:
                shutil.rmtree(target)
            else:
                target.rmdir()
        else:
            target.unlink()
