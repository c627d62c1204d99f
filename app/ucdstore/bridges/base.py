"""Abstract storage bridge.

A bridge is the only way reconciliation code touches storage. Reading is
always available; writing, creating directories and removing are optional
capabilities a bridge declares up front. Invoking or asserting a capability
the bridge did not declare raises UnsupportedOperationError, whatever the
path.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass

from ucdstore.errors import UnsupportedOperationError
from ucdstore.models.entry import FSEntry

logger = logging.getLogger(__name__)

REQUIRED_CAPABILITIES = frozenset({"read", "exists", "listdir"})
OPTIONAL_CAPABILITIES = frozenset({"write", "mkdir", "rm"})

# Paths that address the bridge root.
ROOT_PATHS = frozenset({"", ".", "/"})


@dataclass(frozen=True, slots=True)
class BridgeMetadata:
    """Descriptive information about a bridge."""

    name: str
    description: str = ""


class FileSystemBridge(ABC):
    """Abstract base class for all storage bridges.

    Subclasses implement read, exists and listdir, plus _write, _mkdir and
    _rm for every optional capability they declare. Callers use the public
    write, mkdir and rm methods, which check the capability first.

    Example:
        >>> bridge = MemoryBridge(capabilities={"write"})
        >>> await bridge.write("16.0.0/UnicodeData.txt", "0041;LATIN CAPITAL LETTER A")
        >>> await bridge.rm("16.0.0/UnicodeData.txt")  # raises UnsupportedOperationError
    """

    def __init__(self, capabilities: Iterable[str] | None = None) -> None:
        """Initialize the bridge.

        Args:
            capabilities: Optional capabilities to declare. Defaults to all of
                write, mkdir and rm.

        Raises:
            ValueError: If an unknown capability is requested.
        """
        declared = OPTIONAL_CAPABILITIES if capabilities is None else frozenset(capabilities)
        unknown = declared - OPTIONAL_CAPABILITIES
        if unknown:
            msg = f"Unknown bridge capabilities: {', '.join(sorted(unknown))}"
            raise ValueError(msg)
        self._capabilities = declared

    @property
    @abstractmethod
    def meta(self) -> BridgeMetadata:
        """Return descriptive metadata for this bridge."""

    @property
    def optional_capabilities(self) -> frozenset[str]:
        """Optional capabilities this bridge declares."""
        return self._capabilities

    @property
    def capabilities(self) -> frozenset[str]:
        """All operations this bridge supports."""
        return REQUIRED_CAPABILITIES | self._capabilities

    @abstractmethod
    async def read(self, path: str) -> bytes:
        """Read a file.

        Args:
            path: Bridge-relative file path.

        Returns:
            File contents.

        Raises:
            BridgeFileNotFoundError: If the path does not exist.
            BridgeIsADirectoryError: If the path is a directory.
        """

    @abstractmethod
    async def exists(self, path: str) -> bool:
        """Check whether a file or directory exists.

        Root-equivalent paths ('', '.', '/') always exist.
        """

    @abstractmethod
    async def listdir(self, path: str, recursive: bool = False) -> list[FSEntry]:
        """List a directory.

        Args:
            path: Bridge-relative directory path.
            recursive: Include nested children of directories.

        Returns:
            Entries in the directory, or an empty list if it does not exist.
        """

    async def read_text(self, path: str, encoding: str = "utf-8") -> str:
        """Read a file and decode it as text."""
        return (await self.read(path)).decode(encoding)

    async def write(self, path: str, data: str | bytes, encoding: str = "utf-8") -> None:
        """Write a file, creating parent directories as needed.

        Args:
            path: Bridge-relative file path.
            data: Text (encoded with encoding) or raw bytes.
            encoding: Encoding used when data is text.

        Raises:
            UnsupportedOperationError: If the bridge does not declare 'write'.
        """
        assert_capability(self, "write")
        payload = data.encode(encoding) if isinstance(data, str) else data
        await self._write(path, payload)

    async def mkdir(self, path: str) -> None:
        """Create a directory and its parents.

        Raises:
            UnsupportedOperationError: If the bridge does not declare 'mkdir'.
        """
        assert_capability(self, "mkdir")
        await self._mkdir(path)

    async def rm(self, path: str, recursive: bool = False, force: bool = False) -> None:
        """Remove a file or directory.

        Args:
            path: Bridge-relative path.
            recursive: Remove directories with their contents.
            force: Do not fail if the path does not exist.

        Raises:
            UnsupportedOperationError: If the bridge does not declare 'rm'.
        """
        assert_capability(self, "rm")
        await self._rm(path, recursive=recursive, force=force)

    async def _write(self, path: str, data: bytes) -> None:
        raise UnsupportedOperationError("write", ["write"], self.capabilities)

    async def _mkdir(self, path: str) -> None:
        raise UnsupportedOperationError("mkdir", ["mkdir"], self.capabilities)

    async def _rm(self, path: str, recursive: bool, force: bool) -> None:
        raise UnsupportedOperationError("rm", ["rm"], self.capabilities)


def supports(bridge: FileSystemBridge, *operations: str) -> bool:
    """Check whether a bridge supports every given operation."""
    return set(operations) <= bridge.capabilities


def assert_capability(bridge: FileSystemBridge, *operations: str) -> None:
    """Ensure a bridge supports every given operation.

    Args:
        bridge: Bridge to check.
        *operations: Operation names (e.g., 'write', 'mkdir').

    Raises:
        UnsupportedOperationError: If any operation is not supported.
    """
    missing = [op for op in operations if op not in bridge.capabilities]
    if missing:
        logger.debug(
            "Bridge %s lacks capabilities %s", bridge.meta.name, ", ".join(missing)
        )
        raise UnsupportedOperationError(
            operation=missing[0],
            required=operations,
            available=bridge.capabilities,
        )
