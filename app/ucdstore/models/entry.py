"""Filesystem entry models shared by bridges and the remote file tree.

An entry is either a file or a directory. Directories may carry their
children when listed recursively.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class EntryType(str, Enum):
    """Type of a listed entry.

    Attributes:
        FILE: Regular file.
        DIRECTORY: Directory, possibly with listed children.
    """

    FILE = "file"
    DIRECTORY = "directory"


@dataclass(frozen=True, slots=True)
class FileEntry:
    """A file in a listing.

    Attributes:
        name: Base name of the file (e.g., 'UnicodeData.txt').
        path: Path as reported by the backend.
    """

    name: str
    path: str

    def __post_init__(self) -> None:
        """Validate entry data after initialization."""
        if not self.name:
            msg = "Entry name cannot be empty"
            raise ValueError(msg)

    @property
    def type(self) -> EntryType:
        return EntryType.FILE

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"type": self.type.value, "name": self.name, "path": self.path}


@dataclass(frozen=True, slots=True)
class DirectoryEntry:
    """A directory in a listing.

    Attributes:
        name: Base name of the directory (e.g., 'emoji').
        path: Path as reported by the backend.
        children: Entries below this directory. Empty for non-recursive listings.
    """

    name: str
    path: str
    children: tuple["FSEntry", ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        """Validate entry data after initialization."""
        if not self.name:
            msg = "Entry name cannot be empty"
            raise ValueError(msg)

    @property
    def type(self) -> EntryType:
        return EntryType.DIRECTORY

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "type": self.type.value,
            "name": self.name,
            "path": self.path,
            "children": [child.to_dict() for child in self.children],
        }


FSEntry = FileEntry | DirectoryEntry


def entry_from_dict(data: Any) -> FSEntry:
    """Build an entry from a decoded JSON object.

    Args:
        data: Mapping with 'type', 'name', 'path' and optional 'children'.

    Returns:
        FileEntry or DirectoryEntry.

    Raises:
        ValueError: If the mapping does not describe a valid entry.
    """
    if not isinstance(data, dict):
        msg = f"Entry must be an object, got {type(data).__name__}"
        raise ValueError(msg)

    entry_type = data.get("type")
    name = data.get("name")
    path = data.get("path", name)
    if not isinstance(name, str) or not isinstance(path, str):
        msg = "Entry 'name' and 'path' must be strings"
        raise ValueError(msg)

    if entry_type == EntryType.FILE.value:
        return FileEntry(name=name, path=path)
    if entry_type == EntryType.DIRECTORY.value:
        children = data.get("children") or []
        if not isinstance(children, list):
            msg = f"Directory '{name}' children must be a list"
            raise ValueError(msg)
        return DirectoryEntry(
            name=name,
            path=path,
            children=tuple(entry_from_dict(child) for child in children),
        )

    msg = f"Unknown entry type: {entry_type!r}"
    raise ValueError(msg)
