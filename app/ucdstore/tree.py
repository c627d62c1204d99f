"""Path and file-tree helpers.

All store paths are relative, '/'-separated strings. flatten_file_paths is
the single place where a nested listing becomes a flat set of file paths;
the resolver, Analyze and Mirror all go through it.
"""

from collections.abc import Iterable

from ucdstore.models.entry import DirectoryEntry, FSEntry

NO_EXTENSION = "no_extension"


def flatten_file_paths(
    entries: Iterable[FSEntry],
    prefix: str = "",
    include_directories: bool = False,
) -> list[str]:
    """Flatten a nested listing into relative paths.

    Paths are built from entry names so the result does not depend on how a
    backend formats its 'path' field. Empty directories contribute nothing
    unless include_directories is set.

    Args:
        entries: Top-level entries of the listing.
        prefix: Path prefix to prepend to every result.
        include_directories: Also emit directory paths.

    Returns:
        List of paths in depth-first listing order.
    """
    paths: list[str] = []
    for entry in entries:
        full_path = join_path(prefix, entry.name)
        if isinstance(entry, DirectoryEntry):
            if include_directories:
                paths.append(full_path)
            paths.extend(flatten_file_paths(entry.children, full_path, include_directories))
        else:
            paths.append(full_path)
    return paths


def normalize_path(path: str) -> str:
    """Normalize a relative store path.

    Strips leading '/' and './', collapses repeated separators and drops
    '.' segments. Root-equivalent inputs ('', '.', '/') become ''.

    Args:
        path: Path to normalize.

    Returns:
        Normalized path without leading or trailing separators.

    Raises:
        ValueError: If the path contains a '..' segment.
    """
    parts = [part for part in path.replace("\\", "/").split("/") if part not in ("", ".")]
    if ".." in parts:
        msg = f"Path must not contain '..' segments: {path}"
        raise ValueError(msg)
    return "/".join(parts)


def join_path(*parts: str) -> str:
    """Join path fragments with '/', ignoring empty fragments."""
    return "/".join(part.strip("/") for part in parts if part and part.strip("/"))


def parent_dir(path: str) -> str:
    """Return the parent directory of a path, or '' for top-level paths."""
    head, _, _ = path.rstrip("/").rpartition("/")
    return head


def path_depth(path: str) -> int:
    """Return the number of segments in a path ('' has depth 0)."""
    normalized = path.strip("/")
    if not normalized:
        return 0
    return normalized.count("/") + 1


def get_extension(path: str) -> str:
    """Return the lower-cased extension of a file path.

    Args:
        path: File path (e.g., 'emoji/emoji-data.TXT').

    Returns:
        Extension including the dot (e.g., '.txt'), or NO_EXTENSION.
    """
    name = path.rsplit("/", 1)[-1]
    stem, dot, extension = name.rpartition(".")
    if not dot or not stem or not extension:
        return NO_EXTENSION
    return f".{extension.lower()}"
