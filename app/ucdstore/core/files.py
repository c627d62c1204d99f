"""Reading single files and listings out of the store.

Every read goes to the bridge first. With allow_api set, whatever the store
does not hold is served from the API instead; the API copy is never written
back. Paths the store's filters exclude are treated as absent everywhere.
"""

from __future__ import annotations

import logging

from ucdstore.core.context import SNAPSHOT_FILENAME, StoreContext
from ucdstore.errors import (
    ApiError,
    BridgeFileNotFoundError,
    GenericStoreError,
    InvalidArgumentError,
    PathFilteredError,
)
from ucdstore.models.entry import DirectoryEntry, FSEntry
from ucdstore.tree import flatten_file_paths, join_path, normalize_path

logger = logging.getLogger(__name__)


def _resolve_version(ctx: StoreContext, version: str) -> str:
    [resolved] = ctx.resolve_versions([version])
    return resolved


def _normalize_file_path(path: str) -> str:
    try:
        normalized = normalize_path(path)
    except ValueError as e:
        raise InvalidArgumentError(str(e)) from e
    if not normalized:
        msg = "File path cannot be empty"
        raise InvalidArgumentError(msg)
    return normalized


def _without_snapshot(entries: list[FSEntry]) -> list[FSEntry]:
    return [
        entry
        for entry in entries
        if isinstance(entry, DirectoryEntry) or entry.name != SNAPSHOT_FILENAME
    ]


async def get_file(
    ctx: StoreContext,
    version: str,
    path: str,
    allow_api: bool = False,
) -> bytes:
    """Read one file of a version.

    Args:
        ctx: Store context.
        version: Unicode version.
        path: Version-relative file path.
        allow_api: Fetch the file from the API when the store lacks it.

    Returns:
        File contents.

    Raises:
        VersionNotFoundError: If the version is unknown.
        InvalidArgumentError: If the path is empty or escapes the version.
        PathFilteredError: If the store's filters exclude the path.
        GenericStoreError: If the file is not stored and allow_api is False,
            or if the API request fails.
    """
    version = _resolve_version(ctx, version)
    path = _normalize_file_path(path)
    if not ctx.path_filter(path):
        raise PathFilteredError(version, path)

    try:
        return await ctx.bridge.read(join_path(version, path))
    except BridgeFileNotFoundError as e:
        if not allow_api:
            raise GenericStoreError(
                f"File '{path}' does not exist in local store for version '{version}'",
                version=version,
            ) from e

    logger.debug("Fetching %s/%s from the API", version, path)
    try:
        remote = await ctx.client.get_file(version, path)
    except ApiError as e:
        raise GenericStoreError(
            f"Failed to fetch file '{path}' for version '{version}': {e}",
            version=version,
            status=getattr(e, "status", None),
        ) from e
    return remote.content


async def get_file_tree(
    ctx: StoreContext,
    version: str,
    allow_api: bool = False,
) -> list[FSEntry]:
    """Return the filtered file tree of a version.

    The stored tree is used when the version directory exists. Otherwise,
    or when it cannot be listed, the API tree is used if allow_api is set
    and an empty tree is returned if not.

    Args:
        ctx: Store context.
        version: Unicode version.
        allow_api: Fall back to the API tree.

    Returns:
        Nested entries with filtered-out files and emptied directories removed.

    Raises:
        VersionNotFoundError: If the version is unknown.
        GenericStoreError: If the API fallback fails.
    """
    version = _resolve_version(ctx, version)

    if await ctx.bridge.exists(version):
        try:
            entries = await ctx.bridge.listdir(version, recursive=True)
        except Exception as e:
            logger.warning("Failed to list stored files of %s: %s", version, e)
        else:
            return ctx.path_filter.filter_tree(_without_snapshot(entries))

    if not allow_api:
        return []

    try:
        tree = await ctx.client.get_file_tree(version)
    except ApiError as e:
        raise GenericStoreError(
            f"Failed to fetch file tree for version '{version}': {e}",
            version=version,
            status=getattr(e, "status", None),
        ) from e
    return ctx.path_filter.filter_tree(tree)


async def list_files(
    ctx: StoreContext,
    version: str,
    allow_api: bool = False,
) -> list[str]:
    """Return the filtered, version-relative file paths of a version.

    Follows the same fallback rules as get_file_tree.
    """
    return flatten_file_paths(await get_file_tree(ctx, version, allow_api=allow_api))
