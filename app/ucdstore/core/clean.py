"""Clean: purge versions from the store.

Every stored file of a version, orphaned or expected, is deleted through the
concurrency limiter, along with the snapshot file at the version root. The
directories those files lived in are then removed one at a time, deepest
first, so a child is always evaluated before its parent. Directory removal
is best effort and never fails the call.
"""

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from ucdstore.bridges.base import assert_capability
from ucdstore.concurrency import create_concurrency_limiter
from ucdstore.core.analyze import analyze
from ucdstore.core.context import SNAPSHOT_FILENAME, StoreContext
from ucdstore.models.reports import CleanResult, sorted_paths
from ucdstore.tree import join_path, parent_dir, path_depth

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 5


@dataclass(slots=True)
class _CleanProgress:
    deleted: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    def to_result(self, version: str) -> CleanResult:
        return CleanResult(
            version=version,
            deleted=sorted_paths(self.deleted),
            skipped=sorted_paths(self.skipped),
            failed=sorted_paths(self.failed),
        )


def candidate_directories(version: str, paths: Iterable[str]) -> set[str]:
    """Collect every ancestor directory of a version's files.

    The version root itself is included so a fully purged version leaves
    nothing behind.
    """
    directories = {version}
    for path in paths:
        directory = parent_dir(join_path(version, path))
        while directory and directory not in directories:
            directories.add(directory)
            directory = parent_dir(directory)
    return directories


async def remove_empty_directories(
    ctx: StoreContext,
    directories: Iterable[str],
    dry_run: bool = False,
) -> list[str]:
    """Remove directories deepest first, one at a time.

    A directory is removed only if it still exists and is empty. Failures
    are logged and swallowed.

    Args:
        ctx: Store context.
        directories: Bridge-relative candidate directories.
        dry_run: Log what would be removed without removing anything.

    Returns:
        Directories that were removed (or would be, under dry-run).
    """
    removed: list[str] = []
    ordered = sorted(set(directories), key=lambda d: (-path_depth(d), d))
    for directory in ordered:
        if not directory:
            continue
        try:
            if not await ctx.bridge.exists(directory):
                continue
            if await ctx.bridge.listdir(directory):
                logger.debug("Keeping non-empty directory %s", directory)
                continue
            if dry_run:
                logger.debug("Dry-run: would remove directory %s", directory)
            else:
                await ctx.bridge.rm(directory, recursive=True)
                logger.debug("Removed directory %s", directory)
            removed.append(directory)
        except Exception as e:
            logger.warning("Failed to remove directory %s: %s", directory, e)
    return removed


async def _snapshot_files(ctx: StoreContext, version: str) -> list[str]:
    """Return [SNAPSHOT_FILENAME] if the version root holds a snapshot."""
    if await ctx.bridge.exists(join_path(version, SNAPSHOT_FILENAME)):
        return [SNAPSHOT_FILENAME]
    return []


async def _delete_file(
    ctx: StoreContext,
    version: str,
    path: str,
    progress: _CleanProgress,
    dry_run: bool,
) -> None:
    target = join_path(version, path)
    try:
        if not await ctx.bridge.exists(target):
            logger.info("Skipping %s: file does not exist", target)
            progress.skipped.append(path)
            return
        if dry_run:
            logger.debug("Dry-run: would delete %s", target)
        else:
            await ctx.bridge.rm(target)
            logger.debug("Deleted %s", target)
        progress.deleted.append(path)
    except Exception as e:
        logger.warning("Failed to delete %s: %s", target, e)
        progress.failed.append(path)


async def clean(
    ctx: StoreContext,
    versions: Iterable[str] | None = None,
    dry_run: bool = False,
    concurrency: int = DEFAULT_CONCURRENCY,
    directories: Iterable[str] | None = None,
) -> list[CleanResult]:
    """Delete every stored file of the given versions and prune directories.

    Args:
        ctx: Store context.
        versions: Versions to purge. All known versions if None. May be empty
            when only directories should be pruned.
        dry_run: Report what would be deleted without deleting anything.
        concurrency: Maximum simultaneous deletions.
        directories: Extra bridge-relative directories to prune if empty.

    Returns:
        One CleanResult per version, in request order.

    Raises:
        VersionNotFoundError: If a version is unknown.
        InvalidArgumentError: If concurrency is not a positive integer.
        UnsupportedOperationError: If the bridge cannot remove files.
        GenericStoreError: If the expected set of any version cannot be resolved.
    """
    resolved = ctx.resolve_versions(versions)
    limiter = create_concurrency_limiter(concurrency)
    if not dry_run:
        assert_capability(ctx.bridge, "rm")

    analyses = await analyze(ctx, resolved, check_orphaned=True) if resolved else []
    snapshots = await asyncio.gather(*(_snapshot_files(ctx, r.version) for r in analyses))

    candidates: set[str] = set(directories or ())
    progress = {version: _CleanProgress() for version in resolved}
    tasks = []
    for result, snapshot in zip(analyses, snapshots, strict=True):
        files = [*result.orphaned, *result.present, *snapshot]
        candidates |= candidate_directories(result.version, files)
        tasks.extend(
            limiter(_delete_file, ctx, result.version, path, progress[result.version], dry_run)
            for path in files
        )
    await asyncio.gather(*tasks)

    await remove_empty_directories(ctx, candidates, dry_run=dry_run)

    if not dry_run:
        await ctx.untrack_versions(resolved)

    results = [progress[version].to_result(version) for version in resolved]
    logger.info(
        "Cleaned %d version(s): %d file(s) deleted",
        len(results),
        sum(len(r.deleted) for r in results),
    )
    return results
