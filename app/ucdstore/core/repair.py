"""Repair: bring versions back to exactly their expected files.

Repair analyzes the requested versions, deletes orphaned files, prunes the
directories that leaves empty, and mirrors whatever is missing. Every file
ends in exactly one of restored, removed, skipped or failed.
"""

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from ucdstore.bridges.base import assert_capability
from ucdstore.concurrency import create_concurrency_limiter
from ucdstore.core.analyze import analyze
from ucdstore.core.clean import clean
from ucdstore.core.context import StoreContext
from ucdstore.core.mirror import mirror
from ucdstore.models.reports import AnalyzeResult, RepairFailure, RepairResult, sorted_paths
from ucdstore.tree import join_path, parent_dir

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 5

FILE_NOT_FOUND_MESSAGE = "File does not exist"
DOWNLOAD_FAILED_MESSAGE = "Failed to download file"
NOT_RESTORED_MESSAGE = "File not restored"


@dataclass(slots=True)
class _RepairProgress:
    restored: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: list[RepairFailure] = field(default_factory=list)
    bytes_written: int = 0

    def to_result(self, version: str) -> RepairResult:
        return RepairResult(
            version=version,
            restored=sorted_paths(self.restored),
            removed=sorted_paths(self.removed),
            skipped=sorted_paths(self.skipped),
            failed=tuple(sorted(self.failed, key=lambda f: (f.file_path, f.operation))),
            bytes_written=self.bytes_written,
        )


async def _remove_orphan(
    ctx: StoreContext,
    version: str,
    path: str,
    progress: _RepairProgress,
    dry_run: bool,
) -> None:
    target = join_path(version, path)
    try:
        if not await ctx.bridge.exists(target):
            progress.failed.append(RepairFailure(path, FILE_NOT_FOUND_MESSAGE, "remove"))
            return
        if dry_run:
            logger.debug("Dry-run: would remove orphan %s", target)
        else:
            await ctx.bridge.rm(target)
            logger.debug("Removed orphan %s", target)
        progress.removed.append(path)
    except Exception as e:
        logger.warning("Failed to remove orphan %s: %s", target, e)
        progress.failed.append(RepairFailure(path, str(e), "remove"))


async def _prune_orphan_directories(
    ctx: StoreContext,
    analyses: list[AnalyzeResult],
    concurrency: int,
) -> None:
    candidates = {
        parent_dir(join_path(result.version, path))
        for result in analyses
        for path in result.orphaned
    }
    candidates.discard("")

    empty: list[str] = []
    for directory in sorted(candidates):
        try:
            entries = await ctx.bridge.listdir(directory)
        except Exception as e:
            logger.warning("Failed to list directory %s: %s", directory, e)
            continue
        if not entries:
            empty.append(directory)

    if empty:
        await clean(ctx, [], concurrency=concurrency, directories=empty)


async def _restore_missing(
    ctx: StoreContext,
    analyses: list[AnalyzeResult],
    progress: dict[str, _RepairProgress],
    concurrency: int,
    dry_run: bool,
) -> None:
    missing = {result.version: set(result.missing) for result in analyses if result.missing}
    if not missing:
        return

    try:
        mirrored = await mirror(
            ctx,
            list(missing),
            concurrency=concurrency,
            force=False,
            dry_run=dry_run,
        )
    except Exception as e:
        logger.warning("Mirror failed during repair: %s", e)
        for version, files in missing.items():
            progress[version].failed.extend(
                RepairFailure(path, str(e), "download") for path in files
            )
        return

    for mirror_result in mirrored:
        version = mirror_result.version
        expected = missing[version]
        restored = expected & set(mirror_result.mirrored)
        failed = expected & set(mirror_result.failed)
        progress[version].restored.extend(restored)
        progress[version].bytes_written += mirror_result.bytes_written
        progress[version].failed.extend(
            RepairFailure(
                path,
                mirror_result.errors.get(path) or DOWNLOAD_FAILED_MESSAGE,
                "download",
            )
            for path in failed
        )
        progress[version].failed.extend(
            RepairFailure(path, NOT_RESTORED_MESSAGE, "download")
            for path in expected - restored - failed
        )


async def repair(
    ctx: StoreContext,
    versions: Iterable[str] | None = None,
    concurrency: int = DEFAULT_CONCURRENCY,
    dry_run: bool = False,
) -> list[RepairResult]:
    """Remove orphaned files and restore missing ones.

    Args:
        ctx: Store context.
        versions: Versions to repair. All known versions if None.
        concurrency: Maximum simultaneous file operations.
        dry_run: Report what would change without touching the store.

    Returns:
        One RepairResult per version, in request order.

    Raises:
        VersionNotFoundError: If a version is unknown.
        InvalidArgumentError: If concurrency is not a positive integer.
        UnsupportedOperationError: If orphans must be removed and the bridge
            cannot remove files.
        GenericStoreError: If the expected set of any version cannot be resolved.
    """
    resolved = ctx.resolve_versions(versions)
    if not resolved:
        return []
    limiter = create_concurrency_limiter(concurrency)

    analyses = await analyze(ctx, resolved, check_orphaned=True)
    progress = {
        result.version: _RepairProgress(skipped=list(result.present)) for result in analyses
    }

    orphans = [(result.version, path) for result in analyses for path in result.orphaned]
    if orphans:
        if not dry_run:
            assert_capability(ctx.bridge, "rm")
        logger.info("Removing %d orphaned file(s)", len(orphans))
        await asyncio.gather(
            *(
                limiter(_remove_orphan, ctx, version, path, progress[version], dry_run)
                for version, path in orphans
            )
        )
        if not dry_run:
            await _prune_orphan_directories(ctx, analyses, concurrency)

    await _restore_missing(ctx, analyses, progress, concurrency, dry_run)

    if not dry_run:
        await ctx.track_versions(
            {result.version: (*result.present, *result.missing) for result in analyses}
        )

    results = [progress[version].to_result(version) for version in resolved]
    for result in results:
        logger.info(
            "Repaired %s: %s (%d restored, %d removed, %d failed)",
            result.version,
            result.status,
            len(result.restored),
            len(result.removed),
            len(result.failed),
        )
    return results
