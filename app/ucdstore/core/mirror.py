"""Mirror: download each version's expected files into the store.

Directories are created once, as a batch, before any file is written. Files
are then fetched and written through a concurrency limiter; a failure is
recorded against its path and never stops the rest of the batch.
"""

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from ucdstore.bridges.base import assert_capability
from ucdstore.concurrency import ConcurrencyLimiter, create_concurrency_limiter
from ucdstore.core.context import StoreContext
from ucdstore.models.reports import MirrorResult, sorted_paths
from ucdstore.tree import join_path, parent_dir, path_depth

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 5


@dataclass(slots=True)
class _MirrorProgress:
    """Mutable accumulator for one version while the batch runs."""

    mirrored: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    errors: dict[str, str] = field(default_factory=dict)
    bytes_written: int = 0

    def to_result(self, version: str) -> MirrorResult:
        return MirrorResult(
            version=version,
            mirrored=sorted_paths(self.mirrored),
            skipped=sorted_paths(self.skipped),
            failed=sorted_paths(self.failed),
            errors=dict(sorted(self.errors.items())),
            bytes_written=self.bytes_written,
        )


def required_directories(work: Iterable[tuple[str, str]]) -> list[str]:
    """Collect the distinct parent directories of (version, path) work items.

    Args:
        work: Pairs of version and version-relative file path.

    Returns:
        Bridge-relative directories, shallowest first.
    """
    directories = {parent_dir(join_path(version, path)) for version, path in work}
    directories.discard("")
    return sorted(directories, key=lambda d: (path_depth(d), d))


async def _create_directories(
    ctx: StoreContext,
    limiter: ConcurrencyLimiter,
    directories: list[str],
) -> None:
    async def ensure(directory: str) -> None:
        if not await ctx.bridge.exists(directory):
            await ctx.bridge.mkdir(directory)

    await asyncio.gather(*(limiter(ensure, directory) for directory in directories))
    logger.debug("Prepared %d directories", len(directories))


async def _mirror_file(
    ctx: StoreContext,
    version: str,
    path: str,
    progress: _MirrorProgress,
    force: bool,
    dry_run: bool,
) -> None:
    target = join_path(version, path)
    try:
        if not force and await ctx.bridge.exists(target):
            progress.skipped.append(path)
            return

        if dry_run:
            logger.debug("Dry-run: would mirror %s", target)
            progress.mirrored.append(path)
            return

        remote = await ctx.client.get_file(version, path)
        # Bodies are stored as served, whatever their charset.
        await ctx.bridge.write(target, remote.content)
        progress.mirrored.append(path)
        progress.bytes_written += len(remote.content)
        logger.debug("Mirrored %s (%s)", target, remote.content_type)
    except Exception as e:
        logger.warning("Failed to mirror %s: %s", target, e)
        progress.failed.append(path)
        progress.errors[path] = str(e)


async def mirror(
    ctx: StoreContext,
    versions: Iterable[str] | None = None,
    concurrency: int = DEFAULT_CONCURRENCY,
    force: bool = False,
    dry_run: bool = False,
) -> list[MirrorResult]:
    """Download expected files that the store does not hold yet.

    Args:
        ctx: Store context.
        versions: Versions to mirror. All known versions if None.
        concurrency: Maximum simultaneous downloads.
        force: Download and overwrite files that already exist.
        dry_run: Report what would be mirrored without writing anything.

    Returns:
        One MirrorResult per version, in request order.

    Raises:
        VersionNotFoundError: If a version is unknown.
        InvalidArgumentError: If concurrency is not a positive integer.
        UnsupportedOperationError: If the bridge cannot create directories
            or write files. Raised before any network call.
        GenericStoreError: If the expected set of any version cannot be resolved.
    """
    resolved = ctx.resolve_versions(versions)
    limiter = create_concurrency_limiter(concurrency)
    assert_capability(ctx.bridge, "exists", "mkdir", "write")

    expected_sets = await asyncio.gather(
        *(ctx.resolver.expected_files(version) for version in resolved)
    )
    expected = dict(zip(resolved, expected_sets, strict=True))
    work = [(version, path) for version in resolved for path in expected[version]]
    logger.info(
        "Mirroring %d file(s) across %d version(s)%s",
        len(work),
        len(resolved),
        " (dry-run)" if dry_run else "",
    )

    if not dry_run:
        await _create_directories(ctx, limiter, required_directories(work))

    progress = {version: _MirrorProgress() for version in resolved}
    await asyncio.gather(
        *(
            limiter(_mirror_file, ctx, version, path, progress[version], force, dry_run)
            for version, path in work
        )
    )

    if not dry_run:
        await ctx.track_versions(expected)

    return [progress[version].to_result(version) for version in resolved]
