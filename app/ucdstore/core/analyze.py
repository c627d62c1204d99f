"""Analyze: compare each version's expected files with what the bridge holds.

This module provides the analyze() operation that the other reconciliation
operations build on. It only reads, so it works against read-only bridges.
"""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from collections.abc import Iterable
from typing import TYPE_CHECKING

from ucdstore.core.context import SNAPSHOT_FILENAME, StoreContext
from ucdstore.models.reports import AnalyzeResult, FileCounts, sorted_paths
from ucdstore.tree import flatten_file_paths, get_extension

if TYPE_CHECKING:
    from ucdstore.bridges.base import FileSystemBridge
    from ucdstore.filters import PathFilter

logger = logging.getLogger(__name__)


async def list_version_files(
    bridge: FileSystemBridge,
    version: str,
    path_filter: PathFilter | None = None,
) -> list[str]:
    """List the files stored for a version, relative to the version root.

    The well-known snapshot file at the version root is left out; it is
    store metadata, not data. Files the path filter rejects are left out too,
    so they are never reported as orphaned.

    Args:
        bridge: Bridge holding the store.
        version: Unicode version.
        path_filter: Filter over version-relative paths.

    Returns:
        Version-relative file paths.
    """
    entries = await bridge.listdir(version, recursive=True)
    files = [path for path in flatten_file_paths(entries) if path != SNAPSHOT_FILENAME]
    if path_filter is None:
        return files
    return path_filter.filter_paths(files)


def build_analyze_result(
    version: str,
    expected: Iterable[str],
    actual: Iterable[str],
    check_orphaned: bool = True,
) -> AnalyzeResult:
    """Classify expected and actual files of a version.

    Args:
        version: Unicode version.
        expected: Files the version should contain.
        actual: Files the bridge holds for the version.
        check_orphaned: Classify unexpected files as orphaned. When False,
            every stored file counts as present.

    Returns:
        AnalyzeResult for the version.
    """
    expected_set = set(expected)
    actual_set = set(actual)

    missing = expected_set - actual_set
    if check_orphaned:
        orphaned = actual_set - expected_set
        present = actual_set & expected_set
    else:
        orphaned = set()
        present = actual_set

    file_types = Counter(get_extension(path) for path in actual_set)

    return AnalyzeResult(
        version=version,
        present=sorted_paths(present),
        missing=sorted_paths(missing),
        orphaned=sorted_paths(orphaned),
        counts=FileCounts(
            total=len(expected_set),
            success=len(present),
            skipped=len(orphaned),
            failed=len(missing),
        ),
        file_types=dict(sorted(file_types.items())),
    )


async def analyze_version(
    ctx: StoreContext,
    version: str,
    check_orphaned: bool = True,
) -> AnalyzeResult:
    """Analyze a single, already validated version."""
    expected, actual = await asyncio.gather(
        ctx.resolver.expected_files(version),
        list_version_files(ctx.bridge, version, ctx.path_filter),
    )
    result = build_analyze_result(version, expected, actual, check_orphaned)
    logger.debug(
        "Analyzed %s: %d present, %d missing, %d orphaned",
        version,
        len(result.present),
        len(result.missing),
        len(result.orphaned),
    )
    return result


async def analyze(
    ctx: StoreContext,
    versions: Iterable[str] | None = None,
    check_orphaned: bool = True,
) -> list[AnalyzeResult]:
    """Analyze versions in parallel.

    Args:
        ctx: Store context.
        versions: Versions to analyze. All known versions if None.
        check_orphaned: Classify unexpected stored files as orphaned.

    Returns:
        One AnalyzeResult per version, in request order.

    Raises:
        VersionNotFoundError: If a version is unknown. Raised before any I/O.
        GenericStoreError: If the expected set of any version cannot be resolved.
    """
    resolved = ctx.resolve_versions(versions)
    logger.info("Analyzing %d version(s)", len(resolved))
    return list(
        await asyncio.gather(
            *(analyze_version(ctx, version, check_orphaned) for version in resolved)
        )
    )
