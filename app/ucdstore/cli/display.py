"""Shared Rich display functions for operation results.

Provides the table builders and summary printers used by the analyze,
mirror, clean, repair and init commands.
"""

import json
from collections.abc import Sequence
from typing import Any

from rich.table import Table

from ucdstore.models.reports import (
    AnalysisSummary,
    AnalyzeResult,
    CleanResult,
    MirrorResult,
    OperationSummary,
    RepairResult,
    StoreHealth,
)
from ucdstore.utils.formatting import console, create_table


def print_json(data: Any) -> None:
    """Print data as JSON for scripting."""
    console.print_json(json.dumps(data))


def create_analyze_table(results: Sequence[AnalyzeResult]) -> Table:
    """Create a table with one row per analyzed version.

    Args:
        results: Analyze results to display.

    Returns:
        Rich Table with Version, Status, Present, Missing, Orphaned and
        Expected columns.
    """
    table = create_table("Store Analysis", "Version", "Status", "Present", "Missing", "Orphaned")
    table.add_column("Expected", justify="right")
    for result in results:
        status = "[success]complete[/]" if result.is_complete else "[warning]incomplete[/]"
        table.add_row(
            result.version,
            status,
            str(len(result.present)),
            f"[missing]{len(result.missing)}[/]" if result.missing else "0",
            f"[orphaned]{len(result.orphaned)}[/]" if result.orphaned else "0",
            str(result.counts.total),
        )
    return table


def print_file_lists(result: AnalyzeResult) -> None:
    """Print the missing and orphaned files of a version."""
    for path in result.missing:
        console.print(f"  [missing]-[/] {result.version}/{path} [muted](missing)[/]")
    for path in result.orphaned:
        console.print(f"  [orphaned]?[/] {result.version}/{path} [muted](orphaned)[/]")


def print_analysis_summary(summary: AnalysisSummary) -> None:
    """Print the store-wide health line."""
    styles = {
        StoreHealth.HEALTHY: "success",
        StoreHealth.NEEDS_CLEANUP: "warning",
        StoreHealth.CORRUPTED: "error",
    }
    style = styles[summary.health]
    console.print(
        f"\nStore health: [{style}]{summary.health.value}[/{style}] "
        f"({summary.complete_versions}/{summary.total_versions} versions complete, "
        f"{summary.missing_files} missing, {summary.orphaned_files} orphaned)"
    )


def create_mirror_table(results: Sequence[MirrorResult], dry_run: bool = False) -> Table:
    """Create a table summarizing mirror results per version."""
    title = "Mirror Results (Dry Run)" if dry_run else "Mirror Results"
    table = create_table(title, "Version", "Mirrored", "Skipped", "Failed")
    for result in results:
        table.add_row(
            result.version,
            f"[fetched]{len(result.mirrored)}[/]",
            f"[muted]{len(result.skipped)}[/]",
            f"[error]{len(result.failed)}[/]" if result.failed else "0",
        )
    return table


def print_mirror_failures(results: Sequence[MirrorResult]) -> None:
    """Print every failed download with its reason."""
    for result in results:
        for path in result.failed:
            reason = result.errors.get(path, "unknown error")
            console.print(f"  [error]FAIL[/] {result.version}/{path}: [muted]{reason}[/]")


def create_clean_table(results: Sequence[CleanResult], dry_run: bool = False) -> Table:
    """Create a table summarizing clean results per version."""
    title = "Clean Results (Dry Run)" if dry_run else "Clean Results"
    table = create_table(title, "Version", "Deleted", "Skipped", "Failed")
    for result in results:
        table.add_row(
            result.version,
            f"[deleted]{len(result.deleted)}[/]",
            f"[muted]{len(result.skipped)}[/]",
            f"[error]{len(result.failed)}[/]" if result.failed else "0",
        )
    return table


def create_repair_table(results: Sequence[RepairResult], dry_run: bool = False) -> Table:
    """Create a table summarizing repair results per version."""
    title = "Repair Results (Dry Run)" if dry_run else "Repair Results"
    table = create_table(title, "Version", "Status", "Restored", "Removed", "Skipped", "Failed")
    for result in results:
        status = "[success]OK[/]" if result.status == "success" else "[error]FAIL[/]"
        table.add_row(
            result.version,
            status,
            f"[fetched]{len(result.restored)}[/]",
            f"[deleted]{len(result.removed)}[/]",
            f"[muted]{len(result.skipped)}[/]",
            f"[error]{len(result.failed)}[/]" if result.failed else "0",
        )
    return table


def print_repair_failures(results: Sequence[RepairResult]) -> None:
    """Print every file repair could not fix."""
    for result in results:
        for failure in result.failed:
            console.print(
                f"  [error]FAIL[/] {result.version}/{failure.file_path} "
                f"[muted]({failure.operation}: {failure.error})[/]"
            )


def print_operation_summary(summary: OperationSummary) -> None:
    """Print the timing, rate and size line of a mirror or repair run."""
    metrics = summary.metrics
    console.print(
        f"\n[muted]{summary.operation.capitalize()} took {summary.duration_ms / 1000:.2f}s: "
        f"{metrics.success_rate:.1f}% succeeded, {metrics.cache_hit_rate:.1f}% cached, "
        f"{metrics.failure_rate:.1f}% failed, {summary.storage.total_size} written "
        f"({metrics.average_time_per_file:.1f} ms/file)[/]"
    )
