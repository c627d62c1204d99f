"""Per-version report models for reconciliation operations.

Each operation returns one result per requested version. Results are
immutable and hold sorted tuples of version-relative paths, so output is
deterministic.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Literal, Protocol

RepairOperation = Literal["download", "remove"]


def sorted_paths(paths: Iterable[str]) -> tuple[str, ...]:
    """Return unique paths as a sorted tuple."""
    return tuple(sorted(set(paths)))


@dataclass(frozen=True, slots=True)
class FileCounts:
    """Aggregate file counts for a version.

    Attributes:
        total: Number of expected files.
        success: Number of present files.
        skipped: Number of orphaned files.
        failed: Number of missing files.
    """

    total: int = 0
    success: int = 0
    skipped: int = 0
    failed: int = 0

    def to_dict(self) -> dict[str, int]:
        """Convert to dictionary for JSON serialization."""
        return {
            "total": self.total,
            "success": self.success,
            "skipped": self.skipped,
            "failed": self.failed,
        }


@dataclass(frozen=True, slots=True)
class AnalyzeResult:
    """Comparison of a version's expected files with what the bridge holds.

    Attributes:
        version: Unicode version (e.g., '16.0.0').
        present: Files that are expected and stored.
        missing: Files that are expected but not stored.
        orphaned: Files that are stored but not expected.
        counts: Aggregate counts.
        file_types: Histogram of stored files by lower-cased extension.
    """

    version: str
    present: tuple[str, ...] = ()
    missing: tuple[str, ...] = ()
    orphaned: tuple[str, ...] = ()
    counts: FileCounts = field(default_factory=FileCounts)
    file_types: Mapping[str, int] = field(default_factory=dict)

    @property
    def is_complete(self) -> bool:
        """True if nothing is missing and nothing is orphaned."""
        return not (self.missing or self.orphaned)

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for JSON serialization."""
        return {
            "version": self.version,
            "is_complete": self.is_complete,
            "counts": self.counts.to_dict(),
            "file_types": dict(sorted(self.file_types.items())),
            "files": {
                "present": list(self.present),
                "missing": list(self.missing),
                "orphaned": list(self.orphaned),
            },
        }


@dataclass(frozen=True, slots=True)
class MirrorResult:
    """Outcome of mirroring one version.

    Attributes:
        version: Unicode version.
        mirrored: Files fetched and written (or that would be, under dry-run).
        skipped: Files left alone because they already existed.
        failed: Files whose fetch or write failed.
        errors: Failure message per failed path.
        bytes_written: Size of the files written.
    """

    version: str
    mirrored: tuple[str, ...] = ()
    skipped: tuple[str, ...] = ()
    failed: tuple[str, ...] = ()
    errors: Mapping[str, str] = field(default_factory=dict)
    bytes_written: int = 0

    @property
    def counts(self) -> FileCounts:
        """Counts over every file the version queued."""
        return FileCounts(
            total=len(self.mirrored) + len(self.skipped) + len(self.failed),
            success=len(self.mirrored),
            skipped=len(self.skipped),
            failed=len(self.failed),
        )

    @property
    def files_written(self) -> int:
        return len(self.mirrored)

    @property
    def is_success(self) -> bool:
        return not self.failed

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for JSON serialization."""
        return {
            "version": self.version,
            "summary": {
                "mirrored": len(self.mirrored),
                "skipped": len(self.skipped),
                "failed": len(self.failed),
                "bytes_written": self.bytes_written,
            },
            "mirrored": list(self.mirrored),
            "skipped": list(self.skipped),
            "failed": [
                {"path": path, "error": self.errors.get(path, "")} for path in self.failed
            ],
        }


@dataclass(frozen=True, slots=True)
class CleanResult:
    """Outcome of cleaning one version.

    Attributes:
        version: Unicode version.
        deleted: Files removed (or that would be, under dry-run).
        skipped: Files that were already gone.
        failed: Files whose removal failed.
    """

    version: str
    deleted: tuple[str, ...] = ()
    skipped: tuple[str, ...] = ()
    failed: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for JSON serialization."""
        return {
            "version": self.version,
            "deleted": list(self.deleted),
            "skipped": list(self.skipped),
            "failed": list(self.failed),
        }


@dataclass(frozen=True, slots=True)
class RepairFailure:
    """A file that repair could not fix.

    Attributes:
        file_path: Version-relative path.
        error: Human-readable reason.
        operation: The step that failed ('download' or 'remove').
    """

    file_path: str
    error: str
    operation: RepairOperation

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for JSON serialization."""
        return {"file_path": self.file_path, "error": self.error, "operation": self.operation}


@dataclass(frozen=True, slots=True)
class RepairResult:
    """Outcome of repairing one version.

    Attributes:
        version: Unicode version.
        restored: Missing files that were downloaded again.
        removed: Orphaned files that were deleted.
        skipped: Files that were already correct.
        failed: Files repair could not fix, with the failing step.
        bytes_written: Size of the restored files.
    """

    version: str
    restored: tuple[str, ...] = ()
    removed: tuple[str, ...] = ()
    skipped: tuple[str, ...] = ()
    failed: tuple[RepairFailure, ...] = ()
    bytes_written: int = 0

    @property
    def counts(self) -> FileCounts:
        """Restored and removed files count as successes."""
        success = len(self.restored) + len(self.removed)
        return FileCounts(
            total=success + len(self.skipped) + len(self.failed),
            success=success,
            skipped=len(self.skipped),
            failed=len(self.failed),
        )

    @property
    def files_written(self) -> int:
        return len(self.restored)

    @property
    def status(self) -> Literal["success", "failure"]:
        """'failure' if any file could not be repaired, else 'success'."""
        return "failure" if self.failed else "success"

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for JSON serialization."""
        return {
            "version": self.version,
            "status": self.status,
            "restored": list(self.restored),
            "removed": list(self.removed),
            "skipped": list(self.skipped),
            "failed": [failure.to_dict() for failure in self.failed],
            "bytes_written": self.bytes_written,
        }


class StoreHealth(str, Enum):
    """Overall store state derived from a set of analyze results.

    Attributes:
        HEALTHY: Every version is complete.
        NEEDS_CLEANUP: Nothing is missing but orphaned files exist.
        CORRUPTED: At least one expected file is missing.
    """

    HEALTHY = "healthy"
    NEEDS_CLEANUP = "needs_cleanup"
    CORRUPTED = "corrupted"


@dataclass(frozen=True, slots=True)
class AnalysisSummary:
    """Totals across all analyzed versions."""

    health: StoreHealth
    total_versions: int
    complete_versions: int
    total_files: int
    missing_files: int
    orphaned_files: int

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for JSON serialization."""
        return {
            "health": self.health.value,
            "total_versions": self.total_versions,
            "complete_versions": self.complete_versions,
            "total_files": self.total_files,
            "missing_files": self.missing_files,
            "orphaned_files": self.orphaned_files,
        }


def summarize_analysis(results: Iterable[AnalyzeResult]) -> AnalysisSummary:
    """Aggregate analyze results into a store-wide summary.

    Args:
        results: Per-version analyze results.

    Returns:
        AnalysisSummary with the derived health.
    """
    results = list(results)
    missing = sum(len(r.missing) for r in results)
    orphaned = sum(len(r.orphaned) for r in results)

    if missing:
        health = StoreHealth.CORRUPTED
    elif orphaned:
        health = StoreHealth.NEEDS_CLEANUP
    else:
        health = StoreHealth.HEALTHY

    return AnalysisSummary(
        health=health,
        total_versions=len(results),
        complete_versions=sum(1 for r in results if r.is_complete),
        total_files=sum(r.counts.total for r in results),
        missing_files=missing,
        orphaned_files=orphaned,
    )


BYTE_UNITS = ("B", "KB", "MB", "GB", "TB")


def format_bytes(size: float) -> str:
    """Format a byte count for humans (e.g., 1536 -> '1.50 KB')."""
    if size <= 0:
        return "0 B"
    value = float(size)
    unit = 0
    while value >= 1024 and unit < len(BYTE_UNITS) - 1:
        value /= 1024
        unit += 1
    return f"{value:.2f} {BYTE_UNITS[unit]}"


class CountedResult(Protocol):
    """Any per-version result that reports file counts and what it wrote."""

    @property
    def counts(self) -> FileCounts: ...

    @property
    def bytes_written(self) -> int: ...

    @property
    def files_written(self) -> int: ...


@dataclass(frozen=True, slots=True)
class OperationMetrics:
    """Rates as percentages (0-100) and the mean time per file in milliseconds."""

    success_rate: float = 0.0
    cache_hit_rate: float = 0.0
    failure_rate: float = 0.0
    average_time_per_file: float = 0.0

    @classmethod
    def from_counts(cls, counts: FileCounts, duration_ms: float) -> OperationMetrics:
        """Derive metrics from counts. Every value is 0 when no file was processed."""
        if counts.total <= 0:
            return cls()
        return cls(
            success_rate=counts.success / counts.total * 100,
            cache_hit_rate=counts.skipped / counts.total * 100,
            failure_rate=counts.failed / counts.total * 100,
            average_time_per_file=duration_ms / counts.total,
        )

    def to_dict(self) -> dict[str, float]:
        """Convert to dictionary for JSON serialization."""
        return {
            "success_rate": round(self.success_rate, 2),
            "cache_hit_rate": round(self.cache_hit_rate, 2),
            "failure_rate": round(self.failure_rate, 2),
            "average_time_per_file": round(self.average_time_per_file, 2),
        }


@dataclass(frozen=True, slots=True)
class StorageMetrics:
    """Bytes written by an operation and the mean size per written file."""

    total_bytes: int = 0
    file_count: int = 0

    @property
    def total_size(self) -> str:
        return format_bytes(self.total_bytes)

    @property
    def average_file_size(self) -> str:
        if self.file_count <= 0:
            return "0 B"
        return format_bytes(self.total_bytes / self.file_count)

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for JSON serialization."""
        return {
            "total_bytes": self.total_bytes,
            "total_size": self.total_size,
            "average_file_size": self.average_file_size,
        }


@dataclass(frozen=True, slots=True)
class OperationSummary:
    """Totals, rates and sizes for one run of an operation across versions.

    Attributes:
        operation: Operation name (e.g., 'mirror').
        duration_ms: Wall time of the run in milliseconds.
        timestamp: ISO 8601 time the run completed.
        counts: File counts summed over all versions.
        metrics: Rates derived from counts and duration.
        storage: Bytes written and average size.
    """

    operation: str
    duration_ms: float
    timestamp: str
    counts: FileCounts
    metrics: OperationMetrics
    storage: StorageMetrics

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for JSON serialization."""
        return {
            "operation": self.operation,
            "duration_ms": round(self.duration_ms, 2),
            "timestamp": self.timestamp,
            "counts": self.counts.to_dict(),
            "metrics": self.metrics.to_dict(),
            "storage": self.storage.to_dict(),
        }


def aggregate_counts(results: Iterable[CountedResult]) -> FileCounts:
    """Sum the file counts of several versions."""
    total = success = skipped = failed = 0
    for result in results:
        counts = result.counts
        total += counts.total
        success += counts.success
        skipped += counts.skipped
        failed += counts.failed
    return FileCounts(total=total, success=success, skipped=skipped, failed=failed)


def summarize_operation(
    operation: str,
    results: Iterable[CountedResult],
    duration_ms: float,
    timestamp: str | None = None,
) -> OperationSummary:
    """Build the run summary of a mirror or repair.

    Args:
        operation: Operation name.
        results: Per-version results of the run.
        duration_ms: Wall time of the run in milliseconds.
        timestamp: Completion time. Defaults to now, in UTC.

    Returns:
        OperationSummary. A run that processed no file has zeroed metrics.
    """
    results = list(results)
    counts = aggregate_counts(results)
    return OperationSummary(
        operation=operation,
        duration_ms=duration_ms,
        timestamp=timestamp or datetime.now(UTC).isoformat(),
        counts=counts,
        metrics=OperationMetrics.from_counts(counts, duration_ms),
        storage=StorageMetrics(
            total_bytes=sum(result.bytes_written for result in results),
            file_count=sum(result.files_written for result in results),
        ),
    )
