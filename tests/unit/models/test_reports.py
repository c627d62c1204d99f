"""Unit tests for operation report models."""

import pytest
from ucdstore.models.reports import (
    AnalyzeResult,
    FileCounts,
    MirrorResult,
    OperationMetrics,
    RepairFailure,
    RepairResult,
    StorageMetrics,
    StoreHealth,
    aggregate_counts,
    format_bytes,
    sorted_paths,
    summarize_analysis,
    summarize_operation,
)


class TestSortedPaths:
    """Tests for sorted_paths helper."""

    def test_sorted_and_unique(self) -> None:
        """Paths come back sorted without duplicates."""
        assert sorted_paths(["b", "a", "b"]) == ("a", "b")


class TestAnalyzeResult:
    """Tests for AnalyzeResult model."""

    def test_complete(self) -> None:
        """A version is complete with nothing missing or orphaned."""
        assert AnalyzeResult(version="16.0.0", present=("a",)).is_complete
        assert not AnalyzeResult(version="16.0.0", missing=("a",)).is_complete
        assert not AnalyzeResult(version="16.0.0", orphaned=("a",)).is_complete

    def test_to_dict(self) -> None:
        """Serialization groups file lists."""
        result = AnalyzeResult(
            version="16.0.0",
            present=("a.txt",),
            missing=("b.txt",),
            counts=FileCounts(total=2, success=1, failed=1),
            file_types={".txt": 1},
        )

        data = result.to_dict()

        assert data["is_complete"] is False
        assert data["counts"] == {"total": 2, "success": 1, "skipped": 0, "failed": 1}
        assert data["files"] == {"present": ["a.txt"], "missing": ["b.txt"], "orphaned": []}


class TestMirrorResult:
    """Tests for MirrorResult model."""

    def test_failed_paths_carry_errors(self) -> None:
        """Each failure is serialized with its reason."""
        result = MirrorResult(
            version="16.0.0",
            mirrored=("a.txt",),
            failed=("b.txt",),
            errors={"b.txt": "502 Bad Gateway"},
        )

        assert not result.is_success
        assert result.to_dict()["failed"] == [{"path": "b.txt", "error": "502 Bad Gateway"}]
        assert result.to_dict()["summary"] == {
            "mirrored": 1,
            "skipped": 0,
            "failed": 1,
            "bytes_written": 0,
        }


class TestRepairResult:
    """Tests for RepairResult model."""

    def test_status(self) -> None:
        """Any failure makes the status 'failure'."""
        assert RepairResult(version="16.0.0", restored=("a",)).status == "success"
        failed = RepairResult(
            version="16.0.0",
            failed=(RepairFailure("a", "File does not exist", "remove"),),
        )
        assert failed.status == "failure"
        assert failed.to_dict()["failed"] == [
            {"file_path": "a", "error": "File does not exist", "operation": "remove"}
        ]


class TestSummarizeAnalysis:
    """Tests for summarize_analysis function."""

    def test_healthy(self) -> None:
        """All complete versions mean a healthy store."""
        summary = summarize_analysis(
            [AnalyzeResult(version="16.0.0", present=("a",), counts=FileCounts(total=1, success=1))]
        )

        assert summary.health == StoreHealth.HEALTHY
        assert summary.complete_versions == 1
        assert summary.total_files == 1

    def test_needs_cleanup(self) -> None:
        """Orphans without missing files need cleanup."""
        summary = summarize_analysis(
            [
                AnalyzeResult(version="16.0.0", orphaned=("x",)),
                AnalyzeResult(version="15.1.0"),
            ]
        )

        assert summary.health == StoreHealth.NEEDS_CLEANUP
        assert summary.orphaned_files == 1
        assert summary.complete_versions == 1

    def test_corrupted(self) -> None:
        """Missing files mean a corrupted store."""
        summary = summarize_analysis(
            [AnalyzeResult(version="16.0.0", missing=("a",), orphaned=("x",))]
        )

        assert summary.health == StoreHealth.CORRUPTED
        assert summary.to_dict()["health"] == "corrupted"

    def test_empty(self) -> None:
        """No results is a healthy, empty store."""
        summary = summarize_analysis([])

        assert summary.health == StoreHealth.HEALTHY
        assert summary.total_versions == 0


class TestFormatBytes:
    """Tests for format_bytes helper."""

    @pytest.mark.parametrize(
        ("size", "expected"),
        [
            (0, "0 B"),
            (-5, "0 B"),
            (512, "512.00 B"),
            (1536, "1.50 KB"),
            (1048576, "1.00 MB"),
        ],
    )
    def test_format(self, size: int, expected: str) -> None:
        """Sizes are scaled to the largest fitting unit."""
        assert format_bytes(size) == expected


class TestOperationMetrics:
    """Tests for OperationMetrics model."""

    def test_rates(self) -> None:
        """Rates are percentages of the total and time is per file."""
        counts = FileCounts(total=10, success=7, skipped=2, failed=1)

        metrics = OperationMetrics.from_counts(counts, duration_ms=500)

        assert metrics.success_rate == 70
        assert metrics.cache_hit_rate == 20
        assert metrics.failure_rate == 10
        assert metrics.average_time_per_file == 50

    def test_no_files(self) -> None:
        """A run without files has zeroed metrics instead of dividing by zero."""
        metrics = OperationMetrics.from_counts(FileCounts(), duration_ms=120)

        assert metrics == OperationMetrics()
        assert metrics.to_dict() == {
            "success_rate": 0.0,
            "cache_hit_rate": 0.0,
            "failure_rate": 0.0,
            "average_time_per_file": 0.0,
        }


class TestStorageMetrics:
    """Tests for StorageMetrics model."""

    def test_average(self) -> None:
        """Average size divides the bytes by the files written."""
        storage = StorageMetrics(total_bytes=3072, file_count=2)

        assert storage.total_size == "3.00 KB"
        assert storage.average_file_size == "1.50 KB"

    def test_nothing_written(self) -> None:
        """No written files means a zero average."""
        storage = StorageMetrics(total_bytes=0, file_count=0)

        assert storage.to_dict() == {
            "total_bytes": 0,
            "total_size": "0 B",
            "average_file_size": "0 B",
        }


class TestSummarizeOperation:
    """Tests for summarize_operation function."""

    def test_mirror_run(self) -> None:
        """Counts, rates and sizes are summed across versions."""
        results = [
            MirrorResult(version="16.0.0", mirrored=("a", "b"), skipped=("c",), bytes_written=2048),
            MirrorResult(version="15.1.0", failed=("d",), errors={"d": "boom"}),
        ]

        summary = summarize_operation(
            "mirror", results, duration_ms=400, timestamp="2024-01-01T00:00:00+00:00"
        )

        assert summary.counts == FileCounts(total=4, success=2, skipped=1, failed=1)
        assert summary.metrics.success_rate == 50
        assert summary.metrics.average_time_per_file == 100
        assert summary.storage == StorageMetrics(total_bytes=2048, file_count=2)
        data = summary.to_dict()
        assert data["operation"] == "mirror"
        assert data["timestamp"] == "2024-01-01T00:00:00+00:00"
        assert data["storage"]["average_file_size"] == "1.00 KB"

    def test_empty_run(self) -> None:
        """A run over versions with no files reports zeros."""
        summary = summarize_operation("repair", [RepairResult(version="16.0.0")], duration_ms=5)

        assert summary.counts.total == 0
        assert summary.metrics == OperationMetrics()
        assert summary.storage.average_file_size == "0 B"
        assert summary.timestamp.endswith("+00:00")

    def test_repair_counts(self) -> None:
        """Restored and removed files are successes; only restored ones are written."""
        result = RepairResult(
            version="16.0.0",
            restored=("a",),
            removed=("x", "y"),
            skipped=("b",),
            failed=(RepairFailure(file_path="c", error="boom", operation="download"),),
            bytes_written=10,
        )

        assert aggregate_counts([result]) == FileCounts(total=5, success=3, skipped=1, failed=1)
        assert result.files_written == 1
