"""Data models for ucdstore.

This module exports the core data structures used throughout the application.
"""

from ucdstore.models.entry import DirectoryEntry, EntryType, FileEntry, FSEntry
from ucdstore.models.manifest import StoreManifest, VersionEntry
from ucdstore.models.reports import (
    AnalysisSummary,
    AnalyzeResult,
    CleanResult,
    FileCounts,
    MirrorResult,
    RepairFailure,
    RepairResult,
    StoreHealth,
    summarize_analysis,
)

__all__ = [
    "AnalysisSummary",
    "AnalyzeResult",
    "CleanResult",
    "DirectoryEntry",
    "EntryType",
    "FSEntry",
    "FileCounts",
    "FileEntry",
    "MirrorResult",
    "RepairFailure",
    "RepairResult",
    "StoreHealth",
    "StoreManifest",
    "VersionEntry",
    "summarize_analysis",
]
