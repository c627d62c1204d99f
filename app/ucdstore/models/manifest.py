"""Store manifest models.

The store manifest is a JSON object at the bridge root that records which
versions the store tracks and the files each version is expected to hold:

    {
      "16.0.0": {"expectedFiles": ["UnicodeData.txt", "emoji/emoji-data.txt"]},
      "15.1.0": {"expectedFiles": []}
    }
"""

from collections.abc import Iterable, Mapping
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, RootModel, field_validator


class VersionEntry(BaseModel):
    """Manifest entry for a single tracked version.

    Attributes:
        expected_files: Version-relative paths the version should contain.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    expected_files: Annotated[
        list[str],
        Field(alias="expectedFiles", description="Files the version should contain"),
    ] = []

    @field_validator("expected_files")
    @classmethod
    def sort_expected_files(cls, v: list[str]) -> list[str]:
        """Keep expected files unique and sorted."""
        return sorted(set(v))


class StoreManifest(RootModel[dict[str, VersionEntry]]):
    """Mapping of tracked version to its manifest entry."""

    root: dict[str, VersionEntry] = {}

    @field_validator("root")
    @classmethod
    def validate_versions(cls, v: dict[str, VersionEntry]) -> dict[str, VersionEntry]:
        """Ensure version keys are non-empty."""
        for version in v:
            if not version.strip():
                msg = "Version keys cannot be empty"
                raise ValueError(msg)
        return v

    @property
    def versions(self) -> list[str]:
        """Tracked versions in sorted order."""
        return sorted(self.root)

    def __contains__(self, version: object) -> bool:
        return version in self.root

    def __len__(self) -> int:
        return len(self.root)

    def track(self, expected: Mapping[str, Iterable[str]]) -> "StoreManifest":
        """Return a new manifest that also tracks the given versions.

        Args:
            expected: Expected files per version. Existing entries are replaced.

        Returns:
            New StoreManifest instance.
        """
        entries = dict(self.root)
        for version, files in expected.items():
            entries[version] = VersionEntry(expected_files=list(files))
        return StoreManifest(entries)

    def untrack(self, versions: Iterable[str]) -> "StoreManifest":
        """Return a new manifest without the given versions."""
        removed = set(versions)
        return StoreManifest({k: v for k, v in self.root.items() if k not in removed})

    def to_json(self) -> str:
        """Serialize to pretty JSON with camelCase keys."""
        return self.model_dump_json(by_alias=True, indent=2)
