"""Unit tests for include/exclude path filters."""

import pytest
from ucdstore.filters import PathFilter
from ucdstore.models.entry import DirectoryEntry, FileEntry


class TestPathFilter:
    """Tests for PathFilter matching."""

    def test_empty_keeps_everything(self) -> None:
        """A filter without patterns passes every path."""
        path_filter = PathFilter()

        assert path_filter.is_empty
        assert path_filter("UnicodeData.txt")
        assert path_filter("emoji/emoji-data.txt")

    @pytest.mark.parametrize(
        ("pattern", "path", "expected"),
        [
            ("emoji/*", "emoji/emoji-data.txt", True),
            ("emoji/*", "UnicodeData.txt", False),
            ("*.zip", "Unihan.zip", True),
            ("*.zip", "auxiliary/Extra.zip", True),
            ("**/*.txt", "Blocks.txt", True),
            ("**/*.txt", "extracted/DerivedAge.txt", True),
            ("unicodedata.txt", "UnicodeData.txt", True),
            ("extracted/**", "extracted/DerivedAge.txt", True),
            ("extracted/**", "emoji/emoji-data.txt", False),
        ],
    )
    def test_include(self, pattern: str, path: str, expected: bool) -> None:
        """Includes match the whole path, the base name, and any depth with '**/'."""
        assert PathFilter(include=(pattern,))(path) is expected

    def test_exclusion_wins(self) -> None:
        """A path both included and excluded is dropped."""
        path_filter = PathFilter(include=("emoji/*",), exclude=("*test*",))

        assert path_filter("emoji/emoji-data.txt")
        assert not path_filter("emoji/emoji-test.txt")
        assert not path_filter("Blocks.txt")

    def test_exclude_only(self) -> None:
        """Without includes everything not excluded passes."""
        path_filter = PathFilter(exclude=("*.zip", "*.pdf"))

        assert path_filter.filter_paths(["Unihan.zip", "Blocks.txt", "charts/U0000.pdf"]) == [
            "Blocks.txt"
        ]

    def test_from_patterns_drops_blanks(self) -> None:
        """Blank patterns are ignored."""
        path_filter = PathFilter.from_patterns(include=[" emoji/* ", ""], exclude=None)

        assert path_filter == PathFilter(include=("emoji/*",))

    def test_extend(self) -> None:
        """Extra patterns are added on top of the existing ones."""
        path_filter = PathFilter(exclude=("*.zip",)).extend(include=["emoji/*"])

        assert path_filter == PathFilter(include=("emoji/*",), exclude=("*.zip",))


class TestFilterTree:
    """Tests for PathFilter.filter_tree."""

    def test_prunes_files_and_empty_directories(self) -> None:
        """Rejected files go, and so do directories left without files."""
        tree = [
            FileEntry(name="Unihan.zip", path="/Unihan.zip"),
            FileEntry(name="Blocks.txt", path="/Blocks.txt"),
            DirectoryEntry(
                name="emoji",
                path="/emoji/",
                children=(FileEntry(name="emoji-data.txt", path="/emoji/emoji-data.txt"),),
            ),
            DirectoryEntry(
                name="charts",
                path="/charts/",
                children=(FileEntry(name="U0000.zip", path="/charts/U0000.zip"),),
            ),
        ]

        filtered = PathFilter(exclude=("*.zip",)).filter_tree(tree)

        assert filtered == [
            FileEntry(name="Blocks.txt", path="/Blocks.txt"),
            DirectoryEntry(
                name="emoji",
                path="/emoji/",
                children=(FileEntry(name="emoji-data.txt", path="/emoji/emoji-data.txt"),),
            ),
        ]

    def test_matches_nested_paths(self) -> None:
        """Patterns see the full version-relative path of nested files."""
        tree = [
            FileEntry(name="Blocks.txt", path="/Blocks.txt"),
            DirectoryEntry(
                name="emoji",
                path="/emoji/",
                children=(FileEntry(name="emoji-data.txt", path="/emoji/emoji-data.txt"),),
            ),
        ]

        filtered = PathFilter(include=("emoji/*",)).filter_tree(tree)

        assert [entry.name for entry in filtered] == ["emoji"]
