"""Include/exclude glob filters over version-relative paths.

Patterns are fnmatch globs matched case-insensitively against the whole
version-relative path ('*' also crosses '/'). A leading '**/' matches at
any depth, including the version root, and a pattern without '/' is also
tried against the base name:

- 'emoji/*' keeps everything below emoji/.
- '*.zip' drops Unihan.zip wherever it is.

With no include patterns every path is included. Exclusions always win.
"""

import fnmatch
from collections.abc import Iterable
from dataclasses import dataclass

from ucdstore.models.entry import DirectoryEntry, FSEntry
from ucdstore.tree import join_path


def _matches(path: str, pattern: str) -> bool:
    path = path.lower()
    pattern = pattern.lower()
    if fnmatch.fnmatchcase(path, pattern):
        return True
    if pattern.startswith("**/") and fnmatch.fnmatchcase(path, pattern[3:]):
        return True
    if "/" not in pattern:
        return fnmatch.fnmatchcase(path.rsplit("/", 1)[-1], pattern)
    return False


@dataclass(frozen=True, slots=True)
class PathFilter:
    """A set of include and exclude globs.

    Attributes:
        include: Paths must match one of these, when any are given.
        exclude: Paths matching any of these are dropped.
    """

    include: tuple[str, ...] = ()
    exclude: tuple[str, ...] = ()

    @classmethod
    def from_patterns(
        cls,
        include: Iterable[str] | None = None,
        exclude: Iterable[str] | None = None,
    ) -> "PathFilter":
        """Build a filter, dropping blank patterns."""
        return cls(
            include=tuple(p.strip() for p in include or () if p.strip()),
            exclude=tuple(p.strip() for p in exclude or () if p.strip()),
        )

    @property
    def is_empty(self) -> bool:
        return not self.include and not self.exclude

    def extend(
        self,
        include: Iterable[str] | None = None,
        exclude: Iterable[str] | None = None,
    ) -> "PathFilter":
        """Return a filter with extra patterns added to this one."""
        extra = PathFilter.from_patterns(include, exclude)
        return PathFilter(
            include=self.include + extra.include,
            exclude=self.exclude + extra.exclude,
        )

    def __call__(self, path: str) -> bool:
        """Return True if the path passes the filter."""
        if any(_matches(path, pattern) for pattern in self.exclude):
            return False
        if not self.include:
            return True
        return any(_matches(path, pattern) for pattern in self.include)

    def filter_paths(self, paths: Iterable[str]) -> list[str]:
        """Keep the paths that pass, in input order."""
        if self.is_empty:
            return list(paths)
        return [path for path in paths if self(path)]

    def filter_tree(self, entries: Iterable[FSEntry], prefix: str = "") -> list[FSEntry]:
        """Filter a nested listing by the paths of its files.

        Directories are kept only while at least one file below them passes.

        Args:
            entries: Entries of the listing.
            prefix: Version-relative path of the directory being filtered.

        Returns:
            The filtered entries, in listing order.
        """
        kept: list[FSEntry] = []
        for entry in entries:
            full_path = join_path(prefix, entry.name)
            if isinstance(entry, DirectoryEntry):
                children = self.filter_tree(entry.children, full_path)
                if children:
                    kept.append(
                        DirectoryEntry(
                            name=entry.name,
                            path=entry.path,
                            children=tuple(children),
                        )
                    )
            elif self(full_path):
                kept.append(entry)
        return kept
