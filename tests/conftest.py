"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import asyncio
from collections.abc import Callable, Iterable, Mapping

import pytest
from ucdstore.bridges.memory import MemoryBridge
from ucdstore.client import RemoteFile
from ucdstore.core.context import StoreContext
from ucdstore.core.resolver import ExpectedSetResolver
from ucdstore.errors import ApiNotFoundError, ApiResponseError
from ucdstore.filters import PathFilter
from ucdstore.models.entry import DirectoryEntry, FileEntry, FSEntry


def build_tree(paths: Iterable[str], base: str = "") -> list[FSEntry]:
    """Build a nested entry tree from flat relative paths."""
    entries: list[FSEntry] = []
    groups: dict[str, list[str]] = {}
    for path in sorted(paths):
        head, sep, rest = path.partition("/")
        if sep:
            groups.setdefault(head, []).append(rest)
        else:
            entries.append(FileEntry(name=head, path=f"/{base}{head}"))
    for name, children in groups.items():
        entries.append(
            DirectoryEntry(
                name=name,
                path=f"/{base}{name}/",
                children=tuple(build_tree(children, f"{base}{name}/")),
            )
        )
    return entries


class FakeUCDClient:
    """In-process stand-in for UCDClient.

    Attributes:
        files: Version to {path: content} mapping served by the fake API.
        failing: (version, path) pairs whose download raises.
        tree_failures: Versions whose file tree request raises.
        downloads: (version, path) pairs that were downloaded.
        max_in_flight: Highest number of simultaneous downloads observed.
    """

    def __init__(
        self,
        files: Mapping[str, Mapping[str, str | bytes]],
        failing: Iterable[tuple[str, str]] = (),
        tree_failures: Iterable[str] = (),
        delay: float = 0.0,
    ) -> None:
        self.files = {version: dict(entries) for version, entries in files.items()}
        self.failing = set(failing)
        self.tree_failures = set(tree_failures)
        self.delay = delay
        self.downloads: list[tuple[str, str]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def get_file_tree(self, version: str) -> list[FSEntry]:
        if version in self.tree_failures:
            raise ApiResponseError(f"file tree of {version}", 500, "Internal Server Error")
        if version not in self.files:
            raise ApiNotFoundError(f"file tree of {version}")
        return build_tree(self.files[version])

    async def get_file(self, version: str, path: str) -> RemoteFile:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if (version, path) in self.failing:
                raise ApiResponseError(f"{version}/{path}", 502, "Bad Gateway")
            content = self.files[version][path]
            self.downloads.append((version, path))
            if isinstance(content, bytes):
                return RemoteFile(content=content, content_type="application/octet-stream")
            if path.endswith(".json"):
                return RemoteFile(content=content.encode(), content_type="application/json")
            return RemoteFile(content=content.encode(), content_type="text/plain")
        finally:
            self.in_flight -= 1


ContextFactory = Callable[..., StoreContext]


@pytest.fixture
def ucd_files() -> dict[str, dict[str, str | bytes]]:
    """Files served by the fake API for two versions."""
    return {
        "16.0.0": {
            "UnicodeData.txt": "0041;LATIN CAPITAL LETTER A;Lu;0;L;;;;;N;;;;0061;",
            "Blocks.txt": "0000..007F; Basic Latin",
            "emoji/emoji-data.txt": "231A..231B    ; Emoji",
            "extracted/DerivedAge.txt": "0000..001F    ; 1.1",
        },
        "15.1.0": {
            "UnicodeData.txt": "0041;LATIN CAPITAL LETTER A;Lu;0;L;;;;;N;;;;0061;",
            "Unihan.zip": b"PK\x03\x04binary",
        },
    }


@pytest.fixture
def fake_client(ucd_files: dict[str, dict[str, str | bytes]]) -> FakeUCDClient:
    """Fake API client serving ucd_files."""
    return FakeUCDClient(ucd_files)


@pytest.fixture
def make_client(ucd_files: dict[str, dict[str, str | bytes]]) -> Callable[..., FakeUCDClient]:
    """Factory for fake clients; serves ucd_files unless files are given."""

    def factory(files: Mapping[str, Mapping[str, str | bytes]] | None = None, **kwargs: object):
        served = ucd_files if files is None else files
        return FakeUCDClient(served, **kwargs)  # type: ignore[arg-type]

    return factory


@pytest.fixture
def memory_bridge() -> MemoryBridge:
    """Empty, fully capable in-memory bridge."""
    return MemoryBridge()


@pytest.fixture
def make_context(memory_bridge: MemoryBridge, fake_client: FakeUCDClient) -> ContextFactory:
    """Factory for store contexts over the memory bridge and fake client."""

    def factory(
        bridge: MemoryBridge | None = None,
        client: FakeUCDClient | None = None,
        versions: Iterable[str] = ("16.0.0", "15.1.0"),
        path_filter: PathFilter | None = None,
    ) -> StoreContext:
        active_client = client or fake_client
        active_filter = path_filter or PathFilter()
        return StoreContext(
            bridge=bridge or memory_bridge,
            resolver=ExpectedSetResolver(active_client, active_filter),
            client=active_client,
            versions=tuple(versions),
            path_filter=active_filter,
        )

    return factory


@pytest.fixture
def ctx(make_context: ContextFactory) -> StoreContext:
    """Default store context."""
    return make_context()
