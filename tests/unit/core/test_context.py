"""Unit tests for StoreContext."""

import asyncio

import pytest
from ucdstore.bridges.memory import MemoryBridge
from ucdstore.core.manifest import MANIFEST_FILENAME, read_manifest, write_manifest
from ucdstore.errors import VersionNotFoundError
from ucdstore.models.manifest import StoreManifest


class TestResolveVersions:
    """Tests for StoreContext.resolve_versions."""

    def test_none_means_all(self, ctx) -> None:
        """None resolves to every known version."""
        assert ctx.resolve_versions(None) == ["16.0.0", "15.1.0"]

    def test_keeps_order_and_drops_duplicates(self, ctx) -> None:
        """Requested order wins and duplicates are dropped."""
        assert ctx.resolve_versions(["15.1.0", "16.0.0", "15.1.0"]) == ["15.1.0", "16.0.0"]

    def test_empty(self, ctx) -> None:
        """An empty request stays empty."""
        assert ctx.resolve_versions([]) == []

    def test_unknown(self, ctx) -> None:
        """Unknown versions raise."""
        with pytest.raises(VersionNotFoundError) as exc_info:
            ctx.resolve_versions(["16.0.0", "2.0.0"])
        assert exc_info.value.version == "2.0.0"


class TestManifestTracking:
    """Tests for track_versions and untrack_versions."""

    def test_track_creates_manifest(self, ctx, memory_bridge: MemoryBridge) -> None:
        """Tracking writes a manifest when none exists."""
        asyncio.run(ctx.track_versions({"16.0.0": ["a.txt"]}))

        manifest = asyncio.run(read_manifest(memory_bridge))
        assert manifest.root["16.0.0"].expected_files == ["a.txt"]

    def test_track_merges(self, ctx, memory_bridge: MemoryBridge) -> None:
        """Existing versions are kept."""

        async def run() -> StoreManifest:
            await write_manifest(memory_bridge, StoreManifest().track({"15.1.0": []}))
            await ctx.track_versions({"16.0.0": []})
            return await read_manifest(memory_bridge)

        assert asyncio.run(run()).versions == ["15.1.0", "16.0.0"]

    def test_track_skipped_without_write(self, make_context) -> None:
        """Read-only bridges are left alone."""
        bridge = MemoryBridge(capabilities=())
        ctx = make_context(bridge=bridge)

        asyncio.run(ctx.track_versions({"16.0.0": []}))

        assert bridge.files == {}

    def test_untrack_without_manifest(self, ctx, memory_bridge: MemoryBridge) -> None:
        """Untracking never creates a manifest."""
        asyncio.run(ctx.untrack_versions(["16.0.0"]))

        assert MANIFEST_FILENAME not in memory_bridge.files

    def test_untrack_unrelated_versions(self, ctx, memory_bridge: MemoryBridge) -> None:
        """The manifest is not rewritten when nothing changes."""
        memory_bridge.files[MANIFEST_FILENAME] = b'{"15.1.0": {"expectedFiles": []}}'

        asyncio.run(ctx.untrack_versions(["16.0.0"]))

        assert memory_bridge.files[MANIFEST_FILENAME] == b'{"15.1.0": {"expectedFiles": []}}'
