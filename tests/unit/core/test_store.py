"""Unit tests for the UCDStore facade and factories."""

import asyncio
from pathlib import Path

import pytest
from ucdstore.bridges.local import LocalBridge
from ucdstore.bridges.memory import MemoryBridge
from ucdstore.config import StoreConfig
from ucdstore.core.manifest import MANIFEST_FILENAME, write_manifest
from ucdstore.core.store import (
    UCDStore,
    create_local_store,
    create_memory_store,
    create_store,
)
from ucdstore.errors import VersionNotFoundError
from ucdstore.models.manifest import StoreManifest


class TestCreateStore:
    """Tests for the store factories."""

    def test_configured_and_tracked_versions_merge(self, fake_client, tmp_path: Path) -> None:
        """The version set is the configured versions, then the tracked ones."""
        bridge = MemoryBridge()
        asyncio.run(write_manifest(bridge, StoreManifest().track({"16.0.0": [], "15.1.0": []})))
        config = StoreConfig(store_path=tmp_path, versions=["15.1.0"])

        store = asyncio.run(create_store(bridge, config, client=fake_client))

        assert store.versions == ("15.1.0", "16.0.0")

    def test_unknown_version_rejected(self, fake_client, tmp_path: Path) -> None:
        """Operations refuse versions outside the configured set."""
        config = StoreConfig(store_path=tmp_path, versions=["16.0.0"])
        store = asyncio.run(create_store(MemoryBridge(), config, client=fake_client))

        with pytest.raises(VersionNotFoundError) as exc_info:
            asyncio.run(store.analyze(["99.9.9"]))

        assert exc_info.value.version == "99.9.9"

    def test_filters_from_config(self, fake_client, tmp_path: Path) -> None:
        """Configured include/exclude globs narrow the expected set."""
        config = StoreConfig(store_path=tmp_path, versions=["15.1.0"], exclude=["*.zip"])
        store = asyncio.run(create_store(MemoryBridge(), config, client=fake_client))

        [result] = asyncio.run(store.mirror())

        assert result.mirrored == ("UnicodeData.txt",)
        assert store.ctx.path_filter.exclude == ("*.zip",)

    def test_configured_versions(self, fake_client, tmp_path: Path) -> None:
        """Configured versions are used when none are given."""
        config = StoreConfig(store_path=tmp_path, versions=["16.0.0", "15.1.0"], concurrency=3)

        store = asyncio.run(create_store(MemoryBridge(), config, client=fake_client))

        assert store.versions == ("16.0.0", "15.1.0")
        assert store.concurrency == 3

    def test_manifest_versions(self, fake_client, tmp_path: Path) -> None:
        """Without configured versions the manifest is used."""
        bridge = MemoryBridge()
        asyncio.run(write_manifest(bridge, StoreManifest().track({"16.0.0": [], "15.1.0": []})))

        config = StoreConfig(store_path=tmp_path)
        store = asyncio.run(create_store(bridge, config, client=fake_client))

        assert store.versions == ("15.1.0", "16.0.0")

    def test_no_versions(self, fake_client, tmp_path: Path) -> None:
        """A fresh store without configuration knows no versions."""
        store = asyncio.run(
            create_store(MemoryBridge(), StoreConfig(store_path=tmp_path), client=fake_client)
        )

        assert store.versions == ()

    def test_local_store(self, fake_client, tmp_path: Path) -> None:
        """The local factory roots the bridge at the store path."""
        config = StoreConfig(store_path=tmp_path / "store", versions=["16.0.0"])

        store = asyncio.run(create_local_store(config, client=fake_client))

        assert isinstance(store.bridge, LocalBridge)
        assert store.bridge.base_path == tmp_path / "store"

    def test_local_store_path_override(self, fake_client, tmp_path: Path) -> None:
        """An explicit store path overrides the configured one."""
        config = StoreConfig(store_path=tmp_path / "a", versions=["16.0.0"])

        store = asyncio.run(
            create_local_store(config, store_path=tmp_path / "b", client=fake_client)
        )

        assert store.bridge.base_path == tmp_path / "b"

    def test_memory_store(self, fake_client, tmp_path: Path) -> None:
        """The memory factory preloads files."""
        store = asyncio.run(
            create_memory_store(
                StoreConfig(store_path=tmp_path, versions=["16.0.0"]),
                initial_files={"16.0.0/Blocks.txt": "x"},
                client=fake_client,
            )
        )

        [result] = asyncio.run(store.analyze())
        assert result.present == ("Blocks.txt",)


class TestUCDStore:
    """Tests for UCDStore operations."""

    def test_init_writes_manifest_and_mirrors(self, ctx, memory_bridge: MemoryBridge) -> None:
        """init creates the manifest and downloads every version."""
        store = UCDStore(ctx)

        results = asyncio.run(store.init())

        assert all(r.is_success for r in results)
        assert asyncio.run(store.tracked_versions()) == ["15.1.0", "16.0.0"]
        assert "16.0.0/emoji/emoji-data.txt" in memory_bridge.files

    def test_init_dry_run(self, ctx, memory_bridge: MemoryBridge) -> None:
        """A dry-run init writes nothing."""
        store = UCDStore(ctx)

        results = asyncio.run(store.init(dry_run=True))

        assert sum(len(r.mirrored) for r in results) == 6
        assert memory_bridge.files == {}

    def test_lifecycle(self, ctx, memory_bridge: MemoryBridge) -> None:
        """Mirror, damage, repair and clean through the facade."""
        store = UCDStore(ctx, concurrency=2)

        async def run() -> None:
            await store.mirror()
            await memory_bridge.rm("16.0.0/Blocks.txt")
            await memory_bridge.write("16.0.0/junk.bin", b"\x00")

            [analysis] = await store.analyze(["16.0.0"])
            assert analysis.missing == ("Blocks.txt",)
            assert analysis.orphaned == ("junk.bin",)

            [repaired] = await store.repair(["16.0.0"])
            assert repaired.restored == ("Blocks.txt",)
            assert repaired.removed == ("junk.bin",)

            await store.clean(["15.1.0"])
            assert await store.tracked_versions() == ["16.0.0"]

        asyncio.run(run())

        assert not any(path.startswith("15.1.0/") for path in memory_bridge.files)
        assert MANIFEST_FILENAME in memory_bridge.files

    def test_manifest_default(self, ctx) -> None:
        """A store without a manifest reports an empty one."""
        assert asyncio.run(UCDStore(ctx).manifest()) == StoreManifest()
