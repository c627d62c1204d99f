"""Fixtures for CLI command tests."""

from pathlib import Path

import pytest
from ucdstore.config import API_URL_ENV
from ucdstore.core.context import StoreContext
from ucdstore.core.store import UCDStore


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point XDG directories at a temp dir so no user config is read."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))
    monkeypatch.delenv(API_URL_ENV, raising=False)
    return tmp_path


@pytest.fixture
def ucd_store(ctx: StoreContext) -> UCDStore:
    """Store over the memory bridge and fake client."""
    return UCDStore(ctx)
