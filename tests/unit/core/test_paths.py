"""Unit tests for XDG path management.

Tests for the paths module that provides XDG-compliant directory paths.
"""

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from ucdstore.core.paths import (
    APP_NAME,
    ensure_config_dir,
    get_cache_dir,
    get_config_dir,
    get_config_path,
    get_default_store_path,
)


class TestGetConfigDir:
    """Tests for get_config_dir function."""

    def test_default_config_dir(self) -> None:
        """get_config_dir returns default path when XDG_CONFIG_HOME not set."""
        with patch.dict(os.environ, {}, clear=True):
            os.environ.pop("XDG_CONFIG_HOME", None)

            result = get_config_dir()

        assert result == Path.home() / ".config" / APP_NAME

    def test_respects_xdg_config_home(self, tmp_path: Path) -> None:
        """get_config_dir respects XDG_CONFIG_HOME environment variable."""
        with patch.dict(os.environ, {"XDG_CONFIG_HOME": str(tmp_path)}):
            result = get_config_dir()

        assert result == tmp_path / APP_NAME


class TestGetCacheDir:
    """Tests for get_cache_dir function."""

    def test_default_cache_dir(self) -> None:
        """get_cache_dir returns default path when XDG_CACHE_HOME not set."""
        with patch.dict(os.environ, {}, clear=True):
            os.environ.pop("XDG_CACHE_HOME", None)

            result = get_cache_dir()

        assert result == Path.home() / ".cache" / APP_NAME

    def test_respects_xdg_cache_home(self, tmp_path: Path) -> None:
        """get_cache_dir respects XDG_CACHE_HOME environment variable."""
        with patch.dict(os.environ, {"XDG_CACHE_HOME": str(tmp_path)}):
            result = get_cache_dir()

        assert result == tmp_path / APP_NAME


class TestConveniencePaths:
    """Tests for derived file paths."""

    def test_get_config_path(self, tmp_path: Path) -> None:
        """Config file lives in the config directory."""
        with patch.dict(os.environ, {"XDG_CONFIG_HOME": str(tmp_path)}):
            assert get_config_path() == tmp_path / APP_NAME / "config.toml"

    def test_get_default_store_path(self, tmp_path: Path) -> None:
        """The default store lives in the cache directory."""
        with patch.dict(os.environ, {"XDG_CACHE_HOME": str(tmp_path)}):
            assert get_default_store_path() == tmp_path / APP_NAME / "store"


class TestEnsureConfigDir:
    """Tests for ensure_config_dir function."""

    def test_creates_directory(self, tmp_path: Path) -> None:
        """ensure_config_dir creates the directory."""
        with patch.dict(os.environ, {"XDG_CONFIG_HOME": str(tmp_path)}):
            result = ensure_config_dir()

        assert result.is_dir()
        assert result == tmp_path / APP_NAME

    def test_idempotent(self, tmp_path: Path) -> None:
        """ensure_config_dir can be called repeatedly."""
        with patch.dict(os.environ, {"XDG_CONFIG_HOME": str(tmp_path)}):
            first = ensure_config_dir()
            second = ensure_config_dir()

        assert first == second

    def test_permission_error(self, tmp_path: Path) -> None:
        """Failures to create the directory raise RuntimeError."""
        with (
            patch.dict(os.environ, {"XDG_CONFIG_HOME": str(tmp_path)}),
            patch.object(Path, "mkdir", side_effect=PermissionError("denied")),
            pytest.raises(RuntimeError, match="Permission denied"),
        ):
            ensure_config_dir()
