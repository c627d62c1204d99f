"""Where ucdstore keeps its files.

Both roots follow the XDG base directory variables:

- ~/.config/ucdstore/ holds config.toml and theme.toml.
- ~/.cache/ucdstore/store/ is the default local store.
"""

import os
from pathlib import Path

APP_NAME = "ucdstore"
CONFIG_FILENAME = "config.toml"
STORE_DIRNAME = "store"


def _xdg_home(env_var: str, fallback: str) -> Path:
    """Return $env_var/ucdstore, or ~/fallback/ucdstore when the variable is unset."""
    base = os.environ.get(env_var)
    root = Path(base) if base else Path.home() / fallback
    return root / APP_NAME


def get_config_dir() -> Path:
    """Return the configuration directory."""
    return _xdg_home("XDG_CONFIG_HOME", ".config")


def get_cache_dir() -> Path:
    """Return the cache directory."""
    return _xdg_home("XDG_CACHE_HOME", ".cache")


def get_config_path() -> Path:
    """Return the default config file path."""
    return get_config_dir() / CONFIG_FILENAME


def get_default_store_path() -> Path:
    """Return the store root used when none is configured."""
    return get_cache_dir() / STORE_DIRNAME


def ensure_config_dir() -> Path:
    """Create the configuration directory if needed and return it.

    Raises:
        RuntimeError: If the directory cannot be created.
    """
    config_dir = get_config_dir()
    try:
        config_dir.mkdir(parents=True, exist_ok=True)
    except PermissionError as e:
        msg = f"Cannot create config directory {config_dir}: Permission denied"
        raise RuntimeError(msg) from e
    except OSError as e:
        msg = f"Cannot create config directory {config_dir}: {e}"
        raise RuntimeError(msg) from e
    return config_dir
