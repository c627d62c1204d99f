"""Store configuration and settings.

Configuration is stored in ~/.config/ucdstore/config.toml:

    store_path = "/home/me/.cache/ucdstore/store"
    api_url = "https://api.ucdjs.dev"
    versions = ["16.0.0", "15.1.0"]
    concurrency = 5
    exclude = ["*.zip"]

A missing file means defaults. The UCDSTORE_API_URL environment variable
overrides api_url.
"""

import logging
import os
import tomllib
from pathlib import Path
from typing import Annotated

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ucdstore.client import DEFAULT_API_URL, ClientConfig
from ucdstore.core.paths import (
    CONFIG_FILENAME,
    ensure_config_dir,
    get_config_path,
    get_default_store_path,
)
from ucdstore.filters import PathFilter

logger = logging.getLogger(__name__)

API_URL_ENV = "UCDSTORE_API_URL"


class StoreConfig(BaseModel):
    """Configuration for a ucdstore installation.

    Attributes:
        store_path: Root directory of the local store.
        api_url: Origin of the UCD API.
        versions: Versions to operate on when none are given explicitly.
        concurrency: Default number of simultaneous file operations.
        timeout_seconds: Per-request timeout.
        retries: Retry attempts for transient API failures.
        include: Globs a path must match to be part of the store.
        exclude: Globs that drop a path from the store. Exclusions win.
    """

    model_config = ConfigDict(extra="forbid")

    store_path: Annotated[
        Path,
        Field(
            default_factory=get_default_store_path,
            description="Root directory of the local store",
        ),
    ]
    api_url: Annotated[str, Field(description="UCD API origin")] = DEFAULT_API_URL
    versions: Annotated[
        list[str],
        Field(description="Default versions to operate on"),
    ] = []
    concurrency: Annotated[
        int,
        Field(ge=1, le=64, description="Simultaneous file operations (1-64)"),
    ] = 5
    timeout_seconds: Annotated[
        float,
        Field(gt=0, le=600, description="Request timeout in seconds"),
    ] = 30.0
    retries: Annotated[int, Field(ge=0, le=10, description="Retry attempts")] = 3
    include: Annotated[
        list[str],
        Field(description="Globs of version-relative paths to keep"),
    ] = []
    exclude: Annotated[
        list[str],
        Field(description="Globs of version-relative paths to drop"),
    ] = []

    @field_validator("api_url")
    @classmethod
    def validate_api_url(cls, v: str) -> str:
        """Require an http(s) URL without a trailing slash."""
        url = v.strip().rstrip("/")
        if not url.startswith(("http://", "https://")):
            msg = f"api_url must start with http:// or https://, got '{v}'"
            raise ValueError(msg)
        return url

    @field_validator("versions")
    @classmethod
    def validate_versions(cls, v: list[str]) -> list[str]:
        """Strip whitespace, drop duplicates and keep order."""
        seen: dict[str, None] = {}
        for version in v:
            version = version.strip()
            if not version:
                msg = "versions cannot contain empty entries"
                raise ValueError(msg)
            seen.setdefault(version, None)
        return list(seen)

    @field_validator("include", "exclude")
    @classmethod
    def validate_patterns(cls, v: list[str]) -> list[str]:
        """Strip whitespace and reject empty globs."""
        patterns = [pattern.strip() for pattern in v]
        if any(not pattern for pattern in patterns):
            msg = "filter patterns cannot be empty"
            raise ValueError(msg)
        return patterns

    def path_filter(self) -> PathFilter:
        """Build the path filter for this configuration."""
        return PathFilter.from_patterns(self.include, self.exclude)

    def client_config(self) -> ClientConfig:
        """Build the API client settings for this configuration."""
        return ClientConfig(
            base_url=self.api_url,
            timeout=self.timeout_seconds,
            retries=self.retries,
        )


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigParseError(ConfigError):
    """Raised when the config file cannot be parsed."""


def load_config(path: Path | None = None) -> StoreConfig:
    """Load configuration from a TOML file.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        Validated StoreConfig. Defaults if the file does not exist.

    Raises:
        ConfigParseError: If the TOML syntax is invalid.
        ConfigError: If the file cannot be read or the content is invalid.
    """
    config_path = path or get_config_path()

    data: dict[str, object] = {}
    if config_path.exists():
        try:
            with open(config_path, "rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigParseError(f"Invalid TOML syntax: {e}") from e
        except OSError as e:
            raise ConfigError(f"Failed to read config: {e}") from e
    else:
        logger.debug("No config file at %s, using defaults", config_path)

    env_url = os.environ.get(API_URL_ENV)
    if env_url:
        data["api_url"] = env_url

    try:
        return StoreConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config content: {e}") from e


def save_config(config: StoreConfig, path: Path | None = None) -> Path:
    """Save configuration to a TOML file.

    The file is written to a temporary file in the same directory and then
    renamed into place with os.replace().

    Args:
        config: The StoreConfig to save.
        path: Path to save the config. If None, uses the default config path.

    Returns:
        Path where the config was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    from tempfile import NamedTemporaryFile

    if path is None:
        try:
            config_path = ensure_config_dir() / CONFIG_FILENAME
        except RuntimeError as e:
            raise ConfigError(str(e)) from e
    else:
        config_path = path
        config_path.parent.mkdir(parents=True, exist_ok=True)

    data = config.model_dump(mode="json")

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config: {e}") from e

    return config_path
