"""Console colors for ucdstore.

Defaults live on ThemeColors. Any of them can be overridden in
~/.config/ucdstore/theme.toml:

    [colors]
    missing = "#ff5555"
"""

import logging
import re
import tomllib
from pathlib import Path
from typing import cast

from pydantic import BaseModel, ConfigDict, ValidationError, ValidationInfo, field_validator
from rich.theme import Theme

from ucdstore.core.paths import get_config_dir

logger = logging.getLogger(__name__)

THEME_FILENAME = "theme.toml"

_HEX_DIGITS = re.compile(r"[0-9a-fA-F]+")


class ThemeColors(BaseModel):
    """Hex colors (#RGB or #RRGGBB) for every style the CLI prints."""

    model_config = ConfigDict(extra="forbid")

    header: str = "#69B9A1"
    border: str = "#29526d"
    muted: str = "#b2bec3"

    success: str = "#03b971"
    warning: str = "#f5b332"
    error: str = "#f53263"
    info: str = "#0ec1c8"

    # Store file states
    fetched: str = "#c1ff62"
    missing: str = "#f53263"
    orphaned: str = "#0e8ac8"
    deleted: str = "#f5b332"

    @field_validator("*", mode="before")
    @classmethod
    def validate_hex_color(cls, v: object, info: ValidationInfo) -> str:
        """Accept #RGB and #RRGGBB strings only."""
        if not isinstance(v, str):
            msg = f"{info.field_name}: color must be a string"
            raise ValueError(msg)
        color = v.strip()
        if not color.startswith("#"):
            msg = f"{info.field_name}: color must start with '#'"
            raise ValueError(msg)
        digits = color[1:]
        if len(digits) not in (3, 6):
            msg = f"{info.field_name}: color must be #RGB or #RRGGBB format"
            raise ValueError(msg)
        if not _HEX_DIGITS.fullmatch(digits):
            msg = f"{info.field_name}: invalid hex color '{color}'"
            raise ValueError(msg)
        return color


def get_user_theme_path() -> Path:
    """Return the path of the user's theme overrides."""
    return get_config_dir() / THEME_FILENAME


def _load_toml_colors(path: Path) -> dict[str, str] | None:
    """Read the [colors] table of a theme file.

    Non-string values are dropped. Returns None when the file is missing,
    unreadable or malformed.
    """
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return None
    except tomllib.TOMLDecodeError as e:
        logger.warning("Ignoring malformed theme file %s: %s", path, e)
        return None
    except OSError as e:
        logger.warning("Cannot read theme file %s: %s", path, e)
        return None

    section: object = data.get("colors", {})
    if not isinstance(section, dict):
        logger.warning("Ignoring theme file %s: 'colors' is not a table", path)
        return None
    return {k: v for k, v in cast(dict[str, object], section).items() if isinstance(v, str)}


def load_theme(path: Path | None = None) -> ThemeColors:
    """Build ThemeColors from the defaults and the user's overrides.

    Args:
        path: Theme file to read. Defaults to get_user_theme_path().

    Returns:
        The merged colors, or plain defaults if the overrides are invalid.
    """
    theme_path = path or get_user_theme_path()
    overrides = _load_toml_colors(theme_path)
    if not overrides:
        return ThemeColors()

    try:
        colors = ThemeColors(**overrides)
    except ValidationError as e:
        logger.warning("Ignoring theme overrides in %s: %s", theme_path, e)
        return ThemeColors()
    logger.debug("Applied %d theme overrides from %s", len(overrides), theme_path)
    return colors


def get_rich_theme(colors: ThemeColors | None = None) -> Theme:
    """Map ThemeColors onto Rich style names."""
    colors = colors or load_theme()
    styles = {name: str(value) for name, value in colors.model_dump().items()}
    styles["error"] = f"bold {colors.error}"
    styles["bold_header"] = f"bold {colors.header}"
    return Theme(styles)


_cached_theme: Theme | None = None


def get_theme() -> Theme:
    """Return the Rich theme, loading it on first use."""
    global _cached_theme
    if _cached_theme is None:
        _cached_theme = get_rich_theme()
    return _cached_theme
