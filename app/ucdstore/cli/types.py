"""Shared types for CLI commands."""

from enum import Enum


class OutputFormat(str, Enum):
    """Output format options for commands that print results."""

    TABLE = "table"
    JSON = "json"
