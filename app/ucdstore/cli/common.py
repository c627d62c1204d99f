"""Helpers shared by CLI commands.

Commands load the configuration, open a store and run one async operation.
Library errors are turned into a printed message and exit code 1 here, so
individual commands only deal with presenting results.
"""

import asyncio
from collections.abc import Coroutine
from pathlib import Path
from typing import Annotated, Any, TypeVar

import typer

from ucdstore.config import ConfigError, StoreConfig, load_config
from ucdstore.core.store import UCDStore, create_local_store
from ucdstore.errors import UCDStoreError
from ucdstore.utils.formatting import print_error, print_info

T = TypeVar("T")

StoreOption = Annotated[
    Path | None,
    typer.Option(
        "--store",
        "-s",
        help="Store directory (overrides the configured store_path).",
        file_okay=False,
    ),
]
ApiUrlOption = Annotated[
    str | None,
    typer.Option("--api-url", help="UCD API origin (overrides the configured api_url)."),
]
VersionsArgument = Annotated[
    list[str] | None,
    typer.Argument(help="Versions to operate on. Defaults to every version the store knows."),
]
ConcurrencyOption = Annotated[
    int | None,
    typer.Option(
        "--concurrency",
        "-c",
        min=1,
        help="Maximum simultaneous file operations.",
    ),
]
DryRunOption = Annotated[
    bool,
    typer.Option("--dry-run", "-n", help="Show what would change without changing it."),
]


def load_cli_config(store: Path | None, api_url: str | None) -> StoreConfig:
    """Load the configuration and apply command-line overrides.

    Raises:
        typer.Exit: If the configuration cannot be loaded.
    """
    try:
        config = load_config()
        overrides: dict[str, Any] = {}
        if store is not None:
            overrides["store_path"] = store
        if api_url is not None:
            overrides["api_url"] = api_url
        if overrides:
            config = StoreConfig.model_validate({**config.model_dump(), **overrides})
    except ConfigError as e:
        print_error(f"Failed to load config: {e}")
        raise typer.Exit(code=1) from e
    except ValueError as e:
        print_error(f"Invalid option: {e}")
        raise typer.Exit(code=1) from e
    return config


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """Run a coroutine, turning store errors into a clean exit.

    Raises:
        typer.Exit: If the coroutine raises a UCDStoreError.
    """
    try:
        return asyncio.run(coro)
    except UCDStoreError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e


def open_store(store: Path | None, api_url: str | None) -> UCDStore:
    """Open the local store for a command.

    The store knows the configured and manifest-tracked versions. Versions
    given on the command line are checked against them by select_versions.

    Raises:
        typer.Exit: If no versions are configured or the store cannot be opened.
    """
    config = load_cli_config(store, api_url)
    ucd_store = run_async(create_local_store(config))
    if not ucd_store.versions:
        print_error("No versions to operate on.")
        print_info("Set 'versions' in the config file or run 'ucdstore init' first.")
        raise typer.Exit(code=1)
    return ucd_store


def select_versions(ucd_store: UCDStore, versions: list[str] | None) -> list[str]:
    """Validate command-line versions against the store's version set.

    Returns:
        The requested versions, or every known version if none were given.

    Raises:
        typer.Exit: If a requested version is not part of the store.
    """
    try:
        return ucd_store.ctx.resolve_versions(versions or None)
    except UCDStoreError as e:
        print_error(str(e))
        print_info(f"Known versions: {', '.join(ucd_store.versions) or 'none'}")
        raise typer.Exit(code=1) from e
