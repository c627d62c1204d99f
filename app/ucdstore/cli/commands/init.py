"""Init command implementation.

Creates a new store and mirrors the requested versions into it.
"""

from typing import Annotated

import typer

from ucdstore.cli.common import (
    ApiUrlOption,
    DryRunOption,
    StoreOption,
    VersionsArgument,
    load_cli_config,
    run_async,
)
from ucdstore.cli.display import create_mirror_table, print_mirror_failures
from ucdstore.client import UCDClient
from ucdstore.config import ConfigError, save_config
from ucdstore.core.store import create_local_store
from ucdstore.utils.formatting import console, print_error, print_info, print_success


def init_store(
    versions: VersionsArgument = None,
    all_versions: Annotated[
        bool,
        typer.Option("--all", help="Mirror every version the API knows about."),
    ] = False,
    dry_run: DryRunOption = False,
    store: StoreOption = None,
    api_url: ApiUrlOption = None,
    save: Annotated[
        bool,
        typer.Option("--save", help="Remember the store path and versions in the config file."),
    ] = False,
) -> None:
    """Create a store and mirror versions into it.

    Examples:
        ucdstore init 16.0.0 15.1.0       # Start a store with two versions
        ucdstore init --all --dry-run     # Preview mirroring every version
        ucdstore init 16.0.0 --save       # Make 16.0.0 the configured default
    """
    config = load_cli_config(store, api_url)
    client = UCDClient(config.client_config())

    selected = list(versions or [])
    if all_versions:
        selected = run_async(client.list_versions())
    if not selected:
        selected = list(config.versions)
    if not selected:
        print_error("No versions to initialize.")
        print_info("Pass versions as arguments, use --all, or set 'versions' in the config file.")
        raise typer.Exit(code=1)

    store_config = config.model_copy(update={"versions": selected})
    ucd_store = run_async(create_local_store(store_config, client=client))
    print_info(f"Initializing store at {config.store_path} with {len(selected)} version(s)...")
    results = run_async(ucd_store.init(selected, dry_run=dry_run))

    console.print(create_mirror_table(results, dry_run=dry_run))
    print_mirror_failures(results)

    if any(result.failed for result in results):
        raise typer.Exit(code=1)
    if dry_run:
        print_success("Dry run complete.")
        return
    print_success("Store initialized.")

    if save:
        try:
            saved = save_config(store_config)
        except ConfigError as e:
            print_error(str(e))
            raise typer.Exit(code=1) from e
        print_info(f"Saved configuration to {saved}")
