"""Status command implementation.

Shows the versions tracked in the store manifest.
"""

import typer

from ucdstore.cli.common import ApiUrlOption, StoreOption, load_cli_config, run_async
from ucdstore.core.store import create_local_store
from ucdstore.utils.formatting import console, create_table, print_info


def store_status(
    store: StoreOption = None,
    api_url: ApiUrlOption = None,
) -> None:
    """Show the versions tracked by the store."""
    config = load_cli_config(store, api_url)
    ucd_store = run_async(create_local_store(config))
    manifest = run_async(ucd_store.manifest())

    console.print(f"Store: [info]{config.store_path}[/]")
    console.print(f"API:   [info]{config.api_url}[/]")

    if not manifest.versions:
        print_info("No versions tracked yet. Run 'ucdstore init <version>' to start.")
        raise typer.Exit(code=0)

    table = create_table("Tracked Versions", "Version", "Expected Files")
    for version in manifest.versions:
        table.add_row(version, str(len(manifest.root[version].expected_files)))
    console.print(table)
