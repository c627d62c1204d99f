"""Clean command implementation.

Removes versions from the store, deleting every file they hold.
"""

from typing import Annotated

import typer

from ucdstore.cli.common import (
    ApiUrlOption,
    ConcurrencyOption,
    DryRunOption,
    StoreOption,
    VersionsArgument,
    open_store,
    run_async,
    select_versions,
)
from ucdstore.cli.display import create_clean_table, print_json
from ucdstore.cli.types import OutputFormat
from ucdstore.utils.formatting import console, print_info, print_success, print_warning


def _confirm_clean(versions: list[str]) -> bool:
    """Prompt user to confirm deleting versions.

    Args:
        versions: Versions that would be purged.

    Returns:
        True if user confirms, False otherwise.
    """
    return typer.confirm(
        f"\nDelete all files of {len(versions)} version(s) ({', '.join(versions)})?",
        default=False,
    )


def clean_store(
    versions: VersionsArgument = None,
    dry_run: DryRunOption = False,
    concurrency: ConcurrencyOption = None,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip the confirmation prompt."),
    ] = False,
    output_format: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Output format.", case_sensitive=False),
    ] = OutputFormat.TABLE,
    store: StoreOption = None,
    api_url: ApiUrlOption = None,
) -> None:
    """Delete versions from the store.

    All stored files of each version are removed, empty directories are
    pruned and the versions are dropped from the store manifest.

    Examples:
        ucdstore clean 15.0.0 --dry-run   # Preview
        ucdstore clean 15.0.0 --yes       # Delete without asking
    """
    ucd_store = open_store(store, api_url)
    selected = select_versions(ucd_store, versions)

    if not dry_run and not yes and not _confirm_clean(selected):
        print_info("Aborted.")
        raise typer.Exit(code=0)

    results = run_async(ucd_store.clean(selected, concurrency=concurrency, dry_run=dry_run))

    if output_format == OutputFormat.JSON:
        print_json({"dry_run": dry_run, "versions": [r.to_dict() for r in results]})
    else:
        console.print(create_clean_table(results, dry_run=dry_run))

    failed = sum(len(result.failed) for result in results)
    if failed:
        if output_format == OutputFormat.TABLE:
            print_warning(f"{failed} file(s) could not be deleted.")
        raise typer.Exit(code=1)

    if output_format == OutputFormat.TABLE:
        deleted = sum(len(result.deleted) for result in results)
        verb = "Would delete" if dry_run else "Deleted"
        print_success(f"{verb} {deleted} file(s).")
