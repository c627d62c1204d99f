"""Repair command implementation.

Removes orphaned files and restores missing ones.
"""

import time
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
from ucdstore.cli.display import (
    create_repair_table,
    print_json,
    print_operation_summary,
    print_repair_failures,
)
from ucdstore.cli.types import OutputFormat
from ucdstore.models.reports import summarize_operation
from ucdstore.utils.formatting import console, print_success


def repair_store(
    versions: VersionsArgument = None,
    dry_run: DryRunOption = False,
    concurrency: ConcurrencyOption = None,
    output_format: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Output format.", case_sensitive=False),
    ] = OutputFormat.TABLE,
    store: StoreOption = None,
    api_url: ApiUrlOption = None,
) -> None:
    """Bring versions back to exactly their expected files.

    Exits with code 1 if any file could not be repaired.

    Examples:
        ucdstore repair                   # All configured versions
        ucdstore repair 16.0.0 --dry-run  # Preview one version
    """
    ucd_store = open_store(store, api_url)
    selected = select_versions(ucd_store, versions)
    started = time.perf_counter()
    results = run_async(ucd_store.repair(selected, concurrency=concurrency, dry_run=dry_run))
    summary = summarize_operation("repair", results, (time.perf_counter() - started) * 1000)

    if output_format == OutputFormat.JSON:
        print_json(
            {
                "dry_run": dry_run,
                "summary": summary.to_dict(),
                "versions": [r.to_dict() for r in results],
            }
        )
    else:
        console.print(create_repair_table(results, dry_run=dry_run))
        print_repair_failures(results)
        print_operation_summary(summary)

    if any(result.status == "failure" for result in results):
        raise typer.Exit(code=1)

    if output_format == OutputFormat.TABLE:
        print_success("Store repaired." if not dry_run else "Dry run complete.")
