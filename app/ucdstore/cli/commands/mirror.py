"""Mirror command implementation.

Downloads the expected files of each version into the store.
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
    create_mirror_table,
    print_json,
    print_mirror_failures,
    print_operation_summary,
)
from ucdstore.cli.types import OutputFormat
from ucdstore.models.reports import summarize_operation
from ucdstore.utils.formatting import console, print_success, print_warning


def mirror_store(
    versions: VersionsArgument = None,
    force: Annotated[
        bool,
        typer.Option("--force", help="Download files even if they already exist."),
    ] = False,
    dry_run: DryRunOption = False,
    concurrency: ConcurrencyOption = None,
    output_format: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Output format.", case_sensitive=False),
    ] = OutputFormat.TABLE,
    store: StoreOption = None,
    api_url: ApiUrlOption = None,
) -> None:
    """Download missing files into the store.

    Existing files are skipped unless --force is given. Exits with code 1 if
    any download failed.

    Examples:
        ucdstore mirror 16.0.0            # Mirror one version
        ucdstore mirror --dry-run         # Preview without downloading
        ucdstore mirror --force -c 10     # Re-download everything, 10 at a time
    """
    ucd_store = open_store(store, api_url)
    selected = select_versions(ucd_store, versions)
    started = time.perf_counter()
    results = run_async(
        ucd_store.mirror(selected, concurrency=concurrency, force=force, dry_run=dry_run)
    )
    summary = summarize_operation("mirror", results, (time.perf_counter() - started) * 1000)

    if output_format == OutputFormat.JSON:
        print_json(
            {
                "dry_run": dry_run,
                "summary": summary.to_dict(),
                "versions": [r.to_dict() for r in results],
            }
        )
    else:
        console.print(create_mirror_table(results, dry_run=dry_run))
        print_mirror_failures(results)
        print_operation_summary(summary)

    failed = sum(len(result.failed) for result in results)
    if failed:
        if output_format == OutputFormat.TABLE:
            print_warning(f"{failed} file(s) failed to mirror.")
        raise typer.Exit(code=1)

    if output_format == OutputFormat.TABLE:
        mirrored = sum(len(result.mirrored) for result in results)
        verb = "Would mirror" if dry_run else "Mirrored"
        print_success(f"{verb} {mirrored} file(s).")
