"""Analyze command implementation.

Compares each version's expected files with the files in the store.
"""

from typing import Annotated

import typer

from ucdstore.cli.common import (
    ApiUrlOption,
    StoreOption,
    VersionsArgument,
    open_store,
    run_async,
    select_versions,
)
from ucdstore.cli.display import (
    create_analyze_table,
    print_analysis_summary,
    print_file_lists,
    print_json,
)
from ucdstore.cli.types import OutputFormat
from ucdstore.models.reports import summarize_analysis
from ucdstore.utils.formatting import console


def analyze_store(
    versions: VersionsArgument = None,
    no_orphans: Annotated[
        bool,
        typer.Option("--no-orphans", help="Do not classify unexpected files as orphaned."),
    ] = False,
    files: Annotated[
        bool,
        typer.Option("--files", help="List missing and orphaned files."),
    ] = False,
    output_format: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Output format.", case_sensitive=False),
    ] = OutputFormat.TABLE,
    store: StoreOption = None,
    api_url: ApiUrlOption = None,
) -> None:
    """Analyze the store against the expected file lists.

    Exits with code 1 if any version is incomplete.

    Examples:
        ucdstore analyze                  # All configured versions
        ucdstore analyze 16.0.0 --files   # One version, list problem files
        ucdstore analyze --format json    # JSON output for scripting
    """
    ucd_store = open_store(store, api_url)
    selected = select_versions(ucd_store, versions)
    results = run_async(ucd_store.analyze(selected, check_orphaned=not no_orphans))
    summary = summarize_analysis(results)

    if output_format == OutputFormat.JSON:
        print_json(
            {
                "summary": summary.to_dict(),
                "versions": [result.to_dict() for result in results],
            }
        )
    else:
        console.print(create_analyze_table(results))
        if files:
            for result in results:
                print_file_lists(result)
        print_analysis_summary(summary)

    if not all(result.is_complete for result in results):
        raise typer.Exit(code=1)
