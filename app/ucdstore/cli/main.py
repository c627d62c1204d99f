"""Main CLI application entry point.

Defines the Typer application and global options.
"""

import logging
from typing import Annotated

import typer
from rich.logging import RichHandler

from ucdstore import __version__
from ucdstore.cli.commands import analyze, clean, init, mirror, repair, status
from ucdstore.utils.formatting import err_console

# Create main Typer app
app = typer.Typer(
    name="ucdstore",
    help="Keep local Unicode Character Database mirrors complete and clean.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"ucdstore version {__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool, quiet: bool) -> None:
    """Route library logging to stderr through Rich."""
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress non-essential output.",
        ),
    ] = False,
) -> None:
    """ucdstore - Unicode Character Database store manager.

    Mirror UCD releases locally, find missing and orphaned files,
    and repair the store back to its expected state.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    configure_logging(verbose, quiet)


# Register commands
app.command(name="init")(init.init_store)
app.command(name="analyze")(analyze.analyze_store)
app.command(name="mirror")(mirror.mirror_store)
app.command(name="clean")(clean.clean_store)
app.command(name="repair")(repair.repair_store)
app.command(name="status")(status.store_status)


if __name__ == "__main__":
    app()
