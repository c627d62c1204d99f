"""Console output helpers for the CLI.

Results go to stdout; warnings and errors go to stderr so JSON output
stays machine readable.
"""

import sys

from rich.console import Console
from rich.table import Table

from ucdstore.core.theme import get_theme


def _make_console(stderr: bool = False) -> Console:
    """Build a themed console, forcing truecolor on interactive terminals."""
    stream = sys.stderr if stderr else sys.stdout
    color_system = "truecolor" if stream.isatty() else "auto"
    return Console(theme=get_theme(), stderr=stderr, color_system=color_system)


console = _make_console()
err_console = _make_console(stderr=True)


def create_table(title: str, *columns: str) -> Table:
    """Create a table with the shared header and border styles.

    Args:
        title: Table title.
        *columns: Column headers.

    Returns:
        Rich Table with the given columns.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    for column in columns:
        table.add_column(column)
    return table


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{message}[/]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[warning]Warning:[/] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]Error:[/] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{message}[/]")
