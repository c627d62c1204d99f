"""CLI package for ucdstore.

This package contains the Typer application and all subcommands.
"""
