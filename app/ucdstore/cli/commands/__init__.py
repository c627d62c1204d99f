"""CLI subcommands for ucdstore."""
