"""Main Typer application — registers the CLI commands.

Entry point: ``turbocache`` (configured via pyproject.toml console_scripts).
"""

from __future__ import annotations

import typer

from turbocache.cli.commands.serve import serve_cmd
from turbocache.cli.commands.stats import stats_cmd

app = typer.Typer(
    name="turbocache",
    help="turbocache: remote cache server for the /v8 artifacts API.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

app.command(name="serve", help="Run the cache server.")(serve_cmd)
app.command(name="stats", help="Show artifact count and stored bytes.")(stats_cmd)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
