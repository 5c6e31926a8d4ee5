"""``turbocache stats`` — summarize what the storage root holds."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from turbocache.config import ServerConfig
from turbocache.core.artifact_store import ArtifactStoreError, FileSystemArtifactStore

console = Console()


def stats_cmd(
    cache_dir: Path = typer.Option(
        None, "--cache-dir", "-d", help="Storage root directory (TURBO_CACHE_DIR)."
    ),
) -> None:
    """Show the artifact count and total stored bytes."""
    root = cache_dir if cache_dir is not None else ServerConfig().cache_dir
    if not root.is_dir():
        console.print(f"[yellow]No cache directory at {root}.[/yellow]")
        raise typer.Exit(code=1)

    try:
        stats = FileSystemArtifactStore(root).stats()
    except ArtifactStoreError as exc:
        console.print(f"[red]Cache read error:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1)

    table = Table(title="Artifact Cache", show_header=True, header_style="bold cyan")
    table.add_column("Storage Root")
    table.add_column("Artifacts", justify="right", style="green")
    table.add_column("Total Bytes", justify="right")
    table.add_row(str(root), f"{stats.artifact_count:,}", f"{stats.total_bytes:,}")
    console.print(table)
