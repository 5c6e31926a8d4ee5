"""``turbocache serve`` — run the remote cache server under uvicorn.

Configuration comes from ``TURBO_*`` environment variables; the options here
override the listener address and storage root.  Startup aborts with exit
status 1 when the guard rejects the configuration.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import typer
import uvicorn
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from turbocache.config import ServerConfig
from turbocache.core.startup_guard import StartupConfigError, enforce_startup_constraints
from turbocache.logging_config import configure_logging
from turbocache.server.app import create_app

console = Console()


def serve_cmd(
    host: str = typer.Option(None, "--host", help="Interface to bind (TURBO_HOST)."),
    port: int = typer.Option(None, "--port", "-p", help="Port to listen on (TURBO_PORT)."),
    cache_dir: Path = typer.Option(
        None, "--cache-dir", "-d", help="Storage root directory (TURBO_CACHE_DIR)."
    ),
) -> None:
    """Start the cache server.

    Requires TURBO_AUTH_TOKEN.  Logs go to TURBO_LOG_FILE when set,
    otherwise to standard output.
    """
    overrides: dict[str, Any] = {
        key: value
        for key, value in {"host": host, "port": port, "cache_dir": cache_dir}.items()
        if value is not None
    }

    try:
        config = ServerConfig(**overrides)
        enforce_startup_constraints(config)
        log = configure_logging(config)
    except (ValidationError, StartupConfigError, OSError) as exc:
        console.print(f"[bold red]Startup failed:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1)

    app = create_app(config)
    log.info("Starting server on %s:%d", config.host, config.port)
    console.print(
        f"[green]turbocache[/green] listening on "
        f"[cyan]{config.host}:{config.port}[/cyan] "
        f"(storage: {config.cache_dir})"
    )
    uvicorn.run(
        app,
        host=config.host,
        port=config.port,
        log_config=None,
        access_log=False,
    )
