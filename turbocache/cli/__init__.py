"""turbocache CLI — Typer-based command-line interface.

Provides the ``turbocache`` command with subcommands for running the cache
server and inspecting the storage root.

All output uses Rich for formatted terminal display.
"""
