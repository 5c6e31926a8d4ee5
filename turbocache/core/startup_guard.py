"""Startup guard — fails hard on configuration the server cannot run with.

The guard runs once before the listener is opened and raises
``StartupConfigError`` listing every violation it found.  The fatal
conditions are:

1. No bearer token configured (``TURBO_AUTH_TOKEN``).
2. The storage root cannot be created or is not a writable directory.
3. A log file is configured but cannot be opened for appending.

Request-time failures are never routed through here.
"""

from __future__ import annotations

import logging
import os

from turbocache.config import ServerConfig

logger = logging.getLogger(__name__)


class StartupConfigError(RuntimeError):
    """Raised when the server cannot safely start with the current configuration.

    It must not be caught and ignored; the process should exit.
    """


def _check_storage_root(config: ServerConfig) -> str | None:
    root = config.cache_dir
    try:
        root.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        return f"Storage root {root} cannot be created: {exc}"
    if not root.is_dir():
        return f"Storage root {root} is not a directory."
    if not os.access(root, os.W_OK | os.X_OK):
        return f"Storage root {root} is not writable."
    return None


def _check_log_file(config: ServerConfig) -> str | None:
    if config.log_file is None:
        return None
    try:
        with open(config.log_file, "a", encoding="utf-8"):
            pass
    except OSError as exc:
        return f"Log file {config.log_file} cannot be opened: {exc}"
    return None


def enforce_startup_constraints(config: ServerConfig) -> None:
    """Validate every fatal startup condition at once.

    Raises
    ------
    StartupConfigError
        If any constraint is violated.
    """
    violations: list[str] = []

    if not config.auth_token.strip():
        violations.append(
            "An auth token is required. Set TURBO_AUTH_TOKEN."
        )

    for check in (_check_storage_root, _check_log_file):
        problem = check(config)
        if problem:
            violations.append(problem)

    if violations:
        msg = (
            "Startup configuration guard failed.\n"
            + "\n".join(f"  - {v}" for v in violations)
        )
        logger.critical(msg)
        raise StartupConfigError(msg)

    logger.info("Startup configuration guard passed.")
