"""Store factory for the CLI.

Centralizes creation of the conversation store from environment variables.
Hides configuration details from command implementations.
"""

import os

from rich.console import Console

from ..config import (
    DEFAULT_JSON_PATH,
    DEFAULT_SQLITE_PATH,
    DEFAULT_STORE_BACKEND,
    RETENTION_DAYS,
    STORE_BACKENDS,
)
from ..store import ConversationStore, open_store

# Default console for output
_console = Console()


def get_retention_days(console: Console | None = None) -> int:
    """Read the archival retention window.

    Environment variables:
        SENSEI_RETENTION_DAYS: Days before auto-archival (default: 90)
    """
    import typer

    con = console or _console
    raw = os.getenv("SENSEI_RETENTION_DAYS")
    if not raw:
        return RETENTION_DAYS
    try:
        days = int(raw)
    except ValueError:
        days = 0
    if days <= 0:
        con.print(f"[red]Error: SENSEI_RETENTION_DAYS must be a positive integer, got {raw!r}[/red]")
        raise typer.Exit(code=1)
    return days


def get_store(console: Console | None = None, auto_archive: bool = True) -> ConversationStore:
    """Open the conversation store from environment variables.

    Args:
        console: Optional Rich console for output
        auto_archive: Run the archival sweep while opening

    Returns:
        Opened ConversationStore

    Raises:
        SystemExit: If the configured backend is unknown

    Environment variables:
        SENSEI_STORE_BACKEND: memory, json or sqlite (default: json)
        SENSEI_STORE_PATH: File path for json/sqlite backends
    """
    import typer

    con = console or _console
    backend = os.getenv("SENSEI_STORE_BACKEND", DEFAULT_STORE_BACKEND).lower()
    if backend not in STORE_BACKENDS:
        con.print(f"[red]Error: Unknown store backend: {backend}[/red]")
        raise typer.Exit(code=1)

    config = {}
    if backend == "json":
        config["path"] = os.getenv("SENSEI_STORE_PATH", DEFAULT_JSON_PATH)
    elif backend == "sqlite":
        config["path"] = os.getenv("SENSEI_STORE_PATH", DEFAULT_SQLITE_PATH)

    return open_store(
        backend=backend,
        retention_days=get_retention_days(con),
        auto_archive=auto_archive,
        **config,
    )
