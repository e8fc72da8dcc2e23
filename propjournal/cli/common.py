"""Helpers shared by the CLI command modules."""

from typing import Iterable, Optional

import click
from rich.console import Console
from rich.panel import Panel

from propjournal.db.store import DataStore

console = Console()


def get_data_store(ctx: Optional[click.Context] = None) -> DataStore:
    """Open the data store configured for this invocation."""
    from propjournal.config import get_db_path, load_config

    ctx = ctx or click.get_current_context()
    obj = ctx.find_root().obj or {}
    config = obj.get("config")
    if config is None:
        config = load_config()
    return DataStore(get_db_path(config, obj.get("data_path")))


def fail(title: str, message: str) -> None:
    """Print an error panel and exit with status 1."""
    console.print(Panel(
        f"[red]{title}[/red]\n\n{message}",
        title="[bold red]Error[/bold red]",
        border_style="red",
    ))
    raise SystemExit(1)


def resolve_id(kind: str, ids: Iterable[str], prefix: str) -> str:
    """Resolve a full record id from an id or a unique id prefix."""
    candidates = list(ids)
    if prefix in candidates:
        return prefix
    matches = [i for i in candidates if i.startswith(prefix)]
    if len(matches) == 1:
        return matches[0]
    if not matches:
        fail(f"{kind} not found", f"No {kind.lower()} matches '{prefix}'.")
    fail(f"Ambiguous {kind.lower()} id", f"'{prefix}' matches {len(matches)} records; use more characters.")
    return ""


def short_id(record_id: str) -> str:
    return record_id[:8]


def signed_money(value: float) -> str:
    """Money with a sign and colour markup."""
    color = "green" if value >= 0 else "red"
    sign = "+" if value >= 0 else ""
    return f"[{color}]{sign}{value:,.2f}[/{color}]"
