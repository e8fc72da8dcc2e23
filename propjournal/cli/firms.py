"""Firm management commands for propjournal CLI.

Handles adding, listing, renaming and deleting prop firms.
"""

import click
from rich.table import Table

from propjournal.cli.common import console, fail, get_data_store, resolve_id, short_id
from propjournal.db import records


@click.group()
def firm() -> None:
    """Manage prop firms.

    \b
    Examples:
      propjournal firm add "Topstep"
      propjournal firm list
      propjournal firm rename 1a2b "Topstep Futures"
      propjournal firm delete 1a2b
    """
    pass


@firm.command("add")
@click.argument("name", default="New Firm")
def add_firm(name: str) -> None:
    """Add a firm called NAME."""
    store = get_data_store()
    created = {}

    def edit(db):
        db, created["firm"] = records.add_firm(db, name)
        return db

    store.commit(edit)
    console.print(f"[green]✓ Added firm '{name}' ({short_id(created['firm'].id)})[/green]")


@firm.command("list")
def list_firms() -> None:
    """List firms with their account and log counts."""
    db = get_data_store().snapshot()

    if not db.firms:
        console.print("[dim]No firms yet. Add one with 'propjournal firm add NAME'.[/dim]")
        return

    table = Table(title="Prop Firms", show_header=True, header_style="bold cyan")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="bold")
    table.add_column("Accounts", justify="right")
    table.add_column("Logs", justify="right")

    for f in sorted(db.firms, key=lambda f: f.name):
        accounts, entries = records.cascade_counts(db, f.id)
        table.add_row(short_id(f.id), f.name, str(accounts), str(entries))

    console.print(table)


@firm.command("rename")
@click.argument("firm_id")
@click.argument("name")
def rename_firm(firm_id: str, name: str) -> None:
    """Rename firm FIRM_ID (an id or unique id prefix) to NAME."""
    store = get_data_store()
    full_id = resolve_id("Firm", (f.id for f in store.snapshot().firms), firm_id)
    store.commit(lambda db: records.rename_firm(db, full_id, name))
    console.print(f"[green]✓ Renamed firm to '{name}'[/green]")


@firm.command("delete")
@click.argument("firm_id")
@click.option("--yes", "-y", is_flag=True, default=False, help="Do not ask for confirmation.")
def delete_firm(firm_id: str, yes: bool) -> None:
    """Delete firm FIRM_ID with all its accounts and compliance logs."""
    store = get_data_store()
    db = store.snapshot()
    full_id = resolve_id("Firm", (f.id for f in db.firms), firm_id)
    target = db.get_firm(full_id)
    accounts, entries = records.cascade_counts(db, full_id)

    if not yes:
        click.confirm(
            f"Delete firm \"{target.name}\"?\n\n"
            f"This will also delete:\n"
            f"  • {accounts} account(s)\n"
            f"  • {entries} compliance log(s)\n\n"
            f"This cannot be undone. Continue?",
            abort=True,
        )

    try:
        store.commit(lambda db: records.delete_firm(db, full_id))
    except records.RecordNotFoundError as e:
        fail("Failed to delete firm:", str(e))

    console.print(
        f"[green]✓ Deleted firm '{target.name}', {accounts} account(s) "
        f"and {entries} compliance log(s)[/green]"
    )
