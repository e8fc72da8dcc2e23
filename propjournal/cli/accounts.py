"""Account management commands for propjournal CLI.

Handles adding, listing, updating and deleting trading accounts.
"""

from typing import Optional

import click
from rich.table import Table

from propjournal.cli.common import console, fail, get_data_store, resolve_id, short_id
from propjournal.db import records
from propjournal.models import ACCOUNT_TYPES


def _account_options(func):
    """Options shared by ``account add`` and ``account update``."""
    options = [
        click.option("--type", "account_type", type=click.Choice(ACCOUNT_TYPES), default=None,
                     help="Account type."),
        click.option("--platform", default=None, help="Trading platform."),
        click.option("--start-date", default=None, help="Start date (YYYY-MM-DD)."),
        click.option("--initial-balance", default=None, help="Initial balance."),
        click.option("--max-loss", "overall_max_loss_limit", default=None,
                     help="Overall max loss limit."),
        click.option("--trailing-dd", "trailing_drawdown_limit", default=None,
                     help="Trailing drawdown limit."),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _collect(**values: Optional[str]) -> dict:
    return {k: v for k, v in values.items() if v is not None}


@click.group()
def account() -> None:
    """Manage trading accounts.

    \b
    Examples:
      propjournal account add 1a2b "50K Eval" --initial-balance 50000 --trailing-dd 2500
      propjournal account list --firm 1a2b
      propjournal account update 9f8e --max-loss 2000
      propjournal account delete 9f8e
    """
    pass


@account.command("add")
@click.argument("firm_id")
@click.argument("name", default="New Account")
@_account_options
def add_account(firm_id: str, name: str, **fields: Optional[str]) -> None:
    """Add account NAME under firm FIRM_ID (an id or unique id prefix)."""
    store = get_data_store()
    full_id = resolve_id("Firm", (f.id for f in store.snapshot().firms), firm_id)
    created = {}

    def edit(db):
        db, created["account"] = records.add_account(db, full_id, name, **_collect(**fields))
        return db

    store.commit(edit)
    console.print(f"[green]✓ Added account '{name}' ({short_id(created['account'].id)})[/green]")


@account.command("list")
@click.option("--firm", "firm_id", default=None, help="Only accounts of this firm.")
@click.option("--type", "account_type", type=click.Choice(ACCOUNT_TYPES), default=None,
              help="Only accounts of this type.")
@click.option("--search", "query", default="", help="Text search over name/type/platform/start.")
def list_accounts(firm_id: Optional[str], account_type: Optional[str], query: str) -> None:
    """List accounts."""
    db = get_data_store().snapshot()
    if firm_id:
        firm_id = resolve_id("Firm", (f.id for f in db.firms), firm_id)

    accounts = records.filter_accounts(db, firm_id, account_type, query)
    if not accounts:
        console.print("[dim]No matching accounts.[/dim]")
        return

    table = Table(title="Accounts", show_header=True, header_style="bold cyan")
    table.add_column("ID", style="dim")
    table.add_column("Firm")
    table.add_column("Name", style="bold")
    table.add_column("Type")
    table.add_column("Platform")
    table.add_column("Start")
    table.add_column("Initial", justify="right")
    table.add_column("Max Loss", justify="right")
    table.add_column("Trailing DD", justify="right")

    for a in accounts:
        table.add_row(
            short_id(a.id),
            db.firm_name(a.firm_id),
            a.name,
            a.account_type,
            a.platform or "-",
            a.start_date or "-",
            a.initial_balance or "-",
            a.overall_max_loss_limit or "-",
            a.trailing_drawdown_limit or "-",
        )

    console.print(table)


@account.command("update")
@click.argument("account_id")
@click.option("--name", default=None, help="Account name.")
@_account_options
def update_account(account_id: str, **fields: Optional[str]) -> None:
    """Update fields of account ACCOUNT_ID."""
    patch = _collect(**fields)
    if not patch:
        console.print("[yellow]Nothing to update.[/yellow]")
        return

    store = get_data_store()
    full_id = resolve_id("Account", (a.id for a in store.snapshot().accounts), account_id)
    try:
        store.commit(lambda db: records.update_account(db, full_id, **patch))
    except ValueError as e:
        fail("Failed to update account:", str(e))
    console.print(f"[green]✓ Updated account {short_id(full_id)}[/green]")


@account.command("delete")
@click.argument("account_id")
@click.option("--yes", "-y", is_flag=True, default=False, help="Do not ask for confirmation.")
def delete_account(account_id: str, yes: bool) -> None:
    """Delete account ACCOUNT_ID and its compliance logs."""
    store = get_data_store()
    db = store.snapshot()
    full_id = resolve_id("Account", (a.id for a in db.accounts), account_id)
    target = db.get_account(full_id)
    entries = len(records.entries_for_account(db, full_id))

    if not yes:
        click.confirm(
            f"Delete account \"{target.name}\" and {entries} compliance log(s)? "
            f"This cannot be undone.",
            abort=True,
        )

    store.commit(lambda db: records.delete_account(db, full_id))
    console.print(f"[green]✓ Deleted account '{target.name}' and {entries} compliance log(s)[/green]")
