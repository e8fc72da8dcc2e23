"""Compliance log commands for propjournal CLI.

Handles the per-account daily compliance log: creating today's entry,
editing balances, rule flags and withdrawals, and deleting entries.
"""

from typing import Optional

import click
from rich.panel import Panel
from rich.table import Table

from propjournal.cli.common import (
    console,
    fail,
    get_data_store,
    resolve_id,
    short_id,
    signed_money,
)
from propjournal.db import records
from propjournal.models import GRADES, ComplianceEntry
from propjournal.reporting.parsing import parse_number

FLAG_LABELS = {
    "stayed_within_daily_max_loss": "Daily max loss",
    "stayed_within_trailing_drawdown": "Trailing DD",
    "followed_position_size": "Position size",
    "followed_trading_hours": "Trading hours",
    "followed_stop_rule_11": "11:00 stop",
}


def _entry_options(func):
    """Options shared by ``log add`` and ``log update``."""
    options = [
        click.option("--grade", "compliance_grade", type=click.Choice(GRADES), default=None,
                     help="Compliance grade."),
        click.option("--start", "starting_balance", default=None, help="Starting balance."),
        click.option("--end", "ending_balance", default=None, help="Ending balance."),
        click.option("--manual-dd", "manual_drawdown_remaining", default=None,
                     help="Manual drawdown remaining override."),
        click.option("--daily-max-loss/--no-daily-max-loss", "stayed_within_daily_max_loss",
                     default=None, help="Stayed within daily max loss."),
        click.option("--trailing-dd/--no-trailing-dd", "stayed_within_trailing_drawdown",
                     default=None, help="Stayed within trailing drawdown."),
        click.option("--position-size/--no-position-size", "followed_position_size",
                     default=None, help="Followed position size rules."),
        click.option("--trading-hours/--no-trading-hours", "followed_trading_hours",
                     default=None, help="Followed trading hours."),
        click.option("--stop-rule/--no-stop-rule", "followed_stop_rule_11",
                     default=None, help="Followed the 11:00 stop rule."),
        click.option("--withdrew/--no-withdrew", "withdrew_funds", default=None,
                     help="Withdrew funds today."),
        click.option("--withdrawal", "withdrawal_amount", default=None, help="Withdrawal amount."),
        click.option("--withdrawal-notes", default=None, help="Withdrawal notes."),
        click.option("--violations", default=None, help="Rule violations."),
        click.option("--notes", default=None, help="Notes."),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _collect(**values) -> dict:
    return {k: v for k, v in values.items() if v is not None}


def _render_entry(entry: ComplianceEntry, title: str) -> None:
    flags = "\n".join(
        f"  {'[green]✓[/green]' if getattr(entry, name) else '[red]✗[/red]'} {label}"
        for name, label in FLAG_LABELS.items()
    )
    withdrawal = (
        f"{parse_number(entry.withdrawal_amount):,.2f} {entry.withdrawal_notes}".rstrip()
        if entry.withdrew_funds
        else "-"
    )
    console.print(Panel(
        f"[bold]Date:[/bold] {entry.date}   [bold]Grade:[/bold] {entry.compliance_grade}\n"
        f"[bold]Start:[/bold] {entry.starting_balance or '-'}   "
        f"[bold]End:[/bold] {entry.ending_balance or '-'}   "
        f"[bold]Daily P/L:[/bold] {signed_money(parse_number(entry.daily_pnl))}\n"
        f"[bold]Withdrawal:[/bold] {withdrawal}\n"
        f"[bold]Manual DD remaining:[/bold] {entry.manual_drawdown_remaining or '-'}\n\n"
        f"[bold]Rules:[/bold]\n{flags}\n\n"
        f"[bold]Violations:[/bold] {entry.violations or '-'}\n"
        f"[bold]Notes:[/bold] {entry.notes or '-'}",
        title=f"[bold]{title}[/bold]",
        border_style="cyan",
    ))


@click.group()
def log() -> None:
    """Manage daily compliance logs.

    \b
    Examples:
      propjournal log today 9f8e
      propjournal log update 3c4d --start 50000 --end 49250 --grade B
      propjournal log update 3c4d --withdrew --withdrawal 500
      propjournal log list 9f8e
    """
    pass


def _add(account_id: str, on: Optional[str], fields: dict) -> None:
    store = get_data_store()
    full_id = resolve_id("Account", (a.id for a in store.snapshot().accounts), account_id)
    created = {}

    def edit(db):
        db, created["entry"] = records.add_compliance_entry(db, full_id, on, **fields)
        return db

    try:
        store.commit(edit)
    except ValueError as e:
        fail("Failed to add compliance log:", str(e))
    _render_entry(created["entry"], f"Added log {short_id(created['entry'].id)}")


@log.command("today")
@click.argument("account_id")
def log_today(account_id: str) -> None:
    """Create today's blank compliance log for ACCOUNT_ID."""
    _add(account_id, None, {})


@log.command("add")
@click.argument("account_id")
@click.option("--date", "on", default=None, help="Trading day (YYYY-MM-DD, default today).")
@_entry_options
def log_add(account_id: str, on: Optional[str], **fields) -> None:
    """Create a compliance log for ACCOUNT_ID with the given values."""
    _add(account_id, on, _collect(**fields))


@log.command("list")
@click.argument("account_id")
def log_list(account_id: str) -> None:
    """List ACCOUNT_ID's compliance logs, newest first."""
    db = get_data_store().snapshot()
    full_id = resolve_id("Account", (a.id for a in db.accounts), account_id)
    target = db.get_account(full_id)
    entries = records.entries_for_account(db, full_id)

    title = f"{db.firm_name(target.firm_id)} / {target.name}"
    if not entries:
        console.print(Panel(
            "[dim]No compliance logs found[/dim]",
            title=f"[bold]{title}[/bold]",
            border_style="dim",
        ))
        return

    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("ID", style="dim")
    table.add_column("Date", style="bold")
    table.add_column("Grade", justify="center")
    table.add_column("Start", justify="right")
    table.add_column("End", justify="right")
    table.add_column("Daily P/L", justify="right")
    table.add_column("Withdrawal", justify="right")
    table.add_column("Rules", justify="center")
    table.add_column("Violations", max_width=30)

    for e in entries:
        followed = sum(1 for name in FLAG_LABELS if getattr(e, name))
        table.add_row(
            short_id(e.id),
            e.date,
            e.compliance_grade,
            e.starting_balance or "-",
            e.ending_balance or "-",
            signed_money(parse_number(e.daily_pnl)),
            f"{parse_number(e.withdrawal_amount):,.2f}" if e.withdrew_funds else "-",
            f"{followed}/{len(FLAG_LABELS)}",
            (e.violations[:27] + "...") if len(e.violations) > 30 else (e.violations or "-"),
        )

    console.print(table)


@log.command("show")
@click.argument("entry_id")
def log_show(entry_id: str) -> None:
    """Show compliance log ENTRY_ID."""
    db = get_data_store().snapshot()
    full_id = resolve_id("Compliance log", (c.id for c in db.compliance), entry_id)
    _render_entry(db.get_entry(full_id), f"Log {short_id(full_id)}")


@log.command("update")
@click.argument("entry_id")
@click.option("--date", default=None, help="Trading day (YYYY-MM-DD).")
@_entry_options
def log_update(entry_id: str, **fields) -> None:
    """Update compliance log ENTRY_ID. Daily P/L is recalculated."""
    patch = _collect(**fields)
    if not patch:
        console.print("[yellow]Nothing to update.[/yellow]")
        return

    store = get_data_store()
    full_id = resolve_id("Compliance log", (c.id for c in store.snapshot().compliance), entry_id)
    try:
        db = store.commit(lambda db: records.update_compliance_entry(db, full_id, **patch))
    except ValueError as e:
        fail("Failed to update compliance log:", str(e))
    _render_entry(db.get_entry(full_id), f"Updated log {short_id(full_id)}")


@log.command("delete")
@click.argument("entry_id")
@click.option("--yes", "-y", is_flag=True, default=False, help="Do not ask for confirmation.")
def log_delete(entry_id: str, yes: bool) -> None:
    """Delete compliance log ENTRY_ID."""
    store = get_data_store()
    full_id = resolve_id("Compliance log", (c.id for c in store.snapshot().compliance), entry_id)
    if not yes:
        click.confirm("Delete this compliance log? This cannot be undone.", abort=True)
    store.commit(lambda db: records.delete_compliance_entry(db, full_id))
    console.print(f"[green]✓ Deleted compliance log {short_id(full_id)}[/green]")


@log.command("clear")
@click.argument("account_id")
@click.option("--yes", "-y", is_flag=True, default=False, help="Do not ask for confirmation.")
def log_clear(account_id: str, yes: bool) -> None:
    """Delete ALL compliance logs of ACCOUNT_ID."""
    store = get_data_store()
    db = store.snapshot()
    full_id = resolve_id("Account", (a.id for a in db.accounts), account_id)
    count = len(records.entries_for_account(db, full_id))
    if not yes:
        click.confirm(
            f"Delete ALL {count} compliance log(s) for this account? This cannot be undone.",
            abort=True,
        )
    store.commit(lambda db: records.delete_compliance_for_account(db, full_id))
    console.print(f"[green]✓ Deleted {count} compliance log(s)[/green]")
