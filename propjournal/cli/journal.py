"""Daily journal commands for propjournal CLI.

Handles the trading-plan journal: focus, hard stop, key levels, news and
the day's trading rules.
"""

from typing import Optional

import click
from rich.panel import Panel
from rich.table import Table

from propjournal.cli.common import console, fail, get_data_store, resolve_id, short_id
from propjournal.db import records
from propjournal.models import JournalEntry

RULE_OPTIONS = ("daily_max_loss", "allowed_setups", "max_trades", "max_risk_per_trade")


def _render_journal(journal: JournalEntry) -> None:
    rules = journal.trading_rules
    console.print(Panel(
        f"[bold]Focus:[/bold] {journal.focus or '-'}\n"
        f"[bold]Hard stop:[/bold] {journal.hard_stop_time or '-'}\n"
        f"[bold]Key levels:[/bold] {journal.key_levels or '-'}\n"
        f"[bold]News:[/bold] {journal.news_events or '-'}\n\n"
        f"[bold]Trading rules[/bold]\n"
        f"  Daily max loss: {rules.daily_max_loss or '-'}\n"
        f"  Allowed setups: {rules.allowed_setups or '-'}\n"
        f"  Max trades: {rules.max_trades or '-'}\n"
        f"  Max risk per trade: {rules.max_risk_per_trade or '-'}",
        title=f"[bold]Journal {journal.date}[/bold] [dim]{short_id(journal.id)}[/dim]",
        border_style="cyan",
    ))


@click.group()
def journal() -> None:
    """Manage the daily trading journal.

    \b
    Examples:
      propjournal journal add
      propjournal journal update 5e6f --focus "A+ setups only" --max-trades 3
      propjournal journal list --search ORB --from 2024-01-01
    """
    pass


@journal.command("add")
@click.option("--date", "on", default=None, help="Journal date (YYYY-MM-DD, default today).")
def add_journal(on: Optional[str]) -> None:
    """Create a journal entry for today (or --date)."""
    store = get_data_store()
    created = {}

    def edit(db):
        db, created["journal"] = records.add_journal(db, on)
        return db

    store.commit(edit)
    _render_journal(created["journal"])


@journal.command("list")
@click.option("--search", "query", default="", help="Text search over every field.")
@click.option("--from", "date_from", default=None, help="Earliest date (YYYY-MM-DD).")
@click.option("--to", "date_to", default=None, help="Latest date (YYYY-MM-DD).")
def list_journals(query: str, date_from: Optional[str], date_to: Optional[str]) -> None:
    """List journal entries, newest first."""
    db = get_data_store().snapshot()
    journals = records.filter_journals(db, query, date_from, date_to)

    if not journals:
        console.print(Panel(
            "[dim]No journal entries found[/dim]",
            title="[bold]Journal[/bold]",
            border_style="dim",
        ))
        return

    table = Table(title="Journal", show_header=True, header_style="bold cyan")
    table.add_column("ID", style="dim")
    table.add_column("Date", style="bold")
    table.add_column("Focus", max_width=40)
    table.add_column("Hard Stop")
    table.add_column("Max Loss", justify="right")
    table.add_column("Max Trades", justify="right")

    for j in journals:
        table.add_row(
            short_id(j.id),
            j.date,
            j.focus or "-",
            j.hard_stop_time or "-",
            j.trading_rules.daily_max_loss or "-",
            j.trading_rules.max_trades or "-",
        )

    console.print(table)


@journal.command("show")
@click.argument("journal_id")
def show_journal(journal_id: str) -> None:
    """Show journal entry JOURNAL_ID."""
    db = get_data_store().snapshot()
    full_id = resolve_id("Journal", (j.id for j in db.journals), journal_id)
    _render_journal(db.get_journal(full_id))


@journal.command("update")
@click.argument("journal_id")
@click.option("--date", default=None, help="Journal date (YYYY-MM-DD).")
@click.option("--focus", default=None, help="Focus for the day.")
@click.option("--hard-stop", "hard_stop_time", default=None, help="Hard stop time.")
@click.option("--key-levels", default=None, help="Key levels.")
@click.option("--news", "news_events", default=None, help="News events.")
@click.option("--daily-max-loss", default=None, help="Daily max loss rule.")
@click.option("--allowed-setups", default=None, help="Allowed setups.")
@click.option("--max-trades", default=None, help="Max trades.")
@click.option("--max-risk-per-trade", default=None, help="Max risk per trade.")
def update_journal(journal_id: str, **fields: Optional[str]) -> None:
    """Update journal entry JOURNAL_ID."""
    values = {k: v for k, v in fields.items() if v is not None}
    rules = {k: values.pop(k) for k in RULE_OPTIONS if k in values}
    if rules:
        values["trading_rules"] = rules
    if not values:
        console.print("[yellow]Nothing to update.[/yellow]")
        return

    store = get_data_store()
    full_id = resolve_id("Journal", (j.id for j in store.snapshot().journals), journal_id)
    try:
        db = store.commit(lambda db: records.update_journal(db, full_id, **values))
    except ValueError as e:
        fail("Failed to update journal:", str(e))
    _render_journal(db.get_journal(full_id))


@journal.command("delete")
@click.argument("journal_id")
@click.option("--yes", "-y", is_flag=True, default=False, help="Do not ask for confirmation.")
def delete_journal(journal_id: str, yes: bool) -> None:
    """Delete journal entry JOURNAL_ID."""
    store = get_data_store()
    full_id = resolve_id("Journal", (j.id for j in store.snapshot().journals), journal_id)
    if not yes:
        click.confirm("Delete this journal entry? This cannot be undone.", abort=True)
    store.commit(lambda db: records.delete_journal(db, full_id))
    console.print(f"[green]✓ Deleted journal {short_id(full_id)}[/green]")
