"""Reporting commands for propjournal CLI.

Per-account as-of reports, per-firm and global totals with chart series,
and the dashboard summary.
"""

from typing import Optional

import click
from rich.panel import Panel
from rich.table import Table

from propjournal.cli.common import console, get_data_store, resolve_id, signed_money
from propjournal.reporting import (
    METRICS,
    OVERLAYS,
    account_report,
    aggregate,
    build_series,
    dashboard_summary,
    format_money,
    low_drawdown_alerts,
)


def _print_drawdown_warning(alerts) -> None:
    lines = "\n".join(
        f"  • {a.firm_name} / {a.account_name}: {format_money(a.remaining)} of "
        f"{format_money(a.max_limit)} remaining ({a.ratio:.0%})"
        f"{' [dim](manual)[/dim]' if a.manual else ''}"
        for a in alerts
    )
    console.print(Panel(
        "[bold yellow]⚠ Drawdown remaining is below 20% on one or more accounts.[/bold yellow]\n\n"
        f"{lines}\n\n"
        "[dim]Check the latest compliance logs / drawdown remaining values for those accounts.[/dim]",
        border_style="yellow",
    ))


@click.command()
@click.option("--account", "account_id", default=None, help="Only this account.")
@click.option("--search", "query", default="", help="Filter by firm/account/type/platform.")
@click.option("--as-of", "as_of", default=None, help="Only use logs on or before this date (YYYY-MM-DD).")
def report(account_id: Optional[str], query: str, as_of: Optional[str]) -> None:
    """Show each account's balance and drawdown as of a date.

    \b
    Examples:
      propjournal report
      propjournal report --search topstep
      propjournal report --account 9f8e --as-of 2024-03-31
    """
    db = get_data_store().snapshot()
    if account_id:
        account_id = resolve_id("Account", (a.id for a in db.accounts), account_id)

    rows = account_report(db, account_id, query, as_of)
    if not rows:
        console.print("[dim]No matching accounts.[/dim]")
        return

    for row in rows:
        s = row.snapshot
        table = Table(show_header=False, box=None, padding=(0, 2))
        table.add_column("Metric", style="dim")
        table.add_column("Value", justify="right")
        table.add_column("Metric", style="dim")
        table.add_column("Value", justify="right")
        table.add_row(
            "Current Balance", format_money(s.current_balance),
            "Initial Balance", format_money(s.initial_balance),
        )
        table.add_row(
            "Profit (incl withdrawals)", signed_money(s.profit_incl_withdrawals),
            "Overall Max Loss Limit", format_money(s.overall_max_loss_limit),
        )
        table.add_row(
            "Total Withdrawals", format_money(s.total_withdrawals),
            "Overall DD Remaining", format_money(s.overall_remaining),
        )
        table.add_row(
            "High-Water Mark", format_money(s.high_water_mark),
            "Trailing DD Remaining", format_money(s.trailing_remaining),
        )

        subtitle = f"{row.account_type} • {row.platform} • As of: {s.as_of_date or '—'}"
        console.print(Panel(
            table,
            title=f"[bold]{row.firm_name} / {row.account_name}[/bold]",
            subtitle=f"[dim]{subtitle}[/dim]",
            border_style="cyan",
        ))
        if row.missing_limits:
            console.print(
                "[dim]Tip: fill in initial balance, overall max loss limit and trailing "
                "drawdown limit (propjournal account update) for accurate drawdown remaining.[/dim]"
            )

    console.print(f"\nShowing [bold]{len(rows)}[/bold] account(s)")


@click.command()
@click.option("--firm", "firm_id", default=None, help="Only this firm.")
@click.option("--overlay", type=click.Choice(OVERLAYS), default="global", show_default=True,
              help="One total line, a line per firm, or a line per account.")
@click.option("--metric", type=click.Choice(METRICS), default="balance", show_default=True,
              help="Series metric.")
def totals(firm_id: Optional[str], overlay: str, metric: str) -> None:
    """Show per-firm and global totals with a time series.

    \b
    Examples:
      propjournal totals
      propjournal totals --overlay firms --metric profitInclWithdrawals
      propjournal totals --firm 1a2b --overlay accounts
    """
    db = get_data_store().snapshot()
    if firm_id:
        firm_id = resolve_id("Firm", (f.id for f in db.firms), firm_id)

    alerts = low_drawdown_alerts(db, firm_id)
    if alerts:
        _print_drawdown_warning(alerts)

    result = aggregate(db, firm_id)
    table = Table(title="Totals", show_header=True, header_style="bold cyan")
    table.add_column("Firm", style="bold")
    table.add_column("Accounts", justify="right")
    table.add_column("Current Balance", justify="right")
    table.add_column("Withdrawals", justify="right")
    table.add_column("Initial", justify="right")
    table.add_column("Profit (incl W/D)", justify="right")
    for row in (*result.per_firm, result.global_totals):
        table.add_row(
            row.firm_name,
            str(row.accounts),
            format_money(row.current_balance),
            format_money(row.total_withdrawals),
            format_money(row.initial_balance),
            signed_money(row.profit_incl_withdrawals),
            end_section=row is result.per_firm[-1] if result.per_firm else False,
        )
    console.print(table)

    series = build_series(db, firm_id, overlay, metric)
    if series.note:
        console.print(f"[dim]Note: {series.note}[/dim]")
    if series.insufficient_data:
        console.print(Panel(
            "[dim]Not enough data to chart yet. Add compliance logs on multiple dates "
            "with ending balances.[/dim]",
            title=f"[bold]{series.title}[/bold]",
            border_style="dim",
        ))
        return

    chart = Table(title=series.title, show_header=True, header_style="bold cyan")
    chart.add_column("Date", style="bold")
    for line in series.series:
        chart.add_column(line.label, justify="right")
    for i, date in enumerate(series.dates):
        chart.add_row(date, *(format_money(line.points[i].value) for line in series.series))
    console.print(chart)


@click.command()
def dashboard() -> None:
    """Show journal, compliance and account counts at a glance."""
    db = get_data_store().snapshot()
    summary = dashboard_summary(db)

    latest = summary.latest_journal
    journal_text = (
        f"[bold]{latest.date}[/bold]  {latest.focus or '[dim]no focus set[/dim]'}"
        if latest
        else "[dim]No journal entries yet[/dim]"
    )
    grades = "  ".join(f"{g}: {n}" for g, n in summary.grade_counts.items())
    types = "  ".join(f"{t}: {n}" for t, n in summary.accounts_by_type.items())

    console.print(Panel(
        f"[bold]Latest journal:[/bold] {journal_text}\n"
        f"[bold]Compliance grades:[/bold] {grades}\n"
        f"[bold]Logs with violations:[/bold] {summary.violations_count}\n"
        f"[bold]Accounts:[/bold] {types}",
        title="[bold]Dashboard[/bold]",
        border_style="cyan",
    ))
    if summary.low_drawdown_warning:
        _print_drawdown_warning(low_drawdown_alerts(db))
