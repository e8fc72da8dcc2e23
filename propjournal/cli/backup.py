"""Backup commands for propjournal CLI.

Export the database as JSON, import a JSON backup, or reset to empty.
"""

from pathlib import Path
from typing import Optional

import click

from propjournal.cli.common import console, fail, get_data_store


@click.group()
def backup() -> None:
    """Export, import or reset the database.

    \b
    Examples:
      propjournal backup export backup.json
      propjournal backup import backup.json
      propjournal backup reset
    """
    pass


@backup.command("export")
@click.argument("output", type=click.Path(dir_okay=False), required=False)
def export_db(output: Optional[str]) -> None:
    """Write the database as JSON to OUTPUT (stdout if omitted)."""
    text = get_data_store().export_text()
    if output is None:
        click.echo(text)
        return
    Path(output).write_text(text, encoding="utf-8")
    console.print(f"[green]✓ Exported to {output}[/green]")


@backup.command("import")
@click.argument("source", type=click.Path(exists=True, dir_okay=False))
@click.option("--yes", "-y", is_flag=True, default=False, help="Do not ask for confirmation.")
def import_db(source: str, yes: bool) -> None:
    """Replace the database with the JSON backup SOURCE."""
    if not yes:
        click.confirm("Import overwrites current data. Continue?", abort=True)
    store = get_data_store()
    try:
        db = store.import_text(Path(source).read_text(encoding="utf-8"))
    except ValueError as e:
        fail("Failed to import backup:", str(e))
    console.print(
        f"[green]✓ Imported {len(db.firms)} firm(s), {len(db.accounts)} account(s), "
        f"{len(db.compliance)} compliance log(s), {len(db.journals)} journal(s)[/green]"
    )


@backup.command("reset")
@click.option("--yes", "-y", is_flag=True, default=False, help="Do not ask for confirmation.")
def reset_db(yes: bool) -> None:
    """Reset the database to empty."""
    if not yes:
        click.confirm("Reset DB to empty? This cannot be undone.", abort=True)
    get_data_store().reset()
    console.print("[green]✓ Database reset[/green]")
