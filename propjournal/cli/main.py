"""Main CLI entry point for propjournal.

This module provides the main click group and lazy loading
of the command modules.
"""

import logging
from typing import Optional

import click


class LazyGroup(click.Group):
    """A click Group that lazily loads commands.

    Command modules are only imported when they are actually invoked.
    """

    def __init__(self, *args, lazy_subcommands: dict[str, str] | None = None, **kwargs):
        """Initialize the lazy group.

        Args:
            lazy_subcommands: Mapping of command names to module paths.
        """
        super().__init__(*args, **kwargs)
        self._lazy_subcommands = lazy_subcommands or {}

    def list_commands(self, ctx: click.Context) -> list[str]:
        """List all available commands."""
        base = super().list_commands(ctx)
        lazy = list(self._lazy_subcommands.keys())
        return sorted(set(base + lazy))

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        """Get a command by name, lazily loading if needed."""
        if cmd_name in self.commands:
            return self.commands[cmd_name]

        if cmd_name in self._lazy_subcommands:
            return self._lazy_load(cmd_name)

        return None

    def _lazy_load(self, cmd_name: str) -> click.Command:
        """Lazily load a command from its module path."""
        import importlib

        module_path = self._lazy_subcommands[cmd_name]
        module = importlib.import_module(module_path)

        attr = getattr(module, cmd_name, None)
        if not isinstance(attr, click.Command):
            raise click.ClickException(f"Could not find command '{cmd_name}' in {module_path}")

        self.add_command(attr, cmd_name)
        return attr


LAZY_SUBCOMMANDS = {
    "firm": "propjournal.cli.firms",
    "account": "propjournal.cli.accounts",
    "log": "propjournal.cli.compliance",
    "journal": "propjournal.cli.journal",
    "report": "propjournal.cli.reports",
    "totals": "propjournal.cli.reports",
    "dashboard": "propjournal.cli.reports",
    "backup": "propjournal.cli.backup",
}


CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


@click.group(cls=LazyGroup, lazy_subcommands=LAZY_SUBCOMMANDS, context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="propjournal")
@click.option(
    "--data", "data_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="JSON database file (default: from config, else ~/.config/propjournal/propjournal.json).",
)
@click.pass_context
def cli(ctx: click.Context, data_path: Optional[str]) -> None:
    """propjournal - trading journal and prop-firm compliance tracker.

    Record daily trading plans, track firms and accounts, log daily
    compliance, and report balances and drawdown across accounts.

    \b
    Quick Start:
      propjournal firm add "Topstep"          # Add a firm
      propjournal account add <firm> "50K #1" # Add an account
      propjournal log today <account>         # Start today's compliance log
      propjournal totals                      # Totals and drawdown warnings
    """
    from propjournal.config import get_log_level, load_config

    config = load_config()
    logging.basicConfig(level=get_log_level(config), format="%(levelname)s %(name)s: %(message)s")

    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["data_path"] = data_path


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
