"""CLI commands for propjournal.

This package provides the command-line interface: record management for
firms, accounts, compliance logs and journals, plus reporting and backup.
"""

from propjournal.cli.main import cli, main

__all__ = ["cli", "main"]
