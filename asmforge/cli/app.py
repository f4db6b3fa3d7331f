"""Main Typer application — imports and registers all CLI commands.

Entry points (pyproject.toml ``[project.scripts]``):
    ``asmforge``            -> ``main``
    ``process-assemblies``  -> ``process_main``
"""

from __future__ import annotations

import typer

from asmforge.cli.commands.check_tag import check_tag_cmd
from asmforge.cli.commands.fingerprint import fingerprint_cmd
from asmforge.cli.commands.ledger_cmd import ledger_cmd
from asmforge.cli.commands.process import process_cmd

app = typer.Typer(
    name="asmforge",
    help="asmforge: publicize, fingerprint and publish game assemblies.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# Register subcommands
app.command(name="process", help="Process assemblies and publish them when changed.")(process_cmd)
app.command(name="ledger", help="Show the fingerprint ledger.")(ledger_cmd)
app.command(name="check-tag", help="Check whether a version is already published.")(check_tag_cmd)
app.command(name="fingerprint", help="Print SHA-256 fingerprints of files.")(fingerprint_cmd)

# Standalone single-command app for the ``process-assemblies`` script.
process_app = typer.Typer(name="process-assemblies", add_completion=False)
process_app.command()(process_cmd)


def main() -> None:
    """CLI entry point."""
    app()


def process_main() -> None:
    """``process-assemblies`` entry point."""
    process_app()


if __name__ == "__main__":
    main()
