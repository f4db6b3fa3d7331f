"""``asmforge ledger`` — show the stored fingerprint ledger."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from asmforge.cli.output import console
from asmforge.config import ForgeSettings
from asmforge.core.change_ledger import JsonLedgerStore
from asmforge.monitor.renderer import SummaryRenderer


def ledger_cmd(
    ledger_path: Optional[Path] = typer.Option(
        None,
        "--ledger",
        "-l",
        help="Path to the ledger JSON file (defaults to the configured one).",
    ),
) -> None:
    """Print the last published fingerprint of every assembly."""
    path = ledger_path or ForgeSettings().ledger_path
    ledger = JsonLedgerStore(path).load()
    SummaryRenderer(console=console).print_ledger(ledger, title=f"Ledger: {path}")
