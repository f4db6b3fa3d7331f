"""``asmforge fingerprint PATH...`` — print SHA-256 fingerprints of files."""

from __future__ import annotations

from pathlib import Path
from typing import List

import typer

from asmforge.cli.output import console
from asmforge.core.hasher import fingerprint_file


def fingerprint_cmd(
    paths: List[Path] = typer.Argument(..., help="Files to fingerprint."),
) -> None:
    """Print the ledger fingerprint of each file; exit 1 if any is missing."""
    missing = False
    for path in paths:
        digest = fingerprint_file(path)
        if digest is None:
            missing = True
            console.print(f"[red]missing[/red]  {path}", soft_wrap=True)
        else:
            console.print(f"{digest}  {path}", markup=False, highlight=False, soft_wrap=True)
    if missing:
        raise typer.Exit(code=1)
