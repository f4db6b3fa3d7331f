"""Shared console and logging setup for CLI commands."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

console = Console()
err_console = Console(stderr=True)


def configure_logging(level: str = "INFO", *, verbose: bool = False) -> None:
    """Route stdlib logging through a Rich handler on stderr."""
    resolved = logging.DEBUG if verbose else getattr(logging, level.upper(), logging.INFO)
    handler = RichHandler(
        console=err_console,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    logging.basicConfig(
        level=resolved,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[handler],
        force=True,
    )
