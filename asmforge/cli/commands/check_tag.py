"""``asmforge check-tag`` — run only the publish gate.

Exits 0 when processing may proceed and 1 when the version is already
published (or cannot be verified in strict mode), so CI jobs can skip
work early.
"""

from __future__ import annotations

import typer

from asmforge.cli.output import configure_logging, console
from asmforge.config import ForgeSettings
from asmforge.core.git import GitClient
from asmforge.core.publish_gate import PublishGate


def check_tag_cmd(
    version: str = typer.Option(..., "--version", help="Version to check."),
    force: bool = typer.Option(False, "--force", help="Always report proceed."),
) -> None:
    """Check whether the publish tag for a version exists on the remote."""
    settings = ForgeSettings()
    configure_logging(settings.log_level)
    gate = PublishGate(
        GitClient(timeout=settings.git_timeout_seconds),
        remote=settings.remote_name,
        tag_prefix=settings.tag_prefix,
        strict=settings.strict_remote_check,
    )
    decision = gate.check_duplicate(version, force)
    color = "green" if decision.proceed else "yellow"
    console.print(
        f"[{color}]{decision.tag}: {'proceed' if decision.proceed else 'skip'}[/{color}] "
        f"({decision.reason})",
        soft_wrap=True,
    )
    if not decision.proceed:
        raise typer.Exit(code=1)
