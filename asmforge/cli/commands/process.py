"""``asmforge process`` — publicize, fingerprint and optionally publish assemblies.

Exit codes
----------
0   success, including "already published" and "no changes"
2   invalid arguments
3   game install or managed directory not found
4   not a git working tree (with --auto-publish)
5   staging, commit or tag failed
6   push failed (commit/tag may exist locally)
7   another run holds the lock file
8   remote could not be verified in strict mode
"""

from __future__ import annotations

from enum import IntEnum
from pathlib import Path
from typing import Optional

import typer

from asmforge.cli.output import configure_logging, console
from asmforge.config import ForgeSettings
from asmforge.core.git import GitClient
from asmforge.core.orchestrator import AssemblyPipeline
from asmforge.errors import (
    AsmforgeError,
    CommitError,
    GateRefusedError,
    NotARepositoryError,
    PipelineLockedError,
    PushError,
    SourceNotFoundError,
    TagError,
)
from asmforge.monitor.renderer import SummaryRenderer


class ExitCode(IntEnum):
    OK = 0
    FAILED = 1
    USAGE = 2
    SOURCE_NOT_FOUND = 3
    NOT_A_REPOSITORY = 4
    COMMIT_FAILED = 5
    PUSH_FAILED = 6
    LOCKED = 7
    GATE_REFUSED = 8


# Checked in order; subclasses before their bases.
_EXIT_CODES: list[tuple[type[AsmforgeError], ExitCode]] = [
    (SourceNotFoundError, ExitCode.SOURCE_NOT_FOUND),
    (NotARepositoryError, ExitCode.NOT_A_REPOSITORY),
    (PushError, ExitCode.PUSH_FAILED),
    (CommitError, ExitCode.COMMIT_FAILED),
    (TagError, ExitCode.COMMIT_FAILED),
    (PipelineLockedError, ExitCode.LOCKED),
    (GateRefusedError, ExitCode.GATE_REFUSED),
]


def exit_code_for(exc: AsmforgeError) -> ExitCode:
    for exc_type, code in _EXIT_CODES:
        if isinstance(exc, exc_type):
            return code
    return ExitCode.FAILED


def process_cmd(
    version: Optional[str] = typer.Option(
        None,
        "--version",
        help="Version to publish; tagged as <tag-prefix><version>.",
    ),
    source_dir: Optional[Path] = typer.Option(
        None,
        "--source-dir",
        help="Game install directory (skips auto-detection).",
    ),
    skip_transform: bool = typer.Option(
        False,
        "--skip-transform",
        help="Publish assemblies verbatim without running the publicizer.",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        help="Process even if the version tag already exists on the remote.",
    ),
    auto_publish: bool = typer.Option(
        False,
        "--auto-publish",
        help="Commit, tag and push when any assembly changed.",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Log the git commands of the publish step instead of running them.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Process game assemblies and publish them when they changed.

    Steps:
    - Refuse early if the version tag is already on the remote (unless --force).
    - Locate the game install and its managed assemblies.
    - Publicize + strip each configured assembly (verbatim copy on failure).
    - Compare SHA-256 fingerprints with the ledger and rewrite it.
    - With --auto-publish and changes: commit, tag and push.
    """
    settings = ForgeSettings()
    configure_logging(settings.log_level, verbose=verbose)

    if auto_publish and not version:
        raise typer.BadParameter(
            "--auto-publish needs a version to tag.", param_hint="--version"
        )

    git = GitClient(timeout=settings.git_timeout_seconds, dry_run=dry_run)
    pipeline = AssemblyPipeline(settings, git=git)
    renderer = SummaryRenderer(console=console)

    try:
        report = pipeline.run(
            version=version,
            source_dir=source_dir,
            skip_transform=skip_transform,
            force=force,
            auto_publish=auto_publish,
        )
    except AsmforgeError as exc:
        code = exit_code_for(exc)
        console.print(f"[bold red]{type(exc).__name__}:[/bold red] {exc}", soft_wrap=True)
        if isinstance(exc, PushError) and exc.committed:
            console.print(
                "[yellow]The commit was made locally; push it manually or re-run "
                "after fixing the remote.[/yellow]"
            )
        console.print(f"status=failed exit={int(code)}", markup=False, highlight=False)
        raise typer.Exit(code=int(code))

    renderer.print_report(report)
