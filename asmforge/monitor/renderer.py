"""Rich terminal renderer for pipeline run summaries.

Color scheme
------------
- green     : changed / published
- dim       : same / unchanged
- yellow    : skipped / fallback
- cyan      : already published
"""

from __future__ import annotations

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from asmforge.core.hasher import short_digest
from asmforge.models.artifacts import TransformStatus
from asmforge.models.ledger import FingerprintLedger
from asmforge.models.reports import ArtifactStatus, RunReport, RunStatus

_ARTIFACT_STYLES: dict[ArtifactStatus, str] = {
    ArtifactStatus.CHANGED: "bold green",
    ArtifactStatus.SAME: "dim",
    ArtifactStatus.PROCESSED: "white",
    ArtifactStatus.SKIPPED: "yellow",
}

_TRANSFORM_LABELS: dict[TransformStatus, str] = {
    TransformStatus.TRANSFORMED: "[green]publicized[/green]",
    TransformStatus.PASSED_THROUGH: "[dim]copied[/dim]",
    TransformStatus.FALLBACK: "[yellow]fallback copy[/yellow]",
    TransformStatus.SKIPPED: "[yellow]source missing[/yellow]",
}

_RUN_MESSAGES: dict[RunStatus, str] = {
    RunStatus.ALREADY_PUBLISHED: "[bold cyan]Already published[/bold cyan]",
    RunStatus.UNCHANGED: "[dim]No changes[/dim]",
    RunStatus.CHANGED: "[bold green]Changes detected[/bold green]",
    RunStatus.PUBLISHED: "[bold green]Published[/bold green]",
}


def summary_line(report: RunReport) -> str:
    """Plain one-line overall status, e.g. for logs and scripting."""
    counts: dict[str, int] = {}
    for artifact in report.artifacts:
        counts[artifact.status.value] = counts.get(artifact.status.value, 0) + 1
    parts = ", ".join(f"{n} {status}" for status, n in sorted(counts.items()))
    line = f"status={report.status.value}"
    if report.version:
        line += f" version={report.version}"
    if parts:
        line += f" ({parts})"
    if report.publish is not None:
        line += f" tag={report.publish.tag}"
    return line


class SummaryRenderer:
    """Renders run reports and ledgers as Rich output.

    Parameters
    ----------
    console:
        Rich Console instance.  A new one is created if not provided.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def render_report(self, report: RunReport) -> Panel:
        table = Table(show_header=True, header_style="bold cyan", expand=True)
        table.add_column("Artifact", min_width=28, no_wrap=True)
        table.add_column("Status", justify="center", min_width=10)
        table.add_column("Transform", min_width=14)
        table.add_column("Digest", style="dim", min_width=12)

        for artifact in report.artifacts:
            style = _ARTIFACT_STYLES.get(artifact.status, "")
            table.add_row(
                artifact.name,
                f"[{style}]{artifact.status.value}[/{style}]",
                _TRANSFORM_LABELS.get(artifact.transform, "[dim]-[/dim]")
                if artifact.transform
                else "[dim]-[/dim]",
                short_digest(artifact.digest) if artifact.digest else "-",
            )

        footer: list[str] = [f"[bold]Result:[/bold] {_RUN_MESSAGES[report.status]}"]
        if report.version:
            footer.append(f"[bold]Version:[/bold] {report.version}")
        footer.append(f"[bold]Gate:[/bold] {report.gate.reason}")
        if report.publish is not None:
            publish = report.publish
            steps = [
                "committed" if publish.committed else "no commit",
                "tagged" if publish.tagged else ("tag existed" if publish.tag_existed else "no tag"),
                "pushed" if publish.pushed else "not pushed",
            ]
            if publish.dry_run:
                steps.append("dry run")
            footer.append(f"[bold]Publish:[/bold] {publish.tag} ({', '.join(steps)})")

        return Panel(
            Group(table, Text(""), Text.from_markup("  |  ".join(footer))),
            title="[bold]Assembly Pipeline[/bold]",
            border_style="green" if report.status != RunStatus.UNCHANGED else "blue",
            padding=(1, 2),
        )

    def print_report(self, report: RunReport) -> None:
        self.console.print(self.render_report(report))
        self.console.print(summary_line(report), markup=False, highlight=False, soft_wrap=True)

    def render_ledger(self, ledger: FingerprintLedger, title: str = "Fingerprint Ledger") -> Table:
        table = Table(title=title, show_header=True, header_style="bold cyan")
        table.add_column("Artifact", style="cyan", no_wrap=True)
        table.add_column("SHA-256")
        for name in ledger.names():
            table.add_row(name, ledger.entries[name])
        return table

    def print_ledger(self, ledger: FingerprintLedger, title: str = "Fingerprint Ledger") -> None:
        if len(ledger) == 0:
            self.console.print("[dim]Ledger is empty.[/dim]")
            return
        self.console.print(self.render_ledger(ledger, title))
