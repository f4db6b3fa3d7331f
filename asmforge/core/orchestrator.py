"""Pipeline orchestrator — wires gate, locator, transforms, ledger and publish.

Control flow of one run::

    Publish Gate -> run lock -> Artifact Locator
        -> (per artifact) Transform Invoker -> fingerprint
        -> ledger compare + full rewrite -> verdict
        -> (changed and auto-publish) Publish Driver

Fatal preconditions (gate refusal in strict mode, missing source, not a
repository when auto-publishing, lock held) are raised before any artifact
is touched.  The working directory is a temporary directory that is
removed on every exit path.
"""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path

from asmforge.config import ForgeSettings
from asmforge.core.change_ledger import JsonLedgerStore, LedgerStore, compare
from asmforge.core.git import GitClient
from asmforge.core.hasher import fingerprint_file
from asmforge.core.locator import ArtifactLocator
from asmforge.core.publish_driver import PublishDriver
from asmforge.core.publish_gate import REASON_ALREADY_PUBLISHED, PublishGate
from asmforge.core.run_lock import RunLock
from asmforge.core.transform import (
    PASS_THROUGH,
    TransformInvoker,
    Transformer,
    resolve_transformer,
)
from asmforge.errors import GateRefusedError, NotARepositoryError, PublishError
from asmforge.models.artifacts import TransformOutcome
from asmforge.models.ledger import FingerprintLedger, LedgerComparison
from asmforge.models.publish import GateDecision, PublishResult
from asmforge.models.reports import (
    ArtifactReport,
    ArtifactStatus,
    RunReport,
    RunStatus,
)

logger = logging.getLogger(__name__)


class AssemblyPipeline:
    """Runs the assembly processing and publish pipeline.

    Every collaborator can be injected; anything left as ``None`` is built
    from *config*.

    Parameters
    ----------
    config:
        Settings for this run.  Defaults to a fresh ``ForgeSettings()``.
    locator:
        Resolves the game install.
    ledger_store:
        Persists fingerprints between runs.
    git:
        Git client used by the gate and the publish driver.
    transformer:
        Publicizer strategy.  Resolved from PATH (with auto-install) when
        not given.
    """

    def __init__(
        self,
        config: ForgeSettings | None = None,
        *,
        locator: ArtifactLocator | None = None,
        ledger_store: LedgerStore | None = None,
        git: GitClient | None = None,
        transformer: Transformer | None = None,
    ) -> None:
        self.config = config or ForgeSettings()
        self.locator = locator or ArtifactLocator(
            self.config.game_dir_name,
            self.config.managed_subdir,
            search_roots=self.config.search_roots,
        )
        self.ledger_store: LedgerStore = ledger_store or JsonLedgerStore(self.config.ledger_path)
        self.git = git or GitClient(timeout=self.config.git_timeout_seconds)
        self.gate = PublishGate(
            self.git,
            remote=self.config.remote_name,
            tag_prefix=self.config.tag_prefix,
            strict=self.config.strict_remote_check,
        )
        self._transformer = transformer

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def run(
        self,
        *,
        version: str | None = None,
        source_dir: Path | None = None,
        skip_transform: bool = False,
        force: bool = False,
        auto_publish: bool = False,
    ) -> RunReport:
        """Execute one pipeline run and return its report.

        Raises an ``AsmforgeError`` subclass for fatal conditions.
        """
        if auto_publish and not version:
            raise ValueError("auto-publish requires a version to tag")

        decision = self.gate.check_duplicate(version, force)
        if not decision.proceed:
            if decision.reason == REASON_ALREADY_PUBLISHED:
                logger.info("Version %s is already published (%s); nothing to do.", version, decision.tag)
                return self._already_published(version, decision)
            raise GateRefusedError(
                f"Refusing to process {decision.tag}: {decision.reason}"
            )

        if auto_publish and not self.git.is_work_tree():
            raise NotARepositoryError(
                f"{self.git.cwd} is not inside a git working tree; cannot auto-publish."
            )

        with RunLock(self.config.lock_path):
            source = self.locator.locate(source_dir)
            transformer = PASS_THROUGH if skip_transform else self._resolve_transformer()

            with tempfile.TemporaryDirectory(prefix="asmforge-") as working:
                invoker = TransformInvoker(
                    transformer,
                    Path(working),
                    self.config.output_dir,
                    skip_transform=skip_transform,
                    output_lines=self.config.tool_output_lines,
                )
                outcomes = [
                    invoker.transform(artifact, source.source_path(artifact))
                    for artifact in self.config.artifacts
                ]

            current = self.fingerprint(outcomes)
            previous = self.ledger_store.load()
            comparison = compare(current, previous)
            self.ledger_store.save(current)

            publish: PublishResult | None = None
            if comparison.any_changed and auto_publish:
                tag = decision.tag or self.gate.tag_for(version)
                try:
                    publish = self._publish(version, tag, outcomes, current, comparison)
                except PublishError as exc:
                    if not exc.committed:
                        # keep the change visible to the next run
                        self.ledger_store.save(previous)
                    raise
                if publish.dry_run:
                    # nothing reached the remote; the next real run must still publish
                    self.ledger_store.save(previous)
            elif auto_publish:
                logger.info("No assembly changed; skipping publish.")

        return RunReport(
            status=self._status(comparison, publish),
            version=version,
            gate=decision,
            artifacts=self._artifact_reports(outcomes, current, comparison),
            comparison=comparison,
            publish=publish,
        )

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _resolve_transformer(self) -> Transformer:
        if self._transformer is not None:
            return self._transformer
        self._transformer = resolve_transformer(
            self.config.tool_command,
            self.config.tool_args,
            install_command=self.config.tool_install_command,
            auto_install=self.config.auto_install_tool,
            timeout=self.config.tool_timeout_seconds,
        )
        return self._transformer

    @staticmethod
    def fingerprint(outcomes: list[TransformOutcome]) -> FingerprintLedger:
        """Build this run's ledger from the published files."""
        ledger = FingerprintLedger()
        for outcome in outcomes:
            if outcome.published_path is None:
                continue
            digest = fingerprint_file(outcome.published_path)
            if digest is not None:
                ledger = ledger.with_entry(outcome.name, digest)
        return ledger

    def _publish(
        self,
        version: str,
        tag: str,
        outcomes: list[TransformOutcome],
        current: FingerprintLedger,
        comparison: LedgerComparison,
    ) -> PublishResult:
        paths = [o.published_path for o in outcomes if o.published_path is not None]
        if isinstance(self.ledger_store, JsonLedgerStore):
            paths.append(self.ledger_store.path)
        changed = {name: current.entries[name] for name in comparison.changed_names}
        driver = PublishDriver(self.git, remote=self.config.remote_name)
        return driver.publish(version=version, tag=tag, paths=paths, changed=changed)

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def _already_published(self, version: str | None, decision: GateDecision) -> RunReport:
        return RunReport(
            status=RunStatus.ALREADY_PUBLISHED,
            version=version,
            gate=decision,
            artifacts=[
                ArtifactReport(name=a.name, status=ArtifactStatus.SKIPPED)
                for a in self.config.artifacts
            ],
        )

    @staticmethod
    def _artifact_reports(
        outcomes: list[TransformOutcome],
        current: FingerprintLedger,
        comparison: LedgerComparison,
    ) -> list[ArtifactReport]:
        reports: list[ArtifactReport] = []
        for outcome in outcomes:
            verdict = comparison.per_artifact.get(outcome.name)
            if not outcome.published:
                status = ArtifactStatus.SKIPPED
            elif verdict is None:
                status = ArtifactStatus.PROCESSED
            else:
                status = ArtifactStatus(verdict.value)
            reports.append(
                ArtifactReport(
                    name=outcome.name,
                    status=status,
                    transform=outcome.status,
                    verdict=verdict,
                    digest=current.get(outcome.name),
                )
            )
        return reports

    @staticmethod
    def _status(comparison: LedgerComparison, publish: PublishResult | None) -> RunStatus:
        if publish is not None and not publish.dry_run:
            return RunStatus.PUBLISHED
        if comparison.any_changed:
            return RunStatus.CHANGED
        return RunStatus.UNCHANGED
