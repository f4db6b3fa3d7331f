"""Run summary models rendered at the end of every invocation."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict

from asmforge.models.artifacts import TransformStatus
from asmforge.models.ledger import ArtifactVerdict, LedgerComparison
from asmforge.models.publish import GateDecision, PublishResult


class ArtifactStatus(str, Enum):
    """Single-word status shown per artifact in the summary."""

    PROCESSED = "processed"
    CHANGED = "changed"
    SAME = "same"
    SKIPPED = "skipped"


class RunStatus(str, Enum):
    """Overall outcome of one pipeline invocation."""

    ALREADY_PUBLISHED = "already_published"
    UNCHANGED = "unchanged"
    CHANGED = "changed"
    PUBLISHED = "published"


class ArtifactReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    status: ArtifactStatus
    transform: TransformStatus | None = None
    verdict: ArtifactVerdict | None = None
    digest: str | None = None


class RunReport(BaseModel):
    """Everything the CLI needs to print the final summary."""

    model_config = ConfigDict(frozen=True)

    status: RunStatus
    version: str | None = None
    gate: GateDecision
    artifacts: list[ArtifactReport] = []
    comparison: LedgerComparison | None = None
    publish: PublishResult | None = None

    @property
    def any_changed(self) -> bool:
        return self.comparison is not None and self.comparison.any_changed
