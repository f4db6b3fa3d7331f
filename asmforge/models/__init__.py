"""asmforge data models — all Pydantic v2, all frozen (immutable)."""

from asmforge.models.artifacts import (
    DEFAULT_ARTIFACTS,
    ArtifactDescriptor,
    ResolvedSourceRoot,
    TransformOutcome,
    TransformStatus,
)
from asmforge.models.ledger import ArtifactVerdict, FingerprintLedger, LedgerComparison
from asmforge.models.publish import (
    VALID_TRANSITIONS,
    GateDecision,
    PublishResult,
    PublishState,
)
from asmforge.models.reports import ArtifactReport, ArtifactStatus, RunReport, RunStatus

__all__ = [
    # artifacts
    "ArtifactDescriptor",
    "DEFAULT_ARTIFACTS",
    "ResolvedSourceRoot",
    "TransformOutcome",
    "TransformStatus",
    # ledger
    "ArtifactVerdict",
    "FingerprintLedger",
    "LedgerComparison",
    # publish
    "GateDecision",
    "PublishResult",
    "PublishState",
    "VALID_TRANSITIONS",
    # reports
    "ArtifactReport",
    "ArtifactStatus",
    "RunReport",
    "RunStatus",
]
