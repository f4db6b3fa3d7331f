"""Artifact descriptor and per-artifact transform outcome models."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict


class ArtifactDescriptor(BaseModel):
    """One configured unit of work, e.g. ``Assembly-CSharp.dll``.

    The set of descriptors is static configuration and does not change
    during a pipeline invocation.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    requires_transform: bool = True


class TransformStatus(str, Enum):
    """How the published file for an artifact was produced."""

    TRANSFORMED = "transformed"
    PASSED_THROUGH = "passed_through"  # tool absent, skipped, or not required
    FALLBACK = "fallback"  # tool ran but failed; untouched copy published
    SKIPPED = "skipped"  # source file missing, nothing published


class TransformOutcome(BaseModel):
    """Result of running one artifact through the Transform Invoker."""

    model_config = ConfigDict(frozen=True)

    name: str
    status: TransformStatus
    source_path: Path
    published_path: Path | None = None
    tool_output: str = ""

    @property
    def published(self) -> bool:
        return self.status != TransformStatus.SKIPPED


class ResolvedSourceRoot(BaseModel):
    """A located game install plus its managed assembly directory."""

    model_config = ConfigDict(frozen=True)

    root: Path
    managed_dir: Path

    def source_path(self, artifact: ArtifactDescriptor) -> Path:
        return self.managed_dir / artifact.name


DEFAULT_ARTIFACTS: list[ArtifactDescriptor] = [
    ArtifactDescriptor(name="Assembly-CSharp.dll"),
    ArtifactDescriptor(name="Assembly-CSharp-firstpass.dll"),
]
