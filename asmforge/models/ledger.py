"""Fingerprint ledger value types (compare-then-full-rewrite).

A ``FingerprintLedger`` is an immutable snapshot of ``artifact name ->
SHA-256 hex digest``.  The pipeline never patches a ledger in place: it
loads the previous snapshot, builds a fresh one from the current run,
compares the two, and saves the fresh one wholesale.  After a run the
persisted ledger therefore reflects exactly the artifacts published by
that run.
"""

from __future__ import annotations

from enum import Enum
from typing import Mapping

from pydantic import BaseModel, ConfigDict, field_validator


class ArtifactVerdict(str, Enum):
    """Per-artifact change verdict."""

    CHANGED = "changed"
    SAME = "same"


class FingerprintLedger(BaseModel):
    """Immutable mapping from artifact name to hex digest."""

    model_config = ConfigDict(frozen=True)

    entries: dict[str, str] = {}

    @field_validator("entries")
    @classmethod
    def _check_digests(cls, value: dict[str, str]) -> dict[str, str]:
        for name, digest in value.items():
            if not name:
                raise ValueError("artifact name must not be empty")
            if not digest:
                raise ValueError(f"digest for {name!r} must not be empty")
        return value

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, str]) -> FingerprintLedger:
        return cls(entries=dict(mapping))

    def with_entry(self, name: str, digest: str) -> FingerprintLedger:
        """Return a new ledger with *name* set to *digest*."""
        return FingerprintLedger(entries={**self.entries, name: digest})

    def get(self, name: str) -> str | None:
        return self.entries.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self.entries

    def __len__(self) -> int:
        return len(self.entries)

    def names(self) -> list[str]:
        return sorted(self.entries)


class LedgerComparison(BaseModel):
    """Outcome of comparing the current run's fingerprints to the ledger."""

    model_config = ConfigDict(frozen=True)

    per_artifact: dict[str, ArtifactVerdict] = {}
    any_changed: bool = False

    @property
    def changed_names(self) -> list[str]:
        return sorted(
            name
            for name, verdict in self.per_artifact.items()
            if verdict == ArtifactVerdict.CHANGED
        )
