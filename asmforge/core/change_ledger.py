"""Change Ledger — last-published fingerprints, compared then fully rewritten.

The ledger is reached only through the ``LedgerStore`` protocol so the
pipeline never couples to a file path:

- ``JsonLedgerStore``: flat JSON object ``{"<artifact name>": "<hex>"}``
  on disk, written atomically.
- ``InMemoryLedgerStore``: for tests and dry runs.

Loading never fails.  A missing, unreadable or malformed ledger is
treated as "no prior state", which makes every artifact count as changed.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol, runtime_checkable

from pydantic import ValidationError

from asmforge.models.ledger import ArtifactVerdict, FingerprintLedger, LedgerComparison

logger = logging.getLogger(__name__)


@runtime_checkable
class LedgerStore(Protocol):
    """Protocol for ledger persistence backends."""

    def load(self) -> FingerprintLedger:
        """Return the last saved ledger, or an empty one."""
        ...

    def save(self, ledger: FingerprintLedger) -> None:
        """Replace the stored ledger with *ledger* (full overwrite)."""
        ...


class InMemoryLedgerStore:
    """Ledger store that keeps the snapshot in memory."""

    def __init__(self, initial: FingerprintLedger | None = None) -> None:
        self._ledger = initial or FingerprintLedger()
        self.save_count = 0

    def load(self) -> FingerprintLedger:
        return self._ledger

    def save(self, ledger: FingerprintLedger) -> None:
        self._ledger = ledger
        self.save_count += 1


class JsonLedgerStore:
    """Ledger persisted as a flat JSON object.

    Parameters
    ----------
    path:
        Location of the ledger file.  Parent directories are created on save.
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> FingerprintLedger:
        if not self._path.exists():
            logger.info("No ledger at %s; treating every artifact as changed.", self._path)
            return FingerprintLedger()
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            logger.warning("Ledger %s is unreadable (%s); starting fresh.", self._path, exc)
            return FingerprintLedger()

        if not isinstance(raw, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in raw.items()
        ):
            logger.warning(
                "Ledger %s is not a flat name -> digest object; starting fresh.",
                self._path,
            )
            return FingerprintLedger()
        try:
            return FingerprintLedger.from_mapping(raw)
        except ValidationError as exc:
            logger.warning("Ledger %s failed validation (%s); starting fresh.", self._path, exc)
            return FingerprintLedger()

    def save(self, ledger: FingerprintLedger) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(dict(ledger.entries), indent=2, sort_keys=True) + "\n"
        fd, tmp_name = tempfile.mkstemp(
            dir=str(self._path.parent), prefix=f".{self._path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as fh:
                fh.write(payload)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("Wrote ledger with %d entries to %s", len(ledger), self._path)


def compare(current: FingerprintLedger, previous: FingerprintLedger) -> LedgerComparison:
    """Per-artifact digest equality between this run and the last one.

    Artifacts missing from *previous* count as changed.  Artifacts only in
    *previous* are not reported; they disappear when *current* is saved.
    """
    per_artifact: dict[str, ArtifactVerdict] = {}
    for name in current.names():
        if previous.get(name) == current.get(name):
            per_artifact[name] = ArtifactVerdict.SAME
        else:
            per_artifact[name] = ArtifactVerdict.CHANGED
    any_changed = any(v == ArtifactVerdict.CHANGED for v in per_artifact.values())
    return LedgerComparison(per_artifact=per_artifact, any_changed=any_changed)
