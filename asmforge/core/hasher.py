"""Content fingerprinting for published artifacts.

Fingerprints are plain SHA-256 hex digests of file bytes.  Paths,
timestamps and other metadata never enter the digest, so byte-identical
files hash identically on every platform and every run.
"""

from __future__ import annotations

import hashlib
from pathlib import Path

_CHUNK_SIZE = 1024 * 1024


def sha256_hex(data: bytes) -> str:
    """Return the SHA-256 hex digest of raw bytes."""
    return hashlib.sha256(data).hexdigest()


def fingerprint_file(path: Path) -> str | None:
    """Return the SHA-256 hex digest of the file at *path*.

    Returns ``None`` if the file does not exist; an artifact whose source
    was missing is simply absent from the ledger update.
    """
    path = Path(path)
    if not path.is_file():
        return None
    digest = hashlib.sha256()
    with path.open("rb") as fh:
        for chunk in iter(lambda: fh.read(_CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()


def short_digest(digest: str, length: int = 12) -> str:
    """Prefix of a digest for commit messages and summaries."""
    return digest[:length]
