"""Single-instance guard for pipeline runs.

Two runs against the same ledger would interleave reads and full
rewrites, so a run holds an exclusive lock file for its whole duration.
The file is created with ``O_CREAT | O_EXCL`` (atomic on local
filesystems) and holds the owner's pid for diagnosis.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from types import TracebackType

from asmforge.errors import PipelineLockedError

logger = logging.getLogger(__name__)


class RunLock:
    """Context manager owning ``lock_path`` for the duration of a run.

    Parameters
    ----------
    lock_path:
        File to create.  Parent directories are created as needed.
    """

    def __init__(self, lock_path: Path) -> None:
        self._path = Path(lock_path)
        self._held = False

    @property
    def path(self) -> Path:
        return self._path

    @property
    def held(self) -> bool:
        return self._held

    def acquire(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        try:
            fd = os.open(str(self._path), os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
        except FileExistsError:
            owner = self._read_owner()
            raise PipelineLockedError(
                f"Another run holds {self._path} (pid {owner or 'unknown'}). "
                "Remove the file if no run is active."
            ) from None
        try:
            os.write(fd, f"{os.getpid()}\n".encode("ascii"))
        finally:
            os.close(fd)
        self._held = True
        logger.debug("Acquired run lock %s", self._path)

    def release(self) -> None:
        if not self._held:
            return
        try:
            self._path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Could not remove run lock %s: %s", self._path, exc)
        self._held = False
        logger.debug("Released run lock %s", self._path)

    def _read_owner(self) -> str:
        try:
            return self._path.read_text(encoding="ascii").strip()
        except (OSError, UnicodeDecodeError):
            return ""

    def __enter__(self) -> RunLock:
        self.acquire()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()
