"""Thin git wrapper shared by the Publish Gate and the Publish Driver.

Every call shells out to ``git`` with a bounded timeout.  ``run()`` raises
``GitCommandError`` on non-zero exit, a missing binary or a timeout;
``probe()`` returns the raw ``CompletedProcess`` for commands whose exit
code carries meaning (``diff --quiet``, ``rev-parse --verify``).
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Callable

from asmforge.errors import GitCommandError

logger = logging.getLogger(__name__)

Runner = Callable[..., "subprocess.CompletedProcess[str]"]


class GitClient:
    """Runs git commands inside a working directory.

    Parameters
    ----------
    cwd:
        Directory the commands run in (the repository checkout).
    timeout:
        Seconds before a single git command is abandoned.
    runner:
        ``subprocess.run``-compatible callable (injected by tests).
    dry_run:
        Log mutating commands instead of running them.
    """

    def __init__(
        self,
        cwd: Path | None = None,
        *,
        timeout: float = 60,
        runner: Runner = subprocess.run,
        dry_run: bool = False,
    ) -> None:
        self._cwd = Path(cwd) if cwd is not None else Path.cwd()
        self._timeout = timeout
        self._runner = runner
        self.dry_run = dry_run

    @property
    def cwd(self) -> Path:
        return self._cwd

    # ------------------------------------------------------------------
    # Raw execution
    # ------------------------------------------------------------------

    def probe(self, *args: str) -> subprocess.CompletedProcess[str]:
        """Run ``git <args>`` and return the completed process.

        Raises ``GitCommandError`` only if git cannot be started or times out.
        """
        command = ["git", *args]
        logger.debug("$ %s", " ".join(command))
        try:
            return self._runner(
                command,
                capture_output=True,
                text=True,
                timeout=self._timeout,
                cwd=str(self._cwd),
            )
        except subprocess.TimeoutExpired as exc:
            raise GitCommandError(list(args), None, f"timed out after {self._timeout}s") from exc
        except OSError as exc:
            raise GitCommandError(list(args), None, str(exc)) from exc

    def run(self, *args: str) -> str:
        """Run ``git <args>``; return stdout or raise ``GitCommandError``."""
        proc = self.probe(*args)
        if proc.returncode != 0:
            raise GitCommandError(
                list(args), proc.returncode, (proc.stdout or "") + (proc.stderr or "")
            )
        return proc.stdout or ""

    def _mutate(self, *args: str) -> str:
        if self.dry_run:
            logger.info("[dry-run] git %s", " ".join(args))
            return ""
        return self.run(*args)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def is_work_tree(self) -> bool:
        try:
            proc = self.probe("rev-parse", "--is-inside-work-tree")
        except GitCommandError:
            return False
        return proc.returncode == 0 and proc.stdout.strip() == "true"

    def remotes(self) -> list[str]:
        return [line.strip() for line in self.run("remote").splitlines() if line.strip()]

    def remote_tag_exists(self, remote: str, tag: str) -> bool:
        """True if *remote* has exactly ``refs/tags/<tag>``."""
        ref = f"refs/tags/{tag}"
        output = self.run("ls-remote", "--tags", remote, ref)
        for line in output.splitlines():
            parts = line.split()
            # annotated tags also list "<ref>^{}"
            if len(parts) == 2 and parts[1] == ref:
                return True
        return False

    def local_tag_exists(self, tag: str) -> bool:
        proc = self.probe("rev-parse", "-q", "--verify", f"refs/tags/{tag}")
        return proc.returncode == 0

    def has_staged_changes(self, paths: list[str] | None = None) -> bool:
        args = ["diff", "--cached", "--quiet"]
        if paths:
            args += ["--", *paths]
        proc = self.probe(*args)
        if proc.returncode not in (0, 1):
            raise GitCommandError(args, proc.returncode, (proc.stdout or "") + (proc.stderr or ""))
        return proc.returncode == 1

    def head_sha(self) -> str:
        return self.run("rev-parse", "HEAD").strip()

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add(self, paths: list[str]) -> None:
        self._mutate("add", "--", *paths)

    def commit(self, message: str, paths: list[str] | None = None) -> None:
        args = ["commit", "-m", message]
        if paths:
            args += ["--", *paths]
        self._mutate(*args)

    def tag(self, tag: str, message: str) -> None:
        self._mutate("tag", "-a", tag, "-m", message)

    def push(self, remote: str, *refs: str) -> None:
        self._mutate("push", remote, *refs)
