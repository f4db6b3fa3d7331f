"""Exception hierarchy for the assembly pipeline.

Fatal conditions are raised as subclasses of ``AsmforgeError`` at the point
of detection.  Recoverable conditions (publicizer missing or failing, remote
unreachable, corrupt ledger) are never raised; they are logged as warnings
by the component that hits them.
"""

from __future__ import annotations


class AsmforgeError(RuntimeError):
    """Base class for all fatal pipeline errors."""


class SourceNotFoundError(AsmforgeError):
    """Raised when no game install can be resolved."""


class MissingManagedDirError(SourceNotFoundError):
    """Raised when the install exists but lacks the managed assembly directory."""


class PipelineLockedError(AsmforgeError):
    """Raised when another pipeline run holds the lock file."""


class GateRefusedError(AsmforgeError):
    """Raised when strict remote checking cannot verify the publish tag."""


class GitCommandError(AsmforgeError):
    """Raised when a git invocation exits non-zero or cannot be started."""

    def __init__(self, args: list[str], returncode: int | None, output: str = "") -> None:
        self.command = list(args)
        self.returncode = returncode
        self.output = output
        detail = output.strip().splitlines()[-1] if output.strip() else "no output"
        super().__init__(
            f"git {' '.join(args)} failed (exit={returncode}): {detail}"
        )


class PublishError(AsmforgeError):
    """Base class for publish driver failures.

    ``committed`` and ``tagged`` record how far the workflow got, so a
    caller can tell "committed locally but not pushed" apart from
    "never committed".
    """

    def __init__(self, message: str, *, committed: bool = False, tagged: bool = False) -> None:
        super().__init__(message)
        self.committed = committed
        self.tagged = tagged


class NotARepositoryError(PublishError):
    """Raised when auto-publish is requested outside a git working tree."""


class CommitError(PublishError):
    """Raised when staging or committing the published artifacts fails."""


class TagError(PublishError):
    """Raised when creating the local version tag fails."""


class PushError(PublishError):
    """Raised when pushing to the remote fails after local changes were made."""
