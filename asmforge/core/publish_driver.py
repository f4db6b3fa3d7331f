"""Publish Driver — commit, tag and push changed assemblies.

Walks a fixed state machine::

    check_repo -> stage_changes -> commit -> tag -> push -> done

- ``commit`` is a no-op when staging produced no diff.
- ``tag`` is a no-op (with a warning) when the tag already exists locally.
- Failures in ``check_repo``, ``commit`` and ``push`` are fatal and raised
  as distinct ``PublishError`` subclasses.  ``PushError`` records whether a
  local commit and tag were already made.

This is the only step with effects outside the local checkout; everything
before it is repeatable.
"""

from __future__ import annotations

import logging
from pathlib import Path

from asmforge.core.git import GitClient
from asmforge.core.hasher import short_digest
from asmforge.errors import (
    CommitError,
    GitCommandError,
    NotARepositoryError,
    PushError,
    TagError,
)
from asmforge.models.publish import VALID_TRANSITIONS, PublishResult, PublishState

logger = logging.getLogger(__name__)


class InvalidPublishTransitionError(RuntimeError):
    """Raised when the driver is asked to move outside the transition table."""


def build_commit_message(version: str, changed: dict[str, str]) -> str:
    """Commit message listing each changed artifact with a short digest."""
    lines = [f"Update assemblies to {version}", ""]
    for name in sorted(changed):
        lines.append(f"- {name}: {short_digest(changed[name])}")
    return "\n".join(lines).rstrip() + "\n"


class PublishDriver:
    """Drives one publish through the state machine.

    Parameters
    ----------
    git:
        Git client bound to the repository checkout.
    remote:
        Remote that receives the commit and the tag.
    """

    def __init__(self, git: GitClient, *, remote: str = "origin") -> None:
        self._git = git
        self._remote = remote
        self._state = PublishState.CHECK_REPO
        self.history: list[PublishState] = [PublishState.CHECK_REPO]

    @property
    def state(self) -> PublishState:
        return self._state

    def _advance(self, target: PublishState) -> None:
        allowed = VALID_TRANSITIONS.get(self._state, set())
        if target not in allowed:
            raise InvalidPublishTransitionError(
                f"Cannot move from {self._state.value} to {target.value}. "
                f"Allowed: {[s.value for s in allowed]}"
            )
        logger.debug("publish: %s -> %s", self._state.value, target.value)
        self._state = target
        self.history.append(target)

    def publish(
        self,
        *,
        version: str,
        tag: str,
        paths: list[Path],
        changed: dict[str, str],
    ) -> PublishResult:
        """Commit *paths*, tag the result as *tag* and push both.

        Parameters
        ----------
        version:
            Version label used in the commit and tag messages.
        tag:
            Tag name, e.g. ``assemblies-v1.2.3``.
        paths:
            Published artifacts plus the ledger file.
        changed:
            ``name -> new digest`` for every changed artifact.
        """
        if self._state != PublishState.CHECK_REPO:
            raise InvalidPublishTransitionError("A PublishDriver can only publish once.")

        dry_run = self._git.dry_run
        path_args = [str(p) for p in paths]

        # check_repo
        if not self._git.is_work_tree():
            raise NotARepositoryError(
                f"{self._git.cwd} is not inside a git working tree; cannot auto-publish."
            )

        # stage_changes
        self._advance(PublishState.STAGE_CHANGES)
        try:
            self._git.add(path_args)
        except GitCommandError as exc:
            raise CommitError(f"Staging published assemblies failed: {exc}") from exc

        # commit
        self._advance(PublishState.COMMIT)
        committed = False
        commit_sha = ""
        try:
            if dry_run or self._git.has_staged_changes(path_args):
                self._git.commit(build_commit_message(version, changed), path_args)
                committed = True
                commit_sha = "" if dry_run else self._git.head_sha()
                logger.info("Committed assemblies for %s %s", version, short_digest(commit_sha, 10))
            else:
                logger.info("Nothing staged; skipping commit.")
        except GitCommandError as exc:
            raise CommitError(f"Commit failed: {exc}") from exc

        # tag
        self._advance(PublishState.TAG)
        tag_existed = False
        tagged = False
        try:
            if self._git.local_tag_exists(tag):
                tag_existed = True
                logger.warning("Tag %s already exists locally; not re-tagging.", tag)
            else:
                self._git.tag(tag, f"Assemblies {version}")
                tagged = True
                logger.info("Created tag %s", tag)
        except GitCommandError as exc:
            raise TagError(f"Tagging {tag} failed: {exc}", committed=committed) from exc

        # push
        self._advance(PublishState.PUSH)
        try:
            if committed:
                self._git.push(self._remote, "HEAD")
            self._git.push(self._remote, f"refs/tags/{tag}")
        except GitCommandError as exc:
            raise PushError(
                f"Push to {self._remote} failed: {exc}. "
                + ("The commit and tag exist locally only." if committed else "The tag exists locally only."),
                committed=committed,
                tagged=tagged or tag_existed,
            ) from exc
        logger.info("Pushed %s to %s", tag, self._remote)

        self._advance(PublishState.DONE)
        return PublishResult(
            tag=tag,
            state=self._state,
            committed=committed,
            commit_sha=commit_sha,
            tagged=tagged,
            tag_existed=tag_existed,
            pushed=not dry_run,
            dry_run=dry_run,
        )
