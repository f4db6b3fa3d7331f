"""Publish Gate — refuses to reprocess a version that is already released.

The remote tag ``<tag_prefix><version>`` is the single authority on
whether a version was published; the local change ledger is not consulted
because it can be lost or diverge between machines.

Policy when the remote cannot be asked (no remote configured, git missing,
network failure) is fail-open: processing proceeds with a warning so that
local iteration is never blocked.  ``strict=True`` turns both cases into a
refusal instead.
"""

from __future__ import annotations

import logging

from asmforge.core.git import GitClient
from asmforge.errors import GitCommandError
from asmforge.models.publish import GateDecision

logger = logging.getLogger(__name__)

REASON_FORCED = "forced"
REASON_NO_VERSION = "no version requested"
REASON_NO_REMOTE = "no remote, cannot verify"
REASON_QUERY_FAILED = "remote query failed, cannot verify"
REASON_ALREADY_PUBLISHED = "already published"
REASON_NOT_PUBLISHED = "not yet published"


class PublishGate:
    """Checks the remote for an existing publish tag.

    Parameters
    ----------
    git:
        Git client bound to the repository checkout.
    remote:
        Name of the remote to query (``origin`` by default).
    tag_prefix:
        Prefix of publish tags; the tag is ``<tag_prefix><version>``.
    strict:
        Refuse instead of failing open when the remote cannot be verified.
    """

    def __init__(
        self,
        git: GitClient,
        *,
        remote: str = "origin",
        tag_prefix: str = "assemblies-v",
        strict: bool = False,
    ) -> None:
        self._git = git
        self._remote = remote
        self._tag_prefix = tag_prefix
        self._strict = strict

    def tag_for(self, version: str) -> str:
        return f"{self._tag_prefix}{version.removeprefix('v')}"

    def check_duplicate(self, version: str | None, force: bool = False) -> GateDecision:
        """Decide whether processing *version* may proceed."""
        tag = self.tag_for(version) if version else None

        if force:
            logger.info("Publish gate bypassed (--force).")
            return GateDecision(proceed=True, reason=REASON_FORCED, tag=tag)

        if tag is None:
            return GateDecision(proceed=True, reason=REASON_NO_VERSION)

        try:
            remotes = self._git.remotes() if self._git.is_work_tree() else []
        except GitCommandError as exc:
            logger.warning("Could not list git remotes: %s", exc)
            remotes = []

        if self._remote not in remotes:
            return self._unverified(tag, REASON_NO_REMOTE)

        try:
            exists = self._git.remote_tag_exists(self._remote, tag)
        except GitCommandError as exc:
            logger.warning("Could not query %s for tag %s: %s", self._remote, tag, exc)
            return self._unverified(tag, REASON_QUERY_FAILED)

        if exists:
            logger.info("Tag %s already exists on %s.", tag, self._remote)
            return GateDecision(proceed=False, reason=REASON_ALREADY_PUBLISHED, tag=tag)
        return GateDecision(proceed=True, reason=REASON_NOT_PUBLISHED, tag=tag)

    def _unverified(self, tag: str, reason: str) -> GateDecision:
        if self._strict:
            logger.error("Cannot verify %s on %s (%s); refusing in strict mode.", tag, self._remote, reason)
            return GateDecision(proceed=False, reason=reason, tag=tag)
        logger.warning(
            "Cannot verify whether %s was already published (%s); proceeding.",
            tag,
            reason,
        )
        return GateDecision(proceed=True, reason=reason, tag=tag)
