"""Publish gate and publish driver models.

The driver walks a fixed state machine; ``VALID_TRANSITIONS`` is the only
source of allowed moves, mirroring how stage transitions are enforced.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class GateDecision(BaseModel):
    """Answer from the Publish Gate: may this version be processed?"""

    model_config = ConfigDict(frozen=True)

    proceed: bool
    reason: str
    tag: str | None = None


class PublishState(str, Enum):
    """States of the publish workflow."""

    CHECK_REPO = "check_repo"
    STAGE_CHANGES = "stage_changes"
    COMMIT = "commit"
    TAG = "tag"
    PUSH = "push"
    DONE = "done"


# Strictly linear: commit and tag may be no-ops, but are never skipped
# as states.
VALID_TRANSITIONS: dict[PublishState, set[PublishState]] = {
    PublishState.CHECK_REPO: {PublishState.STAGE_CHANGES},
    PublishState.STAGE_CHANGES: {PublishState.COMMIT},
    PublishState.COMMIT: {PublishState.TAG},
    PublishState.TAG: {PublishState.PUSH},
    PublishState.PUSH: {PublishState.DONE},
    PublishState.DONE: set(),  # terminal
}


class PublishResult(BaseModel):
    """What the publish driver actually did."""

    model_config = ConfigDict(frozen=True)

    tag: str
    state: PublishState = PublishState.DONE
    committed: bool = False
    commit_sha: str = ""
    tagged: bool = False
    tag_existed: bool = False
    pushed: bool = False
    dry_run: bool = False
