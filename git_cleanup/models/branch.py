"""Branch verdict model and related enums"""
from enum import Enum
from dataclasses import dataclass
from typing import Optional

from git_cleanup.constants import REASON_DESCRIPTIONS


class DeletionReason(Enum):
    """Why a branch is considered safe to delete."""
    NO_NEW_COMMITS = "no-new-commits"
    MERGED_STANDARD = "merged-standard"
    EMPTY_DIFF = "empty-diff"
    SQUASH_TREE_MATCH = "squash-tree-match"
    SQUASH_PATCH_MATCH = "squash-patch-match"
    SQUASH_CONTENT_MATCH = "squash-content-match"
    SQUASH_MESSAGE_REFERENCE = "squash-message-reference"
    UPSTREAM_GONE = "upstream-gone"
    STALE = "stale"


@dataclass(frozen=True)
class Verdict:
    """Classification result for one branch: keep it, or delete it for a reason."""
    reason: Optional[DeletionReason] = None
    days: Optional[int] = None  # Only set for STALE

    @classmethod
    def keep(cls) -> "Verdict":
        return cls()

    @classmethod
    def delete(cls, reason: DeletionReason, days: Optional[int] = None) -> "Verdict":
        if reason is DeletionReason.STALE and days is None:
            raise ValueError("A stale verdict needs the branch age in days")
        return cls(reason=reason, days=days)

    @property
    def is_delete(self) -> bool:
        return self.reason is not None

    def describe(self, main_branch: str) -> str:
        """Human readable reason, e.g. 'Squash-merged into main (tree match)'."""
        if self.reason is None:
            return "Keep"
        return REASON_DESCRIPTIONS[self.reason.value].format(main=main_branch, days=self.days)


@dataclass(frozen=True)
class CommitInfo:
    """A commit in a range, as needed by squash-merge detection."""
    sha: str
    message: str
    patch_id: Optional[str] = None  # None for merge commits
