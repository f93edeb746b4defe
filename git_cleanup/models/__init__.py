"""Data models for git-cleanup."""

from .branch import CommitInfo, DeletionReason, Verdict

__all__ = ["CommitInfo", "DeletionReason", "Verdict"]
