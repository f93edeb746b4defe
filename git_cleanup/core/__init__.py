"""Core orchestration for git-cleanup."""

from .branch_cleanup import BranchCleanup

__all__ = ["BranchCleanup"]
