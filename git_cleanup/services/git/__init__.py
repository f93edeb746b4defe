"""Git-related services for git-cleanup."""

from .repository import GitRepository
from .classifier import BranchClassifier

__all__ = [
    "GitRepository",
    "BranchClassifier",
]
