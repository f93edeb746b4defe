"""Branch deletion with the unpushed-commit safety veto"""
from dataclasses import dataclass, field
from typing import Iterable, List, Tuple, TYPE_CHECKING

from git_cleanup.exceptions import GitOperationError
from git_cleanup.logging_config import get_logger

if TYPE_CHECKING:
    from git_cleanup.services.git.repository import GitRepository

logger = get_logger(__name__)


@dataclass
class DeletionResult:
    """Outcome of a deletion batch."""
    dry_run: bool = False
    deleted: List[Tuple[str, str]] = field(default_factory=list)  # (branch, reason)
    failed: List[Tuple[str, str]] = field(default_factory=list)  # (branch, error)
    skipped: List[Tuple[str, str]] = field(default_factory=list)  # (branch, why)

    @property
    def deleted_count(self) -> int:
        return len(self.deleted)

    @property
    def failed_count(self) -> int:
        return len(self.failed)


class DeletionService:
    """Deletes local branch refs, counting successes and failures independently."""

    def __init__(self, repository: "GitRepository", dry_run: bool = False):
        self.repository = repository
        self.dry_run = dry_run

    def unpushed_reason(self, branch: str) -> str:
        """Why a branch must not be deleted, or an empty string if it is safe.

        Only branches with an existing upstream are checked. A check that
        cannot be completed counts as unsafe.
        """
        try:
            count = self.repository.unpushed_commit_count(branch)
        except GitOperationError as e:
            logger.debug(f"Could not verify pushed state of {branch}: {e}")
            return "could not verify pushed state"
        if count:
            return f"has {count} unpushed commit{'s' if count != 1 else ''}"
        return ""

    def apply_safety_veto(
        self, entries: Iterable[Tuple[str, str]]
    ) -> Tuple[List[Tuple[str, str]], List[Tuple[str, str]]]:
        """Split (branch, reason) pairs into (safe, vetoed) lists."""
        safe, vetoed = [], []
        for branch, reason in entries:
            why = self.unpushed_reason(branch)
            if why:
                logger.debug(f"Vetoed {branch}: {why}")
                vetoed.append((branch, why))
            else:
                safe.append((branch, reason))
        return safe, vetoed

    def delete_branches(self, entries: Iterable[Tuple[str, str]]) -> DeletionResult:
        """Delete (branch, reason) pairs, or report what would be deleted in dry-run mode."""
        entries = list(entries)
        result = DeletionResult(dry_run=self.dry_run)

        if self.dry_run:
            result.deleted.extend(entries)
            return result

        entries, result.skipped = self.apply_safety_veto(entries)

        for branch, reason in entries:
            success, error = self.repository.delete_local_branch(branch)
            if success:
                result.deleted.append((branch, reason))
            else:
                logger.debug(f"Failed to delete {branch}: {error}")
                result.failed.append((branch, error or "Unknown error"))

        return result
