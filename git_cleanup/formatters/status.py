"""Report and deletion formatting utilities."""

from typing import Iterable, Tuple

from git_cleanup.services.deletion_service import DeletionResult


def format_deletion_line(branch: str, reason: str, dry_run: bool) -> str:
    """
    Format one deleted (or would-be deleted) branch.

    Args:
        branch: Branch name
        reason: Deletion reason description, may be empty
        dry_run: Whether the deletion was simulated

    Returns:
        Line such as "Deleted: feature/x (Empty branch (no changes))"
    """
    action = "Would delete" if dry_run else "Deleted"
    suffix = f" ({reason})" if reason else ""
    return f"{action}: {branch}{suffix}"


def format_deletion_items(entries: Iterable[Tuple[str, str]]) -> str:
    """
    Format (branch, reason) pairs as a bullet list for confirmation messages.

    Example:
        "  • feature/old (Upstream branch deleted)\\n  • bugfix/tmp (Stale branch (120 days old))"
    """
    return "\n".join(f"  • {branch} ({reason})" for branch, reason in entries)


def format_summary(result: DeletionResult) -> str:
    """One-line summary of a deletion batch."""
    if result.dry_run:
        return f"Would delete {result.deleted_count} branches"
    return f"Successfully deleted {result.deleted_count} branches, {result.failed_count} failed"
