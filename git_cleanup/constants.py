"""Shared constants for git-cleanup."""

from dataclasses import dataclass
from typing import List


@dataclass
class ColumnDefinition:
    """Definition of a table column."""

    key: str
    label: str
    width: int = 0  # 0 means auto-width


REPORT_COLUMNS: List[ColumnDefinition] = [
    ColumnDefinition("index", "#", 4),
    ColumnDefinition("branch", "Branch Name", 40),
    ColumnDefinition("reason", "Reason for Deletion", 40),
]


# Keyed by DeletionReason.value; formatted with main=<trunk>, days=<age>
REASON_DESCRIPTIONS = {
    "no-new-commits": "Local branch with no new commits",
    "merged-standard": "Merged into {main} (regular merge)",
    "empty-diff": "Empty branch (no changes)",
    "squash-tree-match": "Squash-merged into {main} (tree match)",
    "squash-patch-match": "Squash-merged into {main} (patch match)",
    "squash-content-match": "Squash-merged into {main} (content match)",
    "squash-message-reference": "Squash-merged into {main} (commit message reference)",
    "upstream-gone": "Upstream branch deleted",
    "stale": "Stale branch ({days} days old)",
}

SECONDS_PER_DAY = 86400

PROBE_COMMIT_MESSAGE = "Virtual commit for squash merge detection"


# Symbol constants
SYMBOL_KEEP = "✓"
SYMBOL_DELETED = "✅"
SYMBOL_FAILED = "❌"
SYMBOL_WARNING = "⚠️"


# CLI colors (Rich color names)
CLI_COLORS = {
    "index": "blue",
    "reason": "yellow",
    "keep": "green",
    "deleted": "green",
    "failed": "red",
    "warning": "red",
}
