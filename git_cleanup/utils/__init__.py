"""Utility functions for git-cleanup.

This package provides utility modules:
- patterns: Branch-name escaping and include/exclude matching
"""

from .patterns import escape_branch_pattern, matches_filters

__all__ = [
    "escape_branch_pattern",
    "matches_filters",
]
