"""Regular expression helpers for branch names."""

import re
from typing import Optional

_BRANCH_ESCAPE_RE = re.compile(r"[/.]")


def escape_branch_pattern(branch_name: str) -> str:
    """
    Escape a branch name for use as a commit-message search pattern.

    Only ``/`` and ``.`` are escaped, each with a backslash. Other regular
    expression metacharacters are left untouched, so a name such as
    ``c++`` does not compile as a pattern.

    Args:
        branch_name: Local branch name

    Returns:
        Pattern string suitable for ``re.search``

    Example:
        >>> escape_branch_pattern("feature/v1.2")
        'feature\\\\/v1\\\\.2'
    """
    return _BRANCH_ESCAPE_RE.sub(lambda m: "\\" + m.group(0), branch_name)


def matches_filters(
    branch_name: str, include: Optional[str] = None, exclude: Optional[str] = None
) -> bool:
    """Check a branch name against optional include/exclude patterns (unanchored search)."""
    if include and not re.search(include, branch_name):
        return False
    if exclude and re.search(exclude, branch_name):
        return False
    return True
