"""Candidate branch enumeration"""
from typing import Iterable, List, Optional

from git_cleanup.logging_config import get_logger
from git_cleanup.utils.patterns import matches_filters

logger = get_logger(__name__)


def enumerate_candidates(
    branches: Iterable[str],
    main_branch: str,
    include: Optional[str] = None,
    exclude: Optional[str] = None,
) -> List[str]:
    """
    Select the branches to classify.

    Args:
        branches: Local branch names in ref order
        main_branch: Trunk branch, never a candidate
        include: Only keep branches matching this pattern (if set)
        exclude: Drop branches matching this pattern (if set)

    Returns:
        Candidates in the original order
    """
    candidates = []
    for branch in branches:
        if branch == main_branch:
            continue
        if not matches_filters(branch, include, exclude):
            logger.debug(f"Filtered out {branch}")
            continue
        candidates.append(branch)
    return candidates
