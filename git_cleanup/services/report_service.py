"""Branch report aggregation"""
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from git_cleanup.models.branch import Verdict


@dataclass(frozen=True)
class ReportEntry:
    """A branch selected for deletion, with its 1-based position in the report."""
    index: int
    branch: str
    verdict: Verdict
    reason: str


class BranchReport:
    """Ordered delete-report plus keep-list built from classifier verdicts.

    Every branch added lands in exactly one of the two lists. Adding a branch
    that is already present is a no-op, so aggregation is idempotent.
    """

    def __init__(self, main_branch: str):
        self.main_branch = main_branch
        self._entries: List[ReportEntry] = []
        self._by_name: Dict[str, ReportEntry] = {}
        self._keep: List[str] = []
        self._keep_set = set()

    @classmethod
    def from_verdicts(cls, main_branch: str, verdicts: Iterable[Tuple[str, Verdict]]) -> "BranchReport":
        report = cls(main_branch)
        for branch, verdict in verdicts:
            report.add(branch, verdict)
        return report

    def add(self, branch: str, verdict: Verdict) -> None:
        if branch in self._by_name or branch in self._keep_set:
            return
        if verdict.is_delete:
            entry = ReportEntry(
                index=len(self._entries) + 1,
                branch=branch,
                verdict=verdict,
                reason=verdict.describe(self.main_branch),
            )
            self._entries.append(entry)
            self._by_name[branch] = entry
        else:
            self._keep.append(branch)
            self._keep_set.add(branch)

    @property
    def entries(self) -> List[ReportEntry]:
        return list(self._entries)

    @property
    def keep(self) -> List[str]:
        return list(self._keep)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, branch: str) -> bool:
        return branch in self._by_name

    def branch_at(self, index: int) -> str:
        """Branch name at a 1-based report index."""
        if not 1 <= index <= len(self._entries):
            raise IndexError(f"Report index out of range: {index}")
        return self._entries[index - 1].branch

    def reason_for(self, branch: str) -> Optional[str]:
        entry = self._by_name.get(branch)
        return entry.reason if entry else None

    def select(self, choice: str) -> List[ReportEntry]:
        """Resolve space-separated 1-based indices typed by the user.

        Raises:
            ValueError: On the first token that is not a valid index
        """
        selected: List[ReportEntry] = []
        for token in choice.split():
            if not token.isdigit() or not 1 <= int(token) <= len(self._entries):
                raise ValueError(f"Invalid selection: {token}")
            entry = self._entries[int(token) - 1]
            if entry not in selected:
                selected.append(entry)
        return selected
