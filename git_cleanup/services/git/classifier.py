"""Branch disposition classifier for git-cleanup."""

import re
import time
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Tuple, Union, TYPE_CHECKING

from git_cleanup.constants import SECONDS_PER_DAY
from git_cleanup.exceptions import GitOperationError
from git_cleanup.logging_config import get_logger
from git_cleanup.models.branch import DeletionReason, Verdict
from git_cleanup.utils.patterns import escape_branch_pattern

if TYPE_CHECKING:
    from git_cleanup.config import Config
    from git_cleanup.services.git.repository import GitRepository

logger = get_logger(__name__)

ProgressCallback = Callable[[int, int, str], None]

_HUNK_HEADER_RE = re.compile(r"^@@ .* @@")
_HUNK_LINE_PREFIXES = ("+", "-", " ", "\\")


def extract_hunk_bodies(diff_text: str) -> List[str]:
    """Split a unified diff into hunk bodies (the lines after each ``@@`` header).

    File headers and hunk headers are dropped since line numbers differ
    between the branch and trunk histories.
    """
    bodies: List[str] = []
    current: Optional[List[str]] = None
    for line in diff_text.splitlines():
        if _HUNK_HEADER_RE.match(line):
            if current:
                bodies.append("\n".join(current))
            current = []
        elif current is not None and line[:1] in _HUNK_LINE_PREFIXES:
            current.append(line)
        else:
            # Anything else (next file header, log commit header) ends the hunk
            if current:
                bodies.append("\n".join(current))
            current = None
    if current:
        bodies.append("\n".join(current))
    return bodies


class _Context:
    """Values computed once per branch and shared by the detection methods."""

    def __init__(self, branch: str, main_branch: str):
        self.branch = branch
        self.main_branch = main_branch
        self._cache: Dict[str, object] = {}

    def get(self, key: str, compute: Callable[[], object]):
        # Failures are not cached so each method sees its own GitOperationError
        if key not in self._cache:
            self._cache[key] = compute()
        return self._cache[key]


class BranchClassifier:
    """Decides, per branch, whether its work is already captured elsewhere.

    Methods run in a fixed priority order and the first match wins:

    1. no new commits (tip is the merge base, no upstream)
    2. standard merge into the trunk
    3. empty net diff
    4. squash merge: tree match, patch-id match, content containment,
       commit-message reference
    5. upstream deleted
    6. stale

    A method whose repository query fails is treated as not matching.
    """

    def __init__(
        self,
        repository: "GitRepository",
        config: Union["Config", dict],
        main_branch: str,
        now: Optional[Callable[[], float]] = None,
    ):
        """Initialize the classifier.

        Args:
            repository: Repository accessor
            config: Configuration dictionary or Config object
            main_branch: Trunk branch every candidate is compared against
            now: Clock returning unix seconds (defaults to ``time.time``)
        """
        self.repository = repository
        self.config = config
        self.main_branch = main_branch
        self.stale_days = config.get("stale_days", 90)
        self.debug_mode = config.get("debug", False)
        self._now = now or time.time
        self._merged_cache: Optional[frozenset] = None

        self.methods: List[Tuple[str, Callable[[_Context], Optional[Verdict]]]] = [
            ("no_new_commits", self._check_no_new_commits),
            ("merged_standard", self._check_standard_merge),
            ("empty_diff", self._check_empty_diff),
            ("squash_tree", self._check_squash_tree_match),
            ("squash_patch", self._check_squash_patch_match),
            ("squash_content", self._check_squash_content_match),
            ("squash_message", self._check_squash_message_reference),
            ("upstream_gone", self._check_upstream_gone),
        ]
        self.detection_stats: Dict[str, int] = {name: 0 for name, _ in self.methods}
        self.detection_stats["stale"] = 0

        logger.debug(f"Branch classifier initialized (main={main_branch}, stale_days={self.stale_days})")

    # ----- public API -----

    def classify(self, branch: str) -> Verdict:
        """Run the detection pipeline for one branch."""
        ctx = _Context(branch, self.main_branch)

        for name, method in self.methods:
            try:
                verdict = method(ctx)
            except GitOperationError as e:
                logger.debug(f"[{name}] {branch}: query failed, treating as no match ({e})")
                continue
            if verdict is not None:
                self.detection_stats[name] += 1
                logger.debug(f"[{name}] {branch}: {verdict.describe(self.main_branch)}")
                return verdict

        return self._check_stale(ctx)

    def classify_all(
        self, branches: Iterable[str], on_progress: Optional[ProgressCallback] = None
    ) -> Iterator[Tuple[str, Verdict]]:
        """Lazily classify branches one at a time, in order.

        Args:
            branches: Candidate branch names
            on_progress: Observer called as ``on_progress(position, total, branch)``
                before each branch is classified (position is 1-based)
        """
        branches = list(branches)
        total = len(branches)
        for position, branch in enumerate(branches, start=1):
            if on_progress:
                on_progress(position, total, branch)
            yield branch, self.classify(branch)

    def get_detection_stats(self) -> str:
        """Get a summary of which methods produced delete verdicts."""
        hits = [f"{name}: {count}" for name, count in self.detection_stats.items() if count]
        if not hits:
            return "No deletable branches detected"
        return f"Verdicts by method: {', '.join(hits)}"

    # ----- shared per-branch values -----

    def _merge_base(self, ctx: _Context) -> str:
        return ctx.get("merge_base", lambda: self.repository.merge_base(ctx.main_branch, ctx.branch))

    def _tip(self, ctx: _Context) -> str:
        return ctx.get("tip", lambda: self.repository.resolve_ref(ctx.branch))

    def _changed_paths(self, ctx: _Context) -> List[str]:
        return ctx.get(
            "paths", lambda: self.repository.diff_paths(self._merge_base(ctx), self._tip(ctx))
        )

    def _trunk_commits(self, ctx: _Context):
        return ctx.get(
            "trunk_commits",
            lambda: self.repository.commits_in_range(self._merge_base(ctx), ctx.main_branch),
        )

    def _merged_branches(self) -> frozenset:
        # Computed once per run; the trunk does not move during classification
        if self._merged_cache is None:
            self._merged_cache = frozenset(self.repository.merged_branches(self.main_branch))
        return self._merged_cache

    # ----- detection methods -----

    def _check_no_new_commits(self, ctx: _Context) -> Optional[Verdict]:
        """Method 1: tip equals the merge base and nothing tracks a remote."""
        if self._merge_base(ctx) != self._tip(ctx):
            return None
        if self.repository.upstream_of(ctx.branch) is not None:
            logger.debug(f"[Method 1] {ctx.branch} has an upstream, not auto-classifying")
            return None
        return Verdict.delete(DeletionReason.NO_NEW_COMMITS)

    def _check_standard_merge(self, ctx: _Context) -> Optional[Verdict]:
        """Method 2: reachable from the trunk through ordinary merge ancestry."""
        if ctx.branch in self._merged_branches():
            return Verdict.delete(DeletionReason.MERGED_STANDARD)
        return None

    def _check_empty_diff(self, ctx: _Context) -> Optional[Verdict]:
        """Method 3: commits exist but the net diff against the merge base is empty."""
        if not self._changed_paths(ctx):
            return Verdict.delete(DeletionReason.EMPTY_DIFF)
        return None

    def _check_squash_tree_match(self, ctx: _Context) -> Optional[Verdict]:
        """Method 4a: the branch tip tree, replayed on the merge base, is contained in the trunk."""
        merge_base = self._merge_base(ctx)
        branch_tree = self.repository.tree_of(self._tip(ctx))

        with self.repository.probe_commit(branch_tree, merge_base) as probe:
            if self.debug_mode:
                logger.debug(f"[Method 4a] {ctx.branch}: tree {branch_tree[:7]}, probe {probe[:7]}")
            if self.repository.is_ancestor(probe, ctx.main_branch):
                return Verdict.delete(DeletionReason.SQUASH_TREE_MATCH)

        if branch_tree in self.repository.trees_in_range(merge_base, ctx.main_branch):
            return Verdict.delete(DeletionReason.SQUASH_TREE_MATCH)
        return None

    def _check_squash_patch_match(self, ctx: _Context) -> Optional[Verdict]:
        """Method 4b: a trunk commit since the merge base carries the same stable patch id."""
        branch_patch_id = self.repository.patch_id(self._merge_base(ctx), self._tip(ctx))
        if not branch_patch_id:
            return None
        for commit in self._trunk_commits(ctx):
            if commit.patch_id == branch_patch_id:
                logger.debug(f"[Method 4b] {ctx.branch} matches {commit.sha[:7]}")
                return Verdict.delete(DeletionReason.SQUASH_PATCH_MATCH)
        return None

    def _check_squash_content_match(self, ctx: _Context) -> Optional[Verdict]:
        """Method 4c: every hunk of every touched file appears verbatim in trunk history.

        Textual containment only: coincidental identical hunks give false
        positives and reformatted but equivalent changes give false negatives.
        """
        merge_base = self._merge_base(ctx)
        tip = self._tip(ctx)
        paths = self._changed_paths(ctx)
        if not paths:
            return None

        for path in paths:
            bodies = extract_hunk_bodies(self.repository.diff_hunks(merge_base, tip, path))
            if not bodies:
                # Binary or mode-only change, nothing textual to look for
                return None
            history = self.repository.log_patches(merge_base, ctx.main_branch, path)
            trunk_bodies = "\n".join(extract_hunk_bodies(history))
            if not all(body in trunk_bodies for body in bodies):
                return None
        return Verdict.delete(DeletionReason.SQUASH_CONTENT_MATCH)

    def _check_squash_message_reference(self, ctx: _Context) -> Optional[Verdict]:
        """Method 4d: a trunk commit message since the merge base mentions the branch."""
        try:
            pattern = re.compile(escape_branch_pattern(ctx.branch))
        except re.error as e:
            logger.debug(f"[Method 4d] Cannot search for {ctx.branch}: {e}")
            return None
        for commit in self._trunk_commits(ctx):
            if pattern.search(commit.message):
                logger.debug(f"[Method 4d] {ctx.branch} referenced by {commit.sha[:7]}")
                return Verdict.delete(DeletionReason.SQUASH_MESSAGE_REFERENCE)
        return None

    def _check_upstream_gone(self, ctx: _Context) -> Optional[Verdict]:
        """Method 5: the configured upstream branch was deleted on the remote."""
        if self.repository.is_upstream_gone(ctx.branch):
            return Verdict.delete(DeletionReason.UPSTREAM_GONE)
        return None

    def _check_stale(self, ctx: _Context) -> Verdict:
        """Method 6: last commit older than the threshold (strictly greater). Keep if unknown."""
        try:
            timestamp = self.repository.last_commit_timestamp(ctx.branch)
        except GitOperationError as e:
            logger.debug(f"[stale] {ctx.branch}: no timestamp, keeping ({e})")
            return Verdict.keep()

        days_old = int((self._now() - timestamp) // SECONDS_PER_DAY)
        if days_old > self.stale_days:
            self.detection_stats["stale"] += 1
            logger.debug(f"[stale] {ctx.branch}: {days_old} days old")
            return Verdict.delete(DeletionReason.STALE, days=days_old)
        return Verdict.keep()
