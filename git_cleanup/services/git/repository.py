"""Repository accessor: read queries over git objects plus the two writes git-cleanup needs."""

import tempfile
from contextlib import contextmanager
from typing import Iterator, List, Optional, Tuple

import git
from git.objects.commit import Commit

from git_cleanup.constants import PROBE_COMMIT_MESSAGE
from git_cleanup.exceptions import BranchNotFoundError, GitOperationError, NotInRepositoryError
from git_cleanup.logging_config import get_logger
from git_cleanup.models.branch import CommitInfo

logger = get_logger(__name__)


class GitRepository:
    """GitPython-backed accessor for a local repository.

    Every query raises :class:`GitOperationError` on failure; callers decide
    whether a failure is fatal.
    """

    def __init__(self, repo_path: str):
        """Open the repository containing ``repo_path``.

        Args:
            repo_path: Path inside a git working tree

        Raises:
            NotInRepositoryError: If the path is not inside a usable repository
        """
        self.repo_path = repo_path
        self.remote_name = "origin"
        try:
            self.repo = git.Repo(repo_path, search_parent_directories=True)
        except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError) as e:
            raise NotInRepositoryError(repo_path) from e
        if self.repo.bare:
            raise NotInRepositoryError(repo_path, "bare repositories have no working tree")

        logger.debug(f"Opened repository at {self.repo.working_dir}")

    def close(self) -> None:
        self.repo.close()

    def _git(self, operation: str, *args, branch: Optional[str] = None, **kwargs) -> str:
        """Run a git command through GitPython, translating failures."""
        try:
            return getattr(self.repo.git, operation)(*args, **kwargs)
        except git.exc.GitCommandError as e:
            raise GitOperationError(operation, branch, str(e.stderr).strip() or str(e)) from e

    # ----- refs -----

    def list_local_branches(self) -> List[str]:
        """Local branch names in ref order."""
        return [head.name for head in self.repo.heads]

    def resolve_ref(self, name: str) -> str:
        """Resolve a ref (branch, tag, sha) to a commit id."""
        try:
            return self.repo.commit(name).hexsha
        except (git.exc.BadName, git.exc.BadObject, ValueError) as e:
            raise BranchNotFoundError(name) from e

    def merge_base(self, a: str, b: str) -> str:
        """Nearest common ancestor of two refs."""
        try:
            bases = self.repo.merge_base(a, b)
        except git.exc.GitCommandError as e:
            raise GitOperationError("merge_base", b, str(e)) from e
        if not bases:
            raise GitOperationError("merge_base", b, f"No common ancestor with {a}")
        return bases[0].hexsha

    def is_ancestor(self, ancestor: str, descendant: str) -> bool:
        try:
            return self.repo.is_ancestor(ancestor, descendant)
        except git.exc.GitCommandError as e:
            raise GitOperationError("is_ancestor", message=str(e)) from e

    def merged_branches(self, target: str) -> List[str]:
        """Local branches whose tips are reachable from ``target`` (``git branch --merged``)."""
        output = self._git("branch", "--merged", target, "--format=%(refname:short)")
        return [line.strip() for line in output.splitlines() if line.strip()]

    def detect_main_branch(self) -> str:
        """Guess the trunk: origin/HEAD target, else an existing main/master, else 'main'."""
        try:
            head_ref = self.repo.git.symbolic_ref("--short", f"refs/remotes/{self.remote_name}/HEAD")
            main_branch = head_ref.split("/", 1)[1]
            logger.debug(f"Detected main branch {main_branch} from {head_ref}")
            return main_branch
        except (git.exc.GitCommandError, IndexError) as e:
            logger.debug(f"Could not read {self.remote_name}/HEAD: {e}")

        heads = self.list_local_branches()
        for candidate in ("main", "master"):
            if candidate in heads:
                return candidate
        return "main"

    # ----- trees, diffs and commits -----

    def tree_of(self, commit: str) -> str:
        try:
            return self.repo.commit(commit).tree.hexsha
        except (git.exc.BadName, git.exc.BadObject, ValueError) as e:
            raise GitOperationError("tree_of", message=str(e)) from e

    def diff_paths(self, from_ref: str, to_ref: str) -> List[str]:
        output = self._git("diff", "--name-only", from_ref, to_ref)
        return [line for line in output.splitlines() if line]

    def diff_hunks(self, from_ref: str, to_ref: str, path: str) -> str:
        """Zero-context unified diff of one path."""
        return self._git("diff", "--no-color", "--unified=0", from_ref, to_ref, "--", path)

    def log_patches(self, from_ref: str, to_ref: str, path: str) -> str:
        """Zero-context patch log of ``from_ref..to_ref`` restricted to one path."""
        return self._git(
            "log", "--no-color", "-p", "--unified=0", f"{from_ref}..{to_ref}", "--", path
        )

    def _run_patch_id(self, patch_text: str) -> List[Tuple[str, str]]:
        """Pipe patch text through ``git patch-id --stable``; returns (patch_id, commit) pairs."""
        if not patch_text.strip():
            return []
        with tempfile.TemporaryFile() as stream:
            stream.write(patch_text.encode("utf-8", errors="surrogateescape"))
            stream.write(b"\n")
            stream.seek(0)
            output = self._git("patch_id", "--stable", istream=stream)

        pairs = []
        for line in output.splitlines():
            parts = line.split()
            if len(parts) >= 2:
                pairs.append((parts[0], parts[1]))
        return pairs

    def patch_id(self, from_ref: str, to_ref: str) -> Optional[str]:
        """Stable patch id of the combined diff between two points, None if the diff is empty."""
        diff = self._git("diff", "--no-color", from_ref, to_ref)
        pairs = self._run_patch_id(diff)
        return pairs[0][0] if pairs else None

    def commits_in_range(self, from_ref: str, to_ref: str) -> List[CommitInfo]:
        """Commits in ``from_ref..to_ref``, newest first, with patch ids for non-merge commits."""
        revision = f"{from_ref}..{to_ref}"
        try:
            commits = list(self.repo.iter_commits(revision))
        except git.exc.GitCommandError as e:
            raise GitOperationError("commits_in_range", message=str(e)) from e
        if not commits:
            return []

        log = self._git("log", "--no-color", "--no-merges", "-p", revision)
        patch_ids = {commit: pid for pid, commit in self._run_patch_id(log)}

        result = []
        for commit in commits:
            # GitPython can return bytes for undecodable messages
            message = (
                commit.message
                if isinstance(commit.message, str)
                else commit.message.decode("utf-8", errors="ignore")
            )
            result.append(CommitInfo(commit.hexsha, message, patch_ids.get(commit.hexsha)))
        return result

    def trees_in_range(self, from_ref: str, to_ref: str) -> List[str]:
        """Tree ids of the commits in ``from_ref..to_ref``."""
        try:
            return [c.tree.hexsha for c in self.repo.iter_commits(f"{from_ref}..{to_ref}")]
        except git.exc.GitCommandError as e:
            raise GitOperationError("trees_in_range", message=str(e)) from e

    def create_commit(self, tree: str, parents: List[str], message: str) -> str:
        """Write a commit object without moving any ref. Returns its id."""
        try:
            commit = Commit.create_from_tree(
                self.repo,
                self.repo.tree(tree),
                message,
                parent_commits=[self.repo.commit(p) for p in parents],
                head=False,
            )
        except (git.exc.GitCommandError, ValueError) as e:
            raise GitOperationError("create_commit", message=str(e)) from e
        return commit.hexsha

    @contextmanager
    def probe_commit(self, tree: str, parent: str) -> Iterator[str]:
        """Scope a throwaway commit (``tree`` on top of ``parent``) used only for ancestry tests.

        The object stays in the object database unreferenced by any ref and is
        collected by the next ``git gc``.
        """
        sha = self.create_commit(tree, [parent], PROBE_COMMIT_MESSAGE)
        try:
            yield sha
        finally:
            logger.debug(f"Released probe commit {sha[:7]} (unreferenced, eligible for gc)")

    # ----- upstream tracking -----

    def _upstream_state(self, branch: str) -> Tuple[str, bool]:
        """Upstream ref and gone flag for a local branch, as git itself resolves them.

        Returns ``("", False)`` when no upstream is configured. A branch
        tracking a local branch (``branch.<name>.remote = .``) resolves to
        ``refs/heads/<merge>``.

        Raises:
            BranchNotFoundError: If the branch does not exist
        """
        refname = f"refs/heads/{branch}"
        output = self._git(
            "for_each_ref",
            "--format=%(refname)%09%(upstream)%09%(upstream:track)",
            refname,
            branch=branch,
        )
        # for-each-ref matches by prefix, so refs/heads/a also lists refs/heads/a/b
        for line in output.splitlines():
            parts = line.split("\t")
            parts += [""] * (3 - len(parts))  # trailing empty fields are stripped from output
            if parts[0] == refname:
                return parts[1], parts[2] == "[gone]"
        raise BranchNotFoundError(branch)

    def upstream_of(self, branch: str) -> Optional[str]:
        """Short name of the branch's upstream if it is configured and still resolves."""
        upstream, gone = self._upstream_state(branch)
        if not upstream or gone:
            return None
        for prefix in ("refs/heads/", "refs/remotes/"):
            if upstream.startswith(prefix):
                return upstream[len(prefix):]
        return upstream

    def is_upstream_gone(self, branch: str) -> bool:
        """True when an upstream is configured but git can no longer resolve it."""
        upstream, gone = self._upstream_state(branch)
        return bool(upstream) and gone

    def unpushed_commit_count(self, branch: str) -> int:
        """Commits on ``branch`` that its (existing) upstream does not have."""
        upstream, gone = self._upstream_state(branch)
        if not upstream or gone:
            return 0
        count = self._git("rev_list", "--count", f"{upstream}..refs/heads/{branch}", branch=branch)
        return int(count.strip() or 0)

    # ----- branch metadata -----

    def last_commit_timestamp(self, branch: str) -> int:
        """Author timestamp (unix seconds) of the branch tip."""
        try:
            return self.repo.heads[branch].commit.authored_date
        except (IndexError, AttributeError, ValueError) as e:
            raise GitOperationError("last_commit_timestamp", branch, str(e)) from e

    # ----- writes and preparation -----

    def delete_local_branch(self, name: str) -> Tuple[bool, Optional[str]]:
        """Force-delete a local branch ref.

        Returns:
            Tuple of (success, error_message). error_message is None on success.
        """
        try:
            self.repo.delete_head(name, force=True)
            logger.debug(f"Deleted local branch {name}")
            return True, None
        except git.exc.GitCommandError as e:
            error = str(e.stderr).strip() or str(e)
            logger.debug(f"Error deleting branch {name}: {error}")
            return False, error

    def has_remotes(self) -> bool:
        return bool(self.repo.remotes)

    def sync_with_remote(self) -> None:
        """Fetch all remotes and prune deleted remote branches."""
        self._git("fetch", "--all", "--prune", "--quiet")

    def checkout(self, branch: str) -> None:
        self._git("checkout", "--quiet", branch, branch=branch)
