"""Tests for the branch disposition classifier"""
from pathlib import Path

import pytest

from git_cleanup.exceptions import GitOperationError
from git_cleanup.models.branch import CommitInfo, DeletionReason, Verdict
from git_cleanup.services.git.classifier import BranchClassifier, extract_hunk_bodies
from git_cleanup.services.git.repository import GitRepository

NOW = 1_700_000_000 + 10 * 86400  # mock branch tip is 10 days old


@pytest.fixture
def classifier(mock_repository, mock_config):
    return BranchClassifier(mock_repository, mock_config, "main", now=lambda: NOW)


class TestExtractHunkBodies:
    """Test splitting unified diffs into hunk bodies."""

    def test_single_file_diff(self):
        diff = (
            "diff --git a/f.txt b/f.txt\n"
            "index 123..456 100644\n"
            "--- a/f.txt\n"
            "+++ b/f.txt\n"
            "@@ -1,0 +2 @@\n"
            "+added line\n"
            "@@ -5 +6 @@ def foo\n"
            "-old\n"
            "+new"
        )
        assert extract_hunk_bodies(diff) == ["+added line", "-old\n+new"]

    def test_log_output_commit_headers_end_hunks(self):
        log = (
            "commit abc\n"
            "Author: Test <t@example.com>\n"
            "\n"
            "    Message\n"
            "\n"
            "diff --git a/f.txt b/f.txt\n"
            "--- a/f.txt\n"
            "+++ b/f.txt\n"
            "@@ -1,0 +2 @@\n"
            "+added line\n"
            "\n"
            "commit def\n"
        )
        assert extract_hunk_bodies(log) == ["+added line"]

    def test_empty_diff(self):
        assert extract_hunk_bodies("") == []


class TestClassifierPipeline:
    """Test the ordered detection pipeline against a mocked repository."""

    def test_keep_when_nothing_matches(self, classifier):
        assert classifier.classify("feature/a") == Verdict.keep()

    def test_no_new_commits(self, classifier, mock_repository):
        mock_repository.resolve_ref.return_value = "base000"
        verdict = classifier.classify("feature/a")
        assert verdict.reason == DeletionReason.NO_NEW_COMMITS
        assert verdict.describe("main") == "Local branch with no new commits"

    def test_no_new_commits_skipped_with_upstream(self, classifier, mock_repository):
        mock_repository.resolve_ref.return_value = "base000"
        mock_repository.upstream_of.return_value = "origin/feature/a"
        mock_repository.merged_branches.return_value = ["feature/a"]

        verdict = classifier.classify("feature/a")

        assert verdict.reason == DeletionReason.MERGED_STANDARD

    def test_standard_merge_precedes_squash_checks(self, classifier, mock_repository):
        mock_repository.merged_branches.return_value = ["feature/a"]
        mock_repository.commits_in_range.return_value = [
            CommitInfo("c1", "Merge branch 'feature/a'", "patch333")
        ]

        verdict = classifier.classify("feature/a")

        assert verdict.reason == DeletionReason.MERGED_STANDARD
        assert verdict.describe("main") == "Merged into main (regular merge)"
        mock_repository.probe_commit.assert_not_called()
        mock_repository.patch_id.assert_not_called()

    def test_empty_diff(self, classifier, mock_repository):
        mock_repository.diff_paths.return_value = []
        verdict = classifier.classify("feature/a")
        assert verdict.reason == DeletionReason.EMPTY_DIFF
        assert verdict.describe("main") == "Empty branch (no changes)"

    def test_tree_match_via_probe_ancestry(self, classifier, mock_repository):
        mock_repository.is_ancestor.return_value = True

        verdict = classifier.classify("feature/a")

        assert verdict.reason == DeletionReason.SQUASH_TREE_MATCH
        mock_repository.probe_commit.assert_called_once_with("tree222", "base000")
        mock_repository.is_ancestor.assert_called_once_with("probe444", "main")

    def test_tree_match_via_trunk_tree(self, classifier, mock_repository):
        mock_repository.trees_in_range.return_value = ["other", "tree222"]
        verdict = classifier.classify("feature/a")
        assert verdict.describe("main") == "Squash-merged into main (tree match)"

    def test_probe_scope_released_when_query_fails(self, classifier, mock_repository):
        mock_repository.is_ancestor.side_effect = GitOperationError("is_ancestor")

        classifier.classify("feature/a")

        probe = mock_repository.probe_commit.return_value
        probe.__exit__.assert_called_once()

    def test_patch_match(self, classifier, mock_repository):
        mock_repository.commits_in_range.return_value = [
            CommitInfo("c1", "Unrelated", "zzz"),
            CommitInfo("c2", "Squashed", "patch333"),
        ]
        verdict = classifier.classify("feature/a")
        assert verdict.describe("main") == "Squash-merged into main (patch match)"

    def test_patch_match_skipped_without_patch_id(self, classifier, mock_repository):
        mock_repository.patch_id.return_value = None
        mock_repository.commits_in_range.return_value = [CommitInfo("c1", "Merge", None)]
        assert classifier.classify("feature/a") == Verdict.keep()

    def test_content_match(self, classifier, mock_repository):
        mock_repository.log_patches.return_value = (
            "commit c1\n\n    Integrate\n\n"
            "diff --git a/feature.txt b/feature.txt\n"
            "@@ -3,0 +4 @@\n"
            "+feature line\n"
        )
        verdict = classifier.classify("feature/a")
        assert verdict.describe("main") == "Squash-merged into main (content match)"

    def test_content_match_requires_every_file(self, classifier, mock_repository):
        mock_repository.diff_paths.return_value = ["feature.txt", "other.txt"]
        mock_repository.log_patches.side_effect = lambda base, main, path: (
            "@@ -1,0 +1 @@\n+feature line\n" if path == "feature.txt" else ""
        )
        assert classifier.classify("feature/a") == Verdict.keep()

    def test_message_reference(self, classifier, mock_repository):
        mock_repository.commits_in_range.return_value = [
            CommitInfo("c1", "Squash feature/a into main (#12)", "other")
        ]
        verdict = classifier.classify("feature/a")
        assert verdict.reason == DeletionReason.SQUASH_MESSAGE_REFERENCE
        assert verdict.describe("main") == "Squash-merged into main (commit message reference)"

    def test_message_reference_escapes_dots(self, classifier, mock_repository):
        mock_repository.commits_in_range.return_value = [CommitInfo("c1", "Release v1x2", "other")]
        assert classifier.classify("v1.2") == Verdict.keep()

    def test_message_reference_invalid_pattern_does_not_match(self, classifier, mock_repository):
        mock_repository.commits_in_range.return_value = [CommitInfo("c1", "fix c++ build", "other")]
        assert classifier.classify("fix(") == Verdict.keep()

    def test_upstream_gone(self, classifier, mock_repository):
        mock_repository.is_upstream_gone.return_value = True
        verdict = classifier.classify("feature/a")
        assert verdict.describe("main") == "Upstream branch deleted"


class TestClassifierStaleness:
    """Test the stale threshold boundary."""

    def _classify_at_age(self, mock_repository, mock_config, days):
        mock_repository.last_commit_timestamp.return_value = NOW - days * 86400
        return BranchClassifier(mock_repository, mock_config, "main", now=lambda: NOW).classify("old/unused")

    def test_exactly_threshold_is_not_stale(self, mock_repository, mock_config):
        assert self._classify_at_age(mock_repository, mock_config, 90) == Verdict.keep()

    def test_one_day_past_threshold_is_stale(self, mock_repository, mock_config):
        verdict = self._classify_at_age(mock_repository, mock_config, 91)
        assert verdict == Verdict.delete(DeletionReason.STALE, days=91)

    def test_stale_description(self, mock_repository, mock_config):
        verdict = self._classify_at_age(mock_repository, mock_config, 120)
        assert verdict.describe("main") == "Stale branch (120 days old)"

    def test_custom_threshold(self, mock_repository, mock_config):
        mock_config['stale_days'] = 30
        assert self._classify_at_age(mock_repository, mock_config, 31).reason == DeletionReason.STALE

    def test_missing_timestamp_keeps_branch(self, classifier, mock_repository):
        mock_repository.last_commit_timestamp.side_effect = GitOperationError("last_commit_timestamp")
        assert classifier.classify("feature/a") == Verdict.keep()


class TestClassifierFailureSemantics:
    """Test that failing queries fall through to the next method."""

    def test_merge_base_failure_falls_through(self, classifier, mock_repository):
        mock_repository.merge_base.side_effect = GitOperationError("merge_base")
        mock_repository.is_upstream_gone.return_value = True

        verdict = classifier.classify("feature/a")

        assert verdict.reason == DeletionReason.UPSTREAM_GONE

    def test_merged_query_failure_falls_through(self, classifier, mock_repository):
        mock_repository.merged_branches.side_effect = GitOperationError("branch")
        mock_repository.diff_paths.return_value = []
        assert classifier.classify("feature/a").reason == DeletionReason.EMPTY_DIFF

    def test_idempotent(self, classifier, mock_repository):
        mock_repository.commits_in_range.return_value = [CommitInfo("c1", "Squashed", "patch333")]
        assert classifier.classify("feature/a") == classifier.classify("feature/a")

    def test_classify_all_reports_progress(self, classifier):
        calls = []
        results = list(
            classifier.classify_all(["a", "b"], on_progress=lambda *args: calls.append(args))
        )
        assert [branch for branch, _ in results] == ["a", "b"]
        assert calls == [(1, 2, "a"), (2, 2, "b")]

    def test_detection_stats(self, classifier, mock_repository):
        assert classifier.get_detection_stats() == "No deletable branches detected"
        mock_repository.diff_paths.return_value = []
        classifier.classify("feature/a")
        assert classifier.get_detection_stats() == "Verdicts by method: empty_diff: 1"


class TestClassifierOnRealRepository:
    """End-to-end detection scenarios on real repositories."""

    def _classify(self, repo, config, branch):
        repository = GitRepository(repo.working_dir)
        try:
            return BranchClassifier(repository, config, "main").classify(branch)
        finally:
            repository.close()

    def test_identical_branch_has_no_new_commits(self, git_repo, mock_config):
        git_repo.create_head("feature/x")
        verdict = self._classify(git_repo, mock_config, "feature/x")
        assert verdict.reason == DeletionReason.NO_NEW_COMMITS

    def test_merged_branch_with_upstream(self, remote_repo, mock_config, make_commit):
        remote_repo.git.checkout("-b", "feature/merged")
        make_commit(remote_repo, "merged.txt", "merged\n")
        remote_repo.git.push("-u", "origin", "feature/merged")
        remote_repo.git.checkout("main")
        remote_repo.git.merge("--no-ff", "-m", "Merge branch 'feature/merged'", "feature/merged")

        verdict = self._classify(remote_repo, mock_config, "feature/merged")

        # The merge message also references the branch; standard merge wins
        assert verdict.reason == DeletionReason.MERGED_STANDARD

    def test_reverted_branch_is_empty(self, git_repo, mock_config, make_commit):
        git_repo.git.checkout("-b", "feature/revert")
        make_commit(git_repo, "temp.txt", "temporary\n")
        git_repo.git.revert("--no-edit", "HEAD")
        git_repo.git.checkout("main")

        verdict = self._classify(git_repo, mock_config, "feature/revert")

        assert verdict.reason == DeletionReason.EMPTY_DIFF

    def test_squash_merge_tree_match(self, git_repo, mock_config, make_commit):
        git_repo.git.checkout("-b", "feature/squash-tree")
        make_commit(git_repo, "a.txt", "one\n")
        make_commit(git_repo, "a.txt", "one\ntwo\n")
        git_repo.git.checkout("main")
        git_repo.git.merge("--squash", "feature/squash-tree")
        git_repo.git.commit("-m", "Add a.txt")

        verdict = self._classify(git_repo, mock_config, "feature/squash-tree")

        assert verdict.reason == DeletionReason.SQUASH_TREE_MATCH

    def test_squash_merge_patch_match(self, git_repo, mock_config, make_commit):
        git_repo.git.checkout("-b", "feature/squash-patch")
        make_commit(git_repo, "b.txt", "patch content\n")
        git_repo.git.checkout("main")
        make_commit(git_repo, "other.txt", "unrelated\n")
        git_repo.git.merge("--squash", "feature/squash-patch")
        git_repo.git.commit("-m", "Add b.txt")

        verdict = self._classify(git_repo, mock_config, "feature/squash-patch")

        assert verdict.reason == DeletionReason.SQUASH_PATCH_MATCH

    def test_squash_merge_content_match(self, git_repo, mock_config, make_commit):
        git_repo.git.checkout("-b", "feature/content")
        make_commit(git_repo, "README.md", "# Test Repository\nfeature line\n")
        git_repo.git.checkout("main")
        (Path(git_repo.working_dir) / "README.md").write_text("# Test Repository\nfeature line\n")
        (Path(git_repo.working_dir) / "extra.txt").write_text("extra\n")
        git_repo.index.add(["README.md", "extra.txt"])
        git_repo.index.commit("Integrate work")

        verdict = self._classify(git_repo, mock_config, "feature/content")

        assert verdict.reason == DeletionReason.SQUASH_CONTENT_MATCH

    def test_squash_merge_message_reference(self, git_repo, mock_config, make_commit):
        git_repo.git.checkout("-b", "feature/msg")
        make_commit(git_repo, "msg.txt", "branch content\n")
        git_repo.git.checkout("main")
        make_commit(git_repo, "ported.txt", "rewritten\n", message="Port changes from feature/msg")

        verdict = self._classify(git_repo, mock_config, "feature/msg")

        assert verdict.reason == DeletionReason.SQUASH_MESSAGE_REFERENCE

    def test_upstream_gone(self, remote_repo, mock_config, make_commit):
        remote_repo.git.checkout("-b", "feature/gone")
        make_commit(remote_repo, "gone.txt", "gone\n")
        remote_repo.git.push("-u", "origin", "feature/gone")
        remote_repo.git.push("origin", "--delete", "feature/gone")
        remote_repo.git.checkout("main")

        verdict = self._classify(remote_repo, mock_config, "feature/gone")

        assert verdict.reason == DeletionReason.UPSTREAM_GONE

    def test_branch_tracking_local_trunk_is_kept(self, git_repo, mock_config, make_commit):
        git_repo.git.checkout("-b", "feature/wip", "--track", "main")
        make_commit(git_repo, "wip.txt", "wip\n")
        git_repo.git.checkout("main")

        assert self._classify(git_repo, mock_config, "feature/wip") == Verdict.keep()

    def test_stale_branch(self, git_repo, mock_config, make_commit):
        git_repo.git.checkout("-b", "old/unused")
        make_commit(git_repo, "old.txt", "old\n", age_days=120)
        git_repo.git.checkout("main")

        verdict = self._classify(git_repo, mock_config, "old/unused")

        assert verdict.describe("main") == "Stale branch (120 days old)"

    def test_active_branch_is_kept(self, git_repo, mock_config, make_commit):
        git_repo.git.checkout("-b", "feature/active")
        make_commit(git_repo, "active.txt", "work in progress\n")
        git_repo.git.checkout("main")

        assert self._classify(git_repo, mock_config, "feature/active") == Verdict.keep()

    def test_probe_commits_are_not_referenced(self, git_repo, mock_config, make_commit):
        git_repo.git.checkout("-b", "feature/active")
        make_commit(git_repo, "active.txt", "work in progress\n")
        git_repo.git.checkout("main")
        refs_before = sorted((ref.path, ref.commit.hexsha) for ref in git_repo.refs)

        first = self._classify(git_repo, mock_config, "feature/active")
        second = self._classify(git_repo, mock_config, "feature/active")

        assert first == second
        assert sorted((ref.path, ref.commit.hexsha) for ref in git_repo.refs) == refs_before
