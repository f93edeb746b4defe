"""Pytest fixtures for git-cleanup tests"""
import logging
import tempfile
import time
from pathlib import Path
from unittest.mock import MagicMock, Mock

import git
import pytest

from git_cleanup.services.git.repository import GitRepository


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def restore_root_logger():
    """Undo handler and level changes made by setup_logging."""
    root = logging.getLogger()
    level, handlers = root.level, root.handlers[:]
    yield root
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


@pytest.fixture
def mock_config():
    """Create a mock configuration dictionary."""
    return {
        'debug': False,
        'quiet': True,
        'stale_days': 90,
        'main_branch': 'main',
        'include_pattern': None,
        'exclude_pattern': None,
        'dry_run': False,
        'force': False,
        'fetch': False,
    }


def _configure_user(repo):
    writer = repo.config_writer()
    writer.set_value("user", "name", "Test User")
    writer.set_value("user", "email", "test@example.com")
    writer.release()


@pytest.fixture
def make_commit():
    """Return a helper that writes a file and commits it on the current branch.

    ``age_days`` backdates both author and committer dates.
    """
    def _make_commit(repo, filename, content, message=None, age_days=None, timestamp=None):
        path = Path(repo.working_dir) / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        repo.index.add([filename])

        if age_days is not None:
            timestamp = int(time.time()) - age_days * 86400 - 60
        date = f"{int(timestamp)} +0000" if timestamp is not None else None
        return repo.index.commit(
            message or f"Update {filename}", author_date=date, commit_date=date
        )

    return _make_commit


@pytest.fixture
def git_repo(temp_dir):
    """Create a real Git repository with one commit on main and no remote."""
    repo_path = temp_dir / "test_repo"
    repo_path.mkdir()

    repo = git.Repo.init(repo_path)
    _configure_user(repo)

    readme = repo_path / "README.md"
    readme.write_text("# Test Repository\n")
    repo.index.add(["README.md"])
    repo.index.commit("Initial commit")

    # Rename master to main if needed
    repo.git.branch('-M', 'main')

    yield repo

    repo.close()


@pytest.fixture
def remote_repo(temp_dir):
    """Create a local repository whose main tracks a bare 'origin' repository."""
    remote_path = temp_dir / "remote.git"
    local_path = temp_dir / "local"
    local_path.mkdir()

    git.Repo.init(remote_path, bare=True)

    repo = git.Repo.init(local_path)
    _configure_user(repo)

    readme = local_path / "README.md"
    readme.write_text("# Test Repository\n")
    repo.index.add(["README.md"])
    repo.index.commit("Initial commit")
    repo.git.branch('-M', 'main')

    repo.create_remote("origin", url=str(remote_path))
    repo.git.push("-u", "origin", "main")

    yield repo

    repo.close()


@pytest.fixture
def mock_repository():
    """Create a mock repository accessor describing an unmerged, recent branch."""
    repository = Mock(spec=GitRepository)
    repository.merge_base.return_value = "base000"
    repository.resolve_ref.return_value = "tip1111"
    repository.upstream_of.return_value = None
    repository.merged_branches.return_value = []
    repository.diff_paths.return_value = ["feature.txt"]
    repository.tree_of.return_value = "tree222"
    repository.is_ancestor.return_value = False
    repository.trees_in_range.return_value = []
    repository.patch_id.return_value = "patch333"
    repository.commits_in_range.return_value = []
    repository.diff_hunks.return_value = "@@ -0,0 +1 @@\n+feature line"
    repository.log_patches.return_value = ""
    repository.is_upstream_gone.return_value = False
    repository.last_commit_timestamp.return_value = 1_700_000_000
    repository.list_local_branches.return_value = ["main", "feature/a"]

    probe = MagicMock()
    probe.__enter__.return_value = "probe444"
    probe.__exit__.return_value = False
    repository.probe_commit.return_value = probe

    return repository
