"""Custom exceptions for git-cleanup"""

from typing import Optional


class GitCleanupError(Exception):
    """Base exception for all git-cleanup errors."""
    pass


class NotInRepositoryError(GitCleanupError):
    """Exception raised when the working directory is not inside a git repository."""

    def __init__(self, path: str, message: Optional[str] = None):
        self.path = path
        self.message = message

        error_msg = f"Not inside a git repository: {path}"
        if message:
            error_msg += f" ({message})"

        super().__init__(error_msg)


class ConfigError(GitCleanupError, ValueError):
    """Exception raised for invalid configuration values."""
    pass


class GitOperationError(GitCleanupError):
    """Exception raised for errors in Git operations."""

    def __init__(self, operation: str, branch: Optional[str] = None, message: Optional[str] = None):
        self.operation = operation
        self.branch = branch
        self.message = message

        error_msg = f"Git operation '{operation}' failed"
        if branch:
            error_msg += f" for branch '{branch}'"
        if message:
            error_msg += f": {message}"

        super().__init__(error_msg)


class BranchNotFoundError(GitOperationError):
    """Exception raised when a branch is not found."""

    def __init__(self, branch: str):
        super().__init__("find_branch", branch, "Branch not found")
