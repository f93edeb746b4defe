"""Services for git-cleanup."""
