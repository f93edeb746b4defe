"""Version information for git-cleanup."""

__version__ = "1.0.0"
