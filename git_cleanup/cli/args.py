"""Command-line argument parsing for git-cleanup."""

import argparse
from git_cleanup.__version__ import __version__
from git_cleanup.config import DEFAULT_STALE_DAYS


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="git-cleanup",
        description="A tool to safely clean up local git branches",
        epilog="Examples:\n"
        "  git-cleanup --dry-run                  # Show what branches would be deleted\n"
        "  git-cleanup --include=feature          # Only process feature branches\n"
        "  git-cleanup --stale-days=30 --force    # Delete all branches older than 30 days",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"git-cleanup {__version__}")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what branches would be deleted without actually deleting them",
    )
    parser.add_argument(
        "--debug", action="store_true", help="Show additional debug information during branch analysis"
    )
    parser.add_argument(
        "--force", action="store_true", help="Skip confirmation and delete all branches automatically"
    )
    # Kept as a string: a non-numeric value is a configuration error (exit 1)
    parser.add_argument(
        "--stale-days",
        default=str(DEFAULT_STALE_DAYS),
        metavar="N",
        help=f"Set the threshold for stale branches (default: {DEFAULT_STALE_DAYS} days)",
    )
    parser.add_argument(
        "--include", metavar="PATTERN", help="Only process branches matching the given pattern"
    )
    parser.add_argument("--exclude", metavar="PATTERN", help="Skip branches matching the given pattern")
    parser.add_argument(
        "--quiet", action="store_true", help="Reduce output during branch analysis"
    )
    parser.add_argument(
        "--main-branch",
        metavar="NAME",
        help="Main branch name (default: detected from origin/HEAD, then main/master)",
    )
    parser.add_argument(
        "--no-fetch", action="store_true", help="Skip 'git fetch --all --prune' before analysis"
    )

    return parser.parse_args(argv)
