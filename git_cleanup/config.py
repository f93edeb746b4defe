"""Configuration handling for git-cleanup"""

import re
from dataclasses import dataclass, fields
from typing import Optional

from git_cleanup.exceptions import ConfigError

DEFAULT_STALE_DAYS = 90


@dataclass
class Config:
    """Configuration for git-cleanup with validation."""

    # Trunk branch; None means autodetect from origin/HEAD
    main_branch: Optional[str] = None

    # Branch filtering (regular expressions, unanchored search)
    include_pattern: Optional[str] = None
    exclude_pattern: Optional[str] = None

    # Stale branch threshold
    stale_days: int = DEFAULT_STALE_DAYS

    # Execution modes
    dry_run: bool = False
    force: bool = False
    debug: bool = False
    quiet: bool = False
    fetch: bool = True  # Run `git fetch --all --prune` before analysis

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_stale_days()
        self._validate_main_branch()
        self._validate_patterns()

    def _validate_stale_days(self):
        """Validate stale_days is a positive integer."""
        if isinstance(self.stale_days, bool) or not isinstance(self.stale_days, int):
            raise ConfigError(f"stale_days must be an integer, got {self.stale_days!r}")
        if self.stale_days <= 0:
            raise ConfigError(f"stale_days must be positive, got {self.stale_days}")

    def _validate_main_branch(self):
        """Validate main_branch is not blank when given."""
        if self.main_branch is None:
            return
        if not self.main_branch.strip():
            raise ConfigError("main_branch cannot be empty")
        self.main_branch = self.main_branch.strip()

    def _validate_patterns(self):
        """Validate include/exclude patterns compile as regular expressions."""
        for name in ("include_pattern", "exclude_pattern"):
            pattern = getattr(self, name)
            if not pattern:
                setattr(self, name, None)
                continue
            try:
                re.compile(pattern)
            except re.error as e:
                raise ConfigError(f"{name} is not a valid regular expression: {e}") from e

    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def get(self, key: str, default=None):
        """Get config value by key."""
        return getattr(self, key, default)

    @classmethod
    def from_dict(cls, config_dict: dict) -> "Config":
        """Create Config from dictionary, ignoring unknown keys."""
        known_fields = {f.name for f in fields(cls)}
        filtered = {k: v for k, v in config_dict.items() if k in known_fields}
        return cls(**filtered)

    @classmethod
    def from_args(cls, args) -> "Config":
        """Create Config from parsed command-line arguments.

        ``--stale-days`` arrives as a raw string so that a non-numeric value
        is reported as a configuration error rather than an argparse usage error.
        """
        raw_days = args.stale_days
        if not re.fullmatch(r"[0-9]+", str(raw_days)):
            raise ConfigError(f"stale days must be a number, got '{raw_days}'")

        return cls(
            main_branch=args.main_branch,
            include_pattern=args.include,
            exclude_pattern=args.exclude,
            stale_days=int(raw_days),
            dry_run=args.dry_run,
            force=args.force,
            debug=args.debug,
            quiet=args.quiet,
            fetch=not args.no_fetch,
        )
