"""Core functionality for git-cleanup"""

from contextlib import nullcontext
from typing import Callable, List, Optional, Union

from rich.console import Console
from rich.markup import escape
from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn

from git_cleanup.config import Config
from git_cleanup.exceptions import GitOperationError
from git_cleanup.formatters import format_deletion_items
from git_cleanup.logging_config import get_logger
from git_cleanup.services.branch_enumerator import enumerate_candidates
from git_cleanup.services.deletion_service import DeletionResult, DeletionService
from git_cleanup.services.display_service import DisplayService
from git_cleanup.services.git import BranchClassifier, GitRepository
from git_cleanup.services.report_service import BranchReport, ReportEntry

logger = get_logger(__name__)


class BranchCleanup:
    """Main class for analyzing and deleting redundant local branches."""

    def __init__(
        self,
        repo_path: str,
        config: Union[Config, dict],
        console: Optional[Console] = None,
        now: Optional[Callable[[], float]] = None,
    ):
        """Initialize BranchCleanup.

        Args:
            repo_path: Path inside the git repository
            config: Configuration dict or Config object
            console: Rich console for user-facing output
            now: Clock used for staleness (unix seconds)

        Raises:
            NotInRepositoryError: If repo_path is not inside a git repository
        """
        if isinstance(config, dict):
            config = Config.from_dict(config)
        self.config = config
        self.console = console or Console()
        self.dry_run = config.dry_run
        self.force_mode = config.force

        self.repository = GitRepository(repo_path)
        self.main_branch = config.main_branch or self.repository.detect_main_branch()

        self.classifier = BranchClassifier(self.repository, config, self.main_branch, now=now)
        self.deletion_service = DeletionService(self.repository, dry_run=self.dry_run)
        self.display_service = DisplayService(self.console, debug=config.debug)

    def _console_print(self, *args, **kwargs):
        if not self.config.quiet:
            self.console.print(*args, **kwargs)

    def prepare_repository(self) -> None:
        """Sync with remotes and check out the trunk. Best effort: failures only warn."""
        if self.config.fetch and self.repository.has_remotes():
            self._console_print("[blue]🔄 Syncing with remote...[/blue]")
            try:
                self.repository.sync_with_remote()
            except GitOperationError as e:
                logger.warning(f"Could not sync with remote: {e}")

        self._console_print(f"[blue]⏩ Checking out {escape(self.main_branch)} branch...[/blue]")
        try:
            self.repository.checkout(self.main_branch)
        except GitOperationError as e:
            logger.warning(f"Could not check out {self.main_branch}: {e}")

    def get_candidates(self) -> List[str]:
        return enumerate_candidates(
            self.repository.list_local_branches(),
            self.main_branch,
            include=self.config.include_pattern,
            exclude=self.config.exclude_pattern,
        )

    def analyze(self, show_progress: bool = True) -> BranchReport:
        """Classify every candidate branch and aggregate the verdicts."""
        candidates = self.get_candidates()
        self._console_print("[blue]🔎 Analyzing branches...[/blue]")

        show_progress = show_progress and not self.config.quiet and bool(candidates)
        progress_context = (
            Progress(
                TextColumn("[blue]Analyzing"),
                BarColumn(),
                TaskProgressColumn(),
                TextColumn("{task.description}"),
                console=self.console,
                transient=True,
            )
            if show_progress
            else nullcontext()
        )

        with progress_context as progress:
            task = progress.add_task("", total=len(candidates)) if progress is not None else None

            def on_progress(position: int, total: int, branch: str) -> None:
                if progress is not None:
                    progress.update(task, completed=position - 1, description=escape(branch))

            report = BranchReport.from_verdicts(
                self.main_branch, self.classifier.classify_all(candidates, on_progress)
            )
            if progress is not None:
                progress.update(task, completed=len(candidates))

        if self.config.debug:
            logger.debug(self.classifier.get_detection_stats())
        return report

    def delete(self, entries: List[ReportEntry]) -> DeletionResult:
        pairs = [(entry.branch, entry.reason) for entry in entries]
        return self.deletion_service.delete_branches(pairs)

    def _choose_entries(self, report: BranchReport) -> Optional[List[ReportEntry]]:
        """Prompt until the user picks all, some, or cancels (None)."""
        action_text = "Simulate deletion of" if self.dry_run else "Delete"
        self.console.print("\n[yellow]❓ Choose action:[/yellow]")
        self.console.print(f"[green]a[/green] - {action_text} all branches")
        self.console.print(f"[green]1-{len(report)}[/green] - Select specific branches (space-separated)")
        self.console.print("[red]c[/red] - Cancel operation")

        while True:
            choice = self.console.input("Your choice: ").strip()
            if choice.lower() == "a":
                return report.entries
            if choice.lower() == "c":
                return None
            try:
                return report.select(choice)
            except ValueError as e:
                self.console.print(f"[red]⚠️ {escape(str(e))}[/red]")

    def run(self) -> int:
        """Full cleanup flow: prepare, analyze, display, select, delete. Returns an exit code."""
        self.prepare_repository()
        report = self.analyze()
        self.display_service.display_report(report)

        if self.dry_run:
            self.console.print("\n🏜️ [yellow]Dry run, no changes will be made[/yellow]")

        if not len(report):
            self.console.print("\n[green]🎉 No branches need deletion![/green]")
            return 0

        if self.force_mode:
            verb = "Would delete" if self.dry_run else "Deleting"
            self.console.print(f"\n[red]{verb} all branches...[/red]")
            entries = report.entries
        else:
            entries = self._choose_entries(report)
            if entries is None:
                self.console.print("[red]🚫 Operation cancelled[/red]")
                return 0
            if not entries:
                return 0
            logger.debug("Selected for deletion:\n" + format_deletion_items(
                (entry.branch, entry.reason) for entry in entries
            ))

        result = self.delete(entries)
        self.display_service.display_result(result)
        return 0

    def close(self) -> None:
        self.repository.close()

