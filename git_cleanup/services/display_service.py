"""Display service for branch reports and deletion results"""
from typing import List, Optional, Tuple

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from git_cleanup.constants import CLI_COLORS, REPORT_COLUMNS, SYMBOL_DELETED, SYMBOL_FAILED, SYMBOL_KEEP, SYMBOL_WARNING
from git_cleanup.formatters import format_deletion_line, format_summary
from git_cleanup.logging_config import get_logger
from git_cleanup.services.deletion_service import DeletionResult
from git_cleanup.services.report_service import BranchReport

logger = get_logger(__name__)


class DisplayService:
    def __init__(self, console: Optional[Console] = None, debug: bool = False):
        self.console = console or Console()
        self.debug_mode = debug

    def display_report(self, report: BranchReport) -> None:
        """Print the delete-report table and the keep-list."""
        self.console.print("\n[green]🚀 Branch Cleanup Report[/green]")

        table = Table(title="Branches to delete", title_style="yellow", show_edge=True)
        for col in REPORT_COLUMNS:
            table.add_column(col.label, min_width=col.width or None)

        for entry in report.entries:
            table.add_row(
                f"[{CLI_COLORS['index']}]{entry.index}[/{CLI_COLORS['index']}]",
                escape(entry.branch),
                f"[{CLI_COLORS['reason']}]{escape(entry.reason)}[/{CLI_COLORS['reason']}]",
            )

        self.console.print(table)
        self.console.print(f"\n[green]Total branches to delete: {len(report)}[/green]")

        self.console.print("\n[blue]Branches to keep:[/blue]")
        for branch in report.keep:
            self.console.print(f"[{CLI_COLORS['keep']}]{SYMBOL_KEEP} {escape(branch)}[/{CLI_COLORS['keep']}]")

    def display_vetoed(self, vetoed: List[Tuple[str, str]]) -> None:
        for branch, why in vetoed:
            self.console.print(
                f"[{CLI_COLORS['warning']}]{SYMBOL_WARNING} WARNING: {escape(branch)} {why} and won't be deleted[/{CLI_COLORS['warning']}]"
            )

    def display_result(self, result: DeletionResult) -> None:
        """Print per-branch outcomes followed by the batch summary."""
        for branch, reason in result.deleted:
            self.console.print(
                f"[{CLI_COLORS['deleted']}]{SYMBOL_DELETED} {escape(format_deletion_line(branch, reason, result.dry_run))}[/{CLI_COLORS['deleted']}]"
            )
        for branch, error in result.failed:
            self.console.print(
                f"[{CLI_COLORS['failed']}]{SYMBOL_FAILED} Failed to delete: {escape(branch)} ({escape(error)})[/{CLI_COLORS['failed']}]"
            )

        self.display_vetoed(result.skipped)

        verb = "simulation" if result.dry_run else "completed"
        self.console.print(f"\n[green]🎉 Branch cleanup {verb}![/green]")
        self.console.print(f"[green]{format_summary(result)}[/green]")
        if result.skipped:
            self.console.print(f"[yellow]Skipped {len(result.skipped)} branches to protect unpushed work[/yellow]")
