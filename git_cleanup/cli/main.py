"""Main entry point for git-cleanup."""

import os
import sys

from rich.console import Console
from rich.markup import escape

from git_cleanup.cli.args import parse_args
from git_cleanup.config import Config
from git_cleanup.core import BranchCleanup
from git_cleanup.exceptions import ConfigError, NotInRepositoryError
from git_cleanup.logging_config import setup_logging

console = Console()


def main(argv=None) -> int:
    """Main entry point for the application."""
    parsed_args = parse_args(argv)
    setup_logging(debug=parsed_args.debug, quiet=parsed_args.quiet)

    cleanup = None
    try:
        config = Config.from_args(parsed_args)

        if config.debug:
            console.print("[yellow]Debug mode enabled[/yellow]")
            console.print("[yellow]Configuration:[/yellow]")
            for key, value in config.to_dict().items():
                console.print(f"  {key}: {value}")

        cleanup = BranchCleanup(os.getcwd(), config, console=console)
        return cleanup.run()
    except (NotInRepositoryError, ConfigError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        return 1
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        return 1
    except Exception as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        if parsed_args.debug:
            console.print_exception()
        return 1
    finally:
        if cleanup is not None:
            cleanup.close()


if __name__ == "__main__":
    sys.exit(main())
