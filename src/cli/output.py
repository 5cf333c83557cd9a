"""Terminal output handling using Rich library.

This module provides the OutputHandler class for all CLI terminal output.
Uses Rich library for spinners, colored output, tables and formatted text.
Supports verbosity levels and the --no-color flag.
"""

from contextlib import contextmanager
from typing import Iterator, List

from rich.console import Console
from rich.live import Live
from rich.spinner import Spinner
from rich.table import Table

from src.cli.models import RepoStatus
from src.sync_engine.models import ChangedFiles, Conflict, PullCheck, PullResult


class OutputHandler:
    """Handles all terminal output using Rich library.

    Attributes:
        verbosity: Verbosity level (0=summary, 1=info, 2=debug)
        console: Rich Console instance for output

    Example:
        >>> handler = OutputHandler(verbosity=1, no_color=False)
        >>> handler.success("Operation completed")
        >>> with handler.spinner("Pulling..."):
        ...     pass
    """

    def __init__(self, verbosity: int = 0, no_color: bool = False):
        """Initialize output handler.

        Args:
            verbosity: Verbosity level (0=summary, 1=info, 2=debug)
            no_color: Disable color output if True
        """
        self.verbosity = verbosity
        self.console = Console(
            no_color=no_color,
            highlight=False,
        )

    def success(self, message: str) -> None:
        self.console.print(f"[green]✓[/green] {message}")

    def error(self, message: str) -> None:
        self.console.print(f"[red]✗[/red] {message}", style="red")

    def warning(self, message: str) -> None:
        self.console.print(f"[yellow]⚠[/yellow] {message}", style="yellow")

    def info(self, message: str) -> None:
        """Display info message (only if verbosity >= 1)."""
        if self.verbosity >= 1:
            self.console.print(message)

    def debug(self, message: str) -> None:
        """Display debug message (only if verbosity >= 2)."""
        if self.verbosity >= 2:
            self.console.print(f"[dim]{message}[/dim]")

    def print(self, message: str) -> None:
        self.console.print(message)

    @contextmanager
    def spinner(self, message: str) -> Iterator[None]:
        """Display spinner for single operations.

        Yields:
            None

        Example:
            >>> with handler.spinner("Fetching tree..."):
            ...     pass
        """
        if not self.console.is_terminal:
            yield
            return
        spinner = Spinner("dots", text=message)
        with Live(spinner, console=self.console, refresh_per_second=10, transient=True):
            yield

    def print_repo_status(self, project_id: str, status: RepoStatus) -> None:
        if not status.exists_in_db:
            self.console.print(f"Project {project_id}: [yellow]no repository linked[/yellow]")
        elif not status.exists_in_github:
            self.console.print(
                f"Project {project_id}: [red]linked repository no longer exists on GitHub[/red]"
            )
        else:
            self.console.print(
                f"Project {project_id}: linked to [bold]{status.repo.full_name}[/bold] "
                f"({status.repo.html_url})"
            )

    def print_pull_check(self, check: PullCheck) -> None:
        commit = check.latest_commit
        if commit is None:
            self.console.print("[yellow]Remote has no commits[/yellow]")
            return
        headline = commit.message.splitlines()[0] if commit.message else ""
        if check.needs_pull:
            self.console.print(f"[blue]↓[/blue] Remote is at {commit.sha[:7]} ({headline}); pull needed")
        else:
            self.console.print(f"[green]Up to date[/green] with {commit.sha[:7]} ({headline})")

    def print_pull_summary(self, result: PullResult) -> None:
        """Display pull summary with color coding."""
        self.console.print("\n[bold]Pull Summary:[/bold]")

        for path in result.new_files:
            self.debug(f"  new: {path}")
        for path in result.deleted_files:
            self.debug(f"  deleted: {path}")

        if result.new_files:
            self.console.print(f"  [green]+[/green] New: {len(result.new_files)} file(s)")
        if result.deleted_files:
            self.console.print(f"  [red]-[/red] Deleted: {len(result.deleted_files)} file(s)")
        if result.skipped_files:
            self.console.print(f"  [yellow]⊘[/yellow] Skipped: {len(result.skipped_files)} file(s)")
            for path in result.skipped_files:
                self.console.print(f"      {path}")
        if result.conflicts:
            self.console.print(f"  [red]⚡[/red] Conflicts: {len(result.conflicts)} file(s)")

        if result.conflicts:
            self.console.print("\n[red]Pull completed with conflicts[/red]")
            self.print_conflicts(result.conflicts)
        elif not result.new_files and not result.deleted_files:
            self.console.print("\n[green]Already in sync. No changes detected.[/green]")
        else:
            self.console.print("\n[green]Pull completed successfully[/green]")

    def print_conflicts(self, conflicts: List[Conflict]) -> None:
        table = Table(title="Pending conflicts", show_lines=False)
        table.add_column("Path")
        table.add_column("Local", justify="right")
        table.add_column("Incoming", justify="right")
        for conflict in conflicts:
            table.add_row(
                conflict.path,
                f"{len(conflict.local_content.splitlines())} lines",
                f"{len(conflict.incoming_content.splitlines())} lines",
            )
        self.console.print(table)
        self.console.print(
            "Resolve with: sandbox-sync resolve <project> --incoming PATH | --local PATH | --all local|incoming"
        )

    def print_changes(self, changes: ChangedFiles) -> None:
        if not changes.has_changes:
            self.console.print("[green]No local changes[/green]")
            return
        for path in changes.modified:
            self.console.print(f"  [yellow]M[/yellow] {path}")
        for path in changes.created:
            self.console.print(f"  [green]A[/green] {path}")
        for path in changes.deleted:
            self.console.print(f"  [red]D[/red] {path}")
