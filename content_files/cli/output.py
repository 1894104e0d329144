"""Rich-based terminal output for the content-files commands.

Messages, spinners, rule tables and run summaries go through OutputHandler;
verbosity gates info and debug lines, --no-color disables styling.
"""

from contextlib import contextmanager
from typing import Iterator, List, Sequence

from rich.console import Console
from rich.live import Live
from rich.spinner import Spinner
from rich.table import Table
from rich.text import Text

from .models import RunSummary


class OutputHandler:
    """Writes user-facing output to a Rich console.

    Provides methods for displaying messages, spinners, and run summaries
    with color coding and verbosity level control. Log records go to
    stderr through the logging configuration in main.py; this class only
    writes user-facing output.

    Attributes:
        verbosity: Verbosity level (0=summary, 1=info, 2=debug)
        console: Rich Console instance for output

    Example:
        >>> handler = OutputHandler(verbosity=1, no_color=False)
        >>> handler.success("Files written")
        >>> with handler.spinner("Fetching objects..."):
        ...     snapshot = client.fetch()
    """

    def __init__(self, verbosity: int = 0, no_color: bool = False, console: Console = None):
        """Initialize output handler.

        Args:
            verbosity: Verbosity level (0=summary, 1=info, 2=debug)
            no_color: Disable color output if True
            console: Optional Rich console (for testing)
        """
        self.verbosity = verbosity
        self.console = console or Console(
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
        """Display message without formatting."""
        self.console.print(message)

    @contextmanager
    def spinner(self, message: str) -> Iterator[None]:
        """Show a transient spinner while the block runs.

        Example:
            >>> with handler.spinner("Fetching objects..."):
            ...     pass
        """
        spinner = Spinner("dots", text=message)
        with Live(spinner, console=self.console, refresh_per_second=10, transient=True):
            yield

    def print_rules(self, lines: Sequence[str]) -> None:
        """Display the configured rules as a table."""
        table = Table(title="Export rules", show_lines=False)
        table.add_column("#", justify="right", style="dim")
        table.add_column("Rule")
        for i, line in enumerate(lines, start=1):
            table.add_row(str(i), Text(line))
        self.console.print(table)

    def print_run_summary(self, summary: RunSummary) -> None:
        """Display run summary with color coding.

        Args:
            summary: Counts of the run's outcomes
        """
        self.console.print("\n[bold]Export Summary:[/bold]")

        if summary.created_count > 0:
            self.console.print(f"  [green]+[/green] Written: {summary.created_count} file(s)")

        if summary.deleted_count > 0:
            self.console.print(f"  [red]-[/red] Deleted: {summary.deleted_count} stale file(s)")

        if summary.skipped_object_count > 0:
            self.console.print(
                f"  [dim]─[/dim] Skipped: {summary.skipped_object_count} object(s) without a file"
            )

        if summary.failed_object_count > 0:
            self.console.print(
                f"  [red]✗[/red] Failed objects: {summary.failed_object_count}"
            )

        if summary.failed_write_count > 0:
            self.console.print(
                f"  [red]✗[/red] Could not write: {summary.failed_write_count} file(s)"
            )

        if summary.failed_delete_count > 0:
            self.console.print(
                f"  [red]✗[/red] Could not delete: {summary.failed_delete_count} file(s)"
            )

        # Overall status
        if summary.failure_count > 0:
            self.console.print("\n[red]Export completed with failures[/red]")
        elif summary.created_count == 0 and summary.deleted_count == 0:
            self.console.print("\n[yellow]No files to write[/yellow]")
        else:
            self.console.print("\n[green]Export completed successfully[/green]")

    def print_dryrun_summary(
        self,
        to_write: List[str],
        to_delete: List[str],
        failed_objects: List[str],
    ) -> None:
        """Display dry run preview of changes.

        Args:
            to_write: Paths that would be written
            to_delete: Stale paths that would be deleted
            failed_objects: Descriptions of objects that could not be mapped
        """
        self.console.print("\n[bold]Dry Run - Changes Preview:[/bold]")

        if to_write:
            self.console.print(f"\n[green]Would write ({len(to_write)} file(s)):[/green]")
            for path in to_write:
                self.console.print(f"  • {path}")

        if to_delete:
            self.console.print(f"\n[red]Would delete ({len(to_delete)} file(s)):[/red]")
            for path in to_delete:
                self.console.print(f"  • {path}")

        if failed_objects:
            self.console.print(f"\n[red]Could not map ({len(failed_objects)} object(s)):[/red]")
            for description in failed_objects:
                self.console.print(f"  • {description}")

        if not to_write and not to_delete and not failed_objects:
            self.console.print("\n[green]Nothing to write. No changes to apply.[/green]")
