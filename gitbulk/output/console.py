# gitbulk Console Output
# Rich-based console output and the engine event reporter

from pathlib import Path
from typing import Optional

from rich.console import Console as RichConsole
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from gitbulk.github.cloner import CloneResult, CloneStatus, CloneSummary
from gitbulk.sync.events import EventKind, SyncEvent
from gitbulk.sync.inspector import RepositoryState
from gitbulk.sync.locator import RepositoryHandle
from gitbulk.sync.outcome import OperationOutcome, OutcomeStatus, RunSummary


class Console:
    """
    Console output manager using Rich.

    Implements the engine's reporter interface through report().
    """

    def __init__(self, *, verbose: bool = False, colored: bool = True):
        """
        Initialize console.

        Args:
            verbose: Enable verbose output.
            colored: Enable colored output.
        """
        self.verbose = verbose
        self._console = RichConsole(no_color=not colored, highlight=False)

    def print(self, *args, **kwargs) -> None:
        """Print to console."""
        self._console.print(*args, **kwargs)

    def print_error(self, message: str) -> None:
        """Print error message."""
        self._console.print(f"[red]Error:[/red] {message}")

    def print_warning(self, message: str) -> None:
        """Print warning message."""
        self._console.print(f"[yellow]Warning:[/yellow] {message}")

    def print_success(self, message: str) -> None:
        """Print success message."""
        self._console.print(f"[green]{message}[/green]")

    def print_info(self, message: str) -> None:
        """Print info message."""
        self._console.print(f"[blue]{message}[/blue]")

    def print_run_header(self, title: str, root: Path, operation: str, max_depth: int) -> None:
        """Print the banner shown before a run."""
        self._console.print(
            Panel(
                f"Root path: {escape(str(root))}\nOperation: {operation}\nMax depth: {max_depth}",
                title=title,
                border_style="cyan",
            )
        )

    def report(self, event: SyncEvent) -> None:
        """
        Render an engine event.

        Args:
            event: Event emitted by the sync engine.
        """
        path = escape(str(event.path)) if event.path is not None else ""
        message = escape(event.message)

        if event.kind == EventKind.RUN_STARTED:
            self._console.print("[blue]Searching for git repositories...[/blue]\n")
        elif event.kind == EventKind.REPO_STARTED:
            self._console.print(f"[yellow]📂 {path}[/yellow]")
        elif event.kind == EventKind.REPO_STATE:
            if self.verbose:
                self._console.print(f"  [dim]ℹ {message}[/dim]")
        elif event.kind in (EventKind.DEPTH_LIMIT, EventKind.UNREADABLE):
            self._console.print(f"[yellow]⚠[/yellow] {message}")
        elif event.kind == EventKind.STASH_CREATED:
            self._console.print("  [blue]💾 Stashed uncommitted changes[/blue]")
            if self.verbose:
                self._console.print(f"    [dim]{message}[/dim]")
        elif event.kind == EventKind.STASH_RESTORED:
            self._console.print("  [blue]Stashed changes restored[/blue]")
        elif event.kind == EventKind.STASH_CONFLICT:
            self._console.print("  [yellow]⚠ Could not restore stash, it may conflict with the new state[/yellow]")
            self._console.print("    [dim]→ Use 'git stash list' and 'git stash pop' manually[/dim]")
        elif event.kind == EventKind.STASH_PRESERVED:
            self._console.print("  [dim]→ Stashed changes preserved, use 'git stash pop' to restore[/dim]")
        elif event.kind == EventKind.OUTCOME and event.outcome is not None:
            self._print_outcome(event.outcome)
        elif event.kind == EventKind.RUN_FINISHED and event.summary is not None:
            self.print_summary(event.summary, root=event.path)

    def _print_outcome(self, outcome: OperationOutcome) -> None:
        """Print the one-line result for a repository."""
        message = escape(outcome.message)
        if outcome.status == OutcomeStatus.SUCCESS:
            if outcome.warning:
                self._console.print(f"  [yellow]✓[/yellow] {message} [yellow](stash needs manual restore)[/yellow]")
            else:
                self._console.print(f"  [green]✓[/green] {message}")
        elif outcome.status == OutcomeStatus.SKIPPED:
            self._console.print(f"  [dim]○ {message}[/dim]")
        else:
            self._console.print(f"  [red]✗[/red] {message}")
        self._console.print()

    def print_summary(self, summary: RunSummary, *, root: Optional[Path] = None) -> None:
        """
        Print run summary.

        Args:
            summary: Summary of the finished run.
            root: Root path of the run, mentioned when nothing was found.
        """
        lines = [
            f"Total repositories found: [cyan]{summary.total}[/cyan]",
            f"Successfully processed: [green]{summary.success}[/green]",
            f"Skipped: [yellow]{summary.skipped}[/yellow]",
            f"Errors: [red]{summary.error}[/red]",
        ]
        if summary.warnings:
            lines.append(f"Stash restore warnings: [yellow]{summary.warnings}[/yellow]")

        preserved = summary.preserved_stashes
        if preserved:
            lines.append("")
            lines.append("[bold]Stashes kept for manual recovery:[/bold]")
            for outcome in preserved:
                lines.append(f"  • {escape(str(outcome.repo))}")

        lines.append("")
        if summary.total == 0:
            where = f" in: {escape(str(root))}" if root is not None else ""
            lines.append(f"[yellow]No git repositories found{where}[/yellow]")
            border = "yellow"
        elif summary.has_errors:
            lines.append("[yellow]Some repositories had errors. Check the output above.[/yellow]")
            border = "red"
        else:
            lines.append("[green]All repositories processed successfully![/green]")
            border = "yellow" if summary.warnings else "green"

        self._console.print(Panel("\n".join(lines), title="Summary", border_style=border))

    def print_repositories(self, rows: list[tuple[RepositoryHandle, RepositoryState]], root: Path) -> None:
        """
        Print a table of discovered repositories and their state.

        Args:
            rows: Repository handles with their inspected state.
            root: Root of the walk, used to shorten paths.
        """
        if not rows:
            self._console.print(f"[dim]No git repositories found in: {escape(str(root))}[/dim]")
            return

        table = Table(show_header=True, header_style="bold")
        table.add_column("Repository", style="cyan")
        table.add_column("Branch")
        table.add_column("Upstream", style="dim")
        table.add_column("Ahead/Behind", justify="center")
        table.add_column("Working tree", justify="center")
        table.add_column("Remotes", style="dim")

        for handle, state in rows:
            try:
                name = str(handle.path.relative_to(root)) or "."
            except ValueError:
                name = str(handle.path)

            branch = state.current_branch or "[yellow](detached)[/yellow]"
            upstream = state.upstream or "—"
            if state.is_up_to_date:
                ahead_behind = "[green]up to date[/green]"
            elif state.is_diverged:
                ahead_behind = f"[red]↑{state.ahead} ↓{state.behind} diverged[/red]"
            elif state.has_upstream:
                ahead_behind = f"↑{state.ahead} ↓{state.behind}"
            else:
                ahead_behind = "[dim]—[/dim]"
            tree = "[yellow]dirty[/yellow]" if state.is_dirty else "[green]clean[/green]"
            remotes = ", ".join(state.remotes) or "[red]none[/red]"

            table.add_row(escape(name), branch, upstream, ahead_behind, tree, remotes)

        self._console.print(table)
        self._console.print(f"[dim]{len(rows)} repositories[/dim]")

    def print_clone_result(self, result: CloneResult) -> None:
        """Print the result of cloning one repository."""
        name = escape(result.repo.name)
        tags = ""
        if result.repo.fork:
            tags += " [yellow](fork)[/yellow]"
        if result.repo.private:
            tags += " [magenta](private)[/magenta]"

        icons = {
            CloneStatus.CLONED: "[green]✓[/green]",
            CloneStatus.UPDATED: "[green]↓[/green]",
            CloneStatus.EXISTS: "[dim]○[/dim]",
            CloneStatus.DRY_RUN: "[magenta]○[/magenta]",
            CloneStatus.FAILED: "[red]✗[/red]",
        }
        icon = icons.get(result.status, "?")
        self._console.print(f"{icon} [cyan]{name}[/cyan]{tags} - {escape(result.message)}")

    def print_clone_summary(self, summary: CloneSummary, *, dry_run: bool = False) -> None:
        """Print clone run summary."""
        status_text = "Dry run completed" if dry_run else "Clone completed"
        body = (
            f"Repositories: {summary.total}\n"
            f"Cloned: {summary.cloned}, updated: {summary.updated}, "
            f"skipped: {summary.skipped}, failed: {summary.failed}"
        )
        if summary.success:
            self._console.print(Panel(f"[green]{status_text}[/green]\n{body}", title="Summary", border_style="green"))
        else:
            self._console.print(
                Panel(f"[red]{status_text} with errors[/red]\n{body}", title="Summary", border_style="red")
            )

    def print_config_summary(self, config_path: str, exists: bool) -> None:
        """Print configuration summary."""
        state = "[green]found[/green]" if exists else "[yellow]not found, using defaults[/yellow]"
        self._console.print(
            Panel(
                f"Config: {escape(config_path)}\nStatus: {state}",
                title="gitbulk Configuration",
                border_style="blue",
            )
        )

    def confirm(self, message: str, default: bool = False) -> bool:
        """
        Ask for confirmation.

        Args:
            message: Confirmation message.
            default: Default value if user just presses enter.

        Returns:
            True if confirmed.
        """
        suffix = " [Y/n]" if default else " [y/N]"
        response = self._console.input(f"{message}{escape(suffix)}: ").strip().lower()

        if not response:
            return default

        return response in ("y", "yes")


def create_console(*, verbose: bool = False, colored: bool = True) -> Console:
    """
    Create a console instance.

    Args:
        verbose: Enable verbose output.
        colored: Enable colored output.

    Returns:
        Console instance.
    """
    return Console(verbose=verbose, colored=colored)
