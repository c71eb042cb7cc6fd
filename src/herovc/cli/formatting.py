"""Rich formatting helpers for the Hero CLI.

Provides functions that format SDK data structures for terminal display.
Rich auto-detects TTY and degrades gracefully when piped (no ANSI codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.table import Table

if TYPE_CHECKING:
    from herovc.models.branch import BranchInfo
    from herovc.models.commit import LogEntry
    from herovc.models.merge import MergeResult
    from herovc.operations.history import StatusInfo
    from herovc.operations.navigation import CheckoutResult
    from herovc.repo import CommitResult


def get_console() -> Console:
    """Create a Rich Console that auto-detects TTY for graceful pipe degradation."""
    return Console(stderr=False)


def get_error_console() -> Console:
    """Console on the diagnostic stream."""
    return Console(stderr=True)


def format_error(message: str, console: Console) -> None:
    """Display an error message."""
    console.print(f"[red]Error:[/red] {escape(message)}", highlight=False, soft_wrap=True)


def format_log(entries: list[LogEntry], console: Console) -> None:
    """Display commit history, newest first."""
    for i, entry in enumerate(entries):
        if i > 0:
            console.print()

        decoration = ""
        if entry.branches:
            decoration = f" [green]({escape(', '.join(entry.branches))})[/green]"
        console.print(f"[yellow]commit {entry.digest}[/yellow]{decoration}", soft_wrap=True)
        if entry.merge_parent is not None:
            console.print(
                f"Merge:  {(entry.parent or '')[:8]} {entry.merge_parent[:8]}",
                highlight=False,
            )
        console.print(
            f"Date:   {entry.timestamp.strftime('%Y-%m-%d %H:%M:%S')} UTC",
            highlight=False,
        )
        console.print(f"Files:  {entry.file_count} ({entry.total_size} bytes)", highlight=False)
        console.print()
        console.print(f"    {escape(entry.title)}", highlight=False, soft_wrap=True)
        for line in entry.message.splitlines():
            console.print(f"    {escape(line)}", highlight=False, soft_wrap=True)


def format_log_compact(entries: list[LogEntry], console: Console) -> None:
    """Display commit history as a table."""
    table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
    table.add_column("Hash", style="yellow", width=8)
    table.add_column("Date", style="dim")
    table.add_column("Files", justify="right", style="cyan")
    table.add_column("Title")

    for entry in entries:
        title = escape(entry.title)
        if entry.branches:
            title = f"[green]({escape(', '.join(entry.branches))})[/green] {title}"
        table.add_row(
            entry.digest[:8],
            entry.timestamp.strftime("%Y-%m-%d %H:%M"),
            str(entry.file_count),
            title,
        )

    console.print(table)


def format_status(info: StatusInfo, console: Console) -> None:
    """Display repository status."""
    if info.is_detached:
        console.print(
            f"HEAD detached at [yellow]{info.head_digest[:8]}[/yellow] "
            f"(last on branch [green]{escape(info.branch_name)}[/green])"
        )
    else:
        console.print(
            f"On branch [green]{escape(info.branch_name)}[/green]  "
            f"([yellow]{info.head_digest[:8]}[/yellow])"
        )

    if not info.staged:
        console.print("[dim]Nothing staged.[/dim]")
        return

    console.print()
    console.print("[bold]Staged:[/bold]")
    for path, digest in info.staged.items():
        console.print(f"  [yellow]{digest[:8]}[/yellow] {escape(path)}", highlight=False)


def format_branches(branches: list[BranchInfo], console: Console) -> None:
    """Display branches, marking the attached one."""
    for info in branches:
        if info.is_current:
            console.print(
                f"* [green]{escape(info.name)}[/green] [yellow]{info.digest[:8]}[/yellow]",
                highlight=False,
            )
        else:
            console.print(
                f"  {escape(info.name)} [yellow]{info.digest[:8]}[/yellow]",
                highlight=False,
            )


def format_commit_result(result: CommitResult, console: Console) -> None:
    if result.branch is None:
        console.print(f"Committed [yellow]{result.digest}[/yellow] (detached)", soft_wrap=True)
    else:
        console.print(
            f"[[green]{escape(result.branch)}[/green] [yellow]{result.digest[:8]}[/yellow]] "
            f"{escape(result.commit.title)}",
            highlight=False,
        )
    console.print(
        f" {result.commit.count} file(s), {result.commit.total_size} bytes",
        highlight=False,
    )


def format_checkout_result(result: CheckoutResult, label: str, console: Console) -> None:
    if result.is_detached:
        console.print(f"HEAD detached at [yellow]{result.digest[:8]}[/yellow]")
    else:
        console.print(
            f"Switched to branch [green]{escape(label)}[/green] "
            f"([yellow]{result.digest[:8]}[/yellow])"
        )
    console.print(
        f" {len(result.written)} written, {len(result.skipped)} unchanged, "
        f"{len(result.removed)} removed",
        highlight=False,
    )


def format_merge_result(result: MergeResult, console: Console) -> None:
    if result.fast_forward:
        console.print(f"Fast-forward to [yellow]{result.digest[:8]}[/yellow]")
        return
    console.print(f"Merge commit [yellow]{result.digest[:8]}[/yellow]")
    for path, rule in result.resolutions.items():
        console.print(f"  [cyan]{rule.value:<9}[/cyan] {escape(path)}", highlight=False)
