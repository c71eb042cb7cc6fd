"""hero branch -- list or create branches."""

from __future__ import annotations

import click
from rich.markup import escape

from herovc.cli.formatting import format_branches


@click.command()
@click.argument("name", required=False)
@click.argument("reference", required=False, default="HEAD")
@click.option("-c", "--checkout", "switch", is_flag=True, help="Check the new branch out.")
@click.option("-f", "--force", is_flag=True, help="Overwrite an existing branch without asking.")
@click.pass_context
def branch(ctx: click.Context, name: str | None, reference: str, switch: bool, force: bool) -> None:
    """List branches, or create NAME at REFERENCE (default: HEAD).

    Creating a branch at a detached HEAD re-attaches HEAD to it.
    """
    from herovc.cli import _repo_session
    from herovc.cli.prompter import ClickPrompter

    with _repo_session(ctx, ClickPrompter(assume=True if force else None)) as (repo, console):
        if name is None:
            format_branches(repo.list_branches(), console)
            return

        info = repo.branch(name, reference, checkout=switch)
        if info is None:
            console.print("Aborted.")
            return
        console.print(
            f"Branch [green]{escape(info.name)}[/green] at [yellow]{info.digest[:8]}[/yellow]"
        )
        if info.is_current:
            console.print(f"HEAD attached to [green]{escape(info.name)}[/green]")
