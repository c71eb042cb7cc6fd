"""hero init -- create a repository."""

from __future__ import annotations

import click

from herovc.cli.formatting import format_error, get_console, get_error_console
from herovc.exceptions import HeroError


@click.command()
@click.argument("branch_name", required=False)
@click.pass_context
def init(ctx: click.Context, branch_name: str | None) -> None:
    """Create a repository in the working-tree root.

    BRANCH_NAME names the first branch (default: main).  It points at a
    root commit with no files.
    """
    from herovc.cli import _root
    from herovc.repo import Repository

    console = get_console()
    try:
        with Repository.init(_root(ctx), branch=branch_name) as repo:
            console.print(
                f"Initialized empty repository in [bold]{repo.layout.repo_dir}[/bold] "
                f"on branch [green]{repo.current_branch}[/green]",
                highlight=False,
                soft_wrap=True,
            )
    except HeroError as e:
        format_error(str(e), get_error_console())
        raise SystemExit(e.exit_code) from None
