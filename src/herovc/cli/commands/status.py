"""hero status -- show the current position and the index."""

from __future__ import annotations

import click

from herovc.cli.formatting import format_status


@click.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show the attached branch or detached commit, and what is staged."""
    from herovc.cli import _repo_session

    with _repo_session(ctx) as (repo, console):
        format_status(repo.status(), console)
