"""hero log -- show commit history."""

from __future__ import annotations

import click

from herovc.cli.formatting import format_log, format_log_compact


@click.command()
@click.argument("reference", required=False)
@click.option("-n", "--limit", default=None, type=int, help="Maximum number of commits to show.")
@click.option("--oneline", is_flag=True, help="One row per commit.")
@click.pass_context
def log(ctx: click.Context, reference: str | None, limit: int | None, oneline: bool) -> None:
    """Show first-parent history from REFERENCE (default: HEAD) back to the root."""
    from herovc.cli import _repo_session

    with _repo_session(ctx) as (repo, console):
        entries = repo.log(reference, limit=limit)
        if oneline:
            format_log_compact(entries, console)
        else:
            format_log(entries, console)
