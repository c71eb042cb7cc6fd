"""hero commit -- record the staged files."""

from __future__ import annotations

from pathlib import Path

import click

from herovc.cli.formatting import format_commit_result


@click.command()
@click.argument("paths", nargs=-1, type=click.Path(path_type=Path))
@click.option("-a", "--all", "restage", is_flag=True, help="Restage the current commit's files first.")
@click.option("-t", "--title", default=None, help="Commit title (prompted if omitted).")
@click.option("-m", "--message", default=None, help="Commit message.")
@click.pass_context
def commit(
    ctx: click.Context,
    paths: tuple[Path, ...],
    restage: bool,
    title: str | None,
    message: str | None,
) -> None:
    """Commit the index.

    With PATHS, commit exactly those files and keep the rest of the index
    staged.  With -a, restage every file the current commit records.
    """
    from herovc.cli import _repo_session

    if restage and paths:
        raise click.UsageError("-a cannot be combined with PATHS")

    with _repo_session(ctx) as (repo, console):
        if title is None:
            title = click.prompt("Commit title")
            if message is None:
                message = click.prompt("Commit message", default="", show_default=False)
        message = message or ""

        if restage:
            result = repo.commit_all(title, message)
        elif paths:
            result = repo.commit_files([p.absolute() for p in paths], title, message)
        else:
            result = repo.commit(title, message)
        format_commit_result(result, console)
