"""hero add -- stage files."""

from __future__ import annotations

from pathlib import Path

import click
from rich.markup import escape


@click.command()
@click.argument("paths", nargs=-1, required=True, type=click.Path(path_type=Path))
@click.pass_context
def add(ctx: click.Context, paths: tuple[Path, ...]) -> None:
    """Stage PATHS.  Directories are added recursively.

    If any file cannot be staged the whole index is emptied.
    """
    from herovc.cli import _repo_session

    with _repo_session(ctx) as (repo, console):
        staged = repo.add([p.absolute() for p in paths])
        for path, digest in staged.items():
            console.print(f"  [yellow]{digest[:8]}[/yellow] {escape(path)}", highlight=False)
        console.print(f"All files added to index ({len(staged)}).")
