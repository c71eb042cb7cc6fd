"""hero repofix -- upgrade an older repository layout."""

from __future__ import annotations

import click

from herovc.cli.formatting import format_error, get_console, get_error_console
from herovc.exceptions import HeroError
from herovc.migrate import VERSIONS


@click.command()
@click.argument("source_version", required=False, type=click.Choice(list(VERSIONS)))
@click.option("--heuristic", is_flag=True, help="Guess the source version from disk.")
@click.pass_context
def repofix(ctx: click.Context, source_version: str | None, heuristic: bool) -> None:
    """Upgrade the repository in the working-tree root to the current layout.

    SOURCE_VERSION is the latest version the repository is compatible
    with.  Pass --heuristic to guess it instead.
    """
    from herovc.cli import _root
    from herovc.migrate import upgrade

    if (source_version is None) == (not heuristic):
        raise click.UsageError("Pass exactly one of SOURCE_VERSION or --heuristic")

    console = get_console()
    try:
        steps = upgrade(_root(ctx), source_version)
    except HeroError as e:
        format_error(str(e), get_error_console())
        raise SystemExit(e.exit_code) from None

    if not steps:
        console.print("Repository is already up to date.")
        return
    for version in steps:
        console.print(f"Upgraded to [bold]{version}[/bold]", highlight=False)
