"""Hero CLI -- terminal interface for the Hero version-control engine.

This module is NEVER imported from herovc/__init__.py.
It is only loaded via the ``hero`` entry point defined in pyproject.toml.
"""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

import click

from herovc.cli.formatting import format_error, get_console, get_error_console
from herovc.exceptions import HeroError

if TYPE_CHECKING:
    from collections.abc import Iterator

    from rich.console import Console

    from herovc.protocols import Prompter
    from herovc.repo import Repository


@click.group()
@click.option(
    "--root",
    default=None,
    envvar="HERO_ROOT",
    type=click.Path(file_okay=False, path_type=Path),
    help="Working-tree root (discovered upward from the current directory if omitted).",
)
@click.option("-v", "--verbose", is_flag=True, help="Log debug detail to stderr.")
@click.version_option(package_name="herovc", prog_name="hero")
@click.pass_context
def cli(ctx: click.Context, root: Path | None, verbose: bool) -> None:
    """Hero: a minimal version-control engine."""
    ctx.ensure_object(dict)
    ctx.obj["root"] = root
    _configure_logging(verbose)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
        force=True,
    )


def _root(ctx: click.Context) -> Path:
    """The --root option, or the current directory."""
    return ctx.obj["root"] or Path.cwd()


def _get_repo(ctx: click.Context, prompter: Prompter | None = None) -> Repository:
    """Open a Repository from Click context.

    With --root the repository must live exactly there; otherwise it is
    discovered upward from the current directory.
    """
    from herovc.cli.prompter import ClickPrompter
    from herovc.repo import Repository

    prompter = prompter or ClickPrompter()
    if ctx.obj["root"] is not None:
        return Repository.open(ctx.obj["root"], prompter=prompter)
    return Repository.discover(prompter=prompter)


@contextmanager
def _repo_session(
    ctx: click.Context,
    prompter: Prompter | None = None,
) -> Iterator[tuple[Repository, Console]]:
    """Context manager that opens a Repository, yields (repo, console), and handles cleanup.

    Ensures the repository is closed on exit and maps Hero errors to their
    exit status.  Commands with special exception handling can catch
    specific errors inside the ``with`` block before this handler runs.
    """
    console = get_console()
    try:
        repo = _get_repo(ctx, prompter)
        try:
            yield repo, console
        finally:
            repo.close()
    except HeroError as e:
        format_error(str(e), get_error_console())
        raise SystemExit(e.exit_code) from None
    except OSError as e:
        format_error(str(e), get_error_console())
        raise SystemExit(1) from None


# Register subcommands after cli group is defined
from herovc.cli.commands.init import init  # noqa: E402
from herovc.cli.commands.add import add  # noqa: E402
from herovc.cli.commands.commit import commit  # noqa: E402
from herovc.cli.commands.log import log  # noqa: E402
from herovc.cli.commands.status import status  # noqa: E402
from herovc.cli.commands.checkout import checkout  # noqa: E402
from herovc.cli.commands.branch import branch  # noqa: E402
from herovc.cli.commands.merge import merge  # noqa: E402
from herovc.cli.commands.repofix import repofix  # noqa: E402

cli.add_command(init)
cli.add_command(add)
cli.add_command(commit)
cli.add_command(log)
cli.add_command(status)
cli.add_command(checkout)
cli.add_command(branch)
cli.add_command(merge)
cli.add_command(repofix)
