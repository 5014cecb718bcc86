"""twig add, commit and rm commands - manage the staging area."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

if TYPE_CHECKING:
    from twig.cli import TwigContext


@click.command()
@click.argument("file")
@click.pass_obj
def add(ctx: TwigContext, file: str) -> None:
    """Stage the current contents of FILE for the next commit.

    Staging a file whose contents match the head commit unstages it instead,
    and cancels a pending removal.
    """
    from twig.errors import TwigError

    try:
        with ctx.open_repository() as repo:
            repo.add(file)
    except TwigError as e:
        ctx.fail(e)


@click.command()
@click.argument("message", required=False, default="")
@click.pass_obj
def commit(ctx: TwigContext, message: str) -> None:
    """Record the staged changes with MESSAGE."""
    from twig.errors import TwigError
    from twig.logging import get_logger

    try:
        with ctx.open_repository() as repo:
            created = repo.commit(message)
            short = created.short_hash(repo.config.commits.short_hash_length)
            get_logger().debug("[%s %s] %s", repo.current_branch, short, message)
    except TwigError as e:
        ctx.fail(e)


@click.command()
@click.argument("file")
@click.pass_obj
def rm(ctx: TwigContext, file: str) -> None:
    """Unstage FILE, and stage its removal if the head commit tracks it.

    A tracked file is also deleted from the working directory.
    """
    from twig.errors import TwigError

    try:
        with ctx.open_repository() as repo:
            repo.rm(file)
    except TwigError as e:
        ctx.fail(e)


__all__ = ["add", "commit", "rm"]
