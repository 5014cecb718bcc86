"""twig branch, rm-branch and merge commands."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

if TYPE_CHECKING:
    from twig.cli import TwigContext


@click.command()
@click.argument("name")
@click.pass_obj
def branch(ctx: TwigContext, name: str) -> None:
    """Create branch NAME at the head commit (without switching to it)."""
    from twig.errors import TwigError

    try:
        with ctx.open_repository() as repo:
            repo.branch(name)
    except TwigError as e:
        ctx.fail(e)


@click.command("rm-branch")
@click.argument("name")
@click.pass_obj
def rm_branch(ctx: TwigContext, name: str) -> None:
    """Delete the branch pointer NAME. Its commits are kept."""
    from twig.errors import TwigError

    try:
        with ctx.open_repository() as repo:
            repo.rm_branch(name)
    except TwigError as e:
        ctx.fail(e)


@click.command()
@click.argument("name")
@click.pass_obj
def merge(ctx: TwigContext, name: str) -> None:
    """Merge branch NAME into the current branch.

    Conflicting files are written with conflict markers and committed as
    part of the merge commit.
    """
    from twig.core.models import MergeKind
    from twig.errors import TwigError
    from twig.logging import print_info, print_warning

    try:
        with ctx.open_repository() as repo:
            result = repo.merge(name)
    except TwigError as e:
        ctx.fail(e)

    if result.kind is MergeKind.FAST_FORWARD:
        print_info("Current branch fast-forwarded.")
    elif result.has_conflicts:
        print_warning("Encountered a merge conflict.")


__all__ = ["branch", "rm_branch", "merge"]
