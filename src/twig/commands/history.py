"""twig log, global-log, find and status commands."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

if TYPE_CHECKING:
    from twig.cli import TwigContext


@click.command()
@click.pass_obj
def log(ctx: TwigContext) -> None:
    """Show the current branch's history, newest first.

    Only first parents are followed; merge commits show both parents on a
    "Merge:" line.
    """
    from twig.errors import TwigError
    from twig.formatters import format_log
    from twig.logging import print_plain

    try:
        with ctx.open_repository() as repo:
            print_plain(format_log(repo.log(), repo.config.commits.short_hash_length))
    except TwigError as e:
        ctx.fail(e)


@click.command("global-log")
@click.pass_obj
def global_log(ctx: TwigContext) -> None:
    """Show every commit ever made, in no particular order."""
    from twig.errors import TwigError
    from twig.formatters import format_log
    from twig.logging import print_plain

    try:
        with ctx.open_repository() as repo:
            print_plain(format_log(repo.global_log(), repo.config.commits.short_hash_length))
    except TwigError as e:
        ctx.fail(e)


@click.command()
@click.argument("message")
@click.pass_obj
def find(ctx: TwigContext, message: str) -> None:
    """Print the ids of all commits whose message is exactly MESSAGE."""
    from twig.errors import TwigError
    from twig.logging import print_plain

    try:
        with ctx.open_repository() as repo:
            for commit_hash in repo.find(message):
                print_plain(commit_hash)
    except TwigError as e:
        ctx.fail(e)


@click.command()
@click.pass_obj
def status(ctx: TwigContext) -> None:
    """Show branches, staged and removed files, and working tree changes."""
    from twig.errors import TwigError
    from twig.formatters import format_status
    from twig.logging import print_plain

    try:
        with ctx.open_repository() as repo:
            print_plain(format_status(repo.status()))
    except TwigError as e:
        ctx.fail(e)


__all__ = ["log", "global_log", "find", "status"]
