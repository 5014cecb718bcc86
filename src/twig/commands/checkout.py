"""twig checkout and reset commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, NamedTuple

import click

if TYPE_CHECKING:
    from twig.cli import TwigContext

SEPARATOR = "--"


class SeparatorCommand(click.Command):
    """Command that remembers where a ``--`` separator appeared.

    Click drops the separator while parsing, but checkout needs it to tell
    ``checkout BRANCH`` from ``checkout -- FILE``.
    """

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        ctx.meta["twig.separator"] = args.index(SEPARATOR) if SEPARATOR in args else None
        return super().parse_args(ctx, args)


class CheckoutOperands(NamedTuple):
    """What a checkout invocation names."""

    name: str
    commit_ref: str | None = None
    restores_file: bool = True


def parse_checkout_operands(operands: tuple[str, ...], separator: int | None) -> CheckoutOperands:
    """Classify checkout operands.

    Accepted shapes:
        checkout -- FILE          -> CheckoutOperands(FILE)
        checkout REF -- FILE      -> CheckoutOperands(FILE, REF)
        checkout BRANCH           -> CheckoutOperands(BRANCH, restores_file=False)

    Raises:
        UsageError: For any other shape.
    """
    from twig.errors import UsageError

    if separator == 0 and len(operands) == 1:
        return CheckoutOperands(operands[0])
    if separator == 1 and len(operands) == 2:
        return CheckoutOperands(operands[1], commit_ref=operands[0])
    if separator is None and len(operands) == 1:
        return CheckoutOperands(operands[0], restores_file=False)
    raise UsageError("Incorrect operands.", operands=list(operands))


@click.command(cls=SeparatorCommand)
@click.argument("operands", nargs=-1)
@click.pass_context
def checkout(click_ctx: click.Context, operands: tuple[str, ...]) -> None:
    """Restore a file or switch to another branch.

    \b
    Forms:
        twig checkout -- FILE          Restore FILE from the head commit
        twig checkout COMMIT -- FILE   Restore FILE from COMMIT (ids may be abbreviated)
        twig checkout BRANCH           Switch the working tree to BRANCH

    Restoring a file never stages it. Switching branches refuses to run
    while an untracked file is present and discards staged changes.
    """
    from twig.errors import TwigError

    ctx: TwigContext = click_ctx.obj
    try:
        target = parse_checkout_operands(operands, click_ctx.meta.get("twig.separator"))
        with ctx.open_repository() as repo:
            if target.restores_file:
                repo.checkout_file(target.name, target.commit_ref)
            else:
                repo.checkout_branch(target.name)
    except TwigError as e:
        ctx.fail(e)


@click.command()
@click.argument("commit_id")
@click.pass_obj
def reset(ctx: TwigContext, commit_id: str) -> None:
    """Check out every file of COMMIT_ID and move the current branch there."""
    from twig.errors import TwigError

    try:
        with ctx.open_repository() as repo:
            repo.reset(commit_id)
    except TwigError as e:
        ctx.fail(e)


__all__ = ["checkout", "reset", "parse_checkout_operands", "CheckoutOperands", "SeparatorCommand"]
