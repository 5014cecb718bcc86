"""twig init command - create a repository in the current directory."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

if TYPE_CHECKING:
    from twig.cli import TwigContext


@click.command()
@click.option(
    "--with-config",
    is_flag=True,
    help="Also write a default .twigrc.toml next to the repository",
)
@click.pass_obj
def init(ctx: TwigContext, with_config: bool) -> None:
    """Create a twig repository with a single initial commit.

    The repository starts on the configured default branch ("main"), whose
    initial commit tracks no files and is dated the Unix epoch.
    """
    from twig.config import get_default_config_toml
    from twig.core.repository import Repository
    from twig.errors import TwigError
    from twig.logging import print_success, print_warning
    from twig.paths import get_config_path

    root = ctx.start_dir
    try:
        Repository.init(root, ctx.config).close()
    except TwigError as e:
        ctx.fail(e)

    if with_config:
        config_path = get_config_path(root)
        if config_path.exists():
            print_warning(f"Configuration file already exists: {config_path}")
        else:
            config_path.write_text(get_default_config_toml())
            print_success(f"Created {config_path}")


__all__ = ["init"]
