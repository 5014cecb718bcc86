"""twig CLI - a small content-addressed version control system."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Literal, NoReturn

from dotenv import load_dotenv

# Load .env file before any other imports that might use env vars
load_dotenv()

import click  # noqa: E402

from twig import __version__  # noqa: E402
from twig.commands.lazy import LazyGroup  # noqa: E402

if TYPE_CHECKING:
    from twig.config import TwigConfig
    from twig.core.repository import Repository
    from twig.errors import TwigError

VerbosityLevel = Literal["quiet", "normal", "verbose"]


class TwigContext:
    """Shared context for CLI commands."""

    def __init__(self) -> None:
        self.config: TwigConfig | None = None
        self.verbosity: VerbosityLevel = "normal"
        self.debug: bool = False
        self.root: Path | None = None

    @property
    def start_dir(self) -> Path:
        return self.root or Path.cwd()

    def open_repository(self) -> Repository:
        """Open the repository containing the working directory."""
        from twig.core.repository import Repository

        return Repository.open(self.start_dir, self.config)

    def fail(self, error: TwigError) -> NoReturn:
        """Report ``error`` and end the command.

        The exit status stays 0 unless strict exit codes are configured.
        """
        import sys

        from twig.errors import ExitCode
        from twig.logging import print_error, print_info

        print_error(error.message)
        if self.debug:
            import traceback

            print_info("")
            print_info("Full traceback (--debug mode):")
            traceback.print_exception(error)

        strict = self.config is not None and self.config.cli.strict_exit_codes
        sys.exit(error.exit_code if strict else ExitCode.SUCCESS)


pass_context = click.make_pass_decorator(TwigContext, ensure=True)


# Define lazy subcommands: name -> (module_path, attribute_name)
LAZY_COMMANDS: dict[str, tuple[str, str]] = {
    # Setup
    "init": ("twig.commands.init_cmd", "init"),
    # Staging and committing
    "add": ("twig.commands.staging", "add"),
    "commit": ("twig.commands.staging", "commit"),
    "rm": ("twig.commands.staging", "rm"),
    # History
    "log": ("twig.commands.history", "log"),
    "global-log": ("twig.commands.history", "global_log"),
    "find": ("twig.commands.history", "find"),
    "status": ("twig.commands.history", "status"),
    # Working tree
    "checkout": ("twig.commands.checkout", "checkout"),
    "reset": ("twig.commands.checkout", "reset"),
    # Branches
    "branch": ("twig.commands.branch", "branch"),
    "rm-branch": ("twig.commands.branch", "rm_branch"),
    "merge": ("twig.commands.branch", "merge"),
}


@click.group(cls=LazyGroup, lazy_subcommands=LAZY_COMMANDS)
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option("-q", "--quiet", is_flag=True, help="Suppress non-error output")
@click.option("--debug", is_flag=True, help="Show full tracebacks on errors")
@click.option(
    "--config",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file",
)
@click.option(
    "-C",
    "--root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Run as if started in this directory",
)
@click.version_option(version=__version__, prog_name="twig")
@pass_context
def cli(
    ctx: TwigContext,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config: Path | None,
    root: Path | None,
) -> None:
    """twig - snapshots, branches and merges for a flat working tree.

    \b
    Getting started:
      init         Create a repository in the current directory
      add          Stage a file
      commit       Record staged changes

    \b
    Inspecting:
      log          History of the current branch
      global-log   Every commit ever made
      find         Ids of commits with a given message
      status       Branches, staged files and working tree changes

    \b
    Branching:
      checkout     Restore a file or switch branches
      branch       Create a branch at the head commit
      rm-branch    Delete a branch pointer
      reset        Move the current branch to a commit
      merge        Merge a branch into the current branch

    Use 'twig <command> --help' for details.
    Use --debug to show full tracebacks on errors.
    """
    import sys

    # Lazy import for faster startup
    from twig.config import TwigConfig
    from twig.errors import ConfigError, ExitCode
    from twig.logging import print_error, setup_logging
    from twig.paths import find_repo_root

    ctx.debug = debug
    ctx.root = root.resolve() if root else None

    if quiet:
        ctx.verbosity = "quiet"
    elif verbose:
        ctx.verbosity = "verbose"
    else:
        ctx.verbosity = "normal"

    setup_logging(ctx.verbosity)

    try:
        ctx.config = TwigConfig.load(config, root=find_repo_root(ctx.start_dir) or ctx.start_dir)
    except ConfigError as e:
        print_error(e.message)
        sys.exit(ExitCode.CONFIG_ERROR)


def main() -> None:
    """Entry point for the CLI."""
    import sys

    debug_mode = "--debug" in sys.argv

    try:
        cli()
    except click.ClickException:
        # Let Click handle its own exceptions
        raise
    except KeyboardInterrupt:
        # Clean exit on Ctrl+C
        sys.exit(130)
    except Exception as e:
        from twig.logging import print_error, print_info

        print_error(f"Unexpected error: {e}")

        if debug_mode:
            print_info("")
            print_info("Full traceback (--debug mode):")
            import traceback

            traceback.print_exc()
        else:
            print_info("")
            print_info("Run with --debug for full traceback.")

        sys.exit(1)


if __name__ == "__main__":
    main()
