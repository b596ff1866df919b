"""CLI entrypoint for subfork."""

import rich_click as click

from subfork import __version__
from subfork.config import Settings
from subfork.controllers import (
    DemoCommand,
    ExitCodesCommand,
    SubForkCliController,
)
from subfork.logging_setup import setup_logging

click.rich_click.USE_MARKDOWN = True


@click.group()
@click.version_option(version=__version__, prog_name="subfork")
def subfork() -> None:
    """Run Python functions in forked processes."""


@subfork.command("demo")
@click.argument("arguments", nargs=-1)
@click.option(
    "--tasks",
    type=click.IntRange(min=1, max=64),
    default=1,
    show_default=True,
    help="How many parallel tasks run the demo job.",
)
@click.option("--verbose", is_flag=True, default=False, help="Log task lifecycle to stderr.")
def demo(arguments: tuple[str, ...], tasks: int, verbose: bool) -> None:
    """Fork tasks that print their arguments and exit with their sum modulo 256.

    Arguments default to `1 2 ... 10`.
    """

    controller = _controller(verbose=verbose)
    result = controller.run_demo(DemoCommand(arguments=arguments, tasks=tasks))
    _emit_lines(result.lines)


@subfork.command("exit-codes")
@click.argument("codes", nargs=-1, required=True, type=int)
@click.option("--verbose", is_flag=True, default=False, help="Log task lifecycle to stderr.")
def exit_codes(codes: tuple[int, ...], verbose: bool) -> None:
    """Fork one task per CODE; each task exits with its code."""

    controller = _controller(verbose=verbose)
    result = controller.run_exit_codes(ExitCodesCommand(exit_codes=codes))
    _emit_lines(result.lines)
    if not result.success:
        raise click.ClickException("Invalid exit code.")


def _controller(*, verbose: bool) -> SubForkCliController:
    settings = Settings.from_env()
    try:
        settings.validate()
    except ValueError as error:
        raise click.ClickException(str(error)) from error
    setup_logging("DEBUG" if verbose else settings.log_level)
    return SubForkCliController(settings=settings)


def _emit_lines(lines: list[str]) -> None:
    for line in lines:
        click.echo(line)


if __name__ == "__main__":  # pragma: no cover
    subfork()
