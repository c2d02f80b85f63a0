"""CLI entry point: registers all subcommands."""

import typer

from .. import __version__
from ._common import console

app = typer.Typer(
    name="shipscore",
    help="ShipScore - Repository production-readiness scanner",
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"[bold cyan]ShipScore[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit(0)


@app.callback()
def _root(
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    ),
):
    """Score how ready a GitHub repository is to ship."""


# Import subcommands to register them
from .scan import scan as _scan  # noqa: F401, E402


def main() -> None:
    app()


__all__ = ["app", "main"]
