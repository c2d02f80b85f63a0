"""Scan command: fetch a repository and print its readiness report."""

import json
from pathlib import Path
from typing import Optional

import typer

from ..exceptions import ScanError, ShipScoreError
from ..formatters import get_formatter
from ..logging_config import setup_logging
from ..pipeline import ScanPipeline
from . import app
from ._common import EXIT_FAILURE, console, exit_code_for, resolve_config


@app.command()
def scan(
    url: str = typer.Argument(..., help="Repository URL, e.g. https://github.com/owner/repo"),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in machine-readable JSON format",
    ),
    client_key: str = typer.Option(
        "local",
        "--client-key",
        help="Identity used for rate limiting",
    ),
    config: Optional[Path] = typer.Option(
        None,
        "-c",
        "--config",
        help="Configuration file (TOML)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Only log errors",
    ),
):
    """
    Scan a public GitHub repository for production readiness.

    [bold cyan]Examples:[/bold cyan]

      shipscore scan https://github.com/owner/repo

      shipscore scan https://github.com/owner/repo --json
    """
    logger = setup_logging(verbose=verbose, quiet=quiet)

    try:
        settings = resolve_config(config=config, verbose=verbose, quiet=quiet)
        report = ScanPipeline(settings).scan(url, client_key=client_key)
        get_formatter("json" if json_output else "rich").render(report)

    except ScanError as e:
        logger.error(f"{e.__class__.__name__}: {e}")
        if json_output:
            print(json.dumps(e.to_json(), indent=2))
        else:
            console.print(f"[red]Error:[/red] {e.public_message}")
        raise typer.Exit(exit_code_for(e))

    except ShipScoreError as e:
        logger.error(f"{e.__class__.__name__}: {e}")
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(EXIT_FAILURE)

    except KeyboardInterrupt:
        logger.info("Scan interrupted by user")
        console.print("\n[yellow]Scan interrupted[/yellow]")
        raise typer.Exit(130)
