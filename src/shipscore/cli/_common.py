"""Shared CLI helpers."""

from pathlib import Path
from typing import Optional

from rich.console import Console

from ..config import ScanConfig, load_config
from ..exceptions import InvalidReferenceError, RateLimitedError, ScanError

console = Console()

# Caller mistakes exit 2; everything else that fails exits 1.
EXIT_FAILURE = 1
EXIT_USAGE = 2


def resolve_config(
    config: Optional[Path] = None,
    verbose: bool = False,
    quiet: bool = False,
) -> ScanConfig:
    """Build configuration from CLI options."""
    overrides = {}
    if verbose:
        overrides["verbose"] = True
    if quiet:
        overrides["quiet"] = True
    return load_config(config_file=config, **overrides)


def exit_code_for(error: ScanError) -> int:
    if isinstance(error, (InvalidReferenceError, RateLimitedError)):
        return EXIT_USAGE
    return EXIT_FAILURE
