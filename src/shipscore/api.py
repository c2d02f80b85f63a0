"""Public API for ShipScore.

Example:
    >>> from shipscore import scan
    >>>
    >>> report = scan("https://github.com/octocat/Hello-World")
    >>> report.to_dict()["shipScore"] == report.ship_score
    True
    >>>
    >>> # With overrides
    >>> report = scan(
    ...     "https://github.com/octocat/Hello-World",
    ...     clone_timeout_seconds=10,
    ... )
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from .config import load_config
from .logging_config import get_logger
from .models import ShipScoreReport
from .pipeline import ScanPipeline

logger = get_logger(__name__)


def scan(
    reference: str,
    client_key: str = "local",
    config_file: Optional[Path] = None,
    **overrides,
) -> ShipScoreReport:
    """Scan a public GitHub repository and return its readiness report.

    Builds a one-off pipeline, so admission state does not carry over
    between calls. Hosts serving many callers should keep one
    ``ScanPipeline`` (or ``ScanService``) alive instead.

    Args:
        reference: Repository URL (https://github.com/<owner>/<name>)
        client_key: Identity used for admission
        config_file: Optional explicit config file path
        **overrides: Configuration overrides (e.g. scan_timeout_seconds=30)

    Returns:
        ShipScoreReport

    Raises:
        ScanError: The scan failed; ``to_json()`` gives the caller-safe form
        ConfigurationError: If configuration is invalid
    """
    config = load_config(config_file=config_file, **overrides)
    logger.debug("Loaded configuration: %s", config)
    return ScanPipeline(config).scan(reference, client_key=client_key)
