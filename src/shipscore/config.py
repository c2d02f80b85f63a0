"""Configuration loading and management for ShipScore.

Configuration sources are merged in priority order:
    1. Defaults (defined in ScanConfig / ScoringConfig)
    2. Global config (~/.shipscore.toml)
    3. Project config (./shipscore.toml)
    4. Explicit config file
    5. Environment variables (SHIPSCORE_* prefix)
    6. Keyword overrides

Example:
    >>> config = load_config(scan_timeout_seconds=30)
    >>> config.scan_timeout_seconds
    30
    >>> config.scoring.weight(Category.FRONTEND)
    0.2

TOML layout::

    clone_timeout_seconds = 20
    max_workspace_mb = 50

    [scoring.weights]
    frontend = 0.25
    payments = 0.05

    [scoring.thresholds.security]
    pass_at = 85
    warn_at = 50

    [scoring.secrets]
    generic_token_min_length = 40
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, Mapping, Optional, get_type_hints

from .exceptions import ConfigFileError, ConfigurationError, InvalidConfigError
from .models import Category

Verbosity = Literal["quiet", "normal", "verbose"]

ENV_PREFIX = "SHIPSCORE_"


@dataclass(frozen=True)
class Thresholds:
    """Status cut-offs for one category: pass at ``pass_at``, warning at ``warn_at``."""

    pass_at: int
    warn_at: int

    def __post_init__(self) -> None:
        if not 0 <= self.warn_at <= self.pass_at <= 100:
            raise ValueError(
                f"thresholds must satisfy 0 <= warn_at <= pass_at <= 100, "
                f"got pass_at={self.pass_at}, warn_at={self.warn_at}"
            )


DEFAULT_WEIGHTS: dict[Category, float] = {
    Category.FRONTEND: 0.20,
    Category.BACKEND: 0.15,
    Category.AUTHENTICATION: 0.15,
    Category.DATABASE: 0.15,
    Category.PAYMENTS: 0.10,
    Category.SECURITY: 0.10,
    Category.DEPLOYMENT: 0.15,
}

# Payments warns at 0: a project without payments is never critical.
DEFAULT_THRESHOLDS: dict[Category, Thresholds] = {
    Category.FRONTEND: Thresholds(pass_at=70, warn_at=40),
    Category.BACKEND: Thresholds(pass_at=70, warn_at=30),
    Category.AUTHENTICATION: Thresholds(pass_at=70, warn_at=40),
    Category.DATABASE: Thresholds(pass_at=70, warn_at=30),
    Category.PAYMENTS: Thresholds(pass_at=70, warn_at=0),
    Category.SECURITY: Thresholds(pass_at=80, warn_at=50),
    Category.DEPLOYMENT: Thresholds(pass_at=70, warn_at=40),
}


@dataclass(frozen=True)
class SecretScanConfig:
    """Tuning for the generic "long opaque token" secret fallback.

    The fallback flags any alphanumeric run of at least
    ``generic_token_min_length`` characters whose Shannon entropy reaches
    ``generic_token_min_entropy`` bits per character. It over-reports on
    hashes and long identifiers; raise either value to trade recall for
    precision, or disable it entirely.
    """

    generic_token_enabled: bool = True
    generic_token_min_length: int = 32
    generic_token_min_entropy: float = 3.0

    def __post_init__(self) -> None:
        if self.generic_token_min_length < 8:
            raise ValueError("generic_token_min_length must be at least 8")
        if self.generic_token_min_entropy < 0:
            raise ValueError("generic_token_min_entropy must be non-negative")


@dataclass(frozen=True)
class ScoringConfig:
    """Category weights, status thresholds and secret-scan tuning."""

    weights: Mapping[Category, float] = field(default_factory=lambda: dict(DEFAULT_WEIGHTS))
    thresholds: Mapping[Category, Thresholds] = field(
        default_factory=lambda: dict(DEFAULT_THRESHOLDS)
    )
    secrets: SecretScanConfig = field(default_factory=SecretScanConfig)

    def __post_init__(self) -> None:
        for category, weight in self.weights.items():
            if not 0.0 <= weight <= 1.0:
                raise ValueError(f"weight for {category.key} must be between 0.0 and 1.0")
        weight_sum = sum(self.weights.values())
        if not 0.99 <= weight_sum <= 1.01:
            raise ValueError(f"Category weights must sum to 1.0, got {weight_sum:.3f}")
        missing = [c.key for c in Category if c not in self.thresholds]
        if missing:
            raise ValueError(f"thresholds missing for: {', '.join(missing)}")

    def weight(self, category: Category) -> float:
        return self.weights.get(category, 0.0)

    def thresholds_for(self, category: Category) -> Thresholds:
        return self.thresholds[category]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ScoringConfig":
        """Build from a ``[scoring]`` TOML table, filling gaps with defaults.

        Raises:
            InvalidConfigError: A section or per-category entry is not a table
        """
        weights = dict(DEFAULT_WEIGHTS)
        for key, value in _table(data.get("weights"), "weights").items():
            weights[_category(key)] = float(value)

        thresholds = dict(DEFAULT_THRESHOLDS)
        for key, value in _table(data.get("thresholds"), "thresholds").items():
            category = _category(key)
            value = _table(value, f"thresholds.{key}")
            base = thresholds[category]
            thresholds[category] = Thresholds(
                pass_at=int(value.get("pass_at", base.pass_at)),
                warn_at=int(value.get("warn_at", base.warn_at)),
            )

        secrets = SecretScanConfig(**_table(data.get("secrets"), "secrets"))
        return cls(weights=weights, thresholds=thresholds, secrets=secrets)


def _table(value: Any, section: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise InvalidConfigError(f"scoring.{section}", value, "expected a table")
    return value


def _category(key: str) -> Category:
    try:
        return Category.from_key(key)
    except KeyError:
        known = ", ".join(c.key for c in Category)
        raise InvalidConfigError(f"scoring.{key}", key, f"unknown category (expected one of {known})")


@dataclass(frozen=True)
class ScanConfig:
    """Resource bounds and tuning for scan execution.

    Attributes:
        Time limits:
            clone_timeout_seconds: Wall-clock ceiling for the clone step
            scan_timeout_seconds: Wall-clock ceiling for the whole scan

        Workspace:
            max_workspace_mb: Byte ceiling for a fetched workspace (MB)
            workspace_dir: Base directory for workspaces (None = system temp)

        Admission:
            rate_limit_window_seconds: Sliding window length
            rate_limit_max_requests: Scans admitted per client per window

        Index and content search:
            content_scan_file_cap: Files read per content search
            secret_scan_file_cap: Files read by the secret scan
            max_read_bytes: Bytes read per file
            max_index_files: Entries recorded before the walk stops

        Concurrency:
            scorer_workers: Threads used to run category scorers
            max_concurrent_scans: Scans a ScanService runs at once

        Output control:
            verbosity: Logging verbosity level
    """

    clone_timeout_seconds: float = 30.0
    scan_timeout_seconds: float = 60.0

    max_workspace_mb: float = 100.0
    workspace_dir: Optional[str] = None

    rate_limit_window_seconds: float = 3600.0
    rate_limit_max_requests: int = 10

    content_scan_file_cap: int = 50
    secret_scan_file_cap: int = 200
    max_read_bytes: int = 1024 * 1024
    max_index_files: int = 20000

    scorer_workers: int = 7
    max_concurrent_scans: int = 4

    verbosity: Verbosity = "normal"

    scoring: ScoringConfig = field(default_factory=ScoringConfig)

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.clone_timeout_seconds <= 0:
            raise ValueError("clone_timeout_seconds must be positive")
        if self.scan_timeout_seconds <= 0:
            raise ValueError("scan_timeout_seconds must be positive")

        if self.max_workspace_mb <= 0:
            raise ValueError("max_workspace_mb must be positive")

        if self.rate_limit_window_seconds <= 0:
            raise ValueError("rate_limit_window_seconds must be positive")
        if self.rate_limit_max_requests < 1:
            raise ValueError("rate_limit_max_requests must be at least 1")

        if self.content_scan_file_cap < 1:
            raise ValueError("content_scan_file_cap must be at least 1")
        if self.secret_scan_file_cap < 1:
            raise ValueError("secret_scan_file_cap must be at least 1")
        if self.max_read_bytes < 1:
            raise ValueError("max_read_bytes must be at least 1")
        if self.max_index_files < 1:
            raise ValueError("max_index_files must be at least 1")

        if self.scorer_workers < 1:
            raise ValueError("scorer_workers must be at least 1")
        if self.max_concurrent_scans < 1:
            raise ValueError("max_concurrent_scans must be at least 1")

        if self.verbosity not in ("quiet", "normal", "verbose"):
            raise ValueError("verbosity must be one of quiet, normal, verbose")

    @property
    def max_workspace_bytes(self) -> int:
        """Get workspace ceiling in bytes."""
        return int(self.max_workspace_mb * 1024 * 1024)


def load_config(config_file: Optional[Path] = None, **overrides) -> ScanConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags)

    Returns:
        Validated ScanConfig instance

    Raises:
        ConfigFileError: If a config file is missing or unparsable
        ConfigurationError: If the merged values are invalid
    """
    merged: dict[str, Any] = {}

    for candidate in (Path.home() / ".shipscore.toml", Path.cwd() / "shipscore.toml"):
        if candidate.exists():
            _merge(merged, _load_toml_file(candidate))

    if config_file is not None:
        if not config_file.exists():
            raise ConfigFileError(config_file, "file not found")
        _merge(merged, _load_toml_file(config_file))

    merged.update(_load_env_vars())

    if "verbose" in overrides:
        if overrides["verbose"]:
            overrides["verbosity"] = "verbose"
        del overrides["verbose"]
    if "quiet" in overrides:
        if overrides["quiet"]:
            overrides["verbosity"] = "quiet"
        del overrides["quiet"]

    merged.update(overrides)

    scoring = merged.pop("scoring", None)
    try:
        if isinstance(scoring, dict):
            merged["scoring"] = ScoringConfig.from_dict(scoring)
        elif isinstance(scoring, ScoringConfig):
            merged["scoring"] = scoring
        elif scoring is not None:
            raise InvalidConfigError("scoring", scoring, "expected a table")
        return ScanConfig(**merged)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid configuration: {e}")


def _merge(target: dict[str, Any], source: Mapping[str, Any]) -> None:
    """Recursive dict merge so partial [scoring.*] tables layer over each other."""
    for key, value in source.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            _merge(target[key], value)
        else:
            target[key] = value


def _load_env_vars() -> dict[str, Any]:
    """Load scalar ScanConfig fields from SHIPSCORE_* environment variables.

    Examples:
        SHIPSCORE_CLONE_TIMEOUT_SECONDS=20
        SHIPSCORE_MAX_WORKSPACE_MB=50
        SHIPSCORE_RATE_LIMIT_MAX_REQUESTS=100
        SHIPSCORE_WORKSPACE_DIR=/var/tmp/shipscore
    """
    type_hints = get_type_hints(ScanConfig)

    result: dict[str, Any] = {}

    for field_name in ScanConfig.__dataclass_fields__:
        env_key = f"{ENV_PREFIX}{field_name.upper()}"
        env_value = os.environ.get(env_key)

        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hint)
        except ValueError as e:
            raise InvalidConfigError(env_key, env_value, str(e))
        if parsed is not None:
            result[field_name] = parsed

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse environment variable string to the correct type.

    Returns None for types that cannot be set from the environment
    (nested config objects).
    """
    origin = getattr(type_hint, "__origin__", None)

    # Optional[X] is Union[X, None]
    args = getattr(type_hint, "__args__", ())
    if type(None) in args:
        non_none_types = [t for t in args if t is not type(None)]
        if non_none_types:
            type_hint = non_none_types[0]

    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        elif lower in ("false", "0", "no", "off"):
            return False
        else:
            raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    if type_hint is float:
        return float(value)

    if type_hint is str or origin is Literal:
        return value

    return None


def _load_toml_file(path: Path) -> dict:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigFileError(path, str(e))
