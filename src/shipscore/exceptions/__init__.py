"""Exception hierarchy for ShipScore."""

from .base import ShipScoreError
from .config import (
    ConfigFileError,
    ConfigurationError,
    InvalidConfigError,
)
from .scan import (
    ErrorKind,
    InternalFailureError,
    InvalidReferenceError,
    RateLimitedError,
    ScanError,
    ScanTimeoutError,
    TooLargeError,
    UnreachableError,
)

__all__ = [
    "ShipScoreError",
    "ConfigurationError",
    "ConfigFileError",
    "InvalidConfigError",
    "ErrorKind",
    "ScanError",
    "InvalidReferenceError",
    "RateLimitedError",
    "UnreachableError",
    "TooLargeError",
    "ScanTimeoutError",
    "InternalFailureError",
]
