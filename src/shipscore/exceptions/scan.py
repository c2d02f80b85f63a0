"""Scan failure taxonomy with stable codes and public messages.

Error Code Convention:
    SS1xx - Caller errors rejected before any work starts
    SS2xx - Fetch errors (the repository could not be materialized)
    SS9xx - Internal failures

Every failure kind maps to one fixed, human-readable message. The message
never includes paths, patterns or thresholds; internal detail goes to the
log and to ``details``, which boundary layers must not forward.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional

from .base import ShipScoreError


class ErrorKind(Enum):
    """Failure categories surfaced by ``scan``."""

    INVALID_REFERENCE = ("SS100", "Invalid GitHub URL format", False)
    RATE_LIMITED = ("SS101", "Rate limit exceeded. Try again later.", True)
    UNREACHABLE = (
        "SS200",
        "Could not access repository. It may be private, deleted, or the URL is incorrect.",
        False,
    )
    TOO_LARGE = ("SS201", "Repository is too large. Please try a smaller repository.", False)
    TIMEOUT = (
        "SS202",
        "Scan took too long to complete. Please try again or choose a smaller repository.",
        True,
    )
    INTERNAL_FAILURE = ("SS900", "Internal error while scanning the repository.", False)

    def __init__(self, code: str, public_message: str, retryable: bool):
        self.code = code
        self.public_message = public_message
        self.retryable = retryable


class ScanError(ShipScoreError):
    """Base class for failures of a single scan.

    Attributes:
        kind: Failure category, fixed per subclass
        details: Internal context for logs only
    """

    kind: ErrorKind = ErrorKind.INTERNAL_FAILURE

    def __init__(self, reason: str, details: Optional[Dict[str, str]] = None):
        super().__init__(reason, details=details)
        self.reason = reason

    @property
    def code(self) -> str:
        return self.kind.code

    @property
    def public_message(self) -> str:
        return self.kind.public_message

    def to_json(self) -> dict[str, Any]:
        """Caller-safe representation for boundary layers."""
        return {
            "error_code": self.kind.code,
            "message": self.kind.public_message,
            "retryable": self.kind.retryable,
        }


class InvalidReferenceError(ScanError):
    """The repository reference failed the allow-list (SS100)."""

    kind = ErrorKind.INVALID_REFERENCE

    def __init__(self, reference: str):
        super().__init__("Repository reference rejected", details={"reference": reference[:200]})
        self.reference = reference


class RateLimitedError(ScanError):
    """The Admission Guard rejected the caller (SS101)."""

    kind = ErrorKind.RATE_LIMITED

    def __init__(self, client_key: str, retry_after_seconds: int):
        super().__init__(
            "Admission rejected",
            details={"client": client_key, "retry_after": str(retry_after_seconds)},
        )
        self.client_key = client_key
        self.retry_after_seconds = retry_after_seconds

    def to_json(self) -> dict[str, Any]:
        payload = super().to_json()
        payload["retry_after"] = self.retry_after_seconds
        return payload


class UnreachableError(ScanError):
    """The fetch capability could not materialize the repository (SS200)."""

    kind = ErrorKind.UNREACHABLE


class TooLargeError(ScanError):
    """The workspace exceeded the byte ceiling (SS201)."""

    kind = ErrorKind.TOO_LARGE

    def __init__(self, ceiling_bytes: int):
        super().__init__(
            "Workspace exceeded size ceiling", details={"ceiling_bytes": str(ceiling_bytes)}
        )
        self.ceiling_bytes = ceiling_bytes


class ScanTimeoutError(ScanError):
    """The clone or the overall scan exceeded its wall-clock ceiling (SS202)."""

    kind = ErrorKind.TIMEOUT

    def __init__(self, stage: str, limit_seconds: float):
        super().__init__(
            f"Timed out during {stage}",
            details={"stage": stage, "limit_seconds": f"{limit_seconds:g}"},
        )
        self.stage = stage
        self.limit_seconds = limit_seconds


class InternalFailureError(ScanError):
    """Unexpected condition while indexing or scoring (SS900)."""

    kind = ErrorKind.INTERNAL_FAILURE
