"""Tests for the scan error taxonomy."""

import pytest

from shipscore.exceptions import (
    ConfigurationError,
    ErrorKind,
    InternalFailureError,
    InvalidReferenceError,
    RateLimitedError,
    ScanError,
    ScanTimeoutError,
    ShipScoreError,
    TooLargeError,
    UnreachableError,
)


class TestErrorKind:
    """Stable codes: SS1xx caller, SS2xx fetch, SS9xx internal."""

    def test_codes(self):
        assert ErrorKind.INVALID_REFERENCE.code == "SS100"
        assert ErrorKind.RATE_LIMITED.code == "SS101"
        assert ErrorKind.UNREACHABLE.code == "SS200"
        assert ErrorKind.TOO_LARGE.code == "SS201"
        assert ErrorKind.TIMEOUT.code == "SS202"
        assert ErrorKind.INTERNAL_FAILURE.code == "SS900"

    def test_codes_are_unique(self):
        codes = [kind.code for kind in ErrorKind]
        assert len(codes) == len(set(codes))

    def test_only_transient_kinds_are_retryable(self):
        retryable = {kind for kind in ErrorKind if kind.retryable}
        assert retryable == {ErrorKind.RATE_LIMITED, ErrorKind.TIMEOUT}


class TestScanErrors:
    @pytest.mark.parametrize(
        "error,kind",
        [
            (InvalidReferenceError("ftp://x"), ErrorKind.INVALID_REFERENCE),
            (RateLimitedError("1.2.3.4", 30), ErrorKind.RATE_LIMITED),
            (UnreachableError("git clone failed"), ErrorKind.UNREACHABLE),
            (TooLargeError(1024), ErrorKind.TOO_LARGE),
            (ScanTimeoutError("clone", 30), ErrorKind.TIMEOUT),
            (InternalFailureError("KeyError"), ErrorKind.INTERNAL_FAILURE),
        ],
    )
    def test_kind_and_hierarchy(self, error, kind):
        assert error.kind is kind
        assert error.code == kind.code
        assert error.public_message == kind.public_message
        assert isinstance(error, ScanError)
        assert isinstance(error, ShipScoreError)

    def test_to_json_hides_details(self):
        error = UnreachableError(
            "git clone failed", details={"repository": "octocat/private", "returncode": "128"}
        )
        payload = error.to_json()
        assert payload == {
            "error_code": "SS200",
            "message": (
                "Could not access repository. It may be private, deleted, "
                "or the URL is incorrect."
            ),
            "retryable": False,
        }
        assert "octocat/private" in str(error)

    def test_rate_limited_carries_retry_after(self):
        payload = RateLimitedError("1.2.3.4", 42).to_json()
        assert payload["retry_after"] == 42
        assert payload["message"] == "Rate limit exceeded. Try again later."

    def test_timeout_records_stage(self):
        error = ScanTimeoutError("clone", 30)
        assert error.stage == "clone"
        assert error.details["limit_seconds"] == "30"

    def test_configuration_errors_are_not_scan_errors(self):
        assert not issubclass(ConfigurationError, ScanError)
        assert issubclass(ConfigurationError, ShipScoreError)
