"""Tests for repository reference validation."""

import pytest

from shipscore.exceptions import InvalidReferenceError
from shipscore.fetching import is_valid_reference, parse_reference


class TestParseReference:
    """The allow-list accepts exactly https://github.com/<owner>/<name>[/]."""

    def test_accepts_plain_reference(self):
        ref = parse_reference("https://github.com/octocat/Hello-World")
        assert ref.owner == "octocat"
        assert ref.name == "Hello-World"
        assert ref.slug == "octocat/Hello-World"
        assert ref.url == "https://github.com/octocat/Hello-World"

    def test_trailing_slash_is_normalized(self):
        ref = parse_reference("https://github.com/octocat/repo.name_1/")
        assert ref.url == "https://github.com/octocat/repo.name_1"

    @pytest.mark.parametrize(
        "reference",
        [
            "https://example.com/owner/repo",
            "http://github.com/owner/repo",
            "https://github.com/owner",
            "https://github.com/owner/repo/tree/main",
            "https://github.com/owner/repo?tab=readme",
            "https://github.com/owner/repo.git; rm -rf /",
            "https://github.com/owner/repo\n",
            "https://github.com/own er/repo",
            "https://github.com.evil.io/owner/repo",
            "github.com/owner/repo",
            "--upload-pack=touch /tmp/x",
            "",
        ],
    )
    def test_rejects_anything_else(self, reference):
        with pytest.raises(InvalidReferenceError):
            parse_reference(reference)

    def test_rejects_non_string(self):
        with pytest.raises(InvalidReferenceError):
            parse_reference(None)

    def test_error_carries_public_message_only(self):
        """The caller-facing message never echoes the rejected input."""
        with pytest.raises(InvalidReferenceError) as exc_info:
            parse_reference("https://example.com/owner/repo")
        payload = exc_info.value.to_json()
        assert payload["message"] == "Invalid GitHub URL format"
        assert "example.com" not in str(payload)


class TestIsValidReference:
    def test_valid(self):
        assert is_valid_reference("https://github.com/a/b")

    def test_invalid(self):
        assert not is_valid_reference("https://gitlab.com/a/b")
