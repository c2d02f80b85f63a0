"""Tests for the ``shipscore`` command line."""

import json
import logging

import pytest
from typer.testing import CliRunner

from shipscore import __version__
from shipscore.cli import app
from shipscore.exceptions import UnreachableError

URL = "https://github.com/octocat/hello-world"

runner = CliRunner()


@pytest.fixture(autouse=True)
def plain_logging(monkeypatch):
    """Keep the rich log handler off the captured output."""
    monkeypatch.setattr(
        "shipscore.cli.scan.setup_logging",
        lambda verbose=False, quiet=False: logging.getLogger("shipscore"),
    )


@pytest.fixture
def use_pipeline(monkeypatch):
    """Route the scan command through a prepared pipeline."""

    def _use(pipeline):
        monkeypatch.setattr("shipscore.cli.scan.ScanPipeline", lambda settings: pipeline)
        return pipeline

    return _use


class TestVersion:
    def test_version_flag(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output


class TestScanCommand:
    def test_json_report(self, make_pipeline, use_pipeline):
        use_pipeline(make_pipeline({"index.html": "<h1>hi</h1>", ".gitignore": ".env\n"}))

        result = runner.invoke(app, ["scan", URL, "--json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["shipScore"] == 14
        assert data["stackDetection"]["technologies"] == ["Static HTML"]
        assert len(data["categories"]) == 7

    def test_rich_report(self, make_pipeline, use_pipeline):
        use_pipeline(make_pipeline({"index.html": "<h1>hi</h1>"}))

        result = runner.invoke(app, ["scan", URL])

        assert result.exit_code == 0
        assert "Ship Score" in result.output
        assert "Deployment Ready" in result.output

    def test_invalid_url(self):
        result = runner.invoke(app, ["scan", "https://example.com/owner/repo"])
        assert result.exit_code == 2
        assert "Invalid GitHub URL format" in result.output

    def test_invalid_url_json(self):
        result = runner.invoke(app, ["scan", "not a url", "--json"])
        assert result.exit_code == 2
        payload = json.loads(result.stdout)
        assert payload["error_code"] == "SS100"
        assert payload["retryable"] is False

    def test_fetch_failure_exits_one(
        self, make_pipeline, use_pipeline, fixture_capability
    ):
        capability = fixture_capability(error=UnreachableError("git clone failed"))
        use_pipeline(make_pipeline(capability=capability))

        result = runner.invoke(app, ["scan", URL, "--json"])

        assert result.exit_code == 1
        assert json.loads(result.stdout)["error_code"] == "SS200"

    def test_missing_config_file(self, tmp_path):
        result = runner.invoke(app, ["scan", URL, "-c", str(tmp_path / "nope.toml")])
        assert result.exit_code == 2

    def test_invalid_config_value(self, tmp_path):
        path = tmp_path / "bad.toml"
        path.write_text("scan_timeout_seconds = 0\n")

        result = runner.invoke(app, ["scan", URL, "-c", str(path)])

        assert result.exit_code == 1
        assert "Error" in result.output
