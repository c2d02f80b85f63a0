"""Shared test fixtures for ShipScore tests."""

import json
import os
from pathlib import Path

import pytest

from shipscore.admission import AdmissionGuard
from shipscore.config import ScanConfig
from shipscore.detection import detect_stack
from shipscore.fetching import FetchCapability, SourceFetcher
from shipscore.pipeline import ScanPipeline
from shipscore.scanning import build_index, load_package_manifest
from shipscore.scoring import ScanContext

REPO_URL = "https://github.com/octocat/hello-world"


def write_tree(root: Path, files: dict) -> Path:
    """Write ``{relative path: content}`` under ``root``.

    dict/list content is written as JSON, bytes as-is, str as text.
    """
    root.mkdir(parents=True, exist_ok=True)
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, (dict, list)):
            path.write_text(json.dumps(content))
        elif isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content)
    return root


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FixtureCapability(FetchCapability):
    """Materializes a fixed file tree instead of cloning."""

    name = "fixture"

    def __init__(self, files=None, error=None, on_fetch=None):
        self.files = files or {}
        self.error = error
        self.on_fetch = on_fetch
        self.calls = []
        self.destinations = []

    def fetch(self, reference, destination, timeout_seconds):
        self.calls.append((reference, timeout_seconds))
        self.destinations.append(destination)
        write_tree(destination, self.files)
        if self.on_fetch is not None:
            self.on_fetch(reference)
        if self.error is not None:
            raise self.error


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Keep user config files and SHIPSCORE_* variables out of every test."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(tmp_path)
    for key in list(os.environ):
        if key.startswith("SHIPSCORE_"):
            monkeypatch.delenv(key)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fixture_capability():
    """The FixtureCapability class, for tests that need custom fetch behaviour."""
    return FixtureCapability


@pytest.fixture
def make_repo(tmp_path):
    """Factory: write a file tree into a fresh directory and return its path."""
    counter = {"n": 0}

    def _make(files):
        counter["n"] += 1
        return write_tree(tmp_path / f"repo{counter['n']}", files)

    return _make


@pytest.fixture
def make_index(make_repo):
    """Factory: build a FileIndex over a file tree."""

    def _make(files, **kwargs):
        return build_index(make_repo(files), **kwargs)

    return _make


@pytest.fixture
def make_context(make_index):
    """Factory: build the ScanContext scorers receive for a file tree."""

    def _make(files):
        index = make_index(files)
        return ScanContext(
            index=index,
            stack=detect_stack(index),
            manifest=load_package_manifest(index),
        )

    return _make


@pytest.fixture
def workspace_dir(tmp_path):
    path = tmp_path / "workspaces"
    path.mkdir()
    return path


@pytest.fixture
def make_pipeline(workspace_dir):
    """Factory: a ScanPipeline fetching through a FixtureCapability."""

    def _make(files=None, capability=None, clock=None, scorers=None, **config_values):
        config = ScanConfig(**config_values)
        capability = capability or FixtureCapability(files)
        fetcher = SourceFetcher(
            capability,
            clone_timeout_seconds=config.clone_timeout_seconds,
            max_workspace_bytes=config.max_workspace_bytes,
            workspace_dir=workspace_dir,
        )
        kwargs = {}
        if clock is not None:
            kwargs["clock"] = clock
        guard = AdmissionGuard(
            window_seconds=config.rate_limit_window_seconds,
            max_requests=config.rate_limit_max_requests,
            **kwargs,
        )
        return ScanPipeline(config, fetcher=fetcher, guard=guard, scorers=scorers, **kwargs)

    return _make
