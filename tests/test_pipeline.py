"""End-to-end tests for the scan pipeline, service and public API."""

import threading

import pytest

from shipscore import api
from shipscore.exceptions import (
    ConfigurationError,
    InternalFailureError,
    InvalidReferenceError,
    RateLimitedError,
    ScanTimeoutError,
    TooLargeError,
)
from shipscore.models import Category, Status
from shipscore.pipeline import Deadline, ScanPipeline, ScanService
from shipscore.scoring import CategoryScorer, get_default_scorers

URL = "https://github.com/octocat/hello-world"
STATIC_PAGE = "<html><head><title>Hello</title></head><body><h1>Hello world</h1></body></html>"


class TestScenarios:
    """Reference repositories with known outcomes."""

    def test_static_page_only(self, make_pipeline, workspace_dir):
        report = make_pipeline({"index.html": STATIC_PAGE}).scan(URL)

        by_category = {c.category: c for c in report.categories}
        assert [c.category for c in report.categories] == list(Category)
        assert (by_category[Category.FRONTEND].score, by_category[Category.FRONTEND].status) == (
            20,
            Status.WARNING,
        )
        for category in (Category.BACKEND, Category.AUTHENTICATION, Category.DATABASE):
            assert by_category[category].score == 0
            assert by_category[category].status is Status.CRITICAL
        assert by_category[Category.PAYMENTS].score == 0
        assert by_category[Category.PAYMENTS].status is Status.WARNING
        assert by_category[Category.DEPLOYMENT].score == 0
        assert by_category[Category.DEPLOYMENT].status is Status.CRITICAL
        assert report.stack.technologies == ("Static HTML",)
        # 20 * 0.20 + 80 * 0.10 (security loses 20 for the missing .gitignore)
        assert report.ship_score == 12
        assert list(workspace_dir.iterdir()) == []

    def test_payment_provider(self, make_pipeline):
        report = make_pipeline({"package.json": {"dependencies": {"stripe": "^14"}}}).scan(URL)
        payments = report.category(Category.PAYMENTS)
        assert payments.score == 100
        assert payments.status is Status.PASS

    def test_committed_dotenv(self, make_pipeline):
        report = make_pipeline(
            {".env.local": "SECRET=1", ".gitignore": ".env\n", "server.js": "app.use(cors())"}
        ).scan(URL)
        security = report.category(Category.SECURITY)
        assert security.status is Status.CRITICAL
        assert any(".env.local" in finding for finding in security.findings)

    def test_wrong_host_is_rejected_before_any_subprocess(self, monkeypatch, workspace_dir):
        def forbidden(*args, **kwargs):
            raise AssertionError("subprocess must not be started")

        monkeypatch.setattr("shipscore.fetching.git.subprocess.Popen", forbidden)
        pipeline = ScanPipeline()

        with pytest.raises(InvalidReferenceError):
            pipeline.scan("https://example.com/owner/repo")

    def test_wrong_host_never_reaches_the_fetcher(self, make_pipeline, fixture_capability):
        capability = fixture_capability({"index.html": ""})
        with pytest.raises(InvalidReferenceError):
            make_pipeline(capability=capability).scan("https://example.com/owner/repo")
        assert capability.calls == []


class TestReport:
    def test_scans_are_idempotent(self, make_pipeline):
        files = {
            "package.json": {"dependencies": {"react": "18", "express": "4"}},
            "server.js": "const app = express(); app.get('/api/x')",
            ".gitignore": ".env",
        }
        pipeline = make_pipeline(files)
        assert pipeline.scan(URL).to_json() == pipeline.scan(URL).to_json()

    def test_categories_keep_report_order(self, make_pipeline):
        scorers = list(reversed(get_default_scorers()))
        report = make_pipeline({"index.html": STATIC_PAGE}, scorers=scorers).scan(URL)
        assert [c.category for c in report.categories] == list(Category)

    def test_wire_shape(self, make_pipeline):
        data = make_pipeline({"index.html": STATIC_PAGE}).scan(URL).to_dict()
        assert set(data) == {"shipScore", "stackDetection", "categories"}
        assert data["categories"][0] == {
            "name": "Frontend",
            "score": 20,
            "status": "warning",
            "findings": ["Static HTML frontend detected"],
            "suggestion": (
                "Add a modern frontend framework like React or Vue.js with proper build "
                "configuration"
            ),
            "fixAvailable": True,
        }


class TestFailures:
    """Every failure path maps to one error kind and leaves no workspace."""

    def test_rate_limited(self, make_pipeline, clock):
        pipeline = make_pipeline({"index.html": ""}, clock=clock, rate_limit_max_requests=2)
        pipeline.scan(URL, client_key="10.0.0.1")
        pipeline.scan(URL, client_key="10.0.0.1")

        with pytest.raises(RateLimitedError) as exc_info:
            pipeline.scan(URL, client_key="10.0.0.1")

        payload = exc_info.value.to_json()
        assert payload["error_code"] == "SS101"
        assert payload["retry_after"] == 3600
        pipeline.scan(URL, client_key="10.0.0.2")

    def test_too_large(self, make_pipeline, workspace_dir):
        pipeline = make_pipeline({"blob.bin": b"x" * 4096}, max_workspace_mb=0.001)
        with pytest.raises(TooLargeError):
            pipeline.scan(URL)
        assert list(workspace_dir.iterdir()) == []

    def test_deadline_expiry_after_fetch(
        self, make_pipeline, fixture_capability, clock, workspace_dir
    ):
        capability = fixture_capability(
            {"index.html": ""}, on_fetch=lambda reference: clock.advance(61)
        )
        pipeline = make_pipeline(capability=capability, clock=clock)

        with pytest.raises(ScanTimeoutError) as exc_info:
            pipeline.scan(URL)

        assert exc_info.value.stage == "index"
        assert exc_info.value.to_json()["retryable"] is True
        assert list(workspace_dir.iterdir()) == []

    def test_clone_gets_the_tighter_timeout(self, make_pipeline, fixture_capability, clock):
        capability = fixture_capability({"index.html": ""})
        pipeline = make_pipeline(
            capability=capability, clock=clock, clone_timeout_seconds=30, scan_timeout_seconds=10
        )
        pipeline.scan(URL)
        _, timeout = capability.calls[0]
        assert timeout == 10

    def test_unexpected_error_is_internal_failure(self, make_pipeline, workspace_dir):
        class BrokenScorer(CategoryScorer):
            category = Category.BACKEND

            def score(self, context):
                raise RuntimeError(f"boom in {context.index.root}")

        scorers = get_default_scorers()
        scorers[1] = BrokenScorer(scorers[1].thresholds)
        pipeline = make_pipeline({"index.html": ""}, scorers=scorers)

        with pytest.raises(InternalFailureError) as exc_info:
            pipeline.scan(URL)

        payload = exc_info.value.to_json()
        assert payload == {
            "error_code": "SS900",
            "message": "Internal error while scanning the repository.",
            "retryable": False,
        }
        assert list(workspace_dir.iterdir()) == []

    def test_slow_scoring_times_out(self, make_pipeline, workspace_dir):
        release = threading.Event()

        class SlowScorer(CategoryScorer):
            category = Category.DATABASE

            def score(self, context):
                release.wait(5)
                raise RuntimeError("released")

        scorers = get_default_scorers()
        scorers[3] = SlowScorer(scorers[3].thresholds)
        pipeline = make_pipeline({"index.html": ""}, scorers=scorers, scan_timeout_seconds=0.5)

        try:
            with pytest.raises(ScanTimeoutError) as exc_info:
                pipeline.scan(URL)
            assert exc_info.value.stage == "score"
            assert list(workspace_dir.iterdir()) == []
        finally:
            release.set()


class TestDeadline:
    def test_remaining_and_expiry(self, clock):
        deadline = Deadline(10, clock)
        clock.advance(4)
        assert deadline.remaining == 6
        assert not deadline.expired
        clock.advance(6)
        assert deadline.expired
        with pytest.raises(ScanTimeoutError):
            deadline.check("score")


class TestScanService:
    def test_submit_returns_report(self, make_pipeline):
        with ScanService(make_pipeline({"index.html": STATIC_PAGE})) as service:
            report = service.submit(URL).result(timeout=10)
        assert report.ship_score == 12

    def test_hung_fetch_does_not_block_other_scans(self, make_pipeline, fixture_capability):
        release = threading.Event()

        def block_slow(reference):
            if reference.name == "slow":
                release.wait(10)

        capability = fixture_capability({"index.html": STATIC_PAGE}, on_fetch=block_slow)
        service = ScanService(make_pipeline(capability=capability), max_workers=2)
        try:
            slow = service.submit("https://github.com/octocat/slow")
            fast = service.submit("https://github.com/octocat/fast")
            assert fast.result(timeout=10).ship_score == 12
            assert not slow.done()
        finally:
            release.set()
            service.shutdown()
        assert slow.result(timeout=10).ship_score == 12


class TestApi:
    def test_invalid_reference(self):
        with pytest.raises(InvalidReferenceError):
            api.scan("https://example.com/owner/repo")

    def test_invalid_override(self):
        with pytest.raises(ConfigurationError):
            api.scan(URL, scan_timeout_seconds=0)
