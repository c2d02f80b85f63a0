"""Scan pipeline: admission -> fetch -> index -> detect -> score -> aggregate.

One ``ScanPipeline.scan`` call is one request. The only state shared
between scans is the Admission Guard; the workspace, index and scores
belong to the call and the workspace is reclaimed on every exit path.
"""

from __future__ import annotations

import secrets
import time
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from typing import Callable, Optional, Sequence

from .admission import AdmissionGuard
from .config import ScanConfig
from .detection import detect_stack
from .exceptions import InternalFailureError, RateLimitedError, ScanError, ScanTimeoutError
from .fetching import SourceFetcher, Workspace, parse_reference
from .logging_config import get_logger
from .models import Category, CategoryScore, ShipScoreReport
from .scanning import build_index, load_package_manifest
from .scoring import CategoryScorer, ScanContext, aggregate, get_default_scorers

logger = get_logger(__name__)

Clock = Callable[[], float]


class Deadline:
    """Wall-clock budget for one scan."""

    def __init__(self, seconds: float, clock: Clock = time.monotonic):
        self.seconds = seconds
        self._clock = clock
        self._started = clock()

    @property
    def elapsed(self) -> float:
        return self._clock() - self._started

    @property
    def remaining(self) -> float:
        return max(0.0, self.seconds - self.elapsed)

    @property
    def expired(self) -> bool:
        return self.remaining <= 0

    def check(self, stage: str) -> None:
        """Raise ScanTimeoutError if the budget is spent before ``stage``."""
        if self.expired:
            raise ScanTimeoutError(stage, self.seconds)


class ScanPipeline:
    """Runs scans end to end.

    Args:
        config: Scan configuration (defaults if None)
        fetcher: Source fetcher (git clone with configured bounds if None)
        guard: Admission guard shared by every scan of this pipeline
        scorers: Category scorers (one per category, defaults if None)
        clock: Monotonic clock for the scan deadline
    """

    def __init__(
        self,
        config: Optional[ScanConfig] = None,
        fetcher: Optional[SourceFetcher] = None,
        guard: Optional[AdmissionGuard] = None,
        scorers: Optional[Sequence[CategoryScorer]] = None,
        clock: Clock = time.monotonic,
    ):
        self.config = config or ScanConfig()
        self.fetcher = fetcher or SourceFetcher(
            clone_timeout_seconds=self.config.clone_timeout_seconds,
            max_workspace_bytes=self.config.max_workspace_bytes,
            workspace_dir=self.config.workspace_dir,
        )
        self.guard = guard or AdmissionGuard(
            window_seconds=self.config.rate_limit_window_seconds,
            max_requests=self.config.rate_limit_max_requests,
        )
        self.scorers = list(scorers) if scorers is not None else get_default_scorers(self.config)
        self._clock = clock

    def scan(self, reference: str, client_key: str = "local") -> ShipScoreReport:
        """
        Scan one repository.

        Args:
            reference: Repository URL (https://github.com/<owner>/<name>)
            client_key: Identity used for admission

        Returns:
            ShipScoreReport

        Raises:
            RateLimitedError: The client is over quota
            InvalidReferenceError: The reference is not an accepted URL
            UnreachableError, TooLargeError, ScanTimeoutError: Fetch failures
            InternalFailureError: Anything unexpected
        """
        scan_id = secrets.token_hex(4)
        deadline = Deadline(self.config.scan_timeout_seconds, self._clock)

        admission = self.guard.admit(client_key)
        if not admission.allowed:
            raise RateLimitedError(client_key, admission.retry_after_seconds)

        parsed = parse_reference(reference)
        logger.info("[%s] Scanning %s", scan_id, parsed.slug)

        workspace: Optional[Workspace] = None
        try:
            deadline.check("fetch")
            workspace = self.fetcher.fetch(parsed, timeout_seconds=deadline.remaining)

            deadline.check("index")
            index = build_index(
                workspace.root,
                max_files=self.config.max_index_files,
                max_read_bytes=self.config.max_read_bytes,
                file_scan_cap=self.config.content_scan_file_cap,
            )

            deadline.check("detect")
            stack = detect_stack(index)
            context = ScanContext(index=index, stack=stack, manifest=load_package_manifest(index))

            deadline.check("score")
            scores = self._score(context, deadline)

            report = ShipScoreReport(
                ship_score=aggregate(scores, self.config.scoring.weights),
                stack=stack,
                categories=scores,
            )
            logger.info(
                "[%s] %s scored %d in %.2fs",
                scan_id,
                parsed.slug,
                report.ship_score,
                deadline.elapsed,
            )
            return report
        except ScanError:
            raise
        except Exception as e:
            logger.exception("[%s] Unexpected failure scanning %s", scan_id, parsed.slug)
            raise InternalFailureError(type(e).__name__) from e
        finally:
            if workspace is not None:
                workspace.reclaim()

    def _score(self, context: ScanContext, deadline: Deadline) -> tuple[CategoryScore, ...]:
        """Run every scorer concurrently; results come back in category order."""
        executor = ThreadPoolExecutor(
            max_workers=min(self.config.scorer_workers, max(1, len(self.scorers))),
            thread_name_prefix="shipscore-scorer",
        )
        try:
            futures: dict[Future, CategoryScorer] = {
                executor.submit(scorer.score, context): scorer for scorer in self.scorers
            }
            done, pending = wait(futures, timeout=deadline.remaining, return_when=FIRST_EXCEPTION)
            if pending and not any(f.exception() for f in done):
                names = ", ".join(futures[f].name for f in pending)
                logger.warning("Scoring exceeded the scan deadline (pending: %s)", names)
                raise ScanTimeoutError("score", deadline.seconds)

            results = [f.result() for f in done]
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        order = list(Category)
        return tuple(sorted(results, key=lambda s: order.index(s.category)))


class ScanService:
    """Runs scans of one pipeline on a bounded worker pool.

    A slow or hung fetch occupies a single worker; other submitted scans
    proceed on the remaining workers.
    """

    def __init__(self, pipeline: Optional[ScanPipeline] = None, max_workers: Optional[int] = None):
        self.pipeline = pipeline or ScanPipeline()
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers or self.pipeline.config.max_concurrent_scans,
            thread_name_prefix="shipscore-scan",
        )

    def submit(self, reference: str, client_key: str = "local") -> Future:
        """Schedule a scan; the future resolves to a ShipScoreReport or raises ScanError."""
        return self._executor.submit(self.pipeline.scan, reference, client_key)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "ScanService":
        return self

    def __exit__(self, *exc) -> None:
        self.shutdown()
