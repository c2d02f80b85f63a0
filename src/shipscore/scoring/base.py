"""Base class for category scorers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from ..config import Thresholds
from ..models import Category, CategoryScore, StackDetection, Status
from ..scanning import FileIndex, PackageManifest


@dataclass(frozen=True)
class ScanContext:
    """Read-only inputs shared by every scorer in one scan."""

    index: FileIndex
    stack: StackDetection
    manifest: PackageManifest


def clamp_score(score: int) -> int:
    return max(0, min(100, score))


def classify(score: int, thresholds: Thresholds) -> Status:
    if score >= thresholds.pass_at:
        return Status.PASS
    if score >= thresholds.warn_at:
        return Status.WARNING
    return Status.CRITICAL


class CategoryScorer(ABC):
    """Scores one category from a ScanContext.

    Implementations must not mutate the context: scorers of one scan run
    concurrently over the same index.
    """

    category: Category

    def __init__(self, thresholds: Thresholds):
        self.thresholds = thresholds

    @property
    def name(self) -> str:
        return self.category.value

    @abstractmethod
    def score(self, context: ScanContext) -> CategoryScore: ...
