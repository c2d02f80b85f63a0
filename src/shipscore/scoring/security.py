"""Security scorer: starts at 100 and deducts for risky repository contents."""

from __future__ import annotations

import math
import re
from collections import Counter
from typing import Optional

from ..config import SecretScanConfig, Thresholds
from ..logging_config import get_logger
from ..models import Category, CategoryScore, Status
from ..scanning import FileIndex
from . import rules as R
from .base import CategoryScorer, ScanContext, clamp_score, classify

logger = get_logger(__name__)

DEFAULT_SECRET_SCAN_FILE_CAP = 200


def shannon_entropy(text: str) -> float:
    """
    Compute Shannon entropy H(X) = -Σ p(x) log₂ p(x) over the characters of ``text``.

    Returns:
        Entropy in bits per character (0.0 for empty text)
    """
    if not text:
        return 0.0
    total = len(text)
    entropy = 0.0
    for count in Counter(text).values():
        p = count / total
        entropy -= p * math.log2(p)
    return entropy


class SecretDetector:
    """Finds provider-shaped secret literals and high-entropy opaque tokens."""

    def __init__(self, config: Optional[SecretScanConfig] = None):
        self.config = config or SecretScanConfig()
        self._generic = re.compile(rf"[A-Za-z0-9]{{{self.config.generic_token_min_length},}}")

    def _has_generic_token(self, content: str) -> bool:
        if not self.config.generic_token_enabled:
            return False
        threshold = self.config.generic_token_min_entropy
        return any(
            shannon_entropy(m.group(0)) >= threshold for m in self._generic.finditer(content)
        )

    def contains_secret(self, content: str) -> bool:
        if any(pattern.search(content) for _, pattern in R.SECRET_PATTERNS):
            return True
        return self._has_generic_token(content)


def is_example_file(path: str) -> bool:
    name = path.rsplit("/", 1)[-1]
    return any(marker in name for marker in R.EXAMPLE_FILE_MARKERS)


def committed_dotenv_files(index: FileIndex) -> list[str]:
    return [name for name in R.DOTENV_FILES if index.exists(name)]


def files_with_secrets(
    index: FileIndex, detector: SecretDetector, file_cap: int = DEFAULT_SECRET_SCAN_FILE_CAP
) -> list[str]:
    """Source files (bounded by ``file_cap``) that contain a secret-shaped literal."""
    candidates = [p for p in index.find(R.SECRET_SCAN_EXTENSIONS) if not is_example_file(p)]
    return [p for p in candidates[:file_cap] if detector.contains_secret(index.read_text(p))]


class SecurityScorer(CategoryScorer):
    """Deduction-based scorer. Committed dotenv files and secret literals force critical.

    Findings name offending files but never quote the matched text.
    """

    category = Category.SECURITY

    def __init__(
        self,
        thresholds: Thresholds,
        secrets: Optional[SecretScanConfig] = None,
        secret_scan_file_cap: int = DEFAULT_SECRET_SCAN_FILE_CAP,
    ):
        super().__init__(thresholds)
        self.detector = SecretDetector(secrets)
        self.secret_scan_file_cap = secret_scan_file_cap

    def score(self, context: ScanContext) -> CategoryScore:
        index = context.index
        score = 100
        findings: list[str] = []
        forced_critical = False

        dotenv = committed_dotenv_files(index)
        if dotenv:
            score -= R.DOTENV_DEDUCTION
            findings.extend(f"CRITICAL: {name} file committed to repository" for name in dotenv)
            forced_critical = True

        for path in files_with_secrets(index, self.detector, self.secret_scan_file_cap):
            score -= R.SECRET_DEDUCTION
            findings.append(f"Potential hardcoded API key found in {path}")
            forced_critical = True

        if not index.exists(R.GITIGNORE):
            score -= R.MISSING_GITIGNORE_DEDUCTION
            findings.append("No .gitignore file found")
        elif ".env" not in index.read_text(R.GITIGNORE):
            score -= R.UNIGNORED_DOTENV_DEDUCTION
            findings.append(".env files not ignored in .gitignore")

        if index.content_contains_any(R.SECURITY_MIDDLEWARE_TERMS):
            findings.append("Security middleware (CORS/Helmet) detected")

        score = clamp_score(score)
        status = Status.CRITICAL if forced_critical else classify(score, self.thresholds)
        if forced_critical:
            logger.debug("Security forced critical (%d findings)", len(findings))

        low = score < self.thresholds.pass_at
        return CategoryScore(
            category=self.category,
            score=score,
            status=status,
            findings=tuple(findings),
            suggestion=R.SECURITY_SUGGESTION_LOW if low else R.SECURITY_SUGGESTION_OK,
            fix_available=low,
        )
