"""Category scorer registry."""

from __future__ import annotations

from typing import Optional

from ..config import ScanConfig
from ..models import Category
from .base import CategoryScorer
from .evaluator import RuleBasedScorer
from .rules import RULE_TABLES
from .security import SecurityScorer


def get_default_scorers(config: Optional[ScanConfig] = None) -> list[CategoryScorer]:
    """One scorer per category, in report order."""
    config = config or ScanConfig()
    scoring = config.scoring

    scorers: list[CategoryScorer] = [
        RuleBasedScorer(table, scoring.thresholds_for(table.category)) for table in RULE_TABLES
    ]
    scorers.append(
        SecurityScorer(
            scoring.thresholds_for(Category.SECURITY),
            secrets=scoring.secrets,
            secret_scan_file_cap=config.secret_scan_file_cap,
        )
    )
    order = list(Category)
    return sorted(scorers, key=lambda s: order.index(s.category))


def get_scorer(category: Category, config: Optional[ScanConfig] = None) -> CategoryScorer:
    """Look up the default scorer for one category."""
    for scorer in get_default_scorers(config):
        if scorer.category is category:
            return scorer
    raise KeyError(f"Unknown category: {category!r}")
