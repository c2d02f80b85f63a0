"""Aggregator: weighted composite of category scores."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Mapping

from ..models import Category, CategoryScore


def aggregate(scores: Iterable[CategoryScore], weights: Mapping[Category, float]) -> int:
    """
    Combine category scores into the Ship Score.

    Uses exact decimal arithmetic, so the result does not depend on the
    order of ``scores``. Categories without a score contribute 0; scores
    without a weight are ignored.

    Args:
        scores: One CategoryScore per category
        weights: Category -> weight, expected to sum to 1.0

    Returns:
        Weighted sum rounded half up, within [0, 100]
    """
    total = Decimal(0)
    for item in scores:
        weight = weights.get(item.category)
        if weight is None:
            continue
        total += Decimal(item.score) * Decimal(str(weight))
    rounded = int(total.quantize(Decimal(1), rounding=ROUND_HALF_UP))
    return max(0, min(100, rounded))
