"""Rule-based category scorer: evaluates one CategoryRules table."""

from __future__ import annotations

from itertools import groupby
from typing import Iterator, Optional

from ..config import Thresholds
from ..models import NONE_DETECTED, CategoryScore
from .base import CategoryScorer, ScanContext, clamp_score, classify
from .rules import CategoryRules, Rule, RuleKind


def evaluate_rule(rule: Rule, context: ScanContext) -> Optional[str]:
    """
    Evaluate one rule against the scan context.

    Returns:
        The rendered finding if the rule matched, else None
    """
    if rule.requires_manifest and not context.manifest.present:
        return None

    index = context.index
    if rule.kind is RuleKind.DEPENDENCY:
        matches = [t for t in rule.targets if context.manifest.declares(t)]
        if matches:
            return rule.finding.format(matches=", ".join(matches))
        return None

    if rule.kind is RuleKind.STACK:
        value = getattr(context.stack, rule.targets[0])
        if value and value != NONE_DETECTED:
            return rule.finding.format(value=value)
        return None

    if rule.kind is RuleKind.FILE_EXISTS:
        matched = any(index.exists(t) for t in rule.targets)
    elif rule.kind is RuleKind.FILE_SEARCH:
        matched = bool(index.find(rule.extensions, rule.targets or None))
    elif rule.kind is RuleKind.CONTENT_ANY:
        matched = index.content_contains_any(rule.targets, rule.extensions or None)
    elif rule.kind is RuleKind.CONTENT_ALL:
        matched = index.content_contains_all(rule.targets, rule.extensions or None)
    elif rule.kind is RuleKind.SCRIPT:
        matched = any(context.manifest.has_script(t) for t in rule.targets)
    else:
        raise ValueError(f"Unknown rule kind: {rule.kind}")

    return rule.finding if matched else None


def iter_alternatives(rules: tuple[Rule, ...]) -> Iterator[tuple[Rule, ...]]:
    """Split a table into units: a lone rule, or a run of same-group rules."""
    for group, members in groupby(rules, key=lambda r: r.group):
        if group is None:
            for rule in members:
                yield (rule,)
        else:
            yield tuple(members)


class RuleBasedScorer(CategoryScorer):
    """Sums the points of matching rules from a category table.

    Rules of one group must be adjacent in the table.
    """

    def __init__(self, table: CategoryRules, thresholds: Thresholds):
        super().__init__(thresholds)
        self.table = table
        self.category = table.category

    def score(self, context: ScanContext) -> CategoryScore:
        total = 0
        findings: list[str] = []
        matched_groups: set[str] = set()

        for unit in iter_alternatives(self.table.rules):
            for rule in unit:
                finding = evaluate_rule(rule, context)
                if finding is not None:
                    total += rule.points
                    findings.append(finding)
                    if rule.group is not None:
                        matched_groups.add(rule.group)
                    break
            else:
                miss = next((r.on_miss for r in unit if r.on_miss), None)
                if miss:
                    findings.append(miss)

        if total == 0 and self.table.empty_finding:
            findings.append(self.table.empty_finding)

        score = clamp_score(total)
        status = classify(score, self.thresholds)
        floor = self.table.status_floor
        if floor is not None and self.table.floor_group in matched_groups:
            if status.rank < floor.rank:
                status = floor

        low = score < self.thresholds.pass_at
        return CategoryScore(
            category=self.category,
            score=score,
            status=status,
            findings=tuple(findings),
            suggestion=self.table.suggestion_low if low else self.table.suggestion_ok,
            fix_available=low,
        )
