"""Category scoring: declarative rule tables, evaluators and the aggregator."""

from .aggregator import aggregate
from .base import CategoryScorer, ScanContext, classify, clamp_score
from .evaluator import RuleBasedScorer, evaluate_rule
from .registry import get_default_scorers, get_scorer
from .rules import RULE_TABLES, CategoryRules, Rule, RuleKind
from .security import SecretDetector, SecurityScorer, shannon_entropy

__all__ = [
    "RULE_TABLES",
    "CategoryRules",
    "CategoryScorer",
    "Rule",
    "RuleBasedScorer",
    "RuleKind",
    "ScanContext",
    "SecretDetector",
    "SecurityScorer",
    "aggregate",
    "clamp_score",
    "classify",
    "evaluate_rule",
    "get_default_scorers",
    "get_scorer",
    "shannon_entropy",
]
