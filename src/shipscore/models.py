"""Value objects shared across the scan pipeline.

Everything here is immutable. A ``ShipScoreReport`` is the only artifact
that leaves the core; ``to_dict`` gives its wire shape.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

NONE_DETECTED = "None"


class Category(Enum):
    """The seven readiness dimensions, in report order."""

    FRONTEND = "Frontend"
    BACKEND = "Backend"
    AUTHENTICATION = "Authentication"
    DATABASE = "Database"
    PAYMENTS = "Payments"
    SECURITY = "Security"
    DEPLOYMENT = "Deployment Ready"

    @property
    def key(self) -> str:
        """Snake-case name used in config files and env vars."""
        return "deployment_ready" if self is Category.DEPLOYMENT else self.name.lower()

    @classmethod
    def from_key(cls, key: str) -> "Category":
        for category in cls:
            if category.key == key or category.value == key:
                return category
        raise KeyError(key)


class Status(Enum):
    PASS = "pass"
    WARNING = "warning"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return {"critical": 0, "warning": 1, "pass": 2}[self.value]


@dataclass(frozen=True)
class StackDetection:
    """Technologies inferred from manifests and the file index.

    Attributes:
        technologies: Detected technology names in detection order
        has_package_json: A Node manifest exists at the root
        has_dockerfile: A Dockerfile exists at the root
        has_typescript: tsconfig.json or any .ts/.tsx file
        framework: First frontend framework by priority, or "None"
        build_tool: First build tool by priority, or "None"
    """

    technologies: tuple[str, ...] = ()
    has_package_json: bool = False
    has_dockerfile: bool = False
    has_typescript: bool = False
    framework: str = NONE_DETECTED
    build_tool: str = NONE_DETECTED

    @property
    def presence(self) -> Mapping[str, bool]:
        return {name: True for name in self.technologies}

    def has(self, technology: str) -> bool:
        return technology in self.technologies

    def to_dict(self) -> dict[str, Any]:
        return {
            "technologies": list(self.technologies),
            "hasPackageJson": self.has_package_json,
            "hasDockerfile": self.has_dockerfile,
            "hasTypeScript": self.has_typescript,
            "framework": self.framework,
            "buildTool": self.build_tool,
        }


@dataclass(frozen=True)
class CategoryScore:
    """Result of one category scorer."""

    category: Category
    score: int
    status: Status
    findings: tuple[str, ...] = ()
    suggestion: str = ""
    fix_available: bool = False

    def __post_init__(self) -> None:
        if not 0 <= self.score <= 100:
            raise ValueError(f"score must be within [0, 100], got {self.score}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.category.value,
            "score": self.score,
            "status": self.status.value,
            "findings": list(self.findings),
            "suggestion": self.suggestion,
            "fixAvailable": self.fix_available,
        }


@dataclass(frozen=True)
class ShipScoreReport:
    """Composite readiness report for one repository."""

    ship_score: int
    stack: StackDetection
    categories: tuple[CategoryScore, ...] = field(default_factory=tuple)

    def category(self, category: Category) -> CategoryScore | None:
        for item in self.categories:
            if item.category is category:
                return item
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "shipScore": self.ship_score,
            "stackDetection": self.stack.to_dict(),
            "categories": [c.to_dict() for c in self.categories],
        }

    def to_json(self, indent: int | None = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)
