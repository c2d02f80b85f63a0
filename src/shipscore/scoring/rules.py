"""Declarative scoring rules, one table per category.

Every dependency name, marker string and point value used by the rule-based
scorers lives here. Security is scored separately (see ``security.py``) but
keeps its patterns and deductions in this module too.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..models import Category, Status


class RuleKind(Enum):
    DEPENDENCY = "dependency"  # any target in package.json deps/devDeps
    FILE_EXISTS = "file_exists"  # any target path exists
    FILE_SEARCH = "file_search"  # a file with one of ``extensions`` (names in targets)
    CONTENT_ANY = "content_any"  # any target term in capped content files
    CONTENT_ALL = "content_all"  # every target term in capped content files
    SCRIPT = "script"  # any target script in package.json
    STACK = "stack"  # StackDetection attribute ``targets[0]`` is set


@dataclass(frozen=True)
class Rule:
    """One scoring rule.

    ``finding`` may reference ``{value}`` (STACK: the attribute value) or
    ``{matches}`` (DEPENDENCY: matched names, comma separated). Rules with
    the same ``group`` are alternatives: the first match wins, and the
    group's ``on_miss`` is recorded when none match.
    """

    kind: RuleKind
    points: int
    finding: str
    targets: tuple[str, ...] = ()
    extensions: tuple[str, ...] = ()
    group: Optional[str] = None
    requires_manifest: bool = False
    on_miss: Optional[str] = None


@dataclass(frozen=True)
class CategoryRules:
    category: Category
    rules: tuple[Rule, ...]
    suggestion_low: str
    suggestion_ok: str
    empty_finding: Optional[str] = None
    # Minimum status while any rule of ``floor_group`` matched.
    status_floor: Optional[Status] = None
    floor_group: Optional[str] = None


SOURCE_EXTENSIONS = (".js", ".ts", ".py")

FRONTEND = CategoryRules(
    category=Category.FRONTEND,
    rules=(
        Rule(
            RuleKind.STACK,
            40,
            "{value} framework detected",
            targets=("framework",),
            group="surface",
        ),
        Rule(
            RuleKind.FILE_EXISTS,
            20,
            "Static HTML frontend detected",
            targets=("index.html",),
            group="surface",
            on_miss="No frontend files detected",
        ),
        Rule(RuleKind.STACK, 30, "Build tool configured: {value}", targets=("build_tool",)),
        Rule(
            RuleKind.DEPENDENCY,
            20,
            "Styling framework/CSS detected",
            targets=("tailwindcss",),
            group="styling",
            requires_manifest=True,
        ),
        Rule(
            RuleKind.FILE_SEARCH,
            20,
            "Styling framework/CSS detected",
            extensions=(".css",),
            group="styling",
            requires_manifest=True,
        ),
        Rule(
            RuleKind.CONTENT_ANY,
            10,
            "Responsive design patterns found",
            targets=("viewport", "responsive", "@media"),
        ),
    ),
    suggestion_low=(
        "Add a modern frontend framework like React or Vue.js with proper build configuration"
    ),
    suggestion_ok="Frontend looks good",
    status_floor=Status.WARNING,
    floor_group="surface",
)

BACKEND = CategoryRules(
    category=Category.BACKEND,
    rules=(
        Rule(
            RuleKind.FILE_SEARCH,
            30,
            "Backend entry points detected",
            targets=("server", "app", "main", "index"),
            extensions=SOURCE_EXTENSIONS,
        ),
        Rule(
            RuleKind.CONTENT_ANY,
            40,
            "Node.js server framework detected",
            targets=("express()", "app.listen", "fastify()"),
            group="server",
        ),
        Rule(
            RuleKind.CONTENT_ANY,
            40,
            "Python web framework detected",
            targets=("Flask", "Django", "FastAPI"),
            group="server",
        ),
        Rule(
            RuleKind.CONTENT_ANY,
            30,
            "API routes detected",
            targets=("/api/", "app.get", "app.post", "@app.route"),
            on_miss="No API routes found",
        ),
    ),
    suggestion_low="Add a backend server with API endpoints using Express.js or similar",
    suggestion_ok="Backend implementation looks good",
    empty_finding="No backend detected",
)

AUTH_LIBRARIES = (
    "@clerk/nextjs",
    "@clerk/react",
    "@auth0/auth0-react",
    "next-auth",
    "firebase",
    "@supabase/auth-helpers",
    "passport",
    "jsonwebtoken",
    "bcrypt",
)

AUTHENTICATION = CategoryRules(
    category=Category.AUTHENTICATION,
    rules=(
        Rule(
            RuleKind.DEPENDENCY,
            60,
            "Authentication library detected: {matches}",
            targets=AUTH_LIBRARIES,
            requires_manifest=True,
        ),
        Rule(
            RuleKind.CONTENT_ALL,
            20,
            "Login functionality detected",
            targets=("login", "password"),
        ),
        Rule(
            RuleKind.CONTENT_ANY,
            20,
            "Token/session management detected",
            targets=("jwt", "token", "session"),
        ),
    ),
    suggestion_low="Add authentication with Clerk, Auth0, or NextAuth.js",
    suggestion_ok="Authentication system in place",
    empty_finding="No authentication system detected",
)

ORM_LIBRARIES = ("prisma", "@prisma/client", "drizzle-orm", "mongoose", "typeorm", "sequelize")
DATABASE_CLIENTS = (
    "@supabase/supabase-js",
    "firebase",
    "mongodb",
    "mysql2",
    "pg",
    "sqlite3",
    "better-sqlite3",
)

DATABASE = CategoryRules(
    category=Category.DATABASE,
    rules=(
        Rule(
            RuleKind.DEPENDENCY,
            50,
            "ORM detected: {matches}",
            targets=ORM_LIBRARIES,
            requires_manifest=True,
        ),
        Rule(
            RuleKind.DEPENDENCY,
            30,
            "Database client detected: {matches}",
            targets=DATABASE_CLIENTS,
            requires_manifest=True,
        ),
        Rule(
            RuleKind.FILE_EXISTS,
            20,
            "Database schema files detected",
            targets=("prisma/schema.prisma", "drizzle.config.js", "drizzle.config.ts"),
            group="schema",
        ),
        Rule(
            RuleKind.FILE_SEARCH,
            20,
            "Database schema files detected",
            extensions=(".sql",),
            group="schema",
        ),
    ),
    suggestion_low="Add database integration with Prisma, Supabase, or similar",
    suggestion_ok="Database integration looks good",
    empty_finding="No database integration detected",
)

PAYMENTS = CategoryRules(
    category=Category.PAYMENTS,
    rules=(
        Rule(
            RuleKind.DEPENDENCY,
            100,
            "Stripe payment integration detected",
            targets=("stripe", "@stripe/stripe-js"),
            group="provider",
            requires_manifest=True,
        ),
        Rule(
            RuleKind.DEPENDENCY,
            100,
            "Paddle payment integration detected",
            targets=("@paddle/paddle-js",),
            group="provider",
            requires_manifest=True,
        ),
        Rule(
            RuleKind.DEPENDENCY,
            100,
            "Lemon Squeezy payment integration detected",
            targets=("@lemon-squeezy/lemon-squeezy-js",),
            group="provider",
            requires_manifest=True,
        ),
    ),
    suggestion_low="Consider adding payment processing with Stripe for monetization",
    suggestion_ok="Payment system integrated",
    empty_finding="No payment system detected",
)

PORT_BINDING_TERMS = (
    "process.env.PORT",
    'os.environ["PORT"]',
    "os.environ['PORT']",
    'os.environ.get("PORT"',
    "os.environ.get('PORT'",
    'os.getenv("PORT"',
    "os.getenv('PORT'",
)

DEPLOYMENT = CategoryRules(
    category=Category.DEPLOYMENT,
    rules=(
        Rule(RuleKind.SCRIPT, 25, "Build script configured", targets=("build",)),
        Rule(RuleKind.SCRIPT, 25, "Start script configured", targets=("start",)),
        Rule(
            RuleKind.CONTENT_ANY,
            20,
            "PORT environment variable handling detected",
            targets=PORT_BINDING_TERMS,
        ),
        Rule(RuleKind.FILE_EXISTS, 30, "Dockerfile present", targets=("Dockerfile",)),
        Rule(
            RuleKind.FILE_EXISTS,
            0,
            "Deployment configuration file detected",
            targets=("vercel.json", "netlify.toml", ".railway.json", "fly.toml", "render.yaml"),
        ),
    ),
    suggestion_low="Add build/start scripts and environment variable handling for deployment",
    suggestion_ok="Ready for deployment",
    empty_finding="No deployment configuration detected",
)

RULE_TABLES: tuple[CategoryRules, ...] = (
    FRONTEND,
    BACKEND,
    AUTHENTICATION,
    DATABASE,
    PAYMENTS,
    DEPLOYMENT,
)


# ── Security ───────────────────────────────────────────────────────

DOTENV_FILES = (".env", ".env.local", ".env.production", ".env.development")
DOTENV_DEDUCTION = 50

SECRET_SCAN_EXTENSIONS = (".js", ".ts", ".jsx", ".tsx", ".py")
SECRET_DEDUCTION = 30
# Files whose names carry one of these markers hold placeholders, not secrets.
EXAMPLE_FILE_MARKERS = (".example", ".sample", ".template")

# Provider-shaped secret literals; the generic fallback is configured separately.
SECRET_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("Stripe secret key", re.compile(r"sk_[a-zA-Z0-9]{24,}")),
    ("Stripe publishable key", re.compile(r"pk_[a-zA-Z0-9]{24,}")),
    ("GitHub token", re.compile(r"ghp_[a-zA-Z0-9]{36}")),
    ("AWS access key", re.compile(r"AKIA[A-Z0-9]{16}")),
)

GITIGNORE = ".gitignore"
MISSING_GITIGNORE_DEDUCTION = 20
UNIGNORED_DOTENV_DEDUCTION = 15
SECURITY_MIDDLEWARE_TERMS = ("cors", "helmet")

SECURITY_SUGGESTION_LOW = (
    "Review security practices: avoid committing secrets, add .gitignore, "
    "use environment variables"
)
SECURITY_SUGGESTION_OK = "Security practices look good"
