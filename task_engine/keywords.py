"""
Keyword tables used to classify and score work items.

Every scorer and classifier reads its vocabulary from here so the tables
can be reviewed and tested in one place.
"""

from __future__ import annotations

import re

# Complexity analysis
TECHNICAL_KEYWORDS: tuple[str, ...] = (
    "api",
    "database",
    "migration",
    "refactor",
    "architecture",
    "integration",
    "security",
    "performance",
    "scalability",
    "microservice",
    "deployment",
    "testing",
    "automation",
)
MAX_TECHNICAL_BONUS = 3

COMPLEXITY_LABELS: tuple[str, ...] = ("epic", "large", "complex", "research", "spike")

# Priority scoring, checked by substring so "priority: high" matches "high"
PRIORITY_LABELS: dict[str, float] = {
    "critical": 1.0,
    "high": 0.8,
    "medium": 0.6,
    "low": 0.4,
    "lowest": 0.2,
}
BUG_LABELS: tuple[str, ...] = ("bug", "fix")
EPIC_LABELS: tuple[str, ...] = ("epic",)

# Readiness
BLOCKING_LABELS: tuple[str, ...] = (
    "blocked",
    "waiting",
    "needs-info",
    "dependencies",
    "on-hold",
)
DEPENDENCY_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"depends\s+on\s+#\d+", re.IGNORECASE),
    re.compile(r"blocked\s+by\s+#\d+", re.IGNORECASE),
    re.compile(r"waiting\s+for", re.IGNORECASE),
    re.compile(r"needs\s+#\d+", re.IGNORECASE),
)

# Skill domains
SKILL_KEYWORDS: dict[str, tuple[str, ...]] = {
    "frontend": (
        "frontend", "ui", "ux", "react", "vue", "angular", "css", "html",
        "javascript", "typescript",
    ),
    "backend": (
        "backend", "api", "server", "database", "sql", "node", "python", "java",
        "go", "rust",
    ),
    "devops": (
        "devops", "deploy", "infrastructure", "docker", "kubernetes", "ci/cd",
        "pipeline", "aws", "cloud",
    ),
    "mobile": ("mobile", "ios", "android", "react-native", "flutter", "swift", "kotlin"),
    "testing": ("test", "testing", "qa", "automation", "selenium", "jest", "cypress"),
    "design": ("design", "ui", "ux", "figma", "sketch", "prototype"),
    "data": ("data", "analytics", "ml", "ai", "machine learning", "bigquery", "pandas"),
}

# Template selection, checked against labels and title in this order
BUG_INDICATORS: tuple[str, ...] = ("bug", "fix", "error")
REFACTOR_INDICATORS: tuple[str, ...] = ("refactor", "improve", "optimize", "cleanup")

# Item context
FEATURE_LABELS: tuple[str, ...] = ("feature", "enhancement")
FEATURE_TITLE_WORDS: tuple[str, ...] = ("add", "implement")
INFRASTRUCTURE_LABELS: tuple[str, ...] = ("infrastructure", "devops")
RESEARCH_LABELS: tuple[str, ...] = ("research", "spike")
DOCUMENTATION_LABELS: tuple[str, ...] = ("documentation",)
DOCUMENTATION_TITLE_WORDS: tuple[str, ...] = ("docs", "readme")
TESTING_LABELS: tuple[str, ...] = ("testing", "test")

FRONTEND_LABELS: tuple[str, ...] = ("frontend", "ui", "ux")
BACKEND_LABELS: tuple[str, ...] = ("backend", "api", "server")
DATABASE_LABELS: tuple[str, ...] = ("database", "db")
MOBILE_LABELS: tuple[str, ...] = ("mobile", "ios", "android")

API_INTEGRATION_TERMS: tuple[str, ...] = ("api", "integration")
DATA_MIGRATION_TERMS: tuple[str, ...] = ("migration", "migrate")
SECURITY_TERMS: tuple[str, ...] = ("security", "auth")
PERFORMANCE_TERMS: tuple[str, ...] = ("performance", "optimization")


def contains_any(text: str, keywords: tuple[str, ...]) -> bool:
    """Whether ``text`` contains any of ``keywords`` as a substring."""
    return any(keyword in text for keyword in keywords)


def any_label_contains(labels: tuple[str, ...], keywords: tuple[str, ...]) -> bool:
    """Whether any lowercased label contains one of ``keywords``."""
    return any(contains_any(label, keywords) for label in labels)
