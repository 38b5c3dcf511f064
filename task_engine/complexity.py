"""Story-point complexity estimation for work items."""

from __future__ import annotations

from . import keywords as kw
from .models import WorkItem

MIN_COMPLEXITY = 1
MAX_COMPLEXITY = 8

LONG_TITLE_WORDS = 10
LONG_BODY_CHARS = 1000
MEDIUM_BODY_CHARS = 500


def analyze_complexity(item: WorkItem) -> int:
    """
    Estimate the complexity of a work item in story points.

    The estimate starts at 1 and grows with title length, body length,
    technical vocabulary, complexity labels and cross-references.

    Args:
        item: Work item to analyze

    Returns:
        Integer complexity between 1 and 8
    """
    complexity = MIN_COMPLEXITY

    if len(item.title.split()) > LONG_TITLE_WORDS:
        complexity += 1

    body = item.body or ""
    if len(body) > LONG_BODY_CHARS:
        complexity += 2
    elif len(body) > MEDIUM_BODY_CHARS:
        complexity += 1

    lowered = body.lower()
    tech_count = sum(1 for keyword in kw.TECHNICAL_KEYWORDS if keyword in lowered)
    complexity += min(tech_count, kw.MAX_TECHNICAL_BONUS)

    complexity += sum(
        1 for label in item.labels if kw.contains_any(label.lower(), kw.COMPLEXITY_LABELS)
    )

    # Cross-references to other items
    if "#" in body:
        complexity += 1

    return min(complexity, MAX_COMPLEXITY)
