"""Item context classification, computed once per work item."""

from __future__ import annotations

from dataclasses import dataclass

from . import keywords as kw
from .models import WorkItem


@dataclass(frozen=True)
class ItemContext:
    """Keyword-derived facts about a work item."""

    title: str
    body: str
    labels: tuple[str, ...]
    assignees: tuple[str, ...]
    milestone: str | None

    # Work type
    is_feature: bool
    is_bug: bool
    is_refactor: bool
    is_infrastructure: bool
    is_research: bool
    is_documentation: bool
    is_testing: bool

    # Technical areas
    is_frontend: bool
    is_backend: bool
    is_database: bool
    is_mobile: bool

    # Complexity indicators
    has_api_integration: bool
    has_data_migration: bool
    has_security_requirements: bool
    has_performance_requirements: bool

    required_skills: frozenset[str]


def extract_skills(text: str, labels: tuple[str, ...]) -> frozenset[str]:
    """
    Extract skill domains mentioned in text or labels.

    Args:
        text: Lowercased free text (title and body)
        labels: Lowercased label names

    Returns:
        Set of domain tags from the skill keyword table
    """
    skills = set()
    for skill, words in kw.SKILL_KEYWORDS.items():
        if kw.any_label_contains(labels, words) or kw.contains_any(text, words):
            skills.add(skill)
    return frozenset(skills)


def _has_label(labels: tuple[str, ...], names: tuple[str, ...]) -> bool:
    return any(label in names for label in labels)


def analyze_item_context(item: WorkItem) -> ItemContext:
    """
    Classify a work item by keyword presence in its title, body and labels.

    Args:
        item: Work item to classify

    Returns:
        ItemContext with named boolean facts about the item
    """
    title = item.title.lower()
    body = (item.body or "").lower()
    labels = tuple(label.lower() for label in item.labels)

    is_bug = kw.any_label_contains(labels, kw.BUG_INDICATORS) or kw.contains_any(
        title, kw.BUG_INDICATORS
    )
    is_refactor = kw.any_label_contains(labels, kw.REFACTOR_INDICATORS) or kw.contains_any(
        title, kw.REFACTOR_INDICATORS
    )

    return ItemContext(
        title=title,
        body=body,
        labels=labels,
        assignees=item.assignees,
        milestone=item.milestone.title if item.milestone else None,
        is_feature=_has_label(labels, kw.FEATURE_LABELS)
        or kw.contains_any(title, kw.FEATURE_TITLE_WORDS),
        is_bug=is_bug,
        is_refactor=is_refactor,
        is_infrastructure=_has_label(labels, kw.INFRASTRUCTURE_LABELS) or "deploy" in title,
        is_research=_has_label(labels, kw.RESEARCH_LABELS) or "investigate" in title,
        is_documentation=_has_label(labels, kw.DOCUMENTATION_LABELS)
        or kw.contains_any(title, kw.DOCUMENTATION_TITLE_WORDS),
        is_testing=_has_label(labels, kw.TESTING_LABELS) or "test" in title,
        is_frontend=_has_label(labels, kw.FRONTEND_LABELS)
        or kw.contains_any(body, ("frontend", "ui")),
        is_backend=_has_label(labels, kw.BACKEND_LABELS)
        or kw.contains_any(body, ("backend", "api")),
        is_database=_has_label(labels, kw.DATABASE_LABELS)
        or kw.contains_any(body, ("database", "sql")),
        is_mobile=_has_label(labels, kw.MOBILE_LABELS) or "mobile" in body,
        has_api_integration=kw.contains_any(body, kw.API_INTEGRATION_TERMS),
        has_data_migration=kw.contains_any(body, kw.DATA_MIGRATION_TERMS),
        has_security_requirements=kw.contains_any(body, kw.SECURITY_TERMS),
        has_performance_requirements=kw.contains_any(body, kw.PERFORMANCE_TERMS),
        required_skills=extract_skills(f"{title} {body}", labels),
    )
