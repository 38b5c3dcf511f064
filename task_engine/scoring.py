"""
Component scorers for task recommendations.

Each scorer maps a work item to a value in [0, 1]:
- Priority: label severity, bug boost, epic penalty
- Urgency: milestone due date, recent activity, discussion volume
- Availability: workload headroom of the (potential) assignees
- Skill match: overlap between required and known skill domains
- Readiness: blockers and description quality
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from datetime import datetime, timedelta

from . import keywords as kw
from .context import ItemContext, analyze_item_context
from .models import ReadinessResult, TeamMemberWorkload, WorkItem

BASE_PRIORITY = 0.5
BUG_BOOST = 0.2
EPIC_FACTOR = 0.3

BASE_URGENCY = 0.3
RECENT_ACTIVITY_DAYS = 2
RECENT_ACTIVITY_BOOST = 0.2
ACTIVE_DISCUSSION_COMMENTS = 5
ACTIVE_DISCUSSION_BOOST = 0.1

DEFAULT_AVAILABILITY = 0.8
UNKNOWN_ASSIGNEE_AVAILABILITY = 0.6

NEUTRAL_SKILL_MATCH = 0.7
UNKNOWN_MEMBER_SKILL_MATCH = 0.5
UNKNOWN_ASSIGNEE_SKILL_MATCH = 0.6

MIN_DESCRIPTION_CHARS = 50
BLOCKING_LABEL_PENALTY = 0.5
THIN_DESCRIPTION_PENALTY = 0.3
DEPENDENCY_MENTION_PENALTY = 0.2
READY_THRESHOLD = 0.6

_DAY = timedelta(days=1)


def priority_score(item: WorkItem) -> float:
    """
    Score priority from label severity.

    Args:
        item: Work item to score

    Returns:
        Priority score in [0, 1]
    """
    labels = [label.lower() for label in item.labels]
    score = BASE_PRIORITY

    for label in labels:
        for keyword, value in kw.PRIORITY_LABELS.items():
            if keyword in label:
                score = max(score, value)

    if any(kw.contains_any(label, kw.BUG_LABELS) for label in labels):
        score = min(1.0, score + BUG_BOOST)

    # Epics are split before anyone works on them directly
    if any(kw.contains_any(label, kw.EPIC_LABELS) for label in labels):
        score *= EPIC_FACTOR

    return score


def days_until(due: datetime, now: datetime) -> int:
    """Whole days until ``due``, rounded up."""
    return math.ceil((due - now) / _DAY)


def urgency_score(item: WorkItem, now: datetime) -> float:
    """
    Score urgency from deadline proximity and activity.

    Args:
        item: Work item to score
        now: Reference time for the whole scoring pass

    Returns:
        Urgency score in [0, 1]
    """
    score = BASE_URGENCY

    if item.milestone and item.milestone.due_on:
        days_until_due = days_until(item.milestone.due_on, now)
        if days_until_due < 0:
            score = 1.0
        elif days_until_due <= 3:
            score = 0.9
        elif days_until_due <= 7:
            score = 0.7
        elif days_until_due <= 14:
            score = 0.5
        else:
            score = BASE_URGENCY

    if item.updated_at is not None:
        days_since_update = math.floor((now - item.updated_at) / _DAY)
        if days_since_update < RECENT_ACTIVITY_DAYS:
            score = min(1.0, score + RECENT_ACTIVITY_BOOST)

    if item.comments > ACTIVE_DISCUSSION_COMMENTS:
        score = min(1.0, score + ACTIVE_DISCUSSION_BOOST)

    return score


def _assignee_workloads(
    item: WorkItem, workloads: Sequence[TeamMemberWorkload]
) -> list[TeamMemberWorkload]:
    return [member for member in workloads if member.username in item.assignees]


def availability_score(item: WorkItem, workloads: Sequence[TeamMemberWorkload]) -> float:
    """
    Score how much headroom the people who would do the work have.

    Unassigned items look at the most available member of the roster;
    assigned items average over their assignees.
    """
    if not item.is_assigned:
        if not workloads:
            return DEFAULT_AVAILABILITY
        return max(member.availability_score for member in workloads)

    assignees = _assignee_workloads(item, workloads)
    if not assignees:
        return UNKNOWN_ASSIGNEE_AVAILABILITY

    return sum(member.availability_score for member in assignees) / len(assignees)


def individual_skill_match(
    required_skills: frozenset[str], member_skills: Sequence[str]
) -> float:
    """
    Map the overlap between required and known skills to a score.

    Args:
        required_skills: Domains the item needs
        member_skills: Domains the member has worked in

    Returns:
        Skill match score in [0.4, 1.0]
    """
    if not required_skills:
        return NEUTRAL_SKILL_MATCH
    if not member_skills:
        return UNKNOWN_MEMBER_SKILL_MATCH

    matching = [skill for skill in required_skills if skill in member_skills]
    ratio = len(matching) / len(required_skills)

    if ratio == 1.0:
        return 1.0
    if ratio >= 0.7:
        return 0.9
    if ratio >= 0.5:
        return 0.7
    if ratio >= 0.3:
        return 0.6
    return 0.4


def skill_match_score(
    item: WorkItem,
    workloads: Sequence[TeamMemberWorkload],
    context: ItemContext | None = None,
) -> float:
    """
    Score how well the team's skills fit the item.

    Args:
        item: Work item to score
        workloads: Team workload model for this pass
        context: Precomputed item context (computed when omitted)

    Returns:
        Skill match score in [0, 1]
    """
    if not workloads:
        return NEUTRAL_SKILL_MATCH

    context = context or analyze_item_context(item)
    required = context.required_skills

    if not item.is_assigned:
        return max(
            individual_skill_match(required, member.skill_areas) for member in workloads
        )

    assignees = _assignee_workloads(item, workloads)
    if not assignees:
        return UNKNOWN_ASSIGNEE_SKILL_MATCH

    return sum(
        individual_skill_match(required, member.skill_areas) for member in assignees
    ) / len(assignees)


def readiness(item: WorkItem) -> ReadinessResult:
    """
    Detect blockers that keep a work item from being started.

    Any recorded blocker makes the item not ready, whatever the score.

    Args:
        item: Work item to evaluate

    Returns:
        ReadinessResult with readiness flag, score and blocker reasons
    """
    blockers: list[str] = []
    score = 1.0

    blocking_labels = [
        label for label in item.labels
        if kw.contains_any(label.lower(), kw.BLOCKING_LABELS)
    ]
    if blocking_labels:
        blockers.append(f"Labels: {', '.join(blocking_labels)}")
        score -= BLOCKING_LABEL_PENALTY

    body = item.body or ""
    if len(body) < MIN_DESCRIPTION_CHARS:
        blockers.append("Insufficient description")
        score -= THIN_DESCRIPTION_PENALTY

    if body:
        for pattern in kw.DEPENDENCY_PATTERNS:
            if pattern.search(body):
                blockers.append("Has dependencies mentioned in description")
                score -= DEPENDENCY_MENTION_PENALTY
                break

    score = max(0.0, score)
    return ReadinessResult(
        ready=score > READY_THRESHOLD and not blockers,
        score=score,
        blockers=tuple(blockers),
    )
