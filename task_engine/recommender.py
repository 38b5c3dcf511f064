"""Recommendation ranker: weighted multi-factor scoring of open work items."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone
from uuid import uuid4

import structlog

from .complexity import analyze_complexity
from .config_loader import EngineConfig, PriorityFilter, create_default_config
from .context import analyze_item_context
from .exceptions import InvalidArgumentError, ItemNotFoundError
from .logging_config import LogContext
from .models import (
    ReadinessResult,
    RecommendationResult,
    TaskScore,
    TeamMemberWorkload,
    WorkItem,
    parse_timestamp,
)
from .scoring import (
    availability_score,
    priority_score,
    readiness,
    skill_match_score,
    urgency_score,
)
from .workload import analyze_team_workload

logger = structlog.get_logger()

NO_RESULTS_MESSAGE = (
    "No suitable tasks found. Possible reasons: all issues are blocked or waiting, "
    "no issues match the specified criteria, or team capacity is at maximum."
)


def find_item(items: Sequence[WorkItem], number: int | None) -> WorkItem:
    """
    Look up a work item by number.

    Raises:
        InvalidArgumentError: If no number was given
        ItemNotFoundError: If the number is absent from the snapshot
    """
    if number is None:
        raise InvalidArgumentError("An item number is required", error_code="MISSING_ITEM_NUMBER")
    for item in items:
        if item.number == number:
            return item
    raise ItemNotFoundError(number)


def generate_reasoning(
    priority: float,
    urgency: float,
    availability: float,
    skill_match: float,
    readiness_result: ReadinessResult,
    complexity: int,
    context_penalty: float,
) -> str:
    """Build a human-readable justification from component thresholds."""
    reasons = []

    if priority > 0.8:
        reasons.append("High priority based on labels")

    if urgency > 0.8:
        reasons.append("Time-sensitive with approaching deadline")

    if availability > 0.8:
        reasons.append("Team has good availability")
    elif availability < 0.3:
        reasons.append("Team at high capacity")

    if skill_match > 0.8:
        reasons.append("Strong skill alignment with assignee")

    if complexity > 5:
        reasons.append("Complex task requiring experienced developer")
    elif complexity <= 2:
        reasons.append("Simple task suitable for quick completion")

    if readiness_result.blockers:
        reasons.append("Has some blockers that need attention")

    if context_penalty > 0:
        reasons.append("May require context switching")

    if not reasons:
        reasons.append("Balanced task with moderate priority and complexity")

    return ", ".join(reasons)


class RecommendationEngine:
    """
    Ranks work items by how desirable they are to pick up next.

    Each item gets priority, urgency, availability, skill-match and
    readiness scores which are combined into one weighted total. Items
    that are not ready are dropped unless blocked items are requested.
    A ranking pass is a pure function of the snapshot it is given.

    Example:
        >>> engine = RecommendationEngine()
        >>> result = engine.recommend(items, roster=["alice", "bob"])
        >>> [score.number for score in result.recommendations]
    """

    def __init__(self, config: EngineConfig | None = None) -> None:
        self.config = config or create_default_config()

    def score_item(
        self,
        item: WorkItem,
        workloads: Sequence[TeamMemberWorkload],
        now: datetime,
        context_switch_penalty: float = 0.0,
    ) -> tuple[TaskScore, ReadinessResult]:
        """
        Score a single work item.

        Args:
            item: Work item to score
            workloads: Team workload model for this pass
            now: Reference time for the pass
            context_switch_penalty: Deduction applied to assigned items

        Returns:
            The item's TaskScore and its readiness evaluation
        """
        weights = self.config.scoring
        context = analyze_item_context(item)

        priority = priority_score(item)
        urgency = urgency_score(item, now)
        availability = availability_score(item, workloads)
        skill_match = skill_match_score(item, workloads, context)
        readiness_result = readiness(item)
        complexity = analyze_complexity(item)

        context_penalty = context_switch_penalty if item.is_assigned else 0.0

        weighted = (
            priority * weights.priority
            + urgency * weights.urgency
            + availability * weights.availability
            + skill_match * weights.skill_match
            + readiness_result.score * weights.readiness
            - context_penalty
        )
        total = min(1.0, max(0.0, weighted))

        score = TaskScore(
            number=item.number,
            title=item.title,
            total_score=total,
            priority_score=priority,
            urgency_score=urgency,
            availability_score=availability,
            skill_match_score=skill_match,
            readiness_score=readiness_result.score,
            blockers=readiness_result.blockers,
            assignees=item.assignees,
            labels=item.labels,
            milestone=item.milestone.title if item.milestone else None,
            complexity=complexity,
            reasoning=generate_reasoning(
                priority,
                urgency,
                availability,
                skill_match,
                readiness_result,
                complexity,
                context_penalty,
            ),
        )
        return score, readiness_result

    def recommend(
        self,
        items: Sequence[WorkItem],
        roster: Sequence[str] = (),
        assignee: str | None = None,
        priority_filter: PriorityFilter | str | None = None,
        include_blocked: bool | None = None,
        context_switch_penalty: float | None = None,
        max_recommendations: int | None = None,
        now: datetime | None = None,
    ) -> RecommendationResult:
        """
        Rank work items and return the top recommendations.

        Unset options fall back to the engine configuration.

        Args:
            items: Work item snapshot
            roster: Team usernames (all assignees when empty)
            assignee: Only consider items assigned to this login
            priority_filter: Minimum priority class
            include_blocked: Keep items that are not ready
            context_switch_penalty: Deduction applied to assigned items
            max_recommendations: Maximum number of results
            now: Reference time (current UTC time when omitted)

        Returns:
            RecommendationResult, possibly empty with an explanatory message

        Raises:
            InvalidArgumentError: If an option is out of range
        """
        defaults = self.config.recommendation
        roster = list(roster) or list(self.config.team.members)
        include_blocked = defaults.include_blocked if include_blocked is None else include_blocked
        penalty = (
            defaults.context_switch_penalty
            if context_switch_penalty is None
            else context_switch_penalty
        )
        limit = defaults.max_recommendations if max_recommendations is None else max_recommendations
        min_priority = self._resolve_priority_filter(priority_filter or defaults.priority_filter)

        if limit < 1:
            raise InvalidArgumentError(
                f"max_recommendations must be at least 1, got {limit}",
                error_code="INVALID_LIMIT",
            )
        if penalty < 0:
            raise InvalidArgumentError(
                f"context_switch_penalty must not be negative, got {penalty}",
                error_code="INVALID_PENALTY",
            )

        now = parse_timestamp(now, "now") if now else datetime.now(timezone.utc)

        candidates = list(items)
        if assignee:
            candidates = [item for item in candidates if assignee in item.assignees]

        with LogContext(pass_id=uuid4().hex[:8]):
            logger.info(
                "recommendation_pass_started",
                items=len(items),
                candidates=len(candidates),
                include_blocked=include_blocked,
            )

            workloads = analyze_team_workload(
                candidates, roster, max_capacity=self.config.team.max_capacity
            )

            scored: list[TaskScore] = []
            for item in candidates:
                score, readiness_result = self.score_item(item, workloads, now, penalty)

                if not include_blocked and not readiness_result.ready:
                    logger.debug(
                        "item_dropped_not_ready",
                        item_number=item.number,
                        blockers=list(readiness_result.blockers),
                    )
                    continue

                if score.priority_score < min_priority.threshold:
                    logger.debug(
                        "item_dropped_below_priority",
                        item_number=item.number,
                        priority=score.priority_score,
                    )
                    continue

                scored.append(score)

            # Ties resolve by item number so results do not depend on input order
            scored.sort(key=lambda s: (-s.total_score, s.number))
            recommendations = scored[:limit]

            logger.info(
                "recommendation_pass_completed",
                scored=len(scored),
                returned=len(recommendations),
            )

        return RecommendationResult(
            recommendations=recommendations,
            analyzed_count=len(candidates),
            team_workloads=workloads,
            team_size_considered=len(roster),
            message=None if recommendations else NO_RESULTS_MESSAGE,
        )

    @staticmethod
    def _resolve_priority_filter(value: PriorityFilter | str) -> PriorityFilter:
        if isinstance(value, PriorityFilter):
            return value
        try:
            return PriorityFilter(value.lower())
        except ValueError as e:
            choices = ", ".join(p.value for p in PriorityFilter)
            raise InvalidArgumentError(
                f"Unknown priority filter {value!r}; expected one of: {choices}",
                error_code="INVALID_PRIORITY_FILTER",
            ) from e


def recommend_tasks(
    items: Sequence[WorkItem],
    roster: Sequence[str] = (),
    config: EngineConfig | None = None,
    **options,
) -> RecommendationResult:
    """Convenience wrapper around :meth:`RecommendationEngine.recommend`."""
    return RecommendationEngine(config).recommend(items, roster, **options)
