"""Team workload model built from the items already assigned to each person."""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from .complexity import analyze_complexity
from .context import analyze_item_context
from .models import TeamMemberWorkload, WorkItem

logger = structlog.get_logger()

DEFAULT_MAX_CAPACITY = 15
VELOCITY_ALLOWANCE = 2


def discover_team(items: Sequence[WorkItem]) -> list[str]:
    """Distinct assignees across ``items`` in first-seen order."""
    seen: dict[str, None] = {}
    for item in items:
        for login in item.assignees:
            seen.setdefault(login, None)
    return list(seen)


def analyze_team_workload(
    items: Sequence[WorkItem],
    roster: Sequence[str] = (),
    max_capacity: int = DEFAULT_MAX_CAPACITY,
) -> list[TeamMemberWorkload]:
    """
    Build a workload record for every team member.

    The model is rebuilt from the snapshot on every call. When no roster
    is given, every assignee seen in ``items`` is treated as a member.

    Args:
        items: Work item snapshot
        roster: Usernames to model (optional)
        max_capacity: Story points a member can carry

    Returns:
        One TeamMemberWorkload per member, in roster order
    """
    members = list(dict.fromkeys(roster)) if roster else discover_team(items)

    workloads = []
    for username in members:
        assigned = [item for item in items if username in item.assignees]
        current_workload = sum(analyze_complexity(item) for item in assigned)

        skills: set[str] = set()
        for item in assigned:
            skills.update(analyze_item_context(item).required_skills)

        workloads.append(
            TeamMemberWorkload(
                username=username,
                current_workload=current_workload,
                max_capacity=max_capacity,
                availability_score=max(0.0, 1 - current_workload / max_capacity),
                skill_areas=tuple(sorted(skills)),
                # Approximation until completed-item history is available
                recent_velocity=min(max_capacity, current_workload + VELOCITY_ALLOWANCE),
            )
        )

    logger.debug(
        "team_workload_analyzed",
        members=len(workloads),
        from_roster=bool(roster),
    )
    return workloads
