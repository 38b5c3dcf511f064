"""Subtask dependency graph, critical path and phase scheduling."""

from __future__ import annotations

import math
from collections import deque
from collections.abc import Sequence

from .exceptions import DependencyCycleError, DependencyError
from .models import ImplementationPhases, SubTask, SubtaskCategory

DEFAULT_HOURS_PER_DAY = 6.0
DEFAULT_MIN_EFFICIENCY = 0.6

PHASE_ONE_CATEGORIES = (SubtaskCategory.PLANNING, SubtaskCategory.ANALYSIS)

# (max adjusted days, label)
TIMELINE_BUCKETS: tuple[tuple[int, str], ...] = (
    (3, "3-5 days"),
    (7, "1-2 weeks"),
    (14, "2-3 weeks"),
)
LONGEST_BUCKET = "3-4 weeks"


def build_dependency_graph(subtasks: Sequence[SubTask]) -> dict[str, list[str]]:
    """
    Collect each subtask's declared dependencies by title.

    Subtasks without dependencies are left out of the map.
    """
    return {
        task.title: list(task.dependencies)
        for task in subtasks
        if task.dependencies
    }


def validate_dependency_graph(
    subtasks: Sequence[SubTask], graph: dict[str, list[str]]
) -> None:
    """
    Check that the graph only references known subtasks and is acyclic.

    Uses Kahn's algorithm: whatever cannot be peeled off in topological
    order sits on a cycle.

    Raises:
        DependencyError: If a dependency names an unknown subtask
        DependencyCycleError: If the graph contains a cycle
    """
    titles = [task.title for task in subtasks]
    known = set(titles)

    for title, deps in graph.items():
        if title not in known:
            raise DependencyError(
                f"Dependency entry for unknown subtask '{title}'",
                error_code="UNKNOWN_SUBTASK",
            )
        for dep in deps:
            if dep not in known:
                raise DependencyError(
                    f"Subtask '{title}' depends on unknown subtask '{dep}'",
                    error_code="DANGLING_DEPENDENCY",
                )

    in_degree = {title: len(set(graph.get(title, ()))) for title in titles}
    dependents: dict[str, list[str]] = {title: [] for title in titles}
    for title, deps in graph.items():
        for dep in set(deps):
            dependents[dep].append(title)

    queue = deque(title for title in in_degree if in_degree[title] == 0)
    resolved = 0
    while queue:
        current = queue.popleft()
        resolved += 1
        for dependent in dependents[current]:
            in_degree[dependent] -= 1
            if in_degree[dependent] == 0:
                queue.append(dependent)

    if resolved < len(in_degree):
        raise DependencyCycleError(
            [title for title in in_degree if in_degree[title] > 0]
        )


def critical_path_depth(
    subtasks: Sequence[SubTask], graph: dict[str, list[str]]
) -> int:
    """
    Length of the longest dependency chain, counted in subtasks.

    The graph must be acyclic; run :func:`validate_dependency_graph` first.

    Returns:
        0 for no subtasks, otherwise between 1 and ``len(subtasks)``
    """
    known = {task.title for task in subtasks}
    memo: dict[str, int] = {}

    def depth(title: str) -> int:
        if title in memo:
            return memo[title]
        deps = [dep for dep in graph.get(title, []) if dep in known]
        memo[title] = 1 + max((depth(dep) for dep in deps), default=0)
        return memo[title]

    return max((depth(task.title) for task in subtasks), default=0)


def estimate_timeline(
    subtasks: Sequence[SubTask],
    graph: dict[str, list[str]],
    hours_per_day: float = DEFAULT_HOURS_PER_DAY,
    min_efficiency: float = DEFAULT_MIN_EFFICIENCY,
) -> str:
    """
    Estimate calendar time as a coarse bucket.

    Naive days (total hours over productive hours per day) are scaled by
    a parallel-efficiency factor derived from the critical path.

    Returns:
        Bucket label followed by the total hours, e.g. ``"1-2 weeks (30 hours total)"``
    """
    total_hours = sum(task.estimated_hours for task in subtasks)
    if not subtasks:
        return f"{TIMELINE_BUCKETS[0][1]} (0 hours total)"

    total_days = math.ceil(total_hours / hours_per_day)
    depth = critical_path_depth(subtasks, graph)
    efficiency = max(min_efficiency, 1 - depth / len(subtasks))
    adjusted_days = math.ceil(total_days * efficiency)

    for limit, label in TIMELINE_BUCKETS:
        if adjusted_days <= limit:
            return f"{label} ({total_hours} hours total)"
    return f"{LONGEST_BUCKET} ({total_hours} hours total)"


def schedule_phases(
    subtasks: Sequence[SubTask], graph: dict[str, list[str]]
) -> ImplementationPhases:
    """
    Bucket subtasks into three execution phases.

    Phase 1 holds subtasks without dependencies plus planning and
    analysis work; phase 2 holds subtasks whose dependencies all sit in
    phase 1; phase 3 holds the rest. Two passes are enough for the
    fixed-depth templates.
    """
    phases = ImplementationPhases()

    for task in subtasks:
        if not graph.get(task.title) or task.category in PHASE_ONE_CATEGORIES:
            phases.phase1.append(task)

    phase1_titles = {task.title for task in phases.phase1}
    for task in subtasks:
        if task.title in phase1_titles:
            continue
        deps = graph.get(task.title, [])
        if deps and all(dep in phase1_titles for dep in deps):
            phases.phase2.append(task)

    placed = phase1_titles | {task.title for task in phases.phase2}
    phases.phase3.extend(task for task in subtasks if task.title not in placed)

    return phases
