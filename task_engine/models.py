"""Shared data models for the task engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from .exceptions import SnapshotError


def parse_timestamp(value: Any, field_name: str) -> datetime | None:
    """Parse an ISO-8601 timestamp into an aware UTC datetime."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError as e:
            raise SnapshotError(
                f"Invalid timestamp for '{field_name}': {value!r}",
                error_code="INVALID_TIMESTAMP",
            ) from e
    else:
        raise SnapshotError(
            f"Invalid timestamp for '{field_name}': {value!r}",
            error_code="INVALID_TIMESTAMP",
        )
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _names(values: Any, key: str, field_name: str) -> tuple[str, ...]:
    """Normalize a list of strings or ``{key: name}`` dicts."""
    if values is None:
        return ()
    if isinstance(values, (str, bytes)) or not isinstance(values, (list, tuple)):
        raise SnapshotError(
            f"'{field_name}' must be a list, got {type(values).__name__}",
            error_code="INVALID_FIELD",
        )
    names = []
    for value in values:
        if isinstance(value, dict):
            value = value.get(key)
        if not isinstance(value, str) or not value:
            raise SnapshotError(
                f"Invalid entry in '{field_name}': {value!r}",
                error_code="INVALID_FIELD",
            )
        names.append(value)
    return tuple(names)


@dataclass(frozen=True)
class Milestone:
    """Milestone a work item is scheduled into."""

    title: str
    due_on: datetime | None = None
    number: int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "due_on", parse_timestamp(self.due_on, "milestone.due_on"))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Milestone:
        """Create from a tracker dictionary."""
        title = data.get("title")
        if not isinstance(title, str):
            raise SnapshotError("Milestone title is required", error_code="INVALID_FIELD")
        number = data.get("number")
        if number is not None and (isinstance(number, bool) or not isinstance(number, int)):
            raise SnapshotError(
                f"Milestone number must be an integer, got {number!r}",
                error_code="INVALID_FIELD",
            )
        return cls(
            title=title,
            due_on=parse_timestamp(data.get("due_on"), "milestone.due_on"),
            number=number,
        )


@dataclass(frozen=True)
class WorkItem:
    """Immutable snapshot of a tracker issue."""

    number: int
    title: str
    body: str = ""
    labels: tuple[str, ...] = ()
    assignees: tuple[str, ...] = ()
    milestone: Milestone | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    comments: int = 0

    def __post_init__(self) -> None:
        # Naive timestamps are taken as UTC
        for name in ("created_at", "updated_at"):
            object.__setattr__(self, name, parse_timestamp(getattr(self, name), name))

    @property
    def is_assigned(self) -> bool:
        """Whether anyone is assigned to the item."""
        return len(self.assignees) > 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WorkItem:
        """
        Create a work item from a tracker dictionary.

        Accepts the shape returned by issue-tracker REST APIs: labels as
        strings or ``{"name": ...}`` objects, assignees as strings or
        ``{"login": ...}`` objects.

        Raises:
            SnapshotError: If a required field is missing or malformed
        """
        if not isinstance(data, dict):
            raise SnapshotError(
                f"Work item must be a mapping, got {type(data).__name__}",
                error_code="INVALID_ITEM",
            )

        number = data.get("number")
        if isinstance(number, bool) or not isinstance(number, int):
            raise SnapshotError(
                f"Work item number must be an integer, got {number!r}",
                error_code="INVALID_ITEM",
            )

        title = data.get("title")
        if not isinstance(title, str) or not title.strip():
            raise SnapshotError(
                f"Work item #{number} has no title", error_code="INVALID_ITEM"
            )

        body = data.get("body") or ""
        if not isinstance(body, str):
            raise SnapshotError(
                f"Work item #{number} body must be text", error_code="INVALID_ITEM"
            )

        comments = data.get("comments", 0) or 0
        if isinstance(comments, bool) or not isinstance(comments, int) or comments < 0:
            raise SnapshotError(
                f"Work item #{number} comment count must be a non-negative integer",
                error_code="INVALID_ITEM",
            )

        milestone_data = data.get("milestone")
        milestone = None
        if milestone_data:
            if not isinstance(milestone_data, dict):
                raise SnapshotError(
                    f"Work item #{number} milestone must be a mapping",
                    error_code="INVALID_ITEM",
                )
            milestone = Milestone.from_dict(milestone_data)

        assignees = data.get("assignees")
        if assignees is None and data.get("assignee"):
            assignees = [data["assignee"]]

        return cls(
            number=number,
            title=title,
            body=body,
            labels=_names(data.get("labels"), "name", "labels"),
            assignees=_names(assignees, "login", "assignees"),
            milestone=milestone,
            created_at=parse_timestamp(data.get("created_at"), "created_at"),
            updated_at=parse_timestamp(data.get("updated_at"), "updated_at"),
            comments=comments,
        )


@dataclass(frozen=True)
class TeamMemberWorkload:
    """Current load and inferred skills of a team member."""

    username: str
    current_workload: int
    max_capacity: int
    availability_score: float
    skill_areas: tuple[str, ...] = ()
    recent_velocity: int = 0  # heuristic, not a measured value

    @property
    def utilization(self) -> float:
        """Fraction of capacity in use."""
        return self.current_workload / self.max_capacity


@dataclass(frozen=True)
class ReadinessResult:
    """Outcome of blocker detection for a work item."""

    ready: bool
    score: float
    blockers: tuple[str, ...] = ()


@dataclass(frozen=True)
class TaskScore:
    """Scored recommendation for a single work item."""

    number: int
    title: str
    total_score: float
    priority_score: float
    urgency_score: float
    availability_score: float
    skill_match_score: float
    readiness_score: float
    blockers: tuple[str, ...]
    assignees: tuple[str, ...]
    labels: tuple[str, ...]
    milestone: str | None
    complexity: int
    reasoning: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "number": self.number,
            "title": self.title,
            "total_score": self.total_score,
            "priority_score": self.priority_score,
            "urgency_score": self.urgency_score,
            "availability_score": self.availability_score,
            "skill_match_score": self.skill_match_score,
            "readiness_score": self.readiness_score,
            "blockers": list(self.blockers),
            "assignees": list(self.assignees),
            "labels": list(self.labels),
            "milestone": self.milestone,
            "complexity": self.complexity,
            "reasoning": self.reasoning,
        }


@dataclass
class RecommendationResult:
    """Ordered recommendations produced by one ranking pass."""

    recommendations: list[TaskScore] = field(default_factory=list)
    analyzed_count: int = 0
    team_workloads: list[TeamMemberWorkload] = field(default_factory=list)
    team_size_considered: int = 0
    message: str | None = None

    @property
    def is_empty(self) -> bool:
        """Whether no item passed the filters."""
        return not self.recommendations

    def insights(self) -> list[str]:
        """Actionable insights about the recommended set."""
        insights = []

        high_priority = [t for t in self.recommendations if t.priority_score > 0.7]
        urgent = [t for t in self.recommendations if t.urgency_score > 0.8]
        blocked = [t for t in self.recommendations if t.blockers]
        overloaded = [m for m in self.team_workloads if m.utilization > 0.9]

        if high_priority:
            insights.append(
                f"High Priority Focus: {len(high_priority)} high-priority tasks need immediate attention"
            )
        if urgent:
            insights.append(f"Time-Sensitive: {len(urgent)} tasks have urgent deadlines")
        if blocked:
            insights.append(
                f"Blocked Items: {len(blocked)} recommended tasks have blockers to resolve"
            )
        if overloaded:
            insights.append(
                f"Team Balance: {len(overloaded)} team members are at high capacity"
            )

        return insights

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "recommendations": [t.to_dict() for t in self.recommendations],
            "analyzed_count": self.analyzed_count,
            "team_size_considered": self.team_size_considered,
            "team_workloads": [
                {
                    "username": m.username,
                    "current_workload": m.current_workload,
                    "max_capacity": m.max_capacity,
                    "availability_score": m.availability_score,
                    "skill_areas": list(m.skill_areas),
                    "recent_velocity": m.recent_velocity,
                }
                for m in self.team_workloads
            ],
            "message": self.message,
            "insights": self.insights(),
        }


class SubtaskPriority(Enum):
    """Priority of a generated subtask."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class SubtaskCategory(Enum):
    """Work category of a generated subtask."""

    PLANNING = "Planning"
    DESIGN = "Design"
    DEVELOPMENT = "Development"
    QA = "Quality Assurance"
    DOCUMENTATION = "Documentation"
    ANALYSIS = "Analysis"


@dataclass
class SubTask:
    """Represents a decomposed subtask."""

    title: str
    description: str
    complexity: int
    priority: SubtaskPriority
    category: SubtaskCategory
    estimated_hours: int
    dependencies: list[str] = field(default_factory=list)
    labels: list[str] = field(default_factory=list)
    acceptance_criteria: list[str] = field(default_factory=list)
    assignee: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "title": self.title,
            "description": self.description,
            "complexity": self.complexity,
            "priority": self.priority.value,
            "category": self.category.value,
            "estimated_hours": self.estimated_hours,
            "dependencies": list(self.dependencies),
            "labels": list(self.labels),
            "acceptance_criteria": list(self.acceptance_criteria),
            "assignee": self.assignee,
        }


@dataclass
class ImplementationPhases:
    """Subtasks bucketed by dependency-readiness order."""

    phase1: list[SubTask] = field(default_factory=list)
    phase2: list[SubTask] = field(default_factory=list)
    phase3: list[SubTask] = field(default_factory=list)

    def titles(self) -> dict[str, list[str]]:
        """Subtask titles per phase."""
        return {
            "phase1": [t.title for t in self.phase1],
            "phase2": [t.title for t in self.phase2],
            "phase3": [t.title for t in self.phase3],
        }


@dataclass
class TaskBreakdown:
    """Result of decomposing a work item into subtasks."""

    original: WorkItem
    original_complexity: int
    template_name: str
    subtasks: list[SubTask]
    total_complexity: int
    recommended_approach: str
    risk_assessment: list[str]
    timeline: str
    dependencies: dict[str, list[str]]
    critical_path_depth: int = 0
    phases: ImplementationPhases = field(default_factory=ImplementationPhases)

    def complexity_distribution(self) -> dict[int, int]:
        """Number of subtasks per complexity value, in ascending order."""
        distribution: dict[int, int] = {}
        for task in self.subtasks:
            distribution[task.complexity] = distribution.get(task.complexity, 0) + 1
        return dict(sorted(distribution.items()))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "original": {
                "number": self.original.number,
                "title": self.original.title,
                "complexity": self.original_complexity,
                "labels": list(self.original.labels),
            },
            "template": self.template_name,
            "subtasks": [t.to_dict() for t in self.subtasks],
            "total_complexity": self.total_complexity,
            "recommended_approach": self.recommended_approach,
            "risk_assessment": list(self.risk_assessment),
            "timeline": self.timeline,
            "dependencies": {k: list(v) for k, v in self.dependencies.items()},
            "critical_path_depth": self.critical_path_depth,
            "phases": self.phases.titles(),
        }


@dataclass
class DecompositionResult:
    """Outcome of a decomposition request."""

    item: WorkItem
    original_complexity: int
    breakdown: TaskBreakdown | None = None
    advisory: str | None = None

    @property
    def expanded(self) -> bool:
        """Whether a breakdown with at least one subtask was produced."""
        return self.breakdown is not None and bool(self.breakdown.subtasks)
