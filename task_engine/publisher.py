"""Sub-issue publishing.

This module turns a task breakdown into tracker items through a narrow
tracker interface, retrying transient failures with exponential backoff.
"""

from __future__ import annotations

import random
import time
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Optional, Protocol, Sequence, Tuple, Type

import structlog

from .config_loader import PublishingConfig
from .exceptions import PublishError
from .models import SubTask, TaskBreakdown, WorkItem

logger = structlog.get_logger()

SUBTASK_LABEL = "subtask"
PARENT_LABELS = ("expanded", "parent-task")


@dataclass(frozen=True)
class ItemRef:
    """Reference to an item created in the tracker."""

    number: int
    title: str
    url: str | None = None


class IssueTracker(Protocol):
    """Minimal tracker interface needed to publish subtasks."""

    def create_item(
        self,
        title: str,
        body: str,
        labels: Sequence[str],
        assignee: str | None = None,
        milestone: int | str | None = None,
    ) -> ItemRef:
        ...

    def update_item(self, number: int, body: str, labels: Sequence[str]) -> None:
        ...


@dataclass
class RetryPolicy:
    """Retry behaviour for tracker calls."""

    max_attempts: int = 3
    initial_delay: float = 1.0
    max_delay: float = 30.0
    backoff_multiplier: float = 2.0
    jitter: bool = True
    jitter_max: float = 1.0
    retryable_exceptions: Tuple[Type[Exception], ...] = field(
        default=(ConnectionError, TimeoutError)
    )

    @classmethod
    def from_config(cls, config: PublishingConfig) -> RetryPolicy:
        """Build a policy from the publishing configuration."""
        return cls(
            max_attempts=config.max_attempts,
            initial_delay=config.initial_delay,
            max_delay=config.max_delay,
        )


def call_with_retry(
    func: Callable,
    policy: RetryPolicy,
    *args: Any,
    **kwargs: Any,
) -> Any:
    """Execute a tracker call with retry logic.

    Args:
        func: Function to execute
        policy: Retry policy
        *args: Function arguments
        **kwargs: Function keyword arguments

    Returns:
        Function result

    Raises:
        PublishError: If all attempts fail
    """
    name = getattr(func, "__name__", repr(func))
    delay = policy.initial_delay

    for attempt in range(1, policy.max_attempts + 1):
        try:
            result = func(*args, **kwargs)

            if attempt > 1:
                logger.info("retry_succeeded", function=name, attempt=attempt)

            return result

        except policy.retryable_exceptions as e:
            if attempt == policy.max_attempts:
                logger.error(
                    "retry_exhausted",
                    function=name,
                    attempts=policy.max_attempts,
                    error=str(e),
                )
                raise PublishError(
                    f"Tracker call {name} failed after {policy.max_attempts} attempts: {e}",
                    error_code="TRACKER_UNAVAILABLE",
                ) from e

            logger.warning(
                "retry_attempt",
                function=name,
                attempt=attempt,
                next_attempt=attempt + 1,
                delay=delay,
                error=str(e),
            )

            time.sleep(delay)

            delay = min(delay * policy.backoff_multiplier, policy.max_delay)
            if policy.jitter:
                delay += random.uniform(0, policy.jitter_max)

    raise PublishError("Unexpected end of retry loop", error_code="TRACKER_UNAVAILABLE")


def build_subtask_body(subtask: SubTask, parent: WorkItem) -> str:
    """Render the tracker body of a subtask item."""
    lines = [
        f"**Parent Issue:** #{parent.number}",
        "",
        f"**Description:** {subtask.description}",
        "",
        f"**Category:** {subtask.category.value}",
        f"**Complexity:** {subtask.complexity} story points",
        f"**Estimated Hours:** {subtask.estimated_hours}h",
        f"**Priority:** {subtask.priority.value}",
        "",
    ]

    if subtask.dependencies:
        lines.append("**Dependencies:**")
        lines.extend(f"- {dep}" for dep in subtask.dependencies)
        lines.append("")

    if subtask.acceptance_criteria:
        lines.append("**Acceptance Criteria:**")
        lines.extend(f"- [ ] {criterion}" for criterion in subtask.acceptance_criteria)
        lines.append("")

    lines.append("---")
    lines.append("*This is a subtask generated by automated task expansion.*")
    return "\n".join(lines)


def build_parent_checklist(breakdown: TaskBreakdown, created: Sequence[ItemRef]) -> str:
    """Render the checklist section appended to the parent item."""
    lines = [
        "",
        "",
        "---",
        "",
        "## Task Breakdown Checklist",
        "",
        f"*This task has been decomposed into {len(created)} subtasks:*",
        "",
    ]
    lines.extend(f"- [ ] #{ref.number}: {ref.title}" for ref in created)
    lines.append("")
    lines.append(f"**Total Complexity:** {breakdown.total_complexity} story points")
    lines.append(f"**Timeline:** {breakdown.timeline}")
    return "\n".join(lines) + "\n"


class SubtaskPublisher:
    """Creates one tracker item per subtask and links them to the parent.

    Item creation is not idempotent, so a create call that times out is
    not retried; the item may already exist. When publishing stops
    partway, the raised PublishError carries the items created so far.

    Example:
        >>> publisher = SubtaskPublisher(tracker)
        >>> refs = publisher.publish(result.breakdown)
    """

    def __init__(
        self,
        tracker: IssueTracker,
        config: Optional[PublishingConfig] = None,
        policy: Optional[RetryPolicy] = None,
    ) -> None:
        self.tracker = tracker
        self.config = config or PublishingConfig()
        self.policy = policy or RetryPolicy.from_config(self.config)
        self.create_policy = replace(
            self.policy,
            retryable_exceptions=tuple(
                exc
                for exc in self.policy.retryable_exceptions
                if not issubclass(exc, TimeoutError)
            ),
        )

    def publish(
        self,
        breakdown: TaskBreakdown,
        target_milestone: int | str | None = None,
        include_checklist: bool | None = None,
    ) -> list[ItemRef]:
        """Publish every subtask of a breakdown.

        Args:
            breakdown: Breakdown to publish
            target_milestone: Milestone for the new items (parent's when omitted)
            include_checklist: Append a checklist to the parent item

        Returns:
            References to the created items, in subtask order

        Raises:
            PublishError: If the tracker stays unavailable or a create call
                times out; ``created`` lists the items made before that
        """
        parent = breakdown.original
        if include_checklist is None:
            include_checklist = self.config.include_checklist

        milestone = target_milestone
        if milestone is None and parent.milestone is not None:
            milestone = parent.milestone.number

        created: list[ItemRef] = []
        try:
            for subtask in breakdown.subtasks:
                ref = self._create(subtask, parent, milestone)
                created.append(ref)
                logger.info("subtask_published", parent=parent.number, item_number=ref.number)

            if include_checklist and created:
                call_with_retry(
                    self.tracker.update_item,
                    self.policy,
                    parent.number,
                    body=parent.body + build_parent_checklist(breakdown, created),
                    labels=[*parent.labels, *PARENT_LABELS],
                )
                logger.info("parent_checklist_added", parent=parent.number, subtasks=len(created))

        except PublishError as e:
            e.created = list(created)
            e.details["created"] = [ref.number for ref in created]
            logger.error(
                "publish_incomplete",
                parent=parent.number,
                created=e.details["created"],
                error_code=e.error_code,
            )
            raise

        return created

    def _create(
        self, subtask: SubTask, parent: WorkItem, milestone: int | str | None
    ) -> ItemRef:
        try:
            return call_with_retry(
                self.tracker.create_item,
                self.create_policy,
                title=f"{subtask.title} (Part of #{parent.number})",
                body=build_subtask_body(subtask, parent),
                labels=[*subtask.labels, SUBTASK_LABEL, f"complexity-{subtask.complexity}"],
                assignee=subtask.assignee,
                milestone=milestone,
            )
        except TimeoutError as e:
            raise PublishError(
                f"Creating subtask '{subtask.title}' timed out; the item may exist in the tracker",
                error_code="TRACKER_TIMEOUT",
                details={"subtask": subtask.title},
            ) from e
