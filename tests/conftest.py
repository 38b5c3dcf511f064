"""
Pytest configuration and fixtures.
"""

from datetime import datetime, timedelta, timezone

import pytest
import structlog

from task_engine.models import Milestone, SubTask, SubtaskCategory, SubtaskPriority, WorkItem
from task_engine.publisher import ItemRef

NOW = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)

DEFAULT_BODY = "Users need to export their reports so they can share results with stakeholders."


def build_item(
    number=1,
    title="Add export feature",
    body=DEFAULT_BODY,
    labels=(),
    assignees=(),
    due_in_days=None,
    milestone_number=None,
    updated_days_ago=None,
    comments=0,
):
    """Build a work item relative to NOW."""
    milestone = None
    if due_in_days is not None or milestone_number is not None:
        milestone = Milestone(
            title="Sprint 4",
            due_on=NOW + timedelta(days=due_in_days) if due_in_days is not None else None,
            number=milestone_number,
        )
    return WorkItem(
        number=number,
        title=title,
        body=body,
        labels=tuple(labels),
        assignees=tuple(assignees),
        milestone=milestone,
        created_at=NOW - timedelta(days=30),
        updated_at=NOW - timedelta(days=updated_days_ago) if updated_days_ago is not None else None,
        comments=comments,
    )


def build_subtask(title, dependencies=(), hours=6, category=SubtaskCategory.DEVELOPMENT, complexity=1):
    """Build a subtask with sensible defaults."""
    return SubTask(
        title=title,
        description=f"Do {title}",
        complexity=complexity,
        priority=SubtaskPriority.MEDIUM,
        category=category,
        estimated_hours=hours,
        dependencies=list(dependencies),
    )


class FakeTracker:
    """In-memory issue tracker that can fail a number of calls first.

    With ``fail_from`` set, every call from that call number onwards fails.
    """

    def __init__(self, failures=0, error=ConnectionError, fail_from=None):
        self.failures = failures
        self.fail_from = fail_from
        self.error = error
        self.created = []
        self.updates = []
        self.calls = 0
        self._next_number = 100

    def _maybe_fail(self):
        self.calls += 1
        if self.fail_from is not None and self.calls >= self.fail_from:
            raise self.error("tracker unavailable")
        if self.failures > 0:
            self.failures -= 1
            raise self.error("tracker unavailable")

    def create_item(self, title, body, labels, assignee=None, milestone=None):
        self._maybe_fail()
        self._next_number += 1
        self.created.append(
            {
                "number": self._next_number,
                "title": title,
                "body": body,
                "labels": list(labels),
                "assignee": assignee,
                "milestone": milestone,
            }
        )
        return ItemRef(number=self._next_number, title=title)

    def update_item(self, number, body, labels):
        self._maybe_fail()
        self.updates.append({"number": number, "body": body, "labels": list(labels)})


@pytest.fixture
def now():
    """Fixed reference time for scoring passes."""
    return NOW


@pytest.fixture
def make_item():
    """Factory for work items."""
    return build_item


@pytest.fixture
def make_subtask():
    """Factory for subtasks."""
    return build_subtask


@pytest.fixture
def tracker():
    """Fake tracker that always succeeds."""
    return FakeTracker()


@pytest.fixture
def reset_logging():
    """Restore structlog defaults after a test reconfigures logging."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def make_tracker():
    """Factory for fake trackers with injected failures."""
    return FakeTracker
