"""
Tests for sub-issue publishing.
"""

import pytest

from task_engine.config_loader import PublishingConfig
from task_engine.decomposer import TaskDecomposer
from task_engine.exceptions import PublishError
from task_engine.publisher import (
    RetryPolicy,
    SubtaskPublisher,
    build_subtask_body,
    call_with_retry,
)

PARENT_BODY = "Saving a report crashes the database layer and hurts performance. " + "z" * 560

NO_WAIT = RetryPolicy(max_attempts=3, initial_delay=0.0, jitter=False)


@pytest.fixture
def breakdown(make_item):
    """Four-step bug fix breakdown of item #7."""
    parent = make_item(
        number=7, title="Fix crash", body=PARENT_BODY, labels=["bug"], milestone_number=3
    )
    return TaskDecomposer().decompose(parent).breakdown


class TestSubtaskPublisher:
    """Test cases for SubtaskPublisher."""

    def test_creates_one_item_per_subtask(self, tracker, breakdown):
        """Test titles, labels and milestone of created items."""
        refs = SubtaskPublisher(tracker, policy=NO_WAIT).publish(breakdown)

        assert [ref.number for ref in refs] == [101, 102, 103, 104]
        first = tracker.created[0]
        assert first["title"] == "Bug Investigation and Reproduction (Part of #7)"
        assert first["labels"] == ["investigation", "bug", "subtask", "complexity-1"]
        assert first["milestone"] == 3
        assert first["assignee"] is None

    def test_target_milestone(self, tracker, breakdown):
        """Test that an explicit milestone overrides the parent's."""
        SubtaskPublisher(tracker, policy=NO_WAIT).publish(breakdown, target_milestone="Sprint 9")
        assert {item["milestone"] for item in tracker.created} == {"Sprint 9"}

    def test_parent_checklist(self, tracker, breakdown):
        """Test the checklist appended to the parent item."""
        SubtaskPublisher(tracker, policy=NO_WAIT).publish(breakdown)

        (update,) = tracker.updates
        assert update["number"] == 7
        assert update["body"].startswith(PARENT_BODY)
        assert "## Task Breakdown Checklist" in update["body"]
        assert "*This task has been decomposed into 4 subtasks:*" in update["body"]
        assert "- [ ] #101: Bug Investigation and Reproduction (Part of #7)" in update["body"]
        assert "**Total Complexity:** 4 story points" in update["body"]
        assert update["labels"] == ["bug", "expanded", "parent-task"]

    def test_without_checklist(self, tracker, breakdown):
        """Test that the parent is left alone when no checklist is wanted."""
        SubtaskPublisher(tracker, policy=NO_WAIT).publish(breakdown, include_checklist=False)

        assert len(tracker.created) == 4
        assert tracker.updates == []

    def test_checklist_default_from_config(self, tracker, breakdown):
        """Test that the configured checklist default is honoured."""
        config = PublishingConfig(include_checklist=False)
        SubtaskPublisher(tracker, config=config, policy=NO_WAIT).publish(breakdown)

        assert tracker.updates == []

    def test_transient_failures_are_retried(self, make_tracker, breakdown):
        """Test that connection errors are retried."""
        tracker = make_tracker(failures=2)
        refs = SubtaskPublisher(tracker, policy=NO_WAIT).publish(breakdown)

        assert len(refs) == 4
        assert tracker.calls == 7

    def test_retries_exhausted(self, make_tracker, breakdown):
        """Test that a tracker that stays down raises PublishError."""
        tracker = make_tracker(failures=5)

        with pytest.raises(PublishError) as exc_info:
            SubtaskPublisher(tracker, policy=NO_WAIT).publish(breakdown)

        assert exc_info.value.error_code == "TRACKER_UNAVAILABLE"
        assert isinstance(exc_info.value.__cause__, ConnectionError)
        assert exc_info.value.created == []
        assert tracker.calls == 3
        assert tracker.created == []

    def test_failure_partway_reports_created_items(self, make_tracker, breakdown):
        """Test that items created before a failure are attached to the error."""
        tracker = make_tracker(fail_from=3)
        policy = RetryPolicy(max_attempts=1, initial_delay=0.0, jitter=False)

        with pytest.raises(PublishError) as exc_info:
            SubtaskPublisher(tracker, policy=policy).publish(breakdown)

        error = exc_info.value
        assert [ref.number for ref in error.created] == [101, 102]
        assert error.details["created"] == [101, 102]
        assert [item["number"] for item in tracker.created] == [101, 102]
        assert tracker.updates == []

    def test_checklist_failure_reports_created_items(self, make_tracker, breakdown):
        """Test that a failed parent update still reports every created item."""
        tracker = make_tracker(fail_from=5)

        with pytest.raises(PublishError) as exc_info:
            SubtaskPublisher(tracker, policy=NO_WAIT).publish(breakdown)

        assert exc_info.value.details["created"] == [101, 102, 103, 104]
        assert tracker.calls == 7

    def test_create_timeout_is_not_retried(self, make_tracker, breakdown):
        """Test that a timed-out create is reported instead of repeated."""
        tracker = make_tracker(failures=1, error=TimeoutError)

        with pytest.raises(PublishError) as exc_info:
            SubtaskPublisher(tracker, policy=NO_WAIT).publish(breakdown)

        error = exc_info.value
        assert error.error_code == "TRACKER_TIMEOUT"
        assert isinstance(error.__cause__, TimeoutError)
        assert error.details == {
            "subtask": "Bug Investigation and Reproduction",
            "created": [],
        }
        assert tracker.calls == 1

    def test_parent_update_timeout_is_retried(self, make_tracker, breakdown):
        """Test that the idempotent parent update is retried on timeouts."""

        class SlowUpdateTracker(make_tracker):
            timed_out = False

            def update_item(self, number, body, labels):
                if not self.timed_out:
                    self.timed_out = True
                    self.calls += 1
                    raise TimeoutError("update timed out")
                super().update_item(number, body, labels)

        tracker = SlowUpdateTracker()
        refs = SubtaskPublisher(tracker, policy=NO_WAIT).publish(breakdown)

        assert len(refs) == 4
        assert len(tracker.updates) == 1
        assert tracker.calls == 6

    def test_other_errors_propagate(self, make_tracker, breakdown):
        """Test that non-transient errors are not retried."""
        tracker = make_tracker(failures=1, error=ValueError)

        with pytest.raises(ValueError):
            SubtaskPublisher(tracker, policy=NO_WAIT).publish(breakdown)

        assert tracker.calls == 1


class TestCallWithRetry:
    """Test cases for call_with_retry."""

    def test_returns_result(self):
        """Test that a successful call returns its result."""
        assert call_with_retry(lambda x: x * 2, NO_WAIT, 21) == 42

    def test_policy_from_config(self):
        """Test building a policy from configuration."""
        policy = RetryPolicy.from_config(PublishingConfig(max_attempts=5, initial_delay=0.5))

        assert policy.max_attempts == 5
        assert policy.initial_delay == 0.5
        assert policy.max_delay == 30.0


class TestBuildSubtaskBody:
    """Test cases for build_subtask_body."""

    def test_body_sections(self, breakdown):
        """Test the sections of a subtask body."""
        subtask = breakdown.subtasks[1]
        body = build_subtask_body(subtask, breakdown.original)

        assert body.startswith("**Parent Issue:** #7\n")
        assert "**Category:** Development" in body
        assert "**Complexity:** 1 story points" in body
        assert "**Estimated Hours:** 8h" in body
        assert "**Priority:** high" in body
        assert "**Dependencies:**\n- Bug Investigation and Reproduction" in body
        assert "- [ ] Root cause identified" in body
