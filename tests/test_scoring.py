"""
Tests for the component scorers.
"""

from datetime import datetime, timezone

import pytest

from task_engine.models import Milestone, TeamMemberWorkload, WorkItem
from task_engine.recommender import RecommendationEngine
from task_engine.scoring import (
    availability_score,
    individual_skill_match,
    priority_score,
    readiness,
    skill_match_score,
    urgency_score,
)


def member(username, availability, skills=()):
    return TeamMemberWorkload(
        username=username,
        current_workload=0,
        max_capacity=15,
        availability_score=availability,
        skill_areas=tuple(skills),
    )


class TestPriorityScore:
    """Test cases for priority_score."""

    def test_base_priority(self, make_item):
        """Test that unlabeled items get the base priority."""
        assert priority_score(make_item()) == 0.5

    def test_critical_bug_is_clamped(self, make_item):
        """Test that the bug boost never pushes priority above 1."""
        assert priority_score(make_item(labels=["critical", "bug"])) == 1.0

    def test_severity_substring(self, make_item):
        """Test that severity keywords match inside label names."""
        assert priority_score(make_item(labels=["priority: high"])) == 0.8

    def test_highest_severity_wins(self, make_item):
        """Test that the highest matching severity is used."""
        assert priority_score(make_item(labels=["low", "medium"])) == 0.6

    def test_low_label_does_not_lower_base(self, make_item):
        """Test that low severities never go below the base."""
        assert priority_score(make_item(labels=["low"])) == 0.5

    def test_bug_boost(self, make_item):
        """Test the bug boost on top of the base."""
        assert priority_score(make_item(labels=["bug"])) == pytest.approx(0.7)

    def test_epic_penalty(self, make_item):
        """Test that epics are scaled down."""
        assert priority_score(make_item(labels=["epic"])) == pytest.approx(0.15)

    def test_monotonic_in_severity(self, make_item):
        """Test that a critical item never scores below the same low item."""
        for extra in ([], ["bug"], ["epic"], ["bug", "epic"]):
            critical = priority_score(make_item(labels=["critical", *extra]))
            low = priority_score(make_item(labels=["low", *extra]))
            assert critical >= low

    @pytest.mark.parametrize(
        "labels",
        [[], ["critical"], ["critical", "bug", "fix"], ["epic", "lowest"], ["hotfix", "high"]],
    )
    def test_within_bounds(self, make_item, labels):
        """Test that priority stays in [0, 1]."""
        assert 0.0 <= priority_score(make_item(labels=labels)) <= 1.0


class TestUrgencyScore:
    """Test cases for urgency_score."""

    def test_base_urgency(self, make_item, now):
        """Test that items without deadline or activity get the base."""
        assert urgency_score(make_item(), now) == 0.3

    def test_overdue(self, make_item, now):
        """Test that an overdue milestone gives maximum urgency."""
        assert urgency_score(make_item(due_in_days=-2), now) == 1.0

    @pytest.mark.parametrize(
        "days,expected",
        [(0, 0.9), (3, 0.9), (4, 0.7), (7, 0.7), (8, 0.5), (14, 0.5), (15, 0.3), (60, 0.3)],
    )
    def test_deadline_buckets(self, make_item, now, days, expected):
        """Test the due-date buckets."""
        assert urgency_score(make_item(due_in_days=days), now) == expected

    def test_partial_days_round_up(self, make_item, now):
        """Test that a deadline 3.5 days out counts as 4 days."""
        assert urgency_score(make_item(due_in_days=3.5), now) == 0.7

    def test_recent_activity_boost(self, make_item, now):
        """Test the boost for items updated in the last two days."""
        assert urgency_score(make_item(updated_days_ago=1), now) == pytest.approx(0.5)
        assert urgency_score(make_item(updated_days_ago=2), now) == 0.3

    def test_discussion_boost(self, make_item, now):
        """Test the boost for actively discussed items."""
        assert urgency_score(make_item(comments=6), now) == pytest.approx(0.4)
        assert urgency_score(make_item(comments=5), now) == 0.3

    def test_boosts_are_clamped(self, make_item, now):
        """Test that boosts never push urgency above 1."""
        item = make_item(due_in_days=-1, updated_days_ago=0, comments=20)
        assert urgency_score(item, now) == 1.0

    def test_naive_timestamps_are_utc(self, now):
        """Test that naive datetimes on directly built items are read as UTC."""
        item = WorkItem(
            1,
            "Ship the release",
            milestone=Milestone("Sprint 4", due_on=datetime(2026, 3, 6, 12, 0)),
            updated_at=datetime(2026, 3, 1, 12, 0),
        )

        assert item.updated_at.tzinfo is timezone.utc
        assert item.milestone.due_on.tzinfo is timezone.utc
        assert urgency_score(item, now) == pytest.approx(0.9)

    def test_ranking_with_naive_timestamps(self):
        """Test a ranking pass over naive item timestamps and a naive now."""
        item = WorkItem(
            1,
            "Ship the release",
            "x" * 60,
            milestone=Milestone("Sprint 4", due_on=datetime(2026, 1, 1)),
            updated_at=datetime(2026, 1, 1),
        )

        result = RecommendationEngine().recommend([item], now=datetime(2026, 1, 2))

        assert [score.number for score in result.recommendations] == [1]
        assert result.recommendations[0].urgency_score == 1.0


class TestAvailabilityScore:
    """Test cases for availability_score."""

    def test_unassigned_without_roster(self, make_item):
        """Test the default when there is no team."""
        assert availability_score(make_item(), []) == 0.8

    def test_unassigned_uses_most_available_member(self, make_item):
        """Test that unassigned items look at the freest member."""
        workloads = [member("alice", 0.2), member("bob", 0.9)]
        assert availability_score(make_item(), workloads) == 0.9

    def test_assigned_averages_assignees(self, make_item):
        """Test that assigned items average over their assignees."""
        workloads = [member("alice", 0.2), member("bob", 0.6), member("carol", 1.0)]
        item = make_item(assignees=["alice", "bob"])
        assert availability_score(item, workloads) == pytest.approx(0.4)

    def test_assignee_outside_roster(self, make_item):
        """Test the default for assignees missing from the roster."""
        item = make_item(assignees=["mallory"])
        assert availability_score(item, [member("alice", 0.2)]) == 0.6


class TestSkillMatch:
    """Test cases for skill matching."""

    @pytest.mark.parametrize(
        "required,known,expected",
        [
            ({"backend"}, ["backend", "data"], 1.0),
            ({"a", "b", "c"}, ["a"], 0.6),
            ({"a", "b"}, ["a"], 0.7),
            ({"a", "b", "c", "d"}, ["a", "b", "c"], 0.9),
            ({"a", "b", "c", "d"}, ["x"], 0.4),
        ],
    )
    def test_overlap_mapping(self, required, known, expected):
        """Test the overlap-ratio buckets."""
        assert individual_skill_match(frozenset(required), known) == expected

    def test_no_required_skills_is_neutral(self):
        """Test the neutral score for items without skill hints."""
        assert individual_skill_match(frozenset(), ["backend"]) == 0.7

    def test_member_without_history(self):
        """Test the score for members with no known skills."""
        assert individual_skill_match(frozenset({"backend"}), []) == 0.5

    def test_without_roster(self, make_item):
        """Test the neutral score when there is no team."""
        assert skill_match_score(make_item(body="kubernetes rollout"), []) == 0.7

    def test_unassigned_takes_best_member(self, make_item):
        """Test that unassigned items take the best overlap on the team."""
        item = make_item(body="Roll the service out on kubernetes with a new dashboard view")
        workloads = [member("alice", 0.5, ["design"]), member("bob", 0.5, ["devops"])]
        assert skill_match_score(item, workloads) == 1.0

    def test_assignee_outside_roster(self, make_item):
        """Test the default for assignees missing from the roster."""
        item = make_item(body="kubernetes rollout", assignees=["mallory"])
        assert skill_match_score(item, [member("alice", 0.5, ["devops"])]) == 0.6


class TestReadiness:
    """Test cases for readiness."""

    def test_ready_item(self, make_item):
        """Test that a well-described, unblocked item is ready."""
        result = readiness(make_item())

        assert result.ready is True
        assert result.score == 1.0
        assert result.blockers == ()

    def test_empty_body(self, make_item):
        """Test that an empty body is a blocker even with a passing score."""
        result = readiness(make_item(body=""))

        assert result.score == pytest.approx(0.7)
        assert result.blockers == ("Insufficient description",)
        assert result.ready is False

    def test_blocking_label(self, make_item):
        """Test that blocking labels are reported by name."""
        result = readiness(make_item(labels=["Blocked", "frontend"]))

        assert result.score == 0.5
        assert result.blockers == ("Labels: Blocked",)
        assert result.ready is False

    def test_dependency_phrase_counts_once(self, make_item):
        """Test that only the first dependency phrase is penalized."""
        body = "This depends on #12 and is blocked by #13, so it is waiting for both of them."
        result = readiness(make_item(body=body))

        assert result.score == pytest.approx(0.8)
        assert result.blockers == ("Has dependencies mentioned in description",)
        assert result.ready is False

    def test_score_clamped_at_zero(self, make_item):
        """Test that the score never goes negative."""
        result = readiness(make_item(body="needs #4", labels=["on-hold"]))

        assert result.score == pytest.approx(0.0)
        assert len(result.blockers) == 3
