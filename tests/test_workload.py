"""
Tests for the team workload model.
"""

import pytest

from task_engine.workload import analyze_team_workload, discover_team

HEAVY_LABELS = ["epic", "large", "complex", "research", "spike"]


class TestDiscoverTeam:
    """Test cases for discover_team."""

    def test_first_seen_order(self, make_item):
        """Test that assignees are listed once, in first-seen order."""
        items = [
            make_item(number=1, assignees=["bob"]),
            make_item(number=2, assignees=["alice", "bob"]),
            make_item(number=3),
        ]
        assert discover_team(items) == ["bob", "alice"]


class TestAnalyzeTeamWorkload:
    """Test cases for analyze_team_workload."""

    def test_load_from_assigned_items(self, make_item):
        """Test that load is the summed complexity of assigned items."""
        items = [
            make_item(number=1, assignees=["alice"]),
            make_item(number=2, body="z" * 600, assignees=["alice", "bob"]),
        ]
        alice, bob = analyze_team_workload(items)

        assert alice.username == "alice"
        assert alice.current_workload == 3
        assert alice.availability_score == pytest.approx(0.8)
        assert alice.recent_velocity == 5
        assert bob.current_workload == 2
        assert bob.max_capacity == 15

    def test_roster_members_without_items(self, make_item):
        """Test that roster members without items are fully available."""
        items = [make_item(assignees=["alice"])]
        workloads = analyze_team_workload(items, roster=["carol", "alice", "carol"])

        assert [m.username for m in workloads] == ["carol", "alice"]
        carol = workloads[0]
        assert carol.current_workload == 0
        assert carol.availability_score == 1.0
        assert carol.skill_areas == ()
        assert carol.recent_velocity == 2

    def test_overloaded_member(self, make_item):
        """Test that availability bottoms out at zero and velocity at capacity."""
        items = [
            make_item(number=n, body="#" + "z" * 600, labels=HEAVY_LABELS, assignees=["alice"])
            for n in range(1, 4)
        ]
        (alice,) = analyze_team_workload(items)

        assert alice.current_workload == 24
        assert alice.availability_score == 0.0
        assert alice.recent_velocity == 15
        assert alice.utilization > 1.0

    def test_skills_inferred_from_items(self, make_item):
        """Test that skill areas come from the member's items, sorted."""
        items = [make_item(body="kubernetes and jest", assignees=["alice"])]
        (alice,) = analyze_team_workload(items)

        assert alice.skill_areas == ("devops", "testing")

    def test_custom_capacity(self, make_item):
        """Test that availability uses the configured capacity."""
        items = [make_item(body="z" * 600, assignees=["alice"])]
        (alice,) = analyze_team_workload(items, max_capacity=4)

        assert alice.availability_score == pytest.approx(0.5)

    def test_no_items_no_roster(self):
        """Test that an empty snapshot yields no members."""
        assert analyze_team_workload([]) == []
