"""
Tests for the command line interface.
"""

import json

import pytest

from task_engine.cli import main
from task_engine.config_loader import load_config

BUG_BODY = "Saving a report crashes the database layer and hurts performance. " + "z" * 560

SNAPSHOT = {
    "team_members": ["alice", "bob"],
    "issues": [
        {
            "number": 12,
            "title": "Add CSV export",
            "body": "Users need to export their reports so they can share results with stakeholders.",
            "labels": [{"name": "enhancement"}],
            "assignees": [],
        },
        {
            "number": 7,
            "title": "Fix crash when saving large reports",
            "body": BUG_BODY,
            "labels": [{"name": "bug"}],
            "assignees": [{"login": "alice"}],
            "milestone": {"title": "Sprint 4", "number": 3},
        },
    ],
}


@pytest.fixture
def snapshot_path(tmp_path):
    """Snapshot file with one feature and one bug."""
    path = tmp_path / "issues.json"
    path.write_text(json.dumps(SNAPSHOT))
    return str(path)


class TestCli:
    """Test cases for the task-engine CLI."""

    def test_version(self, capsys):
        """Test the version command."""
        assert main(["version"]) == 0
        assert "Task Engine" in capsys.readouterr().out

    def test_no_command_shows_help(self, capsys):
        """Test that running without a command prints help."""
        assert main([]) == 0
        assert "usage: task-engine" in capsys.readouterr().out

    def test_next_json(self, snapshot_path, capsys, reset_logging):
        """Test JSON recommendations."""
        assert main(["next", snapshot_path, "--json"]) == 0

        out = capsys.readouterr().out
        assert '"number": 12' in out
        assert '"number": 7' in out
        assert '"team_size_considered": 2' in out

    def test_next_with_filters(self, snapshot_path, capsys, reset_logging):
        """Test that filters reach the ranker."""
        assert main(["next", snapshot_path, "--json", "--priority", "critical"]) == 0
        assert '"recommendations": []' in capsys.readouterr().out

    def test_next_table(self, snapshot_path, capsys, reset_logging):
        """Test the rendered recommendation report."""
        assert main(["next", snapshot_path, "--limit", "1"]) == 0
        assert "Team Workload" in capsys.readouterr().out

    def test_expand_json(self, snapshot_path, capsys, reset_logging):
        """Test JSON breakdown output."""
        assert main(["expand", snapshot_path, "--item", "7", "--json"]) == 0

        out = capsys.readouterr().out
        assert '"template": "Bug Fix"' in out
        assert '"advisory": null' in out

    def test_expand_table(self, snapshot_path, capsys, reset_logging):
        """Test the rendered breakdown report."""
        assert main(["expand", snapshot_path, "-i", "7"]) == 0
        assert "Implementation Plan" in capsys.readouterr().out

    def test_expand_low_value_item(self, snapshot_path, capsys, reset_logging):
        """Test that small items print an advisory."""
        assert main(["expand", snapshot_path, "--item", "12", "--json"]) == 0
        assert '"breakdown": null' in capsys.readouterr().out

    def test_expand_unknown_item(self, snapshot_path, capsys, reset_logging):
        """Test that an unknown item exits with an error."""
        assert main(["expand", snapshot_path, "--item", "99"]) == 1
        assert "Work item #99 not found in snapshot" in capsys.readouterr().out

    def test_missing_snapshot(self, tmp_path, capsys, reset_logging):
        """Test that a missing snapshot exits with an error."""
        assert main(["next", str(tmp_path / "missing.json")]) == 1
        assert "Error" in capsys.readouterr().out

    def test_write_default_config(self, tmp_path):
        """Test that the written configuration loads back."""
        output = tmp_path / "engine.yaml"

        assert main(["config", "--output", str(output)]) == 0
        assert load_config(output).recommendation.max_recommendations == 5
