"""Snapshot loading: work items and team roster from JSON or YAML files."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog
import yaml

from .exceptions import SnapshotError
from .models import WorkItem

logger = structlog.get_logger()

ITEM_KEYS = ("items", "issues")


@dataclass
class Snapshot:
    """Open work items plus the team roster they are ranked against."""

    items: list[WorkItem] = field(default_factory=list)
    roster: list[str] = field(default_factory=list)


def parse_snapshot(data: Any) -> Snapshot:
    """
    Build a snapshot from decoded data.

    Accepts a list of items, or a mapping holding the list under
    ``items`` or ``issues`` and an optional ``team_members`` list. Pull
    requests and closed items are skipped.

    Raises:
        SnapshotError: If the data does not have a supported shape
    """
    roster: list[str] = []

    if isinstance(data, list):
        raw_items = data
    elif isinstance(data, dict):
        raw_items = next((data[key] for key in ITEM_KEYS if key in data), None)
        if not isinstance(raw_items, list):
            raise SnapshotError(
                "Snapshot mapping must hold a list under 'items' or 'issues'",
                error_code="INVALID_SNAPSHOT",
            )
        members = data.get("team_members") or []
        if not isinstance(members, list) or not all(
            isinstance(member, str) and member for member in members
        ):
            raise SnapshotError(
                "'team_members' must be a list of usernames",
                error_code="INVALID_SNAPSHOT",
            )
        roster = list(members)
    else:
        raise SnapshotError(
            f"Snapshot must be a list or mapping, got {type(data).__name__}",
            error_code="INVALID_SNAPSHOT",
        )

    items = []
    skipped = 0
    for raw in raw_items:
        if isinstance(raw, dict) and (raw.get("pull_request") or raw.get("state") == "closed"):
            skipped += 1
            continue
        items.append(WorkItem.from_dict(raw))

    logger.debug("snapshot_parsed", items=len(items), skipped=skipped, roster=len(roster))
    return Snapshot(items=items, roster=roster)


def load_snapshot(path: str | Path) -> Snapshot:
    """
    Load a snapshot file.

    ``.json`` files are decoded as JSON; anything else as YAML (a JSON
    document is valid YAML too).

    Raises:
        SnapshotError: If the file is missing, undecodable or malformed
    """
    path = Path(path)
    if not path.exists():
        raise SnapshotError(f"Snapshot file not found: {path}", error_code="SNAPSHOT_NOT_FOUND")

    try:
        with open(path, "r", encoding="utf-8") as f:
            if path.suffix.lower() == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise SnapshotError(
            f"Snapshot file {path} could not be decoded: {e}",
            error_code="INVALID_SNAPSHOT",
        ) from e

    snapshot = parse_snapshot(data)
    logger.info("snapshot_loaded", path=str(path), items=len(snapshot.items))
    return snapshot
