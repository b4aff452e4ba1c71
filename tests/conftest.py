"""Shared test fixtures for steady tests."""

from __future__ import annotations

import json
import os
from pathlib import Path

import pytest
import yaml


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Create a temporary workspace with a plan, a ledger and a config."""
    root = tmp_path / "workspace"
    root.mkdir(parents=True)

    config = {"timezone": "UTC", "strict_invariants": False, "log_level": "DEBUG"}
    (root / "config.yaml").write_text(yaml.dump(config, default_flow_style=False), encoding="utf-8")

    plan = {
        "years": [{"id": "y2026", "year": 2026, "goalTitle": "Steady year"}],
        "categories": [
            {"id": "health", "yearId": "y2026", "name": "Health", "colorKey": "green", "sortOrder": 0},
            {"id": "study", "yearId": "y2026", "name": "Study", "colorKey": "blue", "sortOrder": 1},
        ],
        "actions": [
            {
                "id": "stretch",
                "categoryId": "health",
                "name": "Stretch",
                "type": "weekday_repeat",
                "repeatDays": ["mon", "wed", "fri"],
                "activeFrom": "2026-02-02",
                "globalOrder": 0,
                "groupOrder": 0,
            },
            {
                "id": "run",
                "categoryId": "health",
                "name": "Run",
                "type": "weekly_count",
                "weeklyTarget": 3,
                "activeFrom": "2026-02-02",
                "globalOrder": 1,
                "groupOrder": 1,
            },
            {
                "id": "read",
                "categoryId": "study",
                "name": "Read",
                "type": "time_accumulated",
                "repeatDays": ["mon", "tue", "wed", "thu", "fri", "sat", "sun"],
                "dailyMinutes": 60,
                "activeFrom": "2026-02-02",
                "globalOrder": 2,
                "groupOrder": 0,
            },
        ],
    }
    (root / "plan.yaml").write_text(yaml.dump(plan, default_flow_style=False, sort_keys=False), encoding="utf-8")

    ledger = {
        "marks": [
            {"actionId": "stretch", "day": "2026-02-09", "recordedAt": "2026-02-09T20:00:00+00:00"},
            {"actionId": "run", "day": "2026-02-10", "recordedAt": "2026-02-10T07:00:00+00:00"},
        ],
        "sessions": [
            {
                "id": "s1",
                "actionId": "read",
                "startedAt": "2026-02-10T20:00:00+00:00",
                "endedAt": "2026-02-10T20:40:00+00:00",
                "durationMinutes": 40,
                "attributedDay": "2026-02-10",
                "isManual": False,
            },
        ],
    }
    (root / "ledger.json").write_text(json.dumps(ledger, indent=2), encoding="utf-8")

    os.environ["STEADY_ROOT"] = str(root)
    yield root
    if "STEADY_ROOT" in os.environ:
        del os.environ["STEADY_ROOT"]
