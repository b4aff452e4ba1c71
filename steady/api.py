"""High-level API over the workspace store.

Each function loads what it needs, computes or mutates, and (for mutations)
saves inside a single locked transaction. ``now`` is the injectable clock
value; when omitted the workspace clock in the user's timezone is used.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any

from steady import daily, ledger, progress, timer
from steady.actions import categories_for_year, ensure_year, find_action, find_category
from steady.dates import start_of_day, year_start
from steady.fileio import write_yaml_atomic
from steady.logging_setup import setup_logging
from steady.models import (
    CategoryProgress,
    DailyProgress,
    RoutineAction,
    Snapshot,
    TimeSession,
    WeekRow,
)
from steady.store import load_snapshot, transaction
from steady.workspace import config_path, load_config, now_local, today_local, workspace_root

logger = logging.getLogger(__name__)


def _resolve_now(now: datetime | None, root: Path | None) -> datetime:
    return now if now is not None else now_local(root)


def _resolve_today(now: datetime | None, root: Path | None) -> date:
    return start_of_day(now) if now is not None else today_local(root)


def _require_action(snapshot: Snapshot, action_id: str) -> RoutineAction:
    action = find_action(snapshot, action_id)
    if action is None:
        raise KeyError(f"Unknown action: {action_id}")
    return action


# ── Setup ─────────────────────────────────────────────────────


def init_workspace(root: Path | None = None, now: datetime | None = None) -> Path:
    """Create the workspace with a default config and this year's plan."""
    if root is None:
        root = workspace_root()
    root.mkdir(parents=True, exist_ok=True)
    cp = config_path(root)
    if not cp.exists():
        write_yaml_atomic(cp, {"timezone": "UTC", "strict_invariants": False, "log_level": "INFO"})
    setup_logging(load_config(root).log_level)

    year = _resolve_now(now, root).year
    with transaction(root) as snapshot:
        ensure_year(snapshot, year)
    return root


# ── Read side ─────────────────────────────────────────────────


def daily_progress(
    day: date | datetime | None = None,
    root: Path | None = None,
    now: datetime | None = None,
) -> DailyProgress | None:
    """Completed/target for *day* (default today), or None when nothing was due."""
    d = start_of_day(day) if day is not None else _resolve_today(now, root)
    snapshot = load_snapshot(root)
    return daily.daily_progress(d, snapshot.actions, snapshot.marks, snapshot.sessions)


def category_progress(
    start: date | datetime,
    end: date | datetime,
    category_ids: list[str] | None = None,
    root: Path | None = None,
    now: datetime | None = None,
    default_start: date | None = None,
) -> list[CategoryProgress]:
    """Per-category progress over [start, end].

    Without *category_ids*, the current year's categories are used. Actions
    without a start date count from Jan 1 of the current year unless
    *default_start* says otherwise.
    """
    today = _resolve_today(now, root)
    snapshot = load_snapshot(root)
    if category_ids is None:
        categories = categories_for_year(snapshot, today.year)
    else:
        categories = [c for c in (find_category(snapshot, cid) for cid in category_ids) if c is not None]
    return progress.category_progress(
        start, end, categories, snapshot.actions, snapshot.marks, snapshot.sessions,
        today, default_start=default_start or year_start(today),
    )


def today_agenda(root: Path | None = None, now: datetime | None = None) -> dict[str, list[dict[str, Any]]]:
    today = _resolve_today(now, root)
    snapshot = load_snapshot(root)
    return daily.today_agenda(today, snapshot.actions, snapshot.marks, snapshot.sessions)


def month_grid(
    anchor: date | None = None,
    root: Path | None = None,
    now: datetime | None = None,
) -> dict[date, int | None]:
    today = _resolve_today(now, root)
    snapshot = load_snapshot(root)
    return daily.month_percentages(
        anchor or today, today, snapshot.actions, snapshot.marks, snapshot.sessions
    )


def week_table(
    anchor: date | None = None,
    root: Path | None = None,
    now: datetime | None = None,
) -> list[WeekRow]:
    today = _resolve_today(now, root)
    snapshot = load_snapshot(root)
    return progress.week_check_table(anchor or today, snapshot.actions, snapshot.marks)


# ── Write side ────────────────────────────────────────────────


def toggle_completion(
    action_id: str,
    day: date | datetime | None = None,
    root: Path | None = None,
    now: datetime | None = None,
) -> bool:
    """Flip the mark for (action, day); returns whether the mark now exists."""
    current = _resolve_now(now, root)
    d = start_of_day(day) if day is not None else start_of_day(current)
    with transaction(root) as snapshot:
        action = _require_action(snapshot, action_id)
        return ledger.toggle_completion(snapshot, action, d, current)


def start_timer(
    action_id: str,
    root: Path | None = None,
    now: datetime | None = None,
) -> TimeSession | None:
    current = _resolve_now(now, root)
    with transaction(root) as snapshot:
        action = _require_action(snapshot, action_id)
        return timer.start_timer(snapshot, action, current)


def stop_timer(
    action_id: str,
    root: Path | None = None,
    now: datetime | None = None,
) -> TimeSession | None:
    current = _resolve_now(now, root)
    with transaction(root) as snapshot:
        action = _require_action(snapshot, action_id)
        return timer.stop_timer(snapshot, action, current)


def add_manual_time(
    action_id: str,
    minutes: int,
    day: date | datetime | None = None,
    root: Path | None = None,
    now: datetime | None = None,
) -> TimeSession:
    """Record *minutes* against *day* (default today) without running a timer."""
    current = _resolve_now(now, root)
    d = start_of_day(day) if day is not None else start_of_day(current)
    with transaction(root) as snapshot:
        action = _require_action(snapshot, action_id)
        return ledger.add_manual_session(snapshot, action, d, minutes, current)
