"""Range aggregation: per-action and per-category completion over a period.

Each action is measured only inside its own effective window, the
intersection of the requested range with [active_from, active_until] clipped
to today. Days after today can't be satisfied yet, so they count toward
neither target nor completion.

A category's percentage is the unweighted mean of its actions' own
percentages: an action with three opportunities weighs as much as one with
thirty.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta

from steady.dates import (
    iter_days,
    iter_weeks,
    month_interval,
    start_of_day,
    week_days,
    week_interval,
    year_end,
    year_start,
)
from steady.ledger import LedgerIndex
from steady.models import (
    ActionProgress,
    Category,
    CategoryProgress,
    CompletionMark,
    RoutineAction,
    TimeSession,
    WeekRow,
    WeeklyCount,
)


# ── Windows ───────────────────────────────────────────────────


def effective_window(
    action: RoutineAction,
    start: date,
    end: date,
    today: date,
    default_start: date | None = None,
) -> tuple[date, date] | None:
    """Clip [start, end] to the action's own active window and to today.

    Returns None when the result is empty.
    """
    origin = action.active_from or default_start or start
    lo = max(start, origin)
    hi = min(end, action.active_until or today, today)
    if lo > hi:
        return None
    return lo, hi


# ── Per-action progress ───────────────────────────────────────


def _count_days(action: RoutineAction, lo: date, hi: date, index: LedgerIndex, today: date) -> tuple[int, int]:
    completed = target = 0
    for d in iter_days(lo, hi):
        if not action.is_due_on(d):
            continue
        target += 1
        if d <= today and index.is_satisfied(action, d):
            completed += 1
    return completed, target


def _count_weeks(schedule: WeeklyCount, action: RoutineAction, lo: date, hi: date, index: LedgerIndex, today: date) -> tuple[int, int]:
    completed = target = 0
    for w in iter_weeks(lo, hi):
        target += schedule.target_count
        if w <= today:
            done = index.marks_between(action.id, w, w + timedelta(days=7))
            completed += min(schedule.target_count, done)
    return completed, target


def action_progress(
    action: RoutineAction,
    start: date,
    end: date,
    index: LedgerIndex,
    today: date,
    default_start: date | None = None,
) -> ActionProgress | None:
    """Completion of one action over [start, end], or None if nothing was due."""
    if not action.enabled:
        return None
    window = effective_window(action, start, end, today, default_start)
    if window is None:
        return None
    lo, hi = window

    if isinstance(action.schedule, WeeklyCount):
        completed, target = _count_weeks(action.schedule, action, lo, hi, index, today)
    else:
        completed, target = _count_days(action, lo, hi, index, today)

    if target == 0:
        return None
    return ActionProgress(action=action, completed=completed, target=target)


# ── Per-category progress ─────────────────────────────────────


def category_progress(
    start: date | datetime,
    end: date | datetime,
    categories: list[Category],
    actions: list[RoutineAction],
    marks: list[CompletionMark],
    sessions: list[TimeSession],
    today: date,
    default_start: date | None = None,
) -> list[CategoryProgress]:
    """Progress for each category with at least one measurable action.

    Categories keep their sort order; those with nothing due are omitted.
    """
    lo, hi = start_of_day(start), start_of_day(end)
    index = LedgerIndex.build(marks, sessions)

    by_category: dict[str, list[RoutineAction]] = {}
    for action in actions:
        by_category.setdefault(action.category_id, []).append(action)

    result = []
    for category in sorted(categories, key=lambda c: c.sort_order):
        members = sorted(by_category.get(category.id, []), key=lambda a: a.group_order)
        rows = []
        for action in members:
            p = action_progress(action, lo, hi, index, today, default_start)
            if p is not None:
                rows.append(p)
        if not rows:
            continue
        mean = sum(r.percentage for r in rows) // len(rows)
        result.append(CategoryProgress(
            category=category,
            completed=sum(r.completed for r in rows),
            total=sum(r.target for r in rows),
            percentage=mean,
            actions=rows,
        ))
    return result


def week_progress(
    anchor: date | datetime,
    categories: list[Category],
    actions: list[RoutineAction],
    marks: list[CompletionMark],
    sessions: list[TimeSession],
    today: date,
) -> list[CategoryProgress]:
    start, end = week_interval(anchor)
    return category_progress(start, end - timedelta(days=1), categories, actions, marks, sessions, today)


def month_progress(
    anchor: date | datetime,
    categories: list[Category],
    actions: list[RoutineAction],
    marks: list[CompletionMark],
    sessions: list[TimeSession],
    today: date,
) -> list[CategoryProgress]:
    start, end = month_interval(anchor)
    return category_progress(start, end - timedelta(days=1), categories, actions, marks, sessions, today)


def year_progress(
    anchor: date | datetime,
    categories: list[Category],
    actions: list[RoutineAction],
    marks: list[CompletionMark],
    sessions: list[TimeSession],
    today: date,
) -> list[CategoryProgress]:
    """Year-to-date progress; actions without a start date count from Jan 1."""
    return category_progress(
        year_start(anchor), year_end(anchor), categories, actions, marks, sessions, today,
        default_start=year_start(anchor),
    )


# ── Weekly consistency table ──────────────────────────────────


def week_check_table(
    anchor: date | datetime,
    actions: list[RoutineAction],
    marks: list[CompletionMark],
) -> list[WeekRow]:
    """Rows of Mon..Sun check flags for actions that were live during anchor's week."""
    days = week_days(anchor)
    index = LedgerIndex.build(marks)
    rows = []
    for action in sorted(actions, key=lambda a: a.global_order):
        live = any(
            action.is_active_on(d) and action.is_scheduled_on(d)
            for d in days
        )
        if not live:
            continue
        rows.append(WeekRow(action=action, checks=[index.has_mark(action.id, d) for d in days]))
    return rows
