"""Daily aggregation: what was due on one day and how much of it was done.

WeekdayRepeat and TimeAccumulated actions contribute one target slot on each
day they are due. WeeklyCount actions only appear in a day's ratio when they
were checked that day; an unchecked weekly action is not counted as a miss.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Any

from steady.dates import iter_days, month_interval, start_of_day, week_interval
from steady.ledger import LedgerIndex
from steady.models import (
    ActionKind,
    CompletionMark,
    DailyProgress,
    RoutineAction,
    TimeSession,
)


def daily_breakdown(
    day: date | datetime,
    actions: list[RoutineAction],
    marks: list[CompletionMark],
    sessions: list[TimeSession],
    index: LedgerIndex | None = None,
) -> dict[ActionKind, DailyProgress]:
    """Per-kind (completed, target) counts for a single day."""
    d = start_of_day(day)
    if index is None:
        index = LedgerIndex.build(marks, sessions)

    counts = {kind: [0, 0] for kind in ActionKind}
    for action in actions:
        if not action.is_active_on(d):
            continue
        kind = action.kind
        if kind == ActionKind.WEEKLY_COUNT:
            if index.has_mark(action.id, d):
                counts[kind][0] += 1
                counts[kind][1] += 1
            continue
        if not action.is_scheduled_on(d):
            continue
        counts[kind][1] += 1
        if index.is_satisfied(action, d):
            counts[kind][0] += 1

    return {kind: DailyProgress(completed=c, target=t) for kind, (c, t) in counts.items()}


def daily_progress(
    day: date | datetime,
    actions: list[RoutineAction],
    marks: list[CompletionMark],
    sessions: list[TimeSession],
    index: LedgerIndex | None = None,
) -> DailyProgress | None:
    """Completed/target for one day, or None when nothing was due."""
    breakdown = daily_breakdown(day, actions, marks, sessions, index)
    completed = sum(p.completed for p in breakdown.values())
    target = sum(p.target for p in breakdown.values())
    if target == 0:
        return None
    return DailyProgress(completed=completed, target=target)


def completed_actions_on(
    day: date | datetime,
    actions: list[RoutineAction],
    marks: list[CompletionMark],
    sessions: list[TimeSession],
) -> list[RoutineAction]:
    """Actions that count as done on *day*, in global order."""
    d = start_of_day(day)
    index = LedgerIndex.build(marks, sessions)
    done = []
    for action in sorted(actions, key=lambda a: a.global_order):
        if not action.is_active_on(d):
            continue
        if action.kind == ActionKind.WEEKLY_COUNT:
            if index.has_mark(action.id, d):
                done.append(action)
        elif action.is_scheduled_on(d) and index.is_satisfied(action, d):
            done.append(action)
    return done


def weekly_count(action: RoutineAction, day: date | datetime, index: LedgerIndex) -> int:
    """Checked days for *action* in the Monday-first week containing *day*."""
    start, end = week_interval(day)
    return index.marks_between(action.id, start, end)


def month_percentages(
    anchor: date | datetime,
    today: date,
    actions: list[RoutineAction],
    marks: list[CompletionMark],
    sessions: list[TimeSession],
) -> dict[date, int | None]:
    """Daily completion percentage for every day of anchor's month.

    Days after *today* and days with nothing due map to None.
    """
    start, end = month_interval(anchor)
    index = LedgerIndex.build(marks, sessions)
    result: dict[date, int | None] = {}
    for d in iter_days(start, end - timedelta(days=1)):
        if d > today:
            result[d] = None
            continue
        progress = daily_progress(d, actions, marks, sessions, index)
        result[d] = progress.percentage if progress else None
    return result


def today_agenda(
    today: date,
    actions: list[RoutineAction],
    marks: list[CompletionMark],
    sessions: list[TimeSession],
) -> dict[str, list[dict[str, Any]]]:
    """Active actions for *today*, grouped by kind, with their current status.

    Time-accumulated actions with a running timer are listed even on days
    they are not scheduled.
    """
    index = LedgerIndex.build(marks, sessions)
    agenda: dict[str, list[dict[str, Any]]] = {kind.value: [] for kind in ActionKind}

    for action in sorted(actions, key=lambda a: a.global_order):
        if not action.is_active_on(today):
            continue
        item: dict[str, Any] = {"actionId": action.id, "name": action.name}
        if action.kind == ActionKind.WEEKLY_COUNT:
            item["checked"] = index.has_mark(action.id, today)
            item["weekCount"] = weekly_count(action, today, index)
            item["weekTarget"] = action.schedule.target_count
        elif action.kind == ActionKind.WEEKDAY_REPEAT:
            if not action.is_scheduled_on(today):
                continue
            item["checked"] = index.has_mark(action.id, today)
        else:
            running = index.ongoing(action.id)
            if running is None and not action.is_scheduled_on(today):
                continue
            item["minutes"] = index.minutes_on(action.id, today)
            item["targetMinutes"] = action.schedule.daily_minutes
            item["running"] = running is not None
            item["checked"] = index.is_satisfied(action, today)
        agenda[action.kind.value].append(item)
    return agenda
