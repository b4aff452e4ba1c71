"""Tests for steady/daily.py — single-day aggregation and the month grid."""

from datetime import date, datetime, timedelta, timezone

from steady.daily import (
    completed_actions_on,
    daily_breakdown,
    daily_progress,
    month_percentages,
    today_agenda,
)
from steady.models import (
    ActionKind,
    CompletionMark,
    DailyProgress,
    RoutineAction,
    TimeAccumulated,
    TimeSession,
    WeekdayRepeat,
    WeeklyCount,
)
from steady.weekday import WeekdayMask

MONDAY = date(2026, 2, 9)
TUESDAY = MONDAY + timedelta(days=1)
MWF = WeekdayMask.MON | WeekdayMask.WED | WeekdayMask.FRI


def _mark(action_id, day):
    return CompletionMark(action_id=action_id, day=day)


def _session(action_id, day, minutes, ongoing=False):
    started = datetime.combine(day, datetime.min.time(), tzinfo=timezone.utc) + timedelta(hours=9)
    return TimeSession(
        id=f"{action_id}-{day.isoformat()}-{minutes}",
        action_id=action_id,
        started_at=started,
        ended_at=None if ongoing else started + timedelta(minutes=minutes),
        duration_minutes=0 if ongoing else minutes,
        attributed_day=day,
    )


def test_weekday_repeat_checked_on_monday():
    stretch = RoutineAction(id="stretch", schedule=WeekdayRepeat(days=MWF))
    progress = daily_progress(MONDAY, [stretch], [_mark("stretch", MONDAY)], [])
    assert progress == DailyProgress(completed=1, target=1)
    assert progress.percentage == 100


def test_weekday_repeat_nothing_due_on_tuesday():
    stretch = RoutineAction(id="stretch", schedule=WeekdayRepeat(days=MWF))
    assert daily_progress(TUESDAY, [stretch], [_mark("stretch", MONDAY)], []) is None


def test_weekday_repeat_unchecked_counts_as_miss():
    stretch = RoutineAction(id="stretch", schedule=WeekdayRepeat(days=MWF))
    assert daily_progress(MONDAY, [stretch], [], []) == DailyProgress(completed=0, target=1)


def test_weekly_count_only_counts_checked_days():
    run = RoutineAction(id="run", schedule=WeeklyCount(target_count=3))
    marks = [_mark("run", MONDAY), _mark("run", MONDAY + timedelta(days=2))]
    assert daily_progress(MONDAY, [run], marks, []) == DailyProgress(completed=1, target=1)
    assert daily_progress(MONDAY + timedelta(days=2), [run], marks, []) == DailyProgress(completed=1, target=1)
    assert daily_progress(TUESDAY, [run], marks, []) is None


def test_inactive_actions_are_ignored():
    stretch = RoutineAction(id="stretch", schedule=WeekdayRepeat(days=MWF), active_from=TUESDAY)
    disabled = RoutineAction(id="off", schedule=WeekdayRepeat(days=MWF), enabled=False)
    assert daily_progress(MONDAY, [stretch, disabled], [_mark("off", MONDAY)], []) is None


def test_time_accumulated_uses_minutes():
    read = RoutineAction(id="read", schedule=TimeAccumulated(days=WeekdayMask.ALL, daily_minutes=60))
    short = [_session("read", MONDAY, 45)]
    assert daily_progress(MONDAY, [read], [], short) == DailyProgress(completed=0, target=1)
    enough = short + [_session("read", MONDAY, 15)]
    assert daily_progress(MONDAY, [read], [], enough) == DailyProgress(completed=1, target=1)


def test_breakdown_by_kind():
    actions = [
        RoutineAction(id="stretch", schedule=WeekdayRepeat(days=MWF)),
        RoutineAction(id="run", schedule=WeeklyCount(target_count=3)),
        RoutineAction(id="read", schedule=TimeAccumulated(days=WeekdayMask.ALL, daily_minutes=30)),
    ]
    marks = [_mark("run", MONDAY)]
    sessions = [_session("read", MONDAY, 30)]
    breakdown = daily_breakdown(MONDAY, actions, marks, sessions)
    assert breakdown[ActionKind.WEEKDAY_REPEAT] == DailyProgress(0, 1)
    assert breakdown[ActionKind.WEEKLY_COUNT] == DailyProgress(1, 1)
    assert breakdown[ActionKind.TIME_ACCUMULATED] == DailyProgress(1, 1)
    assert daily_progress(MONDAY, actions, marks, sessions) == DailyProgress(2, 3)


def test_completed_actions_on():
    actions = [
        RoutineAction(id="b", schedule=WeeklyCount(), global_order=1),
        RoutineAction(id="a", schedule=WeekdayRepeat(days=MWF), global_order=0),
    ]
    marks = [_mark("a", MONDAY), _mark("b", MONDAY)]
    assert [a.id for a in completed_actions_on(MONDAY, actions, marks, [])] == ["a", "b"]


def test_month_percentages():
    stretch = RoutineAction(id="stretch", schedule=WeekdayRepeat(days=MWF))
    grid = month_percentages(MONDAY, date(2026, 2, 11), [stretch], [_mark("stretch", MONDAY)], [])
    assert len(grid) == 28
    assert grid[MONDAY] == 100
    assert grid[TUESDAY] is None             # nothing due
    assert grid[date(2026, 2, 11)] == 0      # due, unchecked
    assert grid[date(2026, 2, 13)] is None   # future


def test_today_agenda():
    actions = [
        RoutineAction(id="stretch", name="Stretch", schedule=WeekdayRepeat(days=MWF), global_order=0),
        RoutineAction(id="run", name="Run", schedule=WeeklyCount(target_count=3), global_order=1),
        RoutineAction(id="read", name="Read", schedule=TimeAccumulated(days=WeekdayMask.WEEKEND, daily_minutes=60), global_order=2),
    ]
    marks = [_mark("run", MONDAY), _mark("run", TUESDAY)]
    sessions = [_session("read", TUESDAY, 0, ongoing=True)]
    agenda = today_agenda(TUESDAY, actions, marks, sessions)

    assert agenda["weekday_repeat"] == []
    run = agenda["weekly_count"][0]
    assert run["checked"] is True
    assert run["weekCount"] == 2
    assert run["weekTarget"] == 3
    read = agenda["time_accumulated"][0]
    assert read["running"] is True
    assert read["minutes"] == 0
    assert read["checked"] is False
