"""Tests for steady/progress.py — range aggregation per action and per category."""

from datetime import date, timedelta

from steady.ledger import LedgerIndex
from steady.models import (
    Category,
    CompletionMark,
    RoutineAction,
    TimeAccumulated,
    TimeSession,
    WeekdayRepeat,
    WeeklyCount,
)
from steady.progress import (
    action_progress,
    category_progress,
    effective_window,
    month_progress,
    week_check_table,
    week_progress,
    year_progress,
)
from steady.weekday import WeekdayMask

MONDAY = date(2026, 2, 9)
SUNDAY_NEXT = date(2026, 2, 22)
MON_WED = WeekdayMask.MON | WeekdayMask.WED

HEALTH = Category(id="health", name="Health", sort_order=0)
STUDY = Category(id="study", name="Study", sort_order=1)


def _mark(action_id, day):
    return CompletionMark(action_id=action_id, day=day)


def _weekday(aid="stretch", category="health", **kw):
    return RoutineAction(id=aid, category_id=category, schedule=WeekdayRepeat(days=MON_WED), **kw)


# ── windows ──


def test_effective_window_clips_to_today_and_bounds():
    a = _weekday(active_from=date(2026, 2, 11), active_until=date(2026, 2, 20))
    assert effective_window(a, MONDAY, SUNDAY_NEXT, today=date(2026, 2, 18)) == (date(2026, 2, 11), date(2026, 2, 18))
    assert effective_window(a, MONDAY, SUNDAY_NEXT, today=SUNDAY_NEXT) == (date(2026, 2, 11), date(2026, 2, 20))


def test_effective_window_empty():
    a = _weekday(active_from=MONDAY + timedelta(days=10))
    assert effective_window(a, MONDAY, MONDAY + timedelta(days=9), today=SUNDAY_NEXT) is None


def test_action_starting_after_range_contributes_nothing():
    a = _weekday(active_from=MONDAY + timedelta(days=10))
    result = category_progress(MONDAY, MONDAY + timedelta(days=9), [HEALTH], [a], [], [], today=SUNDAY_NEXT)
    assert result == []


# ── per-action ──


def test_weekday_repeat_half_done():
    a = _weekday()
    marks = [_mark("stretch", MONDAY), _mark("stretch", date(2026, 2, 16))]
    result = category_progress(MONDAY, SUNDAY_NEXT, [HEALTH], [a], marks, [], today=SUNDAY_NEXT)
    assert len(result) == 1
    assert result[0].actions[0].completed == 2
    assert result[0].actions[0].target == 4
    assert result[0].actions[0].percentage == 50
    assert result[0].percentage == 50


def test_future_days_are_not_targets():
    a = _weekday()
    p = action_progress(a, MONDAY, SUNDAY_NEXT, LedgerIndex.build([_mark("stretch", MONDAY)]), today=date(2026, 2, 11))
    assert (p.completed, p.target) == (1, 2)


def test_disabled_action_has_no_progress():
    a = _weekday(enabled=False)
    assert action_progress(a, MONDAY, SUNDAY_NEXT, LedgerIndex.build([]), today=SUNDAY_NEXT) is None


def test_weekly_count_caps_each_week():
    run = RoutineAction(id="run", category_id="health", schedule=WeeklyCount(target_count=2))
    marks = [_mark("run", MONDAY + timedelta(days=i)) for i in range(4)]
    p = action_progress(run, MONDAY, SUNDAY_NEXT, LedgerIndex.build(marks), today=SUNDAY_NEXT)
    # four checks in week one count as two; none in week two
    assert (p.completed, p.target) == (2, 4)
    assert p.percentage == 50


def test_weekly_count_partial_week_counts_whole_week():
    run = RoutineAction(id="run", category_id="health", schedule=WeeklyCount(target_count=1))
    index = LedgerIndex.build([_mark("run", MONDAY)])
    p = action_progress(run, date(2026, 2, 12), date(2026, 2, 15), index, today=SUNDAY_NEXT)
    assert (p.completed, p.target) == (1, 1)


def test_time_accumulated_progress():
    read = RoutineAction(
        id="read", category_id="study",
        schedule=TimeAccumulated(days=WeekdayMask.MON | WeekdayMask.TUE, daily_minutes=30),
    )
    sessions = [
        TimeSession(id="a", action_id="read", duration_minutes=30, attributed_day=MONDAY),
        TimeSession(id="b", action_id="read", duration_minutes=20, attributed_day=date(2026, 2, 10)),
    ]
    p = action_progress(read, MONDAY, date(2026, 2, 15), LedgerIndex.build([], sessions), today=SUNDAY_NEXT)
    assert (p.completed, p.target) == (1, 2)


# ── per-category ──


def test_category_percentage_is_mean_of_actions():
    stretch = _weekday(group_order=0)
    run = RoutineAction(id="run", category_id="health", schedule=WeeklyCount(target_count=3), group_order=1)
    marks = [_mark("stretch", MONDAY), _mark("run", MONDAY)]
    # stretch 1/2 = 50, run 1/3 = 33
    result = category_progress(MONDAY, date(2026, 2, 15), [HEALTH], [stretch, run], marks, [], today=date(2026, 2, 15))
    cat = result[0]
    assert [a.action.id for a in cat.actions] == ["stretch", "run"]
    assert cat.percentage == 41
    assert (cat.completed, cat.total) == (2, 5)


def test_categories_keep_sort_order_and_skip_empty():
    stretch = _weekday()
    read = RoutineAction(id="read", category_id="study", schedule=WeeklyCount(target_count=1))
    empty = Category(id="empty", name="Empty", sort_order=2)
    result = category_progress(
        MONDAY, SUNDAY_NEXT, [empty, STUDY, HEALTH], [stretch, read], [], [], today=SUNDAY_NEXT,
    )
    assert [c.category.id for c in result] == ["health", "study"]


def test_week_progress():
    stretch = _weekday()
    result = week_progress(date(2026, 2, 12), [HEALTH], [stretch], [_mark("stretch", MONDAY)], [], today=SUNDAY_NEXT)
    assert result[0].actions[0].target == 2
    assert result[0].percentage == 50


def test_year_progress_counts_from_january_without_start():
    run = RoutineAction(id="run", category_id="health", schedule=WeeklyCount(target_count=1))
    result = year_progress(MONDAY, [HEALTH], [run], [], [], today=date(2026, 1, 11))
    # Dec 29 - Jan 4 and Jan 5 - Jan 11
    assert result[0].actions[0].target == 2


# ── weekly table ──


def test_week_check_table():
    stretch = _weekday(global_order=1)
    later = RoutineAction(id="later", schedule=WeeklyCount(), active_from=date(2026, 3, 1), global_order=0)
    rows = week_check_table(date(2026, 2, 13), [stretch, later], [_mark("stretch", date(2026, 2, 11))])
    assert [r.action.id for r in rows] == ["stretch"]
    assert rows[0].checks == [False, False, True, False, False, False, False]


def test_month_progress_clips_to_month():
    stretch = _weekday()
    marks = [_mark("stretch", date(2026, 1, 28)), _mark("stretch", date(2026, 2, 2))]
    result = month_progress(date(2026, 2, 17), [HEALTH], [stretch], marks, [], today=date(2026, 2, 4))
    # Feb 2 (Mon) and Feb 4 (Wed) are due so far; the January mark is outside
    assert (result[0].completed, result[0].total) == (1, 2)


def test_category_counts_are_summed_across_actions():
    stretch = _weekday(group_order=0)
    run = RoutineAction(id="run", category_id="health", schedule=WeeklyCount(target_count=2), group_order=1)
    marks = [_mark("stretch", MONDAY), _mark("stretch", date(2026, 2, 11)), _mark("run", MONDAY)]
    # stretch 2/2 = 100, run 1/2 = 50
    cat = category_progress(MONDAY, date(2026, 2, 15), [HEALTH], [stretch, run], marks, [], today=date(2026, 2, 15))[0]
    assert cat.percentage == 75
    assert (cat.completed, cat.total) == (3, 4)
