"""Typed dataclasses for the steady data model.

All persisted models use from_dict/to_dict for JSON/YAML serialization.
camelCase in storage is mapped to snake_case in Python.
Unknown keys are ignored; missing keys use defaults.

An action's recurrence is a sum type: exactly one of WeeklyCount,
WeekdayRepeat or TimeAccumulated, each carrying only its own fields.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Union

from steady.dates import format_day, parse_day, percent, start_of_day
from steady.weekday import WeekdayMask


def _parse_ts(value: Any) -> datetime | None:
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


def _format_ts(value: datetime | None) -> str | None:
    return value.isoformat(timespec="seconds") if value else None


def parse_mask(value: Any) -> WeekdayMask:
    """Accept an int bitmask, a list of day names or a "mon,wed" string."""
    if value is None:
        return WeekdayMask.NONE
    if isinstance(value, int):
        return WeekdayMask.from_int(value)
    if isinstance(value, str):
        value = [v for v in value.replace(",", " ").split() if v]
    return WeekdayMask.from_names(value)


# ── Plan hierarchy ────────────────────────────────────────────


@dataclass
class PlanYear:
    id: str = ""
    year: int = 0
    goal_title: str = ""

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> PlanYear:
        return cls(
            id=str(d.get("id", "")),
            year=int(d.get("year", 0)),
            goal_title=str(d.get("goalTitle", "")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "year": self.year, "goalTitle": self.goal_title}


@dataclass
class Category:
    id: str = ""
    year_id: str = ""
    name: str = ""
    color_key: str = "blue"
    sort_order: int = 0

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Category:
        return cls(
            id=str(d.get("id", "")),
            year_id=str(d.get("yearId", "")),
            name=str(d.get("name", "")),
            color_key=str(d.get("colorKey", "blue")),
            sort_order=int(d.get("sortOrder", 0)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "yearId": self.year_id,
            "name": self.name,
            "colorKey": self.color_key,
            "sortOrder": self.sort_order,
        }


# ── Schedules ─────────────────────────────────────────────────


class ActionKind(str, Enum):
    WEEKLY_COUNT = "weekly_count"
    WEEKDAY_REPEAT = "weekday_repeat"
    TIME_ACCUMULATED = "time_accumulated"


@dataclass(frozen=True)
class WeeklyCount:
    """Done N times per Monday-first week, on any days."""

    target_count: int = 3
    kind = ActionKind.WEEKLY_COUNT

    def is_scheduled_on(self, day: date) -> bool:
        return True

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind.value, "weeklyTarget": self.target_count}


@dataclass(frozen=True)
class WeekdayRepeat:
    """Done once on each selected weekday."""

    days: WeekdayMask = WeekdayMask.NONE
    kind = ActionKind.WEEKDAY_REPEAT

    def is_scheduled_on(self, day: date) -> bool:
        return self.days.includes(day)

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind.value, "repeatDays": self.days.to_names()}


@dataclass(frozen=True)
class TimeAccumulated:
    """At least ``daily_minutes`` of tracked time on each selected weekday."""

    days: WeekdayMask = WeekdayMask.NONE
    daily_minutes: int = 60
    kind = ActionKind.TIME_ACCUMULATED

    def is_scheduled_on(self, day: date) -> bool:
        return self.days.includes(day)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind.value,
            "repeatDays": self.days.to_names(),
            "dailyMinutes": self.daily_minutes,
        }


Schedule = Union[WeeklyCount, WeekdayRepeat, TimeAccumulated]


def schedule_from_dict(d: dict[str, Any]) -> Schedule:
    """Build the schedule variant named by d['type'] (weekly_count when unknown)."""
    kind = d.get("type", ActionKind.WEEKLY_COUNT.value)
    if isinstance(kind, ActionKind):
        kind = kind.value
    if kind == ActionKind.WEEKDAY_REPEAT.value:
        return WeekdayRepeat(days=parse_mask(d.get("repeatDays")))
    if kind == ActionKind.TIME_ACCUMULATED.value:
        return TimeAccumulated(
            days=parse_mask(d.get("repeatDays")),
            daily_minutes=int(d.get("dailyMinutes", 60)),
        )
    return WeeklyCount(target_count=int(d.get("weeklyTarget", 3)))


# ── Routine action ────────────────────────────────────────────


@dataclass
class RoutineAction:
    id: str = ""
    category_id: str = ""
    name: str = ""
    schedule: Schedule = field(default_factory=WeeklyCount)
    enabled: bool = True
    active_from: date | None = None
    active_until: date | None = None
    # ordering only; not used by the aggregators
    global_order: int = 0
    group_order: int = 0

    @property
    def kind(self) -> ActionKind:
        return self.schedule.kind

    def is_scheduled_on(self, day: date | datetime) -> bool:
        """WeeklyCount is always scheduled; day-keyed kinds follow their weekday mask."""
        return self.schedule.is_scheduled_on(start_of_day(day))

    def is_active_on(self, day: date | datetime) -> bool:
        """Enabled and inside the inclusive [active_from, active_until] window."""
        if not self.enabled:
            return False
        d = start_of_day(day)
        if self.active_from is not None and d < self.active_from:
            return False
        if self.active_until is not None and d > self.active_until:
            return False
        return True

    def is_due_on(self, day: date | datetime) -> bool:
        return self.is_active_on(day) and self.is_scheduled_on(day)

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> RoutineAction:
        return cls(
            id=str(d.get("id", "")),
            category_id=str(d.get("categoryId", "")),
            name=str(d.get("name", "")),
            schedule=schedule_from_dict(d),
            enabled=bool(d.get("enabled", True)),
            active_from=parse_day(d.get("activeFrom")),
            active_until=parse_day(d.get("activeUntil")),
            global_order=int(d.get("globalOrder", 0)),
            group_order=int(d.get("groupOrder", 0)),
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "categoryId": self.category_id,
            "name": self.name,
        }
        d.update(self.schedule.to_dict())
        d["enabled"] = self.enabled
        if self.active_from:
            d["activeFrom"] = format_day(self.active_from)
        if self.active_until:
            d["activeUntil"] = format_day(self.active_until)
        d["globalOrder"] = self.global_order
        d["groupOrder"] = self.group_order
        return d


# ── Completion evidence ───────────────────────────────────────


@dataclass
class CompletionMark:
    action_id: str = ""
    day: date = date.min
    recorded_at: datetime | None = None

    @property
    def key(self) -> tuple[str, date]:
        return (self.action_id, self.day)

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> CompletionMark:
        return cls(
            action_id=str(d.get("actionId", "")),
            day=parse_day(d.get("day")) or date.min,
            recorded_at=_parse_ts(d.get("recordedAt")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "actionId": self.action_id,
            "day": format_day(self.day),
            "recordedAt": _format_ts(self.recorded_at),
        }


@dataclass
class TimeSession:
    id: str = ""
    action_id: str = ""
    started_at: datetime | None = None
    ended_at: datetime | None = None
    duration_minutes: int = 0
    # fixed when the session starts; never re-derived from ended_at
    attributed_day: date = date.min
    is_manual: bool = False

    @property
    def is_ongoing(self) -> bool:
        return self.started_at is not None and self.ended_at is None

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> TimeSession:
        return cls(
            id=str(d.get("id", "")),
            action_id=str(d.get("actionId", "")),
            started_at=_parse_ts(d.get("startedAt")),
            ended_at=_parse_ts(d.get("endedAt")),
            duration_minutes=max(0, int(d.get("durationMinutes", 0) or 0)),
            attributed_day=parse_day(d.get("attributedDay")) or date.min,
            is_manual=bool(d.get("isManual", False)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "actionId": self.action_id,
            "startedAt": _format_ts(self.started_at),
            "endedAt": _format_ts(self.ended_at),
            "durationMinutes": self.duration_minutes,
            "attributedDay": format_day(self.attributed_day),
            "isManual": self.is_manual,
        }


# ── Snapshot ──────────────────────────────────────────────────


@dataclass
class Snapshot:
    """Complete in-memory collections the engine computes over."""

    years: list[PlanYear] = field(default_factory=list)
    categories: list[Category] = field(default_factory=list)
    actions: list[RoutineAction] = field(default_factory=list)
    marks: list[CompletionMark] = field(default_factory=list)
    sessions: list[TimeSession] = field(default_factory=list)

    @classmethod
    def from_dicts(cls, plan: dict[str, Any], ledger: dict[str, Any]) -> Snapshot:
        plan = plan if isinstance(plan, dict) else {}
        ledger = ledger if isinstance(ledger, dict) else {}
        return cls(
            years=[PlanYear.from_dict(y) for y in (plan.get("years") or [])],
            categories=[Category.from_dict(c) for c in (plan.get("categories") or [])],
            actions=[RoutineAction.from_dict(a) for a in (plan.get("actions") or [])],
            marks=[CompletionMark.from_dict(m) for m in (ledger.get("marks") or [])],
            sessions=[TimeSession.from_dict(s) for s in (ledger.get("sessions") or [])],
        )

    def plan_dict(self) -> dict[str, Any]:
        return {
            "years": [y.to_dict() for y in self.years],
            "categories": [c.to_dict() for c in self.categories],
            "actions": [a.to_dict() for a in self.actions],
        }

    def ledger_dict(self) -> dict[str, Any]:
        return {
            "marks": [m.to_dict() for m in self.marks],
            "sessions": [s.to_dict() for s in self.sessions],
        }


# ── Aggregation results ───────────────────────────────────────


@dataclass(frozen=True)
class DailyProgress:
    completed: int
    target: int

    @property
    def percentage(self) -> int:
        return percent(self.completed, self.target) if self.target > 0 else 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "completed": self.completed,
            "target": self.target,
            "percentage": self.percentage,
        }


@dataclass(frozen=True)
class ActionProgress:
    action: RoutineAction
    completed: int
    target: int

    @property
    def percentage(self) -> int:
        return percent(self.completed, self.target)

    def to_dict(self) -> dict[str, Any]:
        return {
            "actionId": self.action.id,
            "name": self.action.name,
            "completed": self.completed,
            "target": self.target,
            "percentage": self.percentage,
        }


@dataclass
class CategoryProgress:
    """One category's rollup over a range.

    ``percentage`` is the floor of the mean of the member actions' own
    percentages. ``completed`` and ``total`` are the members' completed and
    target counts summed, so ``completed / total`` can differ from
    ``percentage``.
    """

    category: Category
    completed: int
    total: int
    percentage: int
    actions: list[ActionProgress] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "categoryId": self.category.id,
            "name": self.category.name,
            "completed": self.completed,
            "total": self.total,
            "percentage": self.percentage,
            "actions": [a.to_dict() for a in self.actions],
        }


@dataclass
class WeekRow:
    """One action's row in the weekly consistency table (Mon..Sun)."""

    action: RoutineAction
    checks: list[bool] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"actionId": self.action.id, "name": self.action.name, "checks": self.checks}
