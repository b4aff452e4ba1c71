"""Completion ledger: day-checks and time sessions.

Marks are deduplicated by existence: the pair (action_id, day) either has
evidence or it does not, regardless of how many rows were stored for it.
"""

from __future__ import annotations

import logging
import uuid
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Iterable

from steady.dates import start_of_day
from steady.errors import InvariantViolation
from steady.models import (
    ActionKind,
    CompletionMark,
    RoutineAction,
    Snapshot,
    TimeAccumulated,
    TimeSession,
)

logger = logging.getLogger(__name__)


# ── Index ─────────────────────────────────────────────────────


@dataclass
class LedgerIndex:
    """Lookup tables built once per aggregation over immutable collections."""

    marked: set[tuple[str, date]] = field(default_factory=set)
    minutes: dict[tuple[str, date], int] = field(default_factory=dict)
    ongoing_by_action: dict[str, TimeSession] = field(default_factory=dict)

    @classmethod
    def build(
        cls,
        marks: Iterable[CompletionMark],
        sessions: Iterable[TimeSession] = (),
    ) -> LedgerIndex:
        index = cls()
        minutes: dict[tuple[str, date], int] = defaultdict(int)
        for m in marks:
            index.marked.add((m.action_id, m.day))
        for s in sessions:
            minutes[(s.action_id, s.attributed_day)] += s.duration_minutes
            if s.is_ongoing and s.action_id not in index.ongoing_by_action:
                index.ongoing_by_action[s.action_id] = s
        index.minutes = dict(minutes)
        return index

    def has_mark(self, action_id: str, day: date) -> bool:
        return (action_id, day) in self.marked

    def marks_between(self, action_id: str, start: date, end: date) -> int:
        """Distinct marked days for an action in the half-open range [start, end)."""
        return sum(
            1 for (aid, d) in self.marked
            if aid == action_id and start <= d < end
        )

    def minutes_on(self, action_id: str, day: date) -> int:
        return self.minutes.get((action_id, day), 0)

    def ongoing(self, action_id: str) -> TimeSession | None:
        return self.ongoing_by_action.get(action_id)

    def is_satisfied(self, action: RoutineAction, day: date) -> bool:
        """Whether the day-level evidence for *action* on *day* is complete."""
        if isinstance(action.schedule, TimeAccumulated):
            return self.minutes_on(action.id, day) >= action.schedule.daily_minutes
        return self.has_mark(action.id, day)


# ── Queries ───────────────────────────────────────────────────


def find_mark(snapshot: Snapshot, action_id: str, day: date) -> CompletionMark | None:
    for m in snapshot.marks:
        if m.action_id == action_id and m.day == day:
            return m
    return None


def total_minutes(snapshot: Snapshot, action_id: str, day: date | datetime) -> int:
    """Sum of recorded minutes attributed to *day* for an action."""
    d = start_of_day(day)
    return sum(
        s.duration_minutes for s in snapshot.sessions
        if s.action_id == action_id and s.attributed_day == d
    )


def ongoing_session(snapshot: Snapshot, action_id: str) -> TimeSession | None:
    for s in snapshot.sessions:
        if s.action_id == action_id and s.is_ongoing:
            return s
    return None


def marked_days(snapshot: Snapshot, action_id: str, start: date, end: date) -> list[date]:
    """Sorted distinct marked days for an action within inclusive [start, end]."""
    days = {m.day for m in snapshot.marks if m.action_id == action_id and start <= m.day <= end}
    return sorted(days)


# ── Mutations ─────────────────────────────────────────────────


def add_mark(snapshot: Snapshot, action_id: str, day: date | datetime, now: datetime) -> CompletionMark:
    """Insert the mark for (action, day) unless it already exists."""
    d = start_of_day(day)
    existing = find_mark(snapshot, action_id, d)
    if existing is not None:
        return existing
    mark = CompletionMark(action_id=action_id, day=d, recorded_at=now)
    snapshot.marks.append(mark)
    return mark


def remove_mark(snapshot: Snapshot, action_id: str, day: date | datetime) -> bool:
    """Delete every mark for (action, day). Returns True if something was removed."""
    d = start_of_day(day)
    before = len(snapshot.marks)
    snapshot.marks = [m for m in snapshot.marks if not (m.action_id == action_id and m.day == d)]
    return len(snapshot.marks) != before


def can_check(action: RoutineAction, day: date | datetime) -> bool:
    """An action can be checked on a day when it is active and, for day-keyed kinds, scheduled."""
    if not action.is_active_on(day):
        return False
    if action.kind == ActionKind.WEEKLY_COUNT:
        return True
    return action.is_scheduled_on(day)


def toggle_completion(
    snapshot: Snapshot,
    action: RoutineAction,
    day: date | datetime,
    now: datetime,
) -> bool:
    """Flip the existence of the mark for (action, day). Returns the new state.

    Days on which the action cannot be checked are left untouched.
    """
    d = start_of_day(day)
    exists = find_mark(snapshot, action.id, d) is not None
    if not can_check(action, d):
        logger.debug("Toggle ignored for %s on %s: not checkable", action.id, d)
        return exists
    if exists:
        remove_mark(snapshot, action.id, d)
        return False
    add_mark(snapshot, action.id, d, now)
    return True


def mark_if_target_met(snapshot: Snapshot, action: RoutineAction, day: date, now: datetime) -> bool:
    """Create the day's mark once accumulated minutes reach the daily target."""
    if not isinstance(action.schedule, TimeAccumulated):
        return False
    if total_minutes(snapshot, action.id, day) < action.schedule.daily_minutes:
        return False
    add_mark(snapshot, action.id, day, now)
    return True


def add_manual_session(
    snapshot: Snapshot,
    action: RoutineAction,
    day: date | datetime,
    minutes: int,
    now: datetime,
) -> TimeSession:
    """Record a manually entered duration for a day."""
    if minutes < 0:
        raise ValueError("minutes must be non-negative")
    session = TimeSession(
        id=uuid.uuid4().hex,
        action_id=action.id,
        started_at=None,
        ended_at=None,
        duration_minutes=int(minutes),
        attributed_day=start_of_day(day),
        is_manual=True,
    )
    snapshot.sessions.append(session)
    mark_if_target_met(snapshot, action, session.attributed_day, now)
    return session


def delete_session(snapshot: Snapshot, session_id: str) -> bool:
    before = len(snapshot.sessions)
    snapshot.sessions = [s for s in snapshot.sessions if s.id != session_id]
    return len(snapshot.sessions) != before


def purge_action(snapshot: Snapshot, action_ids: set[str]) -> None:
    """Drop all marks and sessions owned by the given actions."""
    snapshot.marks = [m for m in snapshot.marks if m.action_id not in action_ids]
    snapshot.sessions = [s for s in snapshot.sessions if s.action_id not in action_ids]


# ── Invariants ────────────────────────────────────────────────


def find_violations(snapshot: Snapshot) -> list[str]:
    """Describe duplicate marks and actions with more than one running session."""
    problems = []
    seen: set[tuple[str, date]] = set()
    for m in snapshot.marks:
        if m.key in seen:
            problems.append(f"duplicate mark for {m.action_id} on {m.day.isoformat()}")
        seen.add(m.key)

    running: dict[str, int] = defaultdict(int)
    for s in snapshot.sessions:
        if s.is_ongoing:
            running[s.action_id] += 1
    for action_id, count in running.items():
        if count > 1:
            problems.append(f"{count} ongoing sessions for {action_id}")
    return problems


def check_invariants(snapshot: Snapshot, strict: bool = False) -> list[str]:
    """Validate ledger invariants.

    Strict mode raises InvariantViolation. Otherwise each problem is logged and
    repaired in place: duplicate marks collapse to the first, and only the
    earliest ongoing session per action keeps running.
    """
    problems = find_violations(snapshot)
    if not problems:
        return []
    if strict:
        raise InvariantViolation("; ".join(problems))
    for p in problems:
        logger.warning("Ledger invariant violated: %s", p)

    seen: set[tuple[str, date]] = set()
    unique = []
    for m in snapshot.marks:
        if m.key in seen:
            continue
        seen.add(m.key)
        unique.append(m)
    snapshot.marks = unique

    ongoing: dict[str, list[TimeSession]] = defaultdict(list)
    for s in snapshot.sessions:
        if s.is_ongoing:
            ongoing[s.action_id].append(s)
    for sessions in ongoing.values():
        if len(sessions) < 2:
            continue
        sessions.sort(key=lambda s: s.started_at)
        for extra in sessions[1:]:
            # closed at its own start so it adds no time
            extra.ended_at = extra.started_at
            extra.duration_minutes = 0
    return problems

