"""Live time tracking for time-accumulated actions.

An action is either IDLE or RUNNING (it has exactly one ongoing session).
Starting a running action or stopping an idle one is a silent no-op: both are
triggered by repeatable UI taps.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from enum import Enum

from steady.dates import start_of_day
from steady.ledger import mark_if_target_met, ongoing_session
from steady.models import RoutineAction, Snapshot, TimeSession

logger = logging.getLogger(__name__)


class TimerState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"


def timer_state(snapshot: Snapshot, action_id: str) -> TimerState:
    if ongoing_session(snapshot, action_id) is not None:
        return TimerState.RUNNING
    return TimerState.IDLE


def elapsed_minutes(session: TimeSession, now: datetime) -> int:
    """Whole minutes between the session start and *now* (or its end), never negative."""
    if session.started_at is None:
        return session.duration_minutes
    end = session.ended_at or now
    return max(0, int((end - session.started_at).total_seconds() // 60))


def start_timer(snapshot: Snapshot, action: RoutineAction, now: datetime) -> TimeSession | None:
    """Open a session attributed to today's date. Returns None if one is already running."""
    if ongoing_session(snapshot, action.id) is not None:
        logger.debug("Timer already running for %s; start ignored", action.id)
        return None
    session = TimeSession(
        id=uuid.uuid4().hex,
        action_id=action.id,
        started_at=now,
        ended_at=None,
        duration_minutes=0,
        attributed_day=start_of_day(now),
        is_manual=False,
    )
    snapshot.sessions.append(session)
    logger.info("Timer started for %s (%s)", action.id, session.attributed_day.isoformat())
    return session


def stop_timer(snapshot: Snapshot, action: RoutineAction, now: datetime) -> TimeSession | None:
    """Close the running session and record its duration once.

    The session keeps the day it was started on, even past midnight. When the
    day's accumulated minutes reach the action's target, the day gets a mark.
    Returns None if no session was running.
    """
    session = ongoing_session(snapshot, action.id)
    if session is None:
        logger.debug("No running timer for %s; stop ignored", action.id)
        return None

    session.ended_at = now
    session.duration_minutes = elapsed_minutes(session, now)
    logger.info("Timer stopped for %s after %d min", action.id, session.duration_minutes)

    if mark_if_target_met(snapshot, action, session.attributed_day, now):
        logger.info("Daily time target met for %s on %s", action.id, session.attributed_day.isoformat())
    return session
