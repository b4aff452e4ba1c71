"""Year, category and action CRUD with validation for the steady engine.

This is the edit boundary: impossible configurations are rejected here with
InvalidConfiguration and never reach the aggregators. Deletes cascade
downward (year -> categories -> actions -> marks and sessions).
"""

from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import Any

from steady.dates import parse_day
from steady.errors import InvalidConfiguration
from steady.ledger import purge_action
from steady.models import (
    ActionKind,
    Category,
    PlanYear,
    RoutineAction,
    Snapshot,
    parse_mask,
)

logger = logging.getLogger(__name__)


# ── Validation ────────────────────────────────────────────────


VALID_TYPES = {k.value for k in ActionKind}


def _new_id() -> str:
    return uuid.uuid4().hex[:12]


def validate_action(data: dict[str, Any]) -> list[str]:
    """Validate action fields (storage key names) and return a list of errors."""
    errors = []
    if not str(data.get("name", "")).strip():
        errors.append("Missing required field: name")

    kind = data.get("type")
    if isinstance(kind, ActionKind):
        kind = kind.value
    if kind is None:
        errors.append("Missing required field: type")
    elif kind not in VALID_TYPES:
        errors.append(f"Invalid action type: {kind}")

    days = None
    if kind in (ActionKind.WEEKDAY_REPEAT.value, ActionKind.TIME_ACCUMULATED.value):
        try:
            days = parse_mask(data.get("repeatDays"))
        except (TypeError, ValueError) as e:
            errors.append(f"Invalid repeatDays: {e}")

    if kind == ActionKind.WEEKLY_COUNT.value:
        target = data.get("weeklyTarget", 3)
        if not isinstance(target, int) or isinstance(target, bool) or target < 1:
            errors.append("weeklyTarget must be a positive integer")
    elif kind == ActionKind.WEEKDAY_REPEAT.value:
        if days is not None and days.is_empty():
            errors.append("weekday_repeat needs at least one repeat day")
    elif kind == ActionKind.TIME_ACCUMULATED.value:
        minutes = data.get("dailyMinutes", 60)
        if not isinstance(minutes, int) or isinstance(minutes, bool) or minutes < 0:
            errors.append("dailyMinutes must be a non-negative integer")
        if days is not None and days.is_empty():
            errors.append("time_accumulated needs at least one repeat day")

    try:
        start = parse_day(data.get("activeFrom"))
        end = parse_day(data.get("activeUntil"))
    except (TypeError, ValueError):
        errors.append("activeFrom/activeUntil must be ISO dates")
    else:
        if start and end and end < start:
            errors.append("activeUntil is before activeFrom")

    return errors


# ── Lookups ───────────────────────────────────────────────────


def find_year(snapshot: Snapshot, year: int) -> PlanYear | None:
    for y in snapshot.years:
        if y.year == year:
            return y
    return None


def find_category(snapshot: Snapshot, category_id: str) -> Category | None:
    for c in snapshot.categories:
        if c.id == category_id:
            return c
    return None


def find_action(snapshot: Snapshot, action_id: str) -> RoutineAction | None:
    for a in snapshot.actions:
        if a.id == action_id:
            return a
    return None


def categories_for_year(snapshot: Snapshot, year: int) -> list[Category]:
    plan = find_year(snapshot, year)
    if plan is None:
        return []
    cats = [c for c in snapshot.categories if c.year_id == plan.id]
    return sorted(cats, key=lambda c: c.sort_order)


def actions_in_category(snapshot: Snapshot, category_id: str) -> list[RoutineAction]:
    acts = [a for a in snapshot.actions if a.category_id == category_id]
    return sorted(acts, key=lambda a: a.group_order)


def ordered_actions(snapshot: Snapshot) -> list[RoutineAction]:
    return sorted(snapshot.actions, key=lambda a: a.global_order)


# ── Years & categories ────────────────────────────────────────


def ensure_year(snapshot: Snapshot, year: int) -> PlanYear:
    """Return the plan for *year*, creating an empty one on first use."""
    existing = find_year(snapshot, year)
    if existing is not None:
        return existing
    plan = PlanYear(id=_new_id(), year=year)
    snapshot.years.append(plan)
    return plan


def set_goal_title(snapshot: Snapshot, year: int, title: str) -> PlanYear:
    title = title.strip()
    if not title:
        raise InvalidConfiguration(["Goal title must not be empty"])
    plan = ensure_year(snapshot, year)
    plan.goal_title = title
    return plan


def create_category(snapshot: Snapshot, year: int, name: str, color_key: str = "blue") -> Category:
    name = name.strip()
    if not name:
        raise InvalidConfiguration(["Missing required field: name"])
    plan = ensure_year(snapshot, year)
    orders = [c.sort_order for c in snapshot.categories if c.year_id == plan.id]
    category = Category(
        id=_new_id(),
        year_id=plan.id,
        name=name,
        color_key=color_key,
        sort_order=max(orders, default=-1) + 1,
    )
    snapshot.categories.append(category)
    return category


def update_category(snapshot: Snapshot, category_id: str, name: str | None = None, color_key: str | None = None) -> Category:
    category = find_category(snapshot, category_id)
    if category is None:
        raise KeyError(category_id)
    if name is not None:
        if not name.strip():
            raise InvalidConfiguration(["Missing required field: name"])
        category.name = name.strip()
    if color_key is not None:
        category.color_key = color_key
    return category


def delete_category(snapshot: Snapshot, category_id: str) -> bool:
    """Remove a category with all of its actions and their ledger entries."""
    if find_category(snapshot, category_id) is None:
        return False
    doomed = {a.id for a in snapshot.actions if a.category_id == category_id}
    snapshot.actions = [a for a in snapshot.actions if a.id not in doomed]
    purge_action(snapshot, doomed)
    snapshot.categories = [c for c in snapshot.categories if c.id != category_id]
    logger.info("Deleted category %s (%d actions)", category_id, len(doomed))
    return True


def delete_year(snapshot: Snapshot, year: int) -> bool:
    plan = find_year(snapshot, year)
    if plan is None:
        return False
    for c in [c for c in snapshot.categories if c.year_id == plan.id]:
        delete_category(snapshot, c.id)
    snapshot.years = [y for y in snapshot.years if y.id != plan.id]
    return True


# ── Actions ───────────────────────────────────────────────────


def create_action(snapshot: Snapshot, category_id: str, data: dict[str, Any]) -> RoutineAction:
    """Validate and append a new action to a category.

    New actions go to the end of both the global and the category ordering.
    """
    if find_category(snapshot, category_id) is None:
        raise KeyError(category_id)
    errors = validate_action(data)
    if errors:
        raise InvalidConfiguration(errors)

    action = RoutineAction.from_dict(data)
    action.id = _new_id()
    action.name = action.name.strip()
    action.category_id = category_id
    action.global_order = max((a.global_order for a in snapshot.actions), default=-1) + 1
    action.group_order = max(
        (a.group_order for a in snapshot.actions if a.category_id == category_id), default=-1
    ) + 1
    snapshot.actions.append(action)
    return action


def update_action(snapshot: Snapshot, action_id: str, updates: dict[str, Any]) -> RoutineAction:
    """Apply storage-keyed updates to an action, re-validating the result."""
    action = find_action(snapshot, action_id)
    if action is None:
        raise KeyError(action_id)

    merged = action.to_dict()
    merged.update(updates)
    errors = validate_action(merged)
    if errors:
        raise InvalidConfiguration(errors)

    updated = RoutineAction.from_dict(merged)
    updated.id = action.id
    updated.category_id = action.category_id
    updated.name = updated.name.strip()
    for i, a in enumerate(snapshot.actions):
        if a.id == action_id:
            snapshot.actions[i] = updated
            break
    return updated


def set_enabled(snapshot: Snapshot, action_id: str, enabled: bool) -> RoutineAction:
    action = find_action(snapshot, action_id)
    if action is None:
        raise KeyError(action_id)
    action.enabled = enabled
    return action


def delete_action(snapshot: Snapshot, action_id: str) -> bool:
    """Remove an action and cascade to its marks and sessions."""
    if find_action(snapshot, action_id) is None:
        return False
    snapshot.actions = [a for a in snapshot.actions if a.id != action_id]
    purge_action(snapshot, {action_id})
    return True


def reorder_actions(snapshot: Snapshot, action_ids: list[str], category_id: str | None = None) -> None:
    """Set global order (or category order when *category_id* is given) to match *action_ids*."""
    position = {aid: i for i, aid in enumerate(action_ids)}
    for a in snapshot.actions:
        if a.id not in position:
            continue
        if category_id is None:
            a.global_order = position[a.id]
        elif a.category_id == category_id:
            a.group_order = position[a.id]


def active_actions(snapshot: Snapshot, day: date) -> list[RoutineAction]:
    return [a for a in ordered_actions(snapshot) if a.is_active_on(day)]
