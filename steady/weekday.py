"""Monday-based weekday bitmask (Mon=bit 0 ... Sun=bit 6)."""

from __future__ import annotations

from datetime import date, datetime
from enum import IntFlag
from typing import Iterable

from steady.dates import DAY_NAMES, weekday_index


class WeekdayMask(IntFlag):
    NONE = 0
    MON = 1 << 0
    TUE = 1 << 1
    WED = 1 << 2
    THU = 1 << 3
    FRI = 1 << 4
    SAT = 1 << 5
    SUN = 1 << 6
    WEEKDAYS = MON | TUE | WED | THU | FRI
    WEEKEND = SAT | SUN
    ALL = WEEKDAYS | WEEKEND

    @classmethod
    def from_date(cls, day: date | datetime) -> WeekdayMask:
        """Single-bit mask for the weekday of *day*."""
        return cls(1 << weekday_index(day))

    @classmethod
    def from_int(cls, raw: int) -> WeekdayMask:
        """Build from a stored integer, ignoring bits above Sunday."""
        return cls(int(raw) & cls.ALL)

    @classmethod
    def from_names(cls, names: Iterable[str]) -> WeekdayMask:
        """Parse ['mon', 'wed'] style lists. Unknown names raise ValueError."""
        mask = cls.NONE
        for name in names:
            key = str(name).strip().lower()[:3]
            if key not in DAY_NAMES:
                raise ValueError(f"Unknown weekday: {name!r}")
            mask |= cls(1 << DAY_NAMES.index(key))
        return mask

    def to_names(self) -> list[str]:
        return [name for i, name in enumerate(DAY_NAMES) if self & (1 << i)]

    def includes(self, day: date | datetime) -> bool:
        return bool(self & WeekdayMask.from_date(day))

    def is_empty(self) -> bool:
        return int(self) == 0


def mask_for_date(day: date | datetime) -> WeekdayMask:
    return WeekdayMask.from_date(day)


def contains(mask: WeekdayMask, day: date | datetime) -> bool:
    return mask.includes(day)


def union(*masks: WeekdayMask) -> WeekdayMask:
    result = WeekdayMask.NONE
    for m in masks:
        result |= m
    return result
