"""Exception types for the steady engine."""

from __future__ import annotations


class InvalidConfiguration(ValueError):
    """An action, category or year was given an impossible combination of fields.

    Raised at the edit boundary; such records never reach the aggregators.
    """

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "invalid configuration")


class InvariantViolation(RuntimeError):
    """Stored data breaks an engine invariant (duplicate marks, two running timers)."""
