"""Snapshot persistence for the steady workspace.

The plan (years, categories, actions) lives in plan.yaml and the ledger
(marks, sessions) in ledger.json. Every mutation runs inside ``transaction``,
which holds an exclusive lock across the whole read-modify-write, so each
user action is one serializable update.

Marks are unique on (action_id, day): duplicates are dropped on load and on
save.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import date
from pathlib import Path
from typing import Iterator

from steady.fileio import exclusive_lock, read_json, read_yaml, write_json_atomic, write_yaml_atomic
from steady.ledger import check_invariants
from steady.models import CompletionMark, Snapshot
from steady.workspace import ledger_path, load_config, lock_path, plan_path, workspace_root

logger = logging.getLogger(__name__)


def unique_marks(marks: list[CompletionMark]) -> list[CompletionMark]:
    """Keep the first mark for each (action_id, day) key."""
    seen: set[tuple[str, date]] = set()
    out = []
    for m in marks:
        if m.key in seen:
            continue
        seen.add(m.key)
        out.append(m)
    return out


def load_snapshot(root: Path | None = None, strict: bool | None = None) -> Snapshot:
    """Load plan.yaml + ledger.json and check ledger invariants.

    *strict* defaults to the workspace's ``strict_invariants`` setting.
    """
    if root is None:
        root = workspace_root()
    if strict is None:
        strict = load_config(root).strict_invariants
    snapshot = Snapshot.from_dicts(read_yaml(plan_path(root)), read_json(ledger_path(root)))
    check_invariants(snapshot, strict=strict)
    return snapshot


def save_snapshot(snapshot: Snapshot, root: Path | None = None) -> None:
    """Write both files atomically, enforcing the unique mark key."""
    if root is None:
        root = workspace_root()
    snapshot.marks = unique_marks(snapshot.marks)
    write_yaml_atomic(plan_path(root), snapshot.plan_dict())
    write_json_atomic(ledger_path(root), snapshot.ledger_dict())


@contextmanager
def transaction(root: Path | None = None) -> Iterator[Snapshot]:
    """Load, yield for mutation, then save, all under one exclusive lock.

    Nothing is written if the block raises.
    """
    if root is None:
        root = workspace_root()
    with exclusive_lock(lock_path(root)):
        snapshot = load_snapshot(root)
        yield snapshot
        save_snapshot(snapshot, root)
