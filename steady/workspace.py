"""Workspace root, configuration, clock and path helpers."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from steady.fileio import read_yaml

logger = logging.getLogger(__name__)


def workspace_root() -> Path:
    """Get the workspace directory holding plan.yaml, ledger.json and config.yaml."""
    return Path(
        os.environ.get("STEADY_ROOT", str(Path.home() / "steady"))
    ).expanduser().resolve()


# ── Config ────────────────────────────────────────────────────


@dataclass
class Config:
    timezone: str = "UTC"
    # raise on ledger invariant violations instead of logging and repairing
    strict_invariants: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, d: dict) -> Config:
        if not d or not isinstance(d, dict):
            return cls()
        return cls(
            timezone=str(d.get("timezone", "UTC")),
            strict_invariants=bool(d.get("strict_invariants", False)),
            log_level=str(d.get("log_level", "INFO")).upper(),
        )


def load_config(root: Path | None = None) -> Config:
    """Read config.yaml from the workspace, falling back to defaults."""
    return Config.from_dict(read_yaml(config_path(root)))


def get_user_timezone(root: Path | None = None) -> ZoneInfo:
    """User's timezone from config.yaml, defaulting to UTC."""
    name = load_config(root).timezone
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r in config; using UTC", name)
        return ZoneInfo("UTC")


def now_local(root: Path | None = None) -> datetime:
    """Current datetime in the user's timezone."""
    return datetime.now(get_user_timezone(root))


def today_local(root: Path | None = None) -> date:
    """Today's date in the user's timezone."""
    return now_local(root).date()


# ── Path helpers ──────────────────────────────────────────────

def config_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "config.yaml"


def plan_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "plan.yaml"


def ledger_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "ledger.json"


def lock_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / ".steady.lock"
