"""Steady core library: recurring-goal scheduling and completion aggregation.

Public API re-exports for convenient imports:
    from steady import daily_progress, category_progress, start_timer, ...

The aggregation and timer functions work on an in-memory Snapshot. The
workspace-backed facade for applications lives in ``steady.api``:
    from steady import api
    api.toggle_completion("run", root=root)
"""

# Workspace & clock
from steady.workspace import (
    workspace_root,
    load_config,
    get_user_timezone,
    now_local,
    today_local,
)

# Calendar
from steady.dates import (
    start_of_day,
    week_start,
    week_interval,
    week_days,
    month_interval,
    year_start,
    iter_days,
    iter_weeks,
    percent,
)

# Weekday mask
from steady.weekday import WeekdayMask, mask_for_date, contains, union

# Errors
from steady.errors import InvalidConfiguration, InvariantViolation

# Models
from steady.models import (
    ActionKind,
    PlanYear,
    Category,
    WeeklyCount,
    WeekdayRepeat,
    TimeAccumulated,
    RoutineAction,
    CompletionMark,
    TimeSession,
    Snapshot,
    DailyProgress,
    ActionProgress,
    CategoryProgress,
    WeekRow,
)

# Edit boundary
from steady.actions import (
    validate_action,
    create_category,
    create_action,
    update_action,
    delete_action,
    delete_category,
    delete_year,
)

# Ledger
from steady.ledger import (
    LedgerIndex,
    toggle_completion,
    add_manual_session,
    check_invariants,
)

# Aggregation
from steady.daily import daily_progress, daily_breakdown, completed_actions_on
from steady.progress import action_progress, category_progress, week_check_table

# Timer
from steady.timer import TimerState, timer_state, start_timer, stop_timer

# Storage
from steady.store import load_snapshot, save_snapshot, transaction

# Workspace facade
from steady import api
