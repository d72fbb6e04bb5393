"""CLI commands for workout-gamifier."""

from .backup import backup
from .catalog import action, pool, workout
from .init import init
from .session import session
from .stats import stats

__all__ = [
    "action",
    "backup",
    "init",
    "pool",
    "session",
    "stats",
    "workout",
]
