"""Database layer for workout-gamifier."""

from .engine import connect, get_db_path, init_db
from .repositories import (
    ActionCompletionRepository,
    ActionRepository,
    SessionRepository,
    WorkoutPoolRepository,
    WorkoutReceivedRepository,
    WorkoutRepository,
)
from .seed import PRELOADED_WORKOUTS, seed_preloaded_workouts
from .unit_of_work import UnitOfWork

__all__ = [
    "ActionCompletionRepository",
    "ActionRepository",
    "connect",
    "get_db_path",
    "init_db",
    "PRELOADED_WORKOUTS",
    "seed_preloaded_workouts",
    "SessionRepository",
    "UnitOfWork",
    "WorkoutPoolRepository",
    "WorkoutReceivedRepository",
    "WorkoutRepository",
]
