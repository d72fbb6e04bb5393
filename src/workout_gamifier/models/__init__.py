"""Data models for workout-gamifier."""

from .action import Action
from .backup import BackupData, ImportResult, ValidationReport
from .pool import WorkoutPool, WorkoutPoolWorkout
from .session import (
    ActionCompletion,
    Session,
    SessionStatus,
    SessionSummary,
    WorkoutReceived,
)
from .statistics import PointTransaction, TransactionType, UserStatistics
from .workout import Difficulty, Workout, WorkoutState

__all__ = [
    "Action",
    "ActionCompletion",
    "BackupData",
    "Difficulty",
    "ImportResult",
    "PointTransaction",
    "Session",
    "SessionStatus",
    "SessionSummary",
    "TransactionType",
    "UserStatistics",
    "ValidationReport",
    "Workout",
    "WorkoutPool",
    "WorkoutPoolWorkout",
    "WorkoutReceived",
    "WorkoutState",
]
