"""Lifetime statistics models."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from .base import format_dt


class TransactionType(str, Enum):
    """Direction of a point movement."""

    EARNED = "earned"
    SPENT = "spent"


@dataclass
class PointTransaction:
    """One entry in the point history: a completion or a redemption."""

    date: datetime | None
    description: str
    points: int
    type: TransactionType

    @property
    def signed_points(self) -> int:
        return self.points if self.type == TransactionType.EARNED else -self.points

    def to_dict(self) -> dict:
        return {
            "date": format_dt(self.date),
            "description": self.description,
            "points": self.points,
            "type": self.type.value,
        }


@dataclass
class UserStatistics:
    """Totals across one owner's sessions.

    Point totals, session count and active time only include completed
    sessions. Workouts received and actions completed count every record.
    """

    total_points_earned: int = 0
    total_points_spent: int = 0
    total_sessions_completed: int = 0
    total_active_minutes: int = 0
    average_session_minutes: float = 0.0
    total_workouts_received: int = 0
    total_actions_completed: int = 0
    last_session_date: datetime | None = None
    most_used_pool: str | None = None
    preferred_difficulty: str | None = None

    @property
    def current_point_balance(self) -> int:
        return self.total_points_earned - self.total_points_spent

    def to_dict(self) -> dict:
        """Convert to dictionary for display or export."""
        return {
            "totalPointsEarned": self.total_points_earned,
            "totalPointsSpent": self.total_points_spent,
            "currentPointBalance": self.current_point_balance,
            "totalSessionsCompleted": self.total_sessions_completed,
            "totalActiveMinutes": self.total_active_minutes,
            "averageSessionMinutes": self.average_session_minutes,
            "totalWorkoutsReceived": self.total_workouts_received,
            "totalActionsCompleted": self.total_actions_completed,
            "lastSessionDate": format_dt(self.last_session_date),
            "mostUsedPool": self.most_used_pool,
            "preferredDifficulty": self.preferred_difficulty,
        }
