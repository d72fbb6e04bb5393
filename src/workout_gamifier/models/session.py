"""Session and point history models."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum

from .base import format_dt, parse_dt, utcnow


class SessionStatus(str, Enum):
    """Session lifecycle status.

    ACTIVE is the only non-terminal state.
    """

    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self is not SessionStatus.ACTIVE


@dataclass
class Session:
    """A workout session with its embedded point ledger.

    ``points_earned`` and ``points_spent`` only ever grow; the balance is
    derived and never negative.
    """

    name: str
    workout_pool_id: int
    description: str | None = None
    owner: str = "default"
    start_time: datetime | None = None
    end_time: datetime | None = None
    status: SessionStatus = SessionStatus.ACTIVE
    points_earned: int = 0
    points_spent: int = 0
    id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def balance(self) -> int:
        """Points currently available to spend."""
        return self.points_earned - self.points_spent

    @property
    def is_active(self) -> bool:
        return self.status == SessionStatus.ACTIVE

    @property
    def duration(self) -> timedelta | None:
        """Elapsed time for finished sessions."""
        if self.start_time is None or self.end_time is None:
            return None
        return self.end_time - self.start_time

    def elapsed(self, now: datetime | None = None) -> timedelta:
        """Elapsed time, measured up to now while the session is running."""
        if self.start_time is None:
            return timedelta(0)
        end = self.end_time or now or utcnow()
        return end - self.start_time

    def to_dict(self) -> dict:
        """Convert to dictionary for backups."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "owner": self.owner,
            "workoutPoolId": self.workout_pool_id,
            "startTime": format_dt(self.start_time),
            "endTime": format_dt(self.end_time),
            "status": self.status.value,
            "pointsEarned": self.points_earned,
            "pointsSpent": self.points_spent,
            "createdAt": format_dt(self.created_at),
            "updatedAt": format_dt(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Session":
        """Create from a backup dictionary."""
        return cls(
            id=data.get("id"),
            name=data["name"],
            description=data.get("description"),
            owner=data.get("owner") or "default",
            workout_pool_id=int(data["workoutPoolId"]),
            start_time=parse_dt(data.get("startTime")),
            end_time=parse_dt(data.get("endTime")),
            status=SessionStatus(data.get("status", "active")),
            points_earned=int(data.get("pointsEarned", 0)),
            points_spent=int(data.get("pointsSpent", 0)),
            created_at=parse_dt(data.get("createdAt")),
            updated_at=parse_dt(data.get("updatedAt")),
        )

    def get_status_display(self) -> str:
        """Get a human-readable status string."""
        status_map = {
            SessionStatus.ACTIVE: "In Progress",
            SessionStatus.COMPLETED: "Completed",
            SessionStatus.CANCELLED: "Cancelled",
        }
        return status_map.get(self.status, self.status.value)


@dataclass
class ActionCompletion:
    """One completed action; ``points_awarded`` is a snapshot of the action's value."""

    session_id: int
    action_id: int
    points_awarded: int
    completed_at: datetime | None = None
    id: int | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "sessionId": self.session_id,
            "actionId": self.action_id,
            "completedAt": format_dt(self.completed_at),
            "pointsAwarded": self.points_awarded,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ActionCompletion":
        return cls(
            id=data.get("id"),
            session_id=int(data["sessionId"]),
            action_id=int(data["actionId"]),
            completed_at=parse_dt(data.get("completedAt")),
            points_awarded=int(data["pointsAwarded"]),
        )


@dataclass
class WorkoutReceived:
    """One redemption: the workout drawn and the points charged for it."""

    session_id: int
    workout_id: int
    points_spent: int
    received_at: datetime | None = None
    id: int | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "sessionId": self.session_id,
            "workoutId": self.workout_id,
            "receivedAt": format_dt(self.received_at),
            "pointsSpent": self.points_spent,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "WorkoutReceived":
        return cls(
            id=data.get("id"),
            session_id=int(data["sessionId"]),
            workout_id=int(data["workoutId"]),
            received_at=parse_dt(data.get("receivedAt")),
            points_spent=int(data["pointsSpent"]),
        )


@dataclass
class SessionSummary:
    """A session together with its completion and redemption history."""

    session: Session
    completions: list[ActionCompletion] = field(default_factory=list)
    redemptions: list[WorkoutReceived] = field(default_factory=list)
