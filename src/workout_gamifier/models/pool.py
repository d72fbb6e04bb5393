"""Workout pool models."""

from dataclasses import dataclass
from datetime import datetime

from .base import format_dt, parse_dt


@dataclass
class WorkoutPool:
    """A named, curated set of workouts sessions draw from."""

    name: str
    description: str | None = None
    id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary for backups."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "createdAt": format_dt(self.created_at),
            "updatedAt": format_dt(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "WorkoutPool":
        """Create from a backup dictionary."""
        return cls(
            id=data.get("id"),
            name=data["name"],
            description=data.get("description"),
            created_at=parse_dt(data.get("createdAt")),
            updated_at=parse_dt(data.get("updatedAt")),
        )


@dataclass(frozen=True)
class WorkoutPoolWorkout:
    """Membership of a workout in a pool (unique per pair)."""

    workout_pool_id: int
    workout_id: int

    def to_dict(self) -> dict:
        return {"workoutPoolId": self.workout_pool_id, "workoutId": self.workout_id}

    @classmethod
    def from_dict(cls, data: dict) -> "WorkoutPoolWorkout":
        return cls(
            workout_pool_id=int(data["workoutPoolId"]),
            workout_id=int(data["workoutId"]),
        )
