"""Workout catalog models."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from .base import format_dt, parse_dt


class Difficulty(str, Enum):
    """Workout difficulty levels."""

    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"
    EXPERT = "Expert"


class WorkoutState(str, Enum):
    """Catalog lifecycle of a workout.

    Hidden workouts stay in their pools but are never selected. Deleted
    workouts keep their row so redemption history still resolves them.
    """

    VISIBLE = "visible"
    HIDDEN = "hidden"
    DELETED = "deleted"


def _state_from_dict(data: dict) -> WorkoutState:
    # Older backups only carry the isHidden flag
    if data.get("state"):
        return WorkoutState(data["state"])
    return WorkoutState.HIDDEN if data.get("isHidden") else WorkoutState.VISIBLE


@dataclass
class Workout:
    """A workout that can be received from a pool."""

    name: str
    duration_minutes: int
    difficulty: Difficulty = Difficulty.BEGINNER
    description: str | None = None
    instructions: str | None = None
    is_preloaded: bool = False
    state: WorkoutState = WorkoutState.VISIBLE
    id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_hidden(self) -> bool:
        """Whether the workout is excluded from random selection."""
        return self.state != WorkoutState.VISIBLE

    def to_dict(self) -> dict:
        """Convert to dictionary for backups."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "instructions": self.instructions,
            "durationMinutes": self.duration_minutes,
            "difficulty": self.difficulty.value,
            "isPreloaded": self.is_preloaded,
            "isHidden": self.is_hidden,
            "state": self.state.value,
            "createdAt": format_dt(self.created_at),
            "updatedAt": format_dt(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Workout":
        """Create from a backup dictionary."""
        return cls(
            id=data.get("id"),
            name=data["name"],
            description=data.get("description"),
            instructions=data.get("instructions"),
            duration_minutes=int(data["durationMinutes"]),
            difficulty=Difficulty(data.get("difficulty", "Beginner")),
            is_preloaded=bool(data.get("isPreloaded", False)),
            state=_state_from_dict(data),
            created_at=parse_dt(data.get("createdAt")),
            updated_at=parse_dt(data.get("updatedAt")),
        )

    def get_summary(self) -> str:
        """One-line description for display."""
        flags = []
        if self.is_preloaded:
            flags.append("preloaded")
        if self.state != WorkoutState.VISIBLE:
            flags.append(self.state.value)
        suffix = f" [{', '.join(flags)}]" if flags else ""
        return f"{self.name} ({self.duration_minutes} min, {self.difficulty.value}){suffix}"
