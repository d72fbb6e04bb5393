"""Backup snapshot and import/validation result models."""

from dataclasses import dataclass, field
from datetime import datetime

from .action import Action
from .base import format_dt, parse_dt
from .pool import WorkoutPool, WorkoutPoolWorkout
from .session import ActionCompletion, Session, WorkoutReceived
from .workout import Workout

# Snapshot key -> model, in forward dependency (insert) order
COLLECTIONS = {
    "workouts": Workout,
    "actions": Action,
    "workoutPools": WorkoutPool,
    "workoutPoolWorkouts": WorkoutPoolWorkout,
    "sessions": Session,
    "actionCompletions": ActionCompletion,
    "workoutReceived": WorkoutReceived,
}


@dataclass
class BackupData:
    """A full data snapshot.

    A collection is None when it was absent from the source document,
    which the integrity validator reports as an error.
    """

    workouts: list[Workout] | None = field(default_factory=list)
    actions: list[Action] | None = field(default_factory=list)
    workout_pools: list[WorkoutPool] | None = field(default_factory=list)
    workout_pool_workouts: list[WorkoutPoolWorkout] | None = field(default_factory=list)
    sessions: list[Session] | None = field(default_factory=list)
    action_completions: list[ActionCompletion] | None = field(default_factory=list)
    workout_received: list[WorkoutReceived] | None = field(default_factory=list)
    exported_at: datetime | None = None
    app_version: str | None = None

    def to_dict(self) -> dict:
        """Convert to the stable export document."""
        data = {}
        for key in COLLECTIONS:
            items = getattr(self, _attr(key))
            data[key] = [item.to_dict() for item in items] if items is not None else None
        data["exportedAt"] = format_dt(self.exported_at)
        data["appVersion"] = self.app_version
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "BackupData":
        """Create from an export document.

        Raises:
            ValueError: if a record is missing required fields or has
                values of the wrong type.
        """
        kwargs = {}
        for key, model in COLLECTIONS.items():
            raw = data.get(key)
            if raw is None:
                kwargs[_attr(key)] = None
                continue
            if not isinstance(raw, list):
                raise ValueError(f"'{key}' must be a list")
            items = []
            for index, item in enumerate(raw):
                if not isinstance(item, dict):
                    raise ValueError(f"{key}[{index}] is malformed: record must be an object")
                try:
                    items.append(model.from_dict(item))
                except (AttributeError, KeyError, TypeError, ValueError) as e:
                    raise ValueError(f"{key}[{index}] is malformed: {e}") from e
            kwargs[_attr(key)] = items
        try:
            exported_at = parse_dt(data.get("exportedAt"))
        except (AttributeError, TypeError, ValueError):
            exported_at = None
        return cls(
            exported_at=exported_at,
            app_version=data.get("appVersion"),
            **kwargs,
        )

    def counts(self) -> dict[str, int]:
        """Number of records per collection."""
        return {
            key: len(getattr(self, _attr(key)) or [])
            for key in COLLECTIONS
        }


def _attr(key: str) -> str:
    """Map a camelCase snapshot key to its attribute name."""
    out = []
    for ch in key:
        if ch.isupper():
            out.append("_")
            out.append(ch.lower())
        else:
            out.append(ch)
    return "".join(out)


@dataclass
class ValidationReport:
    """Outcome of an integrity check."""

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    data: BackupData | None = None

    @property
    def is_valid(self) -> bool:
        return not self.errors


@dataclass
class ImportResult:
    """Outcome of a backup import."""

    success: bool = False
    message: str = ""
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    workouts_imported: int = 0
    actions_imported: int = 0
    workout_pools_imported: int = 0
    workout_pool_workouts_imported: int = 0
    sessions_imported: int = 0
    action_completions_imported: int = 0
    workout_received_imported: int = 0
