"""Point-earning action model."""

from dataclasses import dataclass
from datetime import datetime

from .base import format_dt, parse_dt


@dataclass
class Action:
    """A predefined activity worth a fixed number of points."""

    description: str
    point_value: int
    id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary for backups."""
        return {
            "id": self.id,
            "description": self.description,
            "pointValue": self.point_value,
            "createdAt": format_dt(self.created_at),
            "updatedAt": format_dt(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Action":
        """Create from a backup dictionary."""
        return cls(
            id=data.get("id"),
            description=data["description"],
            point_value=int(data["pointValue"]),
            created_at=parse_dt(data.get("createdAt")),
            updated_at=parse_dt(data.get("updatedAt")),
        )
