"""Configuration for workout-gamifier.

Numeric bounds live on ``EconomyPolicy`` and are injected into services.
Deployment settings come from environment variables.
"""

import os
from dataclasses import dataclass
from pathlib import Path

DATA_DIR: Path = Path(
    os.environ.get("WORKOUT_GAMIFIER_DATA_DIR", "~/.workout-gamifier")
).expanduser()
BACKUP_DIR: Path = Path(
    os.environ.get("WORKOUT_GAMIFIER_BACKUP_DIR", str(DATA_DIR / "backups"))
).expanduser()
DEFAULT_OWNER: str = os.environ.get("WORKOUT_GAMIFIER_OWNER", "default")

APP_VERSION = "0.1.0"


@dataclass(frozen=True)
class EconomyPolicy:
    """Bounds applied to catalog entries and sessions."""

    min_workout_duration: int = 1
    max_workout_duration: int = 480  # some clients cap at 300
    min_point_value: int = 1
    max_point_value: int = 1000
    max_name_length: int = 100
    max_description_length: int = 500
    max_instructions_length: int = 2000
    max_action_description_length: int = 200

    @classmethod
    def from_env(cls) -> "EconomyPolicy":
        """Build a policy, honouring WORKOUT_GAMIFIER_MAX_DURATION."""
        max_duration = os.environ.get("WORKOUT_GAMIFIER_MAX_DURATION")
        if max_duration:
            return cls(max_workout_duration=int(max_duration))
        return cls()
