"""Random workout selection."""

import logging
import random

from ..errors import InvalidArgumentError
from ..models.workout import Difficulty, Workout

logger = logging.getLogger(__name__)


class WorkoutSelector:
    """Draws workouts uniformly from a pool's visible members.

    Pass a seeded ``random.Random`` to make draws reproducible.
    """

    def __init__(self, rng: random.Random | None = None):
        self.rng = rng or random.Random()

    def select_random_workout(self, workouts: list[Workout]) -> Workout | None:
        """Pick one visible workout, or None if there is none."""
        available = [w for w in workouts if not w.is_hidden]
        if not available:
            return None
        choice = available[self.rng.randrange(len(available))]
        logger.debug("Selected workout %s from %d candidates", choice.id, len(available))
        return choice

    def select_random_workout_by_difficulty(
        self, workouts: list[Workout], difficulty: Difficulty
    ) -> Workout | None:
        """Pick one visible workout of the given difficulty."""
        return self.select_random_workout(self.workouts_by_difficulty(workouts, difficulty))

    def workouts_by_difficulty(
        self, workouts: list[Workout], difficulty: Difficulty
    ) -> list[Workout]:
        return [w for w in workouts if not w.is_hidden and w.difficulty == difficulty]

    def filter_by_duration(
        self, workouts: list[Workout], min_minutes: int, max_minutes: int
    ) -> list[Workout]:
        """Visible workouts whose duration falls in the inclusive range."""
        if min_minutes > max_minutes:
            raise InvalidArgumentError(
                f"Minimum duration ({min_minutes}) cannot be greater than maximum ({max_minutes})"
            )
        return [
            w for w in workouts
            if not w.is_hidden and min_minutes <= w.duration_minutes <= max_minutes
        ]
