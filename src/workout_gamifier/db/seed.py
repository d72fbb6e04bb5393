"""Preloaded workout catalog."""

from pathlib import Path

from ..models.base import format_dt, utcnow
from ..models.workout import Difficulty, Workout
from .engine import connect, get_db_path

PRELOADED_WORKOUTS = [
    Workout(
        name="Push-up Ladder",
        description="Ascending sets of push-ups",
        instructions="Do 1 push-up, rest, 2 push-ups, rest, up to 10.",
        duration_minutes=10,
        difficulty=Difficulty.BEGINNER,
        is_preloaded=True,
    ),
    Workout(
        name="Bodyweight Squats",
        description="Three sets of air squats",
        instructions="3 x 20 squats with 60 seconds rest between sets.",
        duration_minutes=8,
        difficulty=Difficulty.BEGINNER,
        is_preloaded=True,
    ),
    Workout(
        name="Plank Series",
        description="Front and side planks",
        instructions="45s front plank, 30s each side, repeat 3 times.",
        duration_minutes=6,
        difficulty=Difficulty.BEGINNER,
        is_preloaded=True,
    ),
    Workout(
        name="Jump Rope Intervals",
        description="High-intensity rope intervals",
        instructions="30s fast skipping, 30s rest, 10 rounds.",
        duration_minutes=10,
        difficulty=Difficulty.INTERMEDIATE,
        is_preloaded=True,
    ),
    Workout(
        name="Kettlebell Complex",
        description="Swings, cleans and presses",
        instructions="5 rounds of 10 swings, 5 cleans, 5 presses per side.",
        duration_minutes=20,
        difficulty=Difficulty.INTERMEDIATE,
        is_preloaded=True,
    ),
    Workout(
        name="Hill Sprints",
        description="Short uphill sprints",
        instructions="8 x 20s all-out uphill, walk down to recover.",
        duration_minutes=25,
        difficulty=Difficulty.ADVANCED,
        is_preloaded=True,
    ),
    Workout(
        name="Burpee Pyramid",
        description="Burpees up and down a pyramid",
        instructions="1 to 10 burpees and back down, minimal rest.",
        duration_minutes=18,
        difficulty=Difficulty.ADVANCED,
        is_preloaded=True,
    ),
    Workout(
        name="Murph Prep",
        description="Scaled hero workout",
        instructions="1 mile run, 50 pull-ups, 100 push-ups, 150 squats, 1 mile run.",
        duration_minutes=60,
        difficulty=Difficulty.EXPERT,
        is_preloaded=True,
    ),
]


async def seed_preloaded_workouts(db_path: Path | None = None) -> int:
    """Insert the preloaded workouts that are not present yet.

    Returns:
        Number of workouts inserted
    """
    if db_path is None:
        db_path = get_db_path()

    db = await connect(db_path)
    try:
        cursor = await db.execute("SELECT name FROM workouts WHERE is_preloaded = 1")
        existing = {row["name"] for row in await cursor.fetchall()}

        count = 0
        now = format_dt(utcnow())
        await db.execute("BEGIN")
        for workout in PRELOADED_WORKOUTS:
            if workout.name in existing:
                continue
            await db.execute(
                """
                INSERT INTO workouts
                (name, description, instructions, duration_minutes, difficulty,
                 is_preloaded, state, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, 1, ?, ?, ?)
                """,
                (
                    workout.name,
                    workout.description,
                    workout.instructions,
                    workout.duration_minutes,
                    workout.difficulty.value,
                    workout.state.value,
                    now,
                    now,
                ),
            )
            count += 1
        await db.execute("COMMIT")
    finally:
        await db.close()

    return count
