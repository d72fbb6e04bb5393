"""Pytest configuration and fixtures."""

import asyncio
import random
import tempfile
from dataclasses import dataclass
from pathlib import Path

import pytest

from workout_gamifier.db import init_db
from workout_gamifier.models import Action, Difficulty, Workout, WorkoutPool
from workout_gamifier.services import CatalogService, SessionEngine, WorkoutSelector


@pytest.fixture
def temp_db_path():
    """Create a temporary database path."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir) / "test.db"


@pytest.fixture
def db_path(temp_db_path):
    """A temporary database with the schema created (no preloaded workouts)."""
    asyncio.run(init_db(temp_db_path))
    return temp_db_path


@pytest.fixture
def rng():
    """Seeded random source for reproducible selections."""
    return random.Random(42)


@dataclass
class Catalog:
    """Entities created by the ``catalog`` fixture."""

    pool: WorkoutPool
    workout_a: Workout
    workout_b: Workout
    action: Action


async def _build_catalog(db_path: Path) -> Catalog:
    catalog = CatalogService(db_path)
    pool = await catalog.create_pool("Test Pool", "Two workouts")
    workout_a = await catalog.create_workout("Workout A", 10, Difficulty.BEGINNER)
    workout_b = await catalog.create_workout("Workout B", 20, Difficulty.ADVANCED)
    await catalog.add_workout_to_pool(pool.id, workout_a.id)
    await catalog.add_workout_to_pool(pool.id, workout_b.id)
    action = await catalog.create_action("Drink water", 5)
    return Catalog(pool=pool, workout_a=workout_a, workout_b=workout_b, action=action)


@pytest.fixture
def catalog(db_path):
    """A pool holding Workout A and Workout B, plus a 5-point action."""
    return asyncio.run(_build_catalog(db_path))


@pytest.fixture
def engine(db_path, rng):
    """Session engine for the default owner with a seeded selector."""
    return SessionEngine(db_path, selector=WorkoutSelector(rng))
