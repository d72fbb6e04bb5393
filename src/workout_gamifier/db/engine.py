"""Database engine setup and initialization."""

from pathlib import Path

import aiosqlite

from ..config import DATA_DIR

# Seconds a connection waits for another writer before giving up
BUSY_TIMEOUT = 30.0


def get_db_path(data_dir: Path | None = None) -> Path:
    """Get the database file path."""
    if data_dir is None:
        data_dir = DATA_DIR
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir / "workout_gamifier.db"


async def connect(db_path: Path) -> aiosqlite.Connection:
    """Open a connection with foreign keys enforced and rows as mappings."""
    db = await aiosqlite.connect(db_path, timeout=BUSY_TIMEOUT, isolation_level=None)
    db.row_factory = aiosqlite.Row
    await db.execute("PRAGMA foreign_keys = ON")
    return db


async def init_db(db_path: Path | None = None) -> None:
    """Initialize the database schema."""
    if db_path is None:
        db_path = get_db_path()

    async with aiosqlite.connect(db_path) as db:
        await db.execute("PRAGMA journal_mode = WAL")

        await db.execute("""
            CREATE TABLE IF NOT EXISTS workouts (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                description TEXT,
                instructions TEXT,
                duration_minutes INTEGER NOT NULL CHECK (duration_minutes > 0),
                difficulty TEXT NOT NULL,
                is_preloaded INTEGER NOT NULL DEFAULT 0,
                state TEXT NOT NULL DEFAULT 'visible',
                created_at TIMESTAMP,
                updated_at TIMESTAMP
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS actions (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                description TEXT NOT NULL,
                point_value INTEGER NOT NULL CHECK (point_value > 0),
                created_at TIMESTAMP,
                updated_at TIMESTAMP
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS workout_pools (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                description TEXT,
                created_at TIMESTAMP,
                updated_at TIMESTAMP
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS workout_pool_workouts (
                workout_pool_id INTEGER NOT NULL,
                workout_id INTEGER NOT NULL,
                PRIMARY KEY (workout_pool_id, workout_id),
                FOREIGN KEY (workout_pool_id) REFERENCES workout_pools(id),
                FOREIGN KEY (workout_id) REFERENCES workouts(id)
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS sessions (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                owner TEXT NOT NULL DEFAULT 'default',
                name TEXT NOT NULL,
                description TEXT,
                workout_pool_id INTEGER NOT NULL,
                start_time TIMESTAMP NOT NULL,
                end_time TIMESTAMP,
                status TEXT NOT NULL DEFAULT 'active',
                points_earned INTEGER NOT NULL DEFAULT 0 CHECK (points_earned >= 0),
                points_spent INTEGER NOT NULL DEFAULT 0 CHECK (points_spent >= 0),
                created_at TIMESTAMP,
                updated_at TIMESTAMP,
                CHECK (points_spent <= points_earned),
                FOREIGN KEY (workout_pool_id) REFERENCES workout_pools(id)
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS action_completions (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                session_id INTEGER NOT NULL,
                action_id INTEGER NOT NULL,
                completed_at TIMESTAMP NOT NULL,
                points_awarded INTEGER NOT NULL,
                FOREIGN KEY (session_id) REFERENCES sessions(id),
                FOREIGN KEY (action_id) REFERENCES actions(id)
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS workouts_received (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                session_id INTEGER NOT NULL,
                workout_id INTEGER NOT NULL,
                received_at TIMESTAMP NOT NULL,
                points_spent INTEGER NOT NULL,
                FOREIGN KEY (session_id) REFERENCES sessions(id),
                FOREIGN KEY (workout_id) REFERENCES workouts(id)
            )
        """)

        # At most one active session per owner
        await db.execute("""
            CREATE UNIQUE INDEX IF NOT EXISTS idx_sessions_one_active
            ON sessions(owner) WHERE status = 'active'
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_sessions_start_time
            ON sessions(start_time)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_action_completions_session
            ON action_completions(session_id)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_workouts_received_session
            ON workouts_received(session_id)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_pool_workouts_workout
            ON workout_pool_workouts(workout_id)
        """)

        await db.commit()
