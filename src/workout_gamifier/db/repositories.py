"""Data access layer for workout-gamifier.

Repositories share the connection of the unit of work that created them
and never commit on their own.
"""

import aiosqlite

from ..models.action import Action
from ..models.base import format_dt, parse_dt, utcnow
from ..models.pool import WorkoutPool, WorkoutPoolWorkout
from ..models.session import (
    ActionCompletion,
    Session,
    SessionStatus,
    WorkoutReceived,
)
from ..models.workout import Difficulty, Workout, WorkoutState


def _stamp(entity) -> None:
    """Fill missing audit timestamps."""
    now = utcnow()
    if entity.created_at is None:
        entity.created_at = now
    if entity.updated_at is None:
        entity.updated_at = now


async def _insert(db: aiosqlite.Connection, table: str, values: dict, id: int | None) -> int:
    """Insert a row, keeping an explicit id when one is given."""
    if id is not None:
        values = {"id": id, **values}
    columns = ", ".join(values)
    placeholders = ", ".join("?" for _ in values)
    cursor = await db.execute(
        f"INSERT INTO {table} ({columns}) VALUES ({placeholders})",
        tuple(values.values()),
    )
    return cursor.lastrowid


class WorkoutRepository:
    """Repository for workouts."""

    def __init__(self, db: aiosqlite.Connection):
        self.db = db

    async def create(self, workout: Workout) -> Workout:
        """Create a workout; an explicit id is preserved."""
        _stamp(workout)
        workout.id = await _insert(
            self.db,
            "workouts",
            {
                "name": workout.name,
                "description": workout.description,
                "instructions": workout.instructions,
                "duration_minutes": workout.duration_minutes,
                "difficulty": workout.difficulty.value,
                "is_preloaded": 1 if workout.is_preloaded else 0,
                "state": workout.state.value,
                "created_at": format_dt(workout.created_at),
                "updated_at": format_dt(workout.updated_at),
            },
            workout.id,
        )
        return workout

    async def get(self, workout_id: int) -> Workout | None:
        """Get a workout by ID, whatever its state."""
        cursor = await self.db.execute(
            "SELECT * FROM workouts WHERE id = ?", (workout_id,)
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_workout(row)

    async def list_all(self, include_deleted: bool = False) -> list[Workout]:
        """List workouts ordered by name."""
        if include_deleted:
            cursor = await self.db.execute("SELECT * FROM workouts ORDER BY name, id")
        else:
            cursor = await self.db.execute(
                "SELECT * FROM workouts WHERE state != ? ORDER BY name, id",
                (WorkoutState.DELETED.value,),
            )
        rows = await cursor.fetchall()
        return [self._row_to_workout(row) for row in rows]

    async def search(self, query: str) -> list[Workout]:
        """Search non-deleted workouts by name."""
        cursor = await self.db.execute(
            """
            SELECT * FROM workouts
            WHERE name LIKE ? AND state != ?
            ORDER BY name
            """,
            (f"%{query}%", WorkoutState.DELETED.value),
        )
        rows = await cursor.fetchall()
        return [self._row_to_workout(row) for row in rows]

    async def update(self, workout: Workout) -> None:
        """Update an existing workout."""
        if workout.id is None:
            raise ValueError("Workout must have an ID to update")

        workout.updated_at = utcnow()
        await self.db.execute(
            """
            UPDATE workouts SET
                name = ?, description = ?, instructions = ?, duration_minutes = ?,
                difficulty = ?, is_preloaded = ?, state = ?, updated_at = ?
            WHERE id = ?
            """,
            (
                workout.name,
                workout.description,
                workout.instructions,
                workout.duration_minutes,
                workout.difficulty.value,
                1 if workout.is_preloaded else 0,
                workout.state.value,
                format_dt(workout.updated_at),
                workout.id,
            ),
        )

    async def delete(self, workout_id: int) -> None:
        """Hard-delete a workout row."""
        await self.db.execute("DELETE FROM workouts WHERE id = ?", (workout_id,))

    async def delete_non_preloaded(self) -> int:
        """Remove every workout that was not seeded by the system."""
        cursor = await self.db.execute("DELETE FROM workouts WHERE is_preloaded = 0")
        return cursor.rowcount

    async def is_referenced(self, workout_id: int) -> bool:
        """Whether any pool or redemption points at this workout."""
        cursor = await self.db.execute(
            """
            SELECT EXISTS (SELECT 1 FROM workout_pool_workouts WHERE workout_id = ?)
                OR EXISTS (SELECT 1 FROM workouts_received WHERE workout_id = ?)
            """,
            (workout_id, workout_id),
        )
        row = await cursor.fetchone()
        return bool(row[0])

    def _row_to_workout(self, row: aiosqlite.Row) -> Workout:
        """Convert a database row to a Workout."""
        return Workout(
            id=row["id"],
            name=row["name"],
            description=row["description"],
            instructions=row["instructions"],
            duration_minutes=row["duration_minutes"],
            difficulty=Difficulty(row["difficulty"]),
            is_preloaded=bool(row["is_preloaded"]),
            state=WorkoutState(row["state"]),
            created_at=parse_dt(row["created_at"]),
            updated_at=parse_dt(row["updated_at"]),
        )


class ActionRepository:
    """Repository for point-earning actions."""

    def __init__(self, db: aiosqlite.Connection):
        self.db = db

    async def create(self, action: Action) -> Action:
        """Create an action; an explicit id is preserved."""
        _stamp(action)
        action.id = await _insert(
            self.db,
            "actions",
            {
                "description": action.description,
                "point_value": action.point_value,
                "created_at": format_dt(action.created_at),
                "updated_at": format_dt(action.updated_at),
            },
            action.id,
        )
        return action

    async def get(self, action_id: int) -> Action | None:
        """Get an action by ID."""
        cursor = await self.db.execute(
            "SELECT * FROM actions WHERE id = ?", (action_id,)
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_action(row)

    async def list_all(self) -> list[Action]:
        """List all actions."""
        cursor = await self.db.execute("SELECT * FROM actions ORDER BY description, id")
        rows = await cursor.fetchall()
        return [self._row_to_action(row) for row in rows]

    async def update(self, action: Action) -> None:
        """Update an existing action."""
        if action.id is None:
            raise ValueError("Action must have an ID to update")

        action.updated_at = utcnow()
        await self.db.execute(
            "UPDATE actions SET description = ?, point_value = ?, updated_at = ? WHERE id = ?",
            (action.description, action.point_value, format_dt(action.updated_at), action.id),
        )

    async def delete(self, action_id: int) -> None:
        """Delete an action."""
        await self.db.execute("DELETE FROM actions WHERE id = ?", (action_id,))

    async def delete_all(self) -> int:
        cursor = await self.db.execute("DELETE FROM actions")
        return cursor.rowcount

    def _row_to_action(self, row: aiosqlite.Row) -> Action:
        """Convert a database row to an Action."""
        return Action(
            id=row["id"],
            description=row["description"],
            point_value=row["point_value"],
            created_at=parse_dt(row["created_at"]),
            updated_at=parse_dt(row["updated_at"]),
        )


class WorkoutPoolRepository:
    """Repository for workout pools and their memberships."""

    def __init__(self, db: aiosqlite.Connection):
        self.db = db
        self._workouts = WorkoutRepository(db)

    async def create(self, pool: WorkoutPool) -> WorkoutPool:
        """Create a pool; an explicit id is preserved."""
        _stamp(pool)
        pool.id = await _insert(
            self.db,
            "workout_pools",
            {
                "name": pool.name,
                "description": pool.description,
                "created_at": format_dt(pool.created_at),
                "updated_at": format_dt(pool.updated_at),
            },
            pool.id,
        )
        return pool

    async def get(self, pool_id: int) -> WorkoutPool | None:
        """Get a pool by ID."""
        cursor = await self.db.execute(
            "SELECT * FROM workout_pools WHERE id = ?", (pool_id,)
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_pool(row)

    async def list_all(self) -> list[WorkoutPool]:
        """List all pools."""
        cursor = await self.db.execute("SELECT * FROM workout_pools ORDER BY name, id")
        rows = await cursor.fetchall()
        return [self._row_to_pool(row) for row in rows]

    async def update(self, pool: WorkoutPool) -> None:
        """Update an existing pool."""
        if pool.id is None:
            raise ValueError("Pool must have an ID to update")

        pool.updated_at = utcnow()
        await self.db.execute(
            "UPDATE workout_pools SET name = ?, description = ?, updated_at = ? WHERE id = ?",
            (pool.name, pool.description, format_dt(pool.updated_at), pool.id),
        )

    async def delete(self, pool_id: int) -> None:
        """Delete a pool and its memberships."""
        await self.db.execute(
            "DELETE FROM workout_pool_workouts WHERE workout_pool_id = ?", (pool_id,)
        )
        await self.db.execute("DELETE FROM workout_pools WHERE id = ?", (pool_id,))

    async def delete_all(self) -> int:
        cursor = await self.db.execute("DELETE FROM workout_pools")
        return cursor.rowcount

    async def add_workout(self, pool_id: int, workout_id: int) -> None:
        """Add a membership row."""
        await self.db.execute(
            "INSERT INTO workout_pool_workouts (workout_pool_id, workout_id) VALUES (?, ?)",
            (pool_id, workout_id),
        )

    async def remove_workout(self, pool_id: int, workout_id: int) -> bool:
        """Remove a membership row; returns False if it did not exist."""
        cursor = await self.db.execute(
            "DELETE FROM workout_pool_workouts WHERE workout_pool_id = ? AND workout_id = ?",
            (pool_id, workout_id),
        )
        return cursor.rowcount > 0

    async def has_workout(self, pool_id: int, workout_id: int) -> bool:
        cursor = await self.db.execute(
            "SELECT 1 FROM workout_pool_workouts WHERE workout_pool_id = ? AND workout_id = ?",
            (pool_id, workout_id),
        )
        return await cursor.fetchone() is not None

    async def list_memberships(self) -> list[WorkoutPoolWorkout]:
        """List every pool membership."""
        cursor = await self.db.execute(
            "SELECT * FROM workout_pool_workouts ORDER BY workout_pool_id, workout_id"
        )
        rows = await cursor.fetchall()
        return [
            WorkoutPoolWorkout(workout_pool_id=row["workout_pool_id"], workout_id=row["workout_id"])
            for row in rows
        ]

    async def delete_all_memberships(self) -> int:
        cursor = await self.db.execute("DELETE FROM workout_pool_workouts")
        return cursor.rowcount

    async def get_workouts(self, pool_id: int) -> list[Workout]:
        """All non-deleted member workouts, hidden ones included."""
        cursor = await self.db.execute(
            """
            SELECT w.* FROM workouts w
            JOIN workout_pool_workouts pw ON pw.workout_id = w.id
            WHERE pw.workout_pool_id = ? AND w.state != ?
            ORDER BY w.id
            """,
            (pool_id, WorkoutState.DELETED.value),
        )
        rows = await cursor.fetchall()
        return [self._workouts._row_to_workout(row) for row in rows]

    async def get_visible_workouts(self, pool_id: int) -> list[Workout]:
        """Member workouts eligible for random selection."""
        cursor = await self.db.execute(
            """
            SELECT w.* FROM workouts w
            JOIN workout_pool_workouts pw ON pw.workout_id = w.id
            WHERE pw.workout_pool_id = ? AND w.state = ?
            ORDER BY w.id
            """,
            (pool_id, WorkoutState.VISIBLE.value),
        )
        rows = await cursor.fetchall()
        return [self._workouts._row_to_workout(row) for row in rows]

    def _row_to_pool(self, row: aiosqlite.Row) -> WorkoutPool:
        """Convert a database row to a WorkoutPool."""
        return WorkoutPool(
            id=row["id"],
            name=row["name"],
            description=row["description"],
            created_at=parse_dt(row["created_at"]),
            updated_at=parse_dt(row["updated_at"]),
        )


class SessionRepository:
    """Repository for sessions and their point totals."""

    def __init__(self, db: aiosqlite.Connection):
        self.db = db

    async def create(self, session: Session) -> Session:
        """Create a session; an explicit id is preserved."""
        _stamp(session)
        if session.start_time is None:
            session.start_time = session.created_at
        session.id = await _insert(
            self.db,
            "sessions",
            {
                "owner": session.owner,
                "name": session.name,
                "description": session.description,
                "workout_pool_id": session.workout_pool_id,
                "start_time": format_dt(session.start_time),
                "end_time": format_dt(session.end_time),
                "status": session.status.value,
                "points_earned": session.points_earned,
                "points_spent": session.points_spent,
                "created_at": format_dt(session.created_at),
                "updated_at": format_dt(session.updated_at),
            },
            session.id,
        )
        return session

    async def get(self, session_id: int) -> Session | None:
        """Get a session by ID."""
        cursor = await self.db.execute(
            "SELECT * FROM sessions WHERE id = ?", (session_id,)
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_session(row)

    async def get_active(self, owner: str) -> Session | None:
        """Get the owner's active session, if any."""
        cursor = await self.db.execute(
            "SELECT * FROM sessions WHERE owner = ? AND status = ? LIMIT 1",
            (owner, SessionStatus.ACTIVE.value),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_session(row)

    async def get_active_owners(self) -> set[str]:
        cursor = await self.db.execute(
            "SELECT owner FROM sessions WHERE status = ?", (SessionStatus.ACTIVE.value,)
        )
        return {row["owner"] for row in await cursor.fetchall()}

    async def list_all(self, owner: str | None = None) -> list[Session]:
        """List sessions, newest start first."""
        if owner is None:
            cursor = await self.db.execute(
                "SELECT * FROM sessions ORDER BY start_time DESC, id DESC"
            )
        else:
            cursor = await self.db.execute(
                "SELECT * FROM sessions WHERE owner = ? ORDER BY start_time DESC, id DESC",
                (owner,),
            )
        rows = await cursor.fetchall()
        return [self._row_to_session(row) for row in rows]

    async def add_points_earned(self, session_id: int, points: int) -> bool:
        """Atomically credit an active session; False if it is not active."""
        cursor = await self.db.execute(
            """
            UPDATE sessions
            SET points_earned = points_earned + ?, updated_at = ?
            WHERE id = ? AND status = ?
            """,
            (points, format_dt(utcnow()), session_id, SessionStatus.ACTIVE.value),
        )
        return cursor.rowcount == 1

    async def add_points_spent(self, session_id: int, points: int) -> bool:
        """Atomically debit an active session if its balance covers ``points``.

        The balance check and the write are one statement, so no caller can
        spend against a stale balance.
        """
        cursor = await self.db.execute(
            """
            UPDATE sessions
            SET points_spent = points_spent + ?, updated_at = ?
            WHERE id = ? AND status = ? AND points_earned - points_spent >= ?
            """,
            (points, format_dt(utcnow()), session_id, SessionStatus.ACTIVE.value, points),
        )
        return cursor.rowcount == 1

    async def finish(self, session_id: int, status: SessionStatus) -> bool:
        """Move an active session to a terminal status."""
        now = format_dt(utcnow())
        cursor = await self.db.execute(
            """
            UPDATE sessions SET status = ?, end_time = ?, updated_at = ?
            WHERE id = ? AND status = ?
            """,
            (status.value, now, now, session_id, SessionStatus.ACTIVE.value),
        )
        return cursor.rowcount == 1

    async def is_pool_in_active_use(self, pool_id: int) -> bool:
        cursor = await self.db.execute(
            "SELECT 1 FROM sessions WHERE workout_pool_id = ? AND status = ? LIMIT 1",
            (pool_id, SessionStatus.ACTIVE.value),
        )
        return await cursor.fetchone() is not None

    async def delete_all(self) -> int:
        cursor = await self.db.execute("DELETE FROM sessions")
        return cursor.rowcount

    def _row_to_session(self, row: aiosqlite.Row) -> Session:
        """Convert a database row to a Session."""
        return Session(
            id=row["id"],
            owner=row["owner"],
            name=row["name"],
            description=row["description"],
            workout_pool_id=row["workout_pool_id"],
            start_time=parse_dt(row["start_time"]),
            end_time=parse_dt(row["end_time"]),
            status=SessionStatus(row["status"]),
            points_earned=row["points_earned"],
            points_spent=row["points_spent"],
            created_at=parse_dt(row["created_at"]),
            updated_at=parse_dt(row["updated_at"]),
        )


class ActionCompletionRepository:
    """Append-only history of completed actions."""

    def __init__(self, db: aiosqlite.Connection):
        self.db = db

    async def create(self, completion: ActionCompletion) -> ActionCompletion:
        if completion.completed_at is None:
            completion.completed_at = utcnow()
        completion.id = await _insert(
            self.db,
            "action_completions",
            {
                "session_id": completion.session_id,
                "action_id": completion.action_id,
                "completed_at": format_dt(completion.completed_at),
                "points_awarded": completion.points_awarded,
            },
            completion.id,
        )
        return completion

    async def list_by_session(self, session_id: int) -> list[ActionCompletion]:
        cursor = await self.db.execute(
            "SELECT * FROM action_completions WHERE session_id = ? ORDER BY completed_at, id",
            (session_id,),
        )
        rows = await cursor.fetchall()
        return [self._row_to_completion(row) for row in rows]

    async def list_all(self) -> list[ActionCompletion]:
        cursor = await self.db.execute("SELECT * FROM action_completions ORDER BY id")
        rows = await cursor.fetchall()
        return [self._row_to_completion(row) for row in rows]

    async def exists_in_active_session(self, action_id: int) -> bool:
        """Whether the action has completions tied to a running session."""
        cursor = await self.db.execute(
            """
            SELECT 1 FROM action_completions ac
            JOIN sessions s ON s.id = ac.session_id
            WHERE ac.action_id = ? AND s.status = ?
            LIMIT 1
            """,
            (action_id, SessionStatus.ACTIVE.value),
        )
        return await cursor.fetchone() is not None

    async def exists_for_action(self, action_id: int) -> bool:
        cursor = await self.db.execute(
            "SELECT 1 FROM action_completions WHERE action_id = ? LIMIT 1", (action_id,)
        )
        return await cursor.fetchone() is not None

    async def delete_all(self) -> int:
        cursor = await self.db.execute("DELETE FROM action_completions")
        return cursor.rowcount

    def _row_to_completion(self, row: aiosqlite.Row) -> ActionCompletion:
        return ActionCompletion(
            id=row["id"],
            session_id=row["session_id"],
            action_id=row["action_id"],
            completed_at=parse_dt(row["completed_at"]),
            points_awarded=row["points_awarded"],
        )


class WorkoutReceivedRepository:
    """Append-only history of redemptions."""

    def __init__(self, db: aiosqlite.Connection):
        self.db = db

    async def create(self, received: WorkoutReceived) -> WorkoutReceived:
        if received.received_at is None:
            received.received_at = utcnow()
        received.id = await _insert(
            self.db,
            "workouts_received",
            {
                "session_id": received.session_id,
                "workout_id": received.workout_id,
                "received_at": format_dt(received.received_at),
                "points_spent": received.points_spent,
            },
            received.id,
        )
        return received

    async def list_by_session(self, session_id: int) -> list[WorkoutReceived]:
        cursor = await self.db.execute(
            "SELECT * FROM workouts_received WHERE session_id = ? ORDER BY received_at, id",
            (session_id,),
        )
        rows = await cursor.fetchall()
        return [self._row_to_received(row) for row in rows]

    async def list_all(self) -> list[WorkoutReceived]:
        cursor = await self.db.execute("SELECT * FROM workouts_received ORDER BY id")
        rows = await cursor.fetchall()
        return [self._row_to_received(row) for row in rows]

    async def delete_all(self) -> int:
        cursor = await self.db.execute("DELETE FROM workouts_received")
        return cursor.rowcount

    def _row_to_received(self, row: aiosqlite.Row) -> WorkoutReceived:
        return WorkoutReceived(
            id=row["id"],
            session_id=row["session_id"],
            workout_id=row["workout_id"],
            received_at=parse_dt(row["received_at"]),
            points_spent=row["points_spent"],
        )
