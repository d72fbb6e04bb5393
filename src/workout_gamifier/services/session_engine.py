"""Session lifecycle and point economy."""

import logging
from pathlib import Path

import aiosqlite

from ..config import DEFAULT_OWNER, EconomyPolicy
from ..db.unit_of_work import UnitOfWork
from ..errors import (
    ConflictActiveSessionError,
    EmptyPoolError,
    InsufficientPointsError,
    InvalidArgumentError,
    InvalidStateError,
    NotFoundError,
)
from ..models.base import utcnow
from ..models.session import (
    ActionCompletion,
    Session,
    SessionStatus,
    SessionSummary,
    WorkoutReceived,
)
from ..models.workout import Difficulty
from .ledger import PointLedger
from .selector import WorkoutSelector
from .validation import validate_session

logger = logging.getLogger(__name__)


class SessionEngine:
    """Runs sessions for one logical owner.

    Every mutating operation executes inside a single write transaction,
    so a check and the write that depends on it cannot interleave with a
    concurrent caller. At most one session per owner is active; a partial
    unique index on the sessions table backs this up.
    """

    def __init__(
        self,
        db_path: Path | None = None,
        selector: WorkoutSelector | None = None,
        policy: EconomyPolicy | None = None,
        owner: str = DEFAULT_OWNER,
    ):
        """Initialize the engine.

        Args:
            db_path: SQLite database file. Uses the default location if not provided.
            selector: Random selector; inject a seeded one for reproducible draws.
            policy: Bounds applied to session names and descriptions.
            owner: Logical owner whose sessions this engine manages.
        """
        self.db_path = db_path
        self.selector = selector or WorkoutSelector()
        self.policy = policy or EconomyPolicy()
        self.owner = owner
        self.ledger = PointLedger()

    def _uow(self) -> UnitOfWork:
        return UnitOfWork(self.db_path)

    async def start_session(
        self, name: str, pool_id: int, description: str | None = None
    ) -> Session:
        """Start a new active session drawing from ``pool_id``.

        Raises:
            InvalidArgumentError: bad name or description
            NotFoundError: the pool does not exist
            EmptyPoolError: the pool has no visible workouts
            ConflictActiveSessionError: another session is active for this owner
        """
        # Lengths are checked on the values that will be stored
        if isinstance(name, str):
            name = name.strip()
        if isinstance(description, str):
            description = description.strip() or None
        validate_session(name, pool_id, description, self.policy).raise_if_invalid()

        async with self._uow() as uow:
            async with uow.transaction():
                pool = await uow.pools.get(pool_id)
                if pool is None:
                    raise NotFoundError("WorkoutPool", pool_id)

                if not await uow.pools.get_visible_workouts(pool_id):
                    raise EmptyPoolError(pool_id)

                active = await uow.sessions.get_active(self.owner)
                if active is not None:
                    raise ConflictActiveSessionError(self.owner, active.id)

                now = utcnow()
                session = Session(
                    name=name,
                    description=description,
                    workout_pool_id=pool_id,
                    owner=self.owner,
                    start_time=now,
                    status=SessionStatus.ACTIVE,
                    created_at=now,
                    updated_at=now,
                )
                try:
                    await uow.sessions.create(session)
                except aiosqlite.IntegrityError as e:
                    # Unique index on active sessions rejected a racing insert
                    raise ConflictActiveSessionError(self.owner) from e

        logger.info(
            "Started session %d '%s' on pool %d for %s",
            session.id, session.name, pool_id, self.owner,
        )
        return session

    async def get_active_session(self) -> Session | None:
        """The owner's active session as last committed, if any."""
        async with self._uow() as uow:
            return await uow.sessions.get_active(self.owner)

    async def has_active_session(self) -> bool:
        return await self.get_active_session() is not None

    async def get_session(self, session_id: int) -> Session | None:
        """Get a session by ID."""
        async with self._uow() as uow:
            return await uow.sessions.get(session_id)

    async def get_all_sessions(self) -> list[Session]:
        """The owner's sessions, most recent start first."""
        async with self._uow() as uow:
            return await uow.sessions.list_all(self.owner)

    async def get_session_summary(self, session_id: int) -> SessionSummary:
        """A session with its completions and redemptions."""
        async with self._uow() as uow:
            session = await uow.sessions.get(session_id)
            if session is None:
                raise NotFoundError("Session", session_id)
            return SessionSummary(
                session=session,
                completions=await uow.completions.list_by_session(session_id),
                redemptions=await uow.redemptions.list_by_session(session_id),
            )

    async def end_session(self, session_id: int) -> Session:
        """Complete an active session."""
        return await self._finish(session_id, SessionStatus.COMPLETED, "end session")

    async def cancel_session(self, session_id: int) -> Session:
        """Abandon an active session; it accepts no further changes."""
        return await self._finish(session_id, SessionStatus.CANCELLED, "cancel session")

    async def _finish(self, session_id: int, status: SessionStatus, operation: str) -> Session:
        async with self._uow() as uow:
            async with uow.transaction():
                session = await uow.sessions.get(session_id)
                if session is None:
                    raise NotFoundError("Session", session_id)
                if not session.is_active:
                    raise InvalidStateError(session_id, session.status.value, operation)

                await uow.sessions.finish(session_id, status)
                session = await uow.sessions.get(session_id)

        logger.info(
            "Session %d %s with %d earned, %d spent",
            session_id, status.value, session.points_earned, session.points_spent,
        )
        return session

    async def complete_action(self, session_id: int, action_id: int) -> ActionCompletion:
        """Record an action and credit its current point value.

        The completion row and the credit commit together or not at all.

        Raises:
            NotFoundError: the session or action does not exist
            InvalidStateError: the session is not active
        """
        async with self._uow() as uow:
            async with uow.transaction():
                session = await uow.sessions.get(session_id)
                if session is None:
                    raise NotFoundError("Session", session_id)
                if not session.is_active:
                    raise InvalidStateError(session_id, session.status.value, "complete action")

                action = await uow.actions.get(action_id)
                if action is None:
                    raise NotFoundError("Action", action_id)

                completion = await uow.completions.create(
                    ActionCompletion(
                        session_id=session_id,
                        action_id=action_id,
                        points_awarded=action.point_value,
                    )
                )
                if not await uow.sessions.add_points_earned(session_id, action.point_value):
                    raise InvalidStateError(session_id, session.status.value, "complete action")

        logger.info(
            "Session %d: action %d completed for %d points",
            session_id, action_id, completion.points_awarded,
        )
        return completion

    async def redeem_workout(
        self, session_id: int, point_cost: int, difficulty: Difficulty | None = None
    ) -> WorkoutReceived:
        """Spend points on a randomly selected workout from the session's pool.

        With ``difficulty`` the draw is limited to workouts of that level.

        Raises:
            InvalidArgumentError: point_cost is not positive
            NotFoundError: the session does not exist
            InvalidStateError: the session is not active
            InsufficientPointsError: the balance does not cover point_cost
            EmptyPoolError: the pool has no visible workouts left (of that difficulty)
        """
        if point_cost <= 0:
            raise InvalidArgumentError(f"Point cost must be greater than 0, got {point_cost}")
        if difficulty is not None:
            try:
                difficulty = Difficulty(difficulty)
            except ValueError as e:
                raise InvalidArgumentError(f"Unknown difficulty: {difficulty}") from e

        async with self._uow() as uow:
            async with uow.transaction():
                session = await uow.sessions.get(session_id)
                if session is None:
                    raise NotFoundError("Session", session_id)
                if not session.is_active:
                    raise InvalidStateError(session_id, session.status.value, "redeem workout")

                self.ledger.check_spend(session, point_cost)

                candidates = await uow.pools.get_visible_workouts(session.workout_pool_id)
                if difficulty is None:
                    workout = self.selector.select_random_workout(candidates)
                else:
                    workout = self.selector.select_random_workout_by_difficulty(
                        candidates, difficulty
                    )
                if workout is None:
                    raise EmptyPoolError(
                        session.workout_pool_id,
                        difficulty.value if difficulty else None,
                    )

                if not await uow.sessions.add_points_spent(session_id, point_cost):
                    current = await uow.sessions.get(session_id)
                    raise InsufficientPointsError(balance=current.balance, required=point_cost)

                received = await uow.redemptions.create(
                    WorkoutReceived(
                        session_id=session_id,
                        workout_id=workout.id,
                        points_spent=point_cost,
                    )
                )

        logger.info(
            "Session %d: redeemed workout %d for %d points",
            session_id, workout.id, point_cost,
        )
        return received
