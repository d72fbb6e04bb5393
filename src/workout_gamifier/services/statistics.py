"""Lifetime statistics and point history."""

import logging
from collections import Counter
from collections.abc import Iterable
from datetime import datetime, timezone
from pathlib import Path

from ..config import DEFAULT_OWNER
from ..db.unit_of_work import UnitOfWork
from ..models.session import ActionCompletion, Session, SessionStatus, WorkoutReceived
from ..models.statistics import PointTransaction, TransactionType, UserStatistics
from .ledger import PointLedger

logger = logging.getLogger(__name__)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _most_common(values: Iterable[str | None]) -> str | None:
    counts = Counter(v for v in values if v is not None)
    if not counts:
        return None
    return counts.most_common(1)[0][0]


class StatisticsService:
    """Read-only reporting over one owner's sessions.

    Completions and redemptions are attributed to the owner through
    their session, whatever that session's status.
    """

    def __init__(self, db_path: Path | None = None, owner: str = DEFAULT_OWNER):
        self.db_path = db_path
        self.owner = owner
        self.ledger = PointLedger()

    def _uow(self) -> UnitOfWork:
        return UnitOfWork(self.db_path)

    async def _load_history(
        self, uow: UnitOfWork
    ) -> tuple[list[Session], list[ActionCompletion], list[WorkoutReceived]]:
        sessions = await uow.sessions.list_all(self.owner)
        session_ids = {s.id for s in sessions}
        completions = [
            c for c in await uow.completions.list_all() if c.session_id in session_ids
        ]
        redemptions = [
            r for r in await uow.redemptions.list_all() if r.session_id in session_ids
        ]
        return sessions, completions, redemptions

    async def get_user_statistics(self) -> UserStatistics:
        """Compute lifetime totals for the owner."""
        async with self._uow() as uow:
            sessions, completions, redemptions = await self._load_history(uow)
            pool_names = {p.id: p.name for p in await uow.pools.list_all()}
            workouts = {w.id: w for w in await uow.workouts.list_all(include_deleted=True)}

        completed = [s for s in sessions if s.status == SessionStatus.COMPLETED]
        stats = UserStatistics(
            total_points_earned=sum(s.points_earned for s in completed),
            total_points_spent=sum(s.points_spent for s in completed),
            total_sessions_completed=len(completed),
            total_active_minutes=sum(
                int(self.ledger.session_duration(s).total_seconds() // 60)
                for s in completed
                if s.end_time is not None
            ),
            average_session_minutes=self.ledger.average_session_minutes(sessions),
            total_workouts_received=len(redemptions),
            total_actions_completed=len(completions),
            last_session_date=max(
                (s.start_time for s in completed if s.start_time is not None), default=None
            ),
            most_used_pool=_most_common(pool_names.get(s.workout_pool_id) for s in sessions),
            preferred_difficulty=_most_common(
                workouts[r.workout_id].difficulty.value
                for r in redemptions
                if r.workout_id in workouts
            ),
        )
        logger.debug("Statistics for %s: %s", self.owner, stats.to_dict())
        return stats

    async def get_point_transaction_history(
        self, limit: int | None = None
    ) -> list[PointTransaction]:
        """Completions and redemptions as one list, newest first."""
        async with self._uow() as uow:
            _, completions, redemptions = await self._load_history(uow)
            actions = {a.id: a.description for a in await uow.actions.list_all()}
            workouts = {
                w.id: w.name for w in await uow.workouts.list_all(include_deleted=True)
            }

        transactions = [
            PointTransaction(
                date=c.completed_at,
                description=f"Completed: {actions.get(c.action_id, 'Unknown Action')}",
                points=c.points_awarded,
                type=TransactionType.EARNED,
            )
            for c in completions
        ]
        transactions.extend(
            PointTransaction(
                date=r.received_at,
                description=f"Received workout: {workouts.get(r.workout_id, 'Unknown Workout')}",
                points=r.points_spent,
                type=TransactionType.SPENT,
            )
            for r in redemptions
        )
        transactions.sort(key=lambda t: t.date or _EPOCH, reverse=True)
        if limit is not None:
            return transactions[:limit]
        return transactions

    async def get_pool_usage(self) -> dict[str, int]:
        """Sessions per pool name, most used first."""
        async with self._uow() as uow:
            sessions = await uow.sessions.list_all(self.owner)
            pool_names = {p.id: p.name for p in await uow.pools.list_all()}
        counts = Counter(
            pool_names[s.workout_pool_id] for s in sessions if s.workout_pool_id in pool_names
        )
        return dict(counts.most_common())

    async def get_difficulty_breakdown(self) -> dict[str, int]:
        """Workouts received per difficulty, most frequent first."""
        async with self._uow() as uow:
            _, _, redemptions = await self._load_history(uow)
            workouts = {w.id: w for w in await uow.workouts.list_all(include_deleted=True)}
        counts = Counter(
            workouts[r.workout_id].difficulty.value
            for r in redemptions
            if r.workout_id in workouts
        )
        return dict(counts.most_common())
