"""Transactional unit of work over a single SQLite connection."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

import aiosqlite

from ..errors import StorageFailureError
from .engine import connect, get_db_path
from .repositories import (
    ActionCompletionRepository,
    ActionRepository,
    SessionRepository,
    WorkoutPoolRepository,
    WorkoutReceivedRepository,
    WorkoutRepository,
)

logger = logging.getLogger(__name__)


class UnitOfWork:
    """Groups repository calls so they commit or roll back together.

    Usage::

        async with UnitOfWork(db_path) as uow:
            async with uow.transaction():
                session = await uow.sessions.get(1)
                ...

    ``begin()`` takes SQLite's write lock up front (``BEGIN IMMEDIATE``),
    so a read followed by a write inside one transaction cannot interleave
    with another writer on the same database file.
    """

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()
        self._db: aiosqlite.Connection | None = None
        self._in_transaction = False

    async def __aenter__(self) -> "UnitOfWork":
        try:
            self._db = await connect(self.db_path)
        except aiosqlite.Error as e:
            raise StorageFailureError(f"Failed to open database {self.db_path}: {e}") from e
        self.workouts = WorkoutRepository(self._db)
        self.actions = ActionRepository(self._db)
        self.pools = WorkoutPoolRepository(self._db)
        self.sessions = SessionRepository(self._db)
        self.completions = ActionCompletionRepository(self._db)
        self.redemptions = WorkoutReceivedRepository(self._db)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            if self._in_transaction:
                await self.rollback()
        finally:
            await self._db.close()
            self._db = None

    @property
    def in_transaction(self) -> bool:
        return self._in_transaction

    async def begin(self) -> None:
        """Start a write transaction."""
        if self._in_transaction:
            raise RuntimeError("Transaction already in progress")
        try:
            await self._db.execute("BEGIN IMMEDIATE")
        except aiosqlite.Error as e:
            raise StorageFailureError(f"Failed to begin transaction: {e}") from e
        self._in_transaction = True

    async def commit(self) -> None:
        """Commit the current transaction."""
        if not self._in_transaction:
            raise RuntimeError("No transaction in progress")
        try:
            await self._db.execute("COMMIT")
        except aiosqlite.Error as e:
            await self.rollback()
            raise StorageFailureError(f"Failed to commit transaction: {e}") from e
        self._in_transaction = False

    async def rollback(self) -> None:
        """Discard the current transaction."""
        if not self._in_transaction:
            return
        self._in_transaction = False
        try:
            await self._db.execute("ROLLBACK")
        except aiosqlite.Error:
            # SQLite may already have rolled back on its own after an error
            logger.debug("Rollback on %s had nothing to undo", self.db_path)

    @asynccontextmanager
    async def transaction(self):
        """Run the enclosed block atomically.

        Storage errors escaping the block are raised as StorageFailureError;
        every other exception propagates unchanged after the rollback.
        """
        await self.begin()
        try:
            yield self
        except aiosqlite.Error as e:
            await self.rollback()
            raise StorageFailureError(str(e)) from e
        except BaseException:
            await self.rollback()
            raise
        await self.commit()
