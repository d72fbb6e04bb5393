"""Catalog management for workouts, actions and pools."""

import logging
from pathlib import Path

from ..config import EconomyPolicy
from ..db.unit_of_work import UnitOfWork
from ..errors import CatalogConflictError, NotFoundError
from ..models.action import Action
from ..models.pool import WorkoutPool
from ..models.workout import Difficulty, Workout, WorkoutState
from .selector import WorkoutSelector
from .validation import validate_action, validate_pool, validate_workout

logger = logging.getLogger(__name__)


class CatalogService:
    """Create, edit and retire catalog entries without breaking history."""

    def __init__(
        self,
        db_path: Path | None = None,
        policy: EconomyPolicy | None = None,
        selector: WorkoutSelector | None = None,
    ):
        self.db_path = db_path
        self.policy = policy or EconomyPolicy()
        self.selector = selector or WorkoutSelector()

    def _uow(self) -> UnitOfWork:
        return UnitOfWork(self.db_path)

    # Workouts

    async def create_workout(
        self,
        name: str,
        duration_minutes: int,
        difficulty: Difficulty = Difficulty.BEGINNER,
        description: str | None = None,
        instructions: str | None = None,
    ) -> Workout:
        """Create a user-defined workout."""
        validate_workout(
            name, duration_minutes, difficulty, description, instructions, self.policy
        ).raise_if_invalid()

        workout = Workout(
            name=name.strip(),
            duration_minutes=int(duration_minutes),
            difficulty=Difficulty(difficulty),
            description=description,
            instructions=instructions,
        )
        async with self._uow() as uow:
            async with uow.transaction():
                await uow.workouts.create(workout)
        logger.info("Created workout %d '%s'", workout.id, workout.name)
        return workout

    async def update_workout(self, workout: Workout) -> Workout:
        """Save edits to an existing workout."""
        validate_workout(
            workout.name,
            workout.duration_minutes,
            workout.difficulty,
            workout.description,
            workout.instructions,
            self.policy,
        ).raise_if_invalid()

        async with self._uow() as uow:
            async with uow.transaction():
                existing = await uow.workouts.get(workout.id)
                if existing is None or existing.state == WorkoutState.DELETED:
                    raise NotFoundError("Workout", workout.id)
                # Seeded status is not editable
                workout.is_preloaded = existing.is_preloaded
                await uow.workouts.update(workout)
        return workout

    async def get_workout(self, workout_id: int) -> Workout | None:
        """Get a workout by ID, deleted ones included so history resolves."""
        async with self._uow() as uow:
            return await uow.workouts.get(workout_id)

    async def list_workouts(self, include_hidden: bool = True) -> list[Workout]:
        async with self._uow() as uow:
            workouts = await uow.workouts.list_all()
        if include_hidden:
            return workouts
        return [w for w in workouts if not w.is_hidden]

    async def search_workouts(self, query: str) -> list[Workout]:
        async with self._uow() as uow:
            return await uow.workouts.search(query.strip())

    async def list_workouts_by_duration(self, min_minutes: int, max_minutes: int) -> list[Workout]:
        """Visible workouts lasting between min_minutes and max_minutes inclusive."""
        return self.selector.filter_by_duration(
            await self.list_workouts(include_hidden=False), min_minutes, max_minutes
        )

    async def set_workout_hidden(self, workout_id: int, hidden: bool) -> Workout:
        """Hide a workout from selection, or make it selectable again."""
        async with self._uow() as uow:
            async with uow.transaction():
                workout = await uow.workouts.get(workout_id)
                if workout is None or workout.state == WorkoutState.DELETED:
                    raise NotFoundError("Workout", workout_id)
                workout.state = WorkoutState.HIDDEN if hidden else WorkoutState.VISIBLE
                await uow.workouts.update(workout)
        logger.info("Workout %d is now %s", workout_id, workout.state.value)
        return workout

    async def delete_workout(self, workout_id: int) -> WorkoutState:
        """Retire a workout.

        Preloaded workouts are only hidden. Workouts still referenced by a
        pool or a redemption are tombstoned so history keeps resolving
        them. Anything else is removed.

        Returns:
            The resulting state (HIDDEN or DELETED)
        """
        async with self._uow() as uow:
            async with uow.transaction():
                workout = await uow.workouts.get(workout_id)
                if workout is None or workout.state == WorkoutState.DELETED:
                    raise NotFoundError("Workout", workout_id)

                if workout.is_preloaded:
                    workout.state = WorkoutState.HIDDEN
                    await uow.workouts.update(workout)
                elif await uow.workouts.is_referenced(workout_id):
                    workout.state = WorkoutState.DELETED
                    await uow.workouts.update(workout)
                else:
                    await uow.workouts.delete(workout_id)
                    workout.state = WorkoutState.DELETED

        logger.info("Workout %d retired as %s", workout_id, workout.state.value)
        return workout.state

    # Actions

    async def create_action(self, description: str, point_value: int) -> Action:
        validate_action(description, point_value, self.policy).raise_if_invalid()
        action = Action(description=description.strip(), point_value=int(point_value))
        async with self._uow() as uow:
            async with uow.transaction():
                await uow.actions.create(action)
        logger.info("Created action %d worth %d points", action.id, action.point_value)
        return action

    async def update_action(self, action: Action) -> Action:
        """Save edits to an action; past completions keep their snapshot."""
        validate_action(action.description, action.point_value, self.policy).raise_if_invalid()
        async with self._uow() as uow:
            async with uow.transaction():
                if await uow.actions.get(action.id) is None:
                    raise NotFoundError("Action", action.id)
                await uow.actions.update(action)
        return action

    async def get_action(self, action_id: int) -> Action | None:
        async with self._uow() as uow:
            return await uow.actions.get(action_id)

    async def list_actions(self) -> list[Action]:
        async with self._uow() as uow:
            return await uow.actions.list_all()

    async def delete_action(self, action_id: int) -> None:
        """Delete an action that no completion history depends on.

        Raises:
            CatalogConflictError: the action has completions
        """
        async with self._uow() as uow:
            async with uow.transaction():
                if await uow.actions.get(action_id) is None:
                    raise NotFoundError("Action", action_id)
                if await uow.completions.exists_in_active_session(action_id):
                    raise CatalogConflictError(
                        f"Action {action_id} has completions in an active session"
                    )
                if await uow.completions.exists_for_action(action_id):
                    raise CatalogConflictError(
                        f"Action {action_id} is referenced by completion history"
                    )
                await uow.actions.delete(action_id)
        logger.info("Deleted action %d", action_id)

    # Pools

    async def create_pool(self, name: str, description: str | None = None) -> WorkoutPool:
        validate_pool(name, description, self.policy).raise_if_invalid()
        pool = WorkoutPool(name=name.strip(), description=description)
        async with self._uow() as uow:
            async with uow.transaction():
                await uow.pools.create(pool)
        logger.info("Created workout pool %d '%s'", pool.id, pool.name)
        return pool

    async def update_pool(self, pool: WorkoutPool) -> WorkoutPool:
        validate_pool(pool.name, pool.description, self.policy).raise_if_invalid()
        async with self._uow() as uow:
            async with uow.transaction():
                if await uow.pools.get(pool.id) is None:
                    raise NotFoundError("WorkoutPool", pool.id)
                await uow.pools.update(pool)
        return pool

    async def get_pool(self, pool_id: int) -> WorkoutPool | None:
        async with self._uow() as uow:
            return await uow.pools.get(pool_id)

    async def list_pools(self) -> list[WorkoutPool]:
        async with self._uow() as uow:
            return await uow.pools.list_all()

    async def get_pool_workouts(self, pool_id: int) -> list[Workout]:
        """Members of a pool, hidden ones included."""
        async with self._uow() as uow:
            if await uow.pools.get(pool_id) is None:
                raise NotFoundError("WorkoutPool", pool_id)
            return await uow.pools.get_workouts(pool_id)

    async def get_visible_workouts_in_pool(self, pool_id: int) -> list[Workout]:
        async with self._uow() as uow:
            return await uow.pools.get_visible_workouts(pool_id)

    async def delete_pool(self, pool_id: int) -> None:
        """Delete a pool that no session refers to.

        Raises:
            CatalogConflictError: a session still references the pool
        """
        async with self._uow() as uow:
            async with uow.transaction():
                if await uow.pools.get(pool_id) is None:
                    raise NotFoundError("WorkoutPool", pool_id)
                if await uow.sessions.is_pool_in_active_use(pool_id):
                    raise CatalogConflictError(
                        f"Workout pool {pool_id} is used by an active session"
                    )
                if any(s.workout_pool_id == pool_id for s in await uow.sessions.list_all()):
                    raise CatalogConflictError(
                        f"Workout pool {pool_id} is referenced by session history"
                    )
                await uow.pools.delete(pool_id)
        logger.info("Deleted workout pool %d", pool_id)

    async def add_workout_to_pool(self, pool_id: int, workout_id: int) -> None:
        async with self._uow() as uow:
            async with uow.transaction():
                if await uow.pools.get(pool_id) is None:
                    raise NotFoundError("WorkoutPool", pool_id)
                workout = await uow.workouts.get(workout_id)
                if workout is None or workout.state == WorkoutState.DELETED:
                    raise NotFoundError("Workout", workout_id)
                if await uow.pools.has_workout(pool_id, workout_id):
                    raise CatalogConflictError(
                        f"Workout {workout_id} is already in pool {pool_id}"
                    )
                await uow.pools.add_workout(pool_id, workout_id)
        logger.info("Added workout %d to pool %d", workout_id, pool_id)

    async def remove_workout_from_pool(self, pool_id: int, workout_id: int) -> None:
        async with self._uow() as uow:
            async with uow.transaction():
                if not await uow.pools.remove_workout(pool_id, workout_id):
                    raise NotFoundError("WorkoutPoolWorkout", workout_id)
        logger.info("Removed workout %d from pool %d", workout_id, pool_id)
