"""Tests for catalog management."""

import asyncio

import pytest

from workout_gamifier.db import PRELOADED_WORKOUTS, seed_preloaded_workouts
from workout_gamifier.errors import CatalogConflictError, InvalidArgumentError, NotFoundError
from workout_gamifier.models import Difficulty, WorkoutState
from workout_gamifier.services import CatalogService


@pytest.fixture
def service(db_path):
    return CatalogService(db_path)


class TestWorkouts:
    """Tests for workout catalog operations."""

    @pytest.mark.asyncio
    async def test_create_and_get(self, service):
        """Test creating a workout."""
        workout = await service.create_workout(
            "  Rowing  ", 30, Difficulty.INTERMEDIATE, "Erg intervals"
        )

        fetched = await service.get_workout(workout.id)
        assert fetched.name == "Rowing"
        assert fetched.difficulty == Difficulty.INTERMEDIATE
        assert fetched.state == WorkoutState.VISIBLE
        assert not fetched.is_preloaded

    @pytest.mark.asyncio
    async def test_create_invalid(self, service):
        """Test invalid workouts are rejected."""
        with pytest.raises(InvalidArgumentError):
            await service.create_workout("Too long", 481)

    @pytest.mark.asyncio
    async def test_hide_and_unhide(self, service, catalog):
        """Test hiding removes a workout from selection until unhidden."""
        hidden = await service.set_workout_hidden(catalog.workout_a.id, True)
        assert hidden.is_hidden
        visible = await service.get_visible_workouts_in_pool(catalog.pool.id)
        assert [w.id for w in visible] == [catalog.workout_b.id]

        shown = await service.set_workout_hidden(catalog.workout_a.id, False)
        assert not shown.is_hidden
        visible = await service.get_visible_workouts_in_pool(catalog.pool.id)
        assert len(visible) == 2

    @pytest.mark.asyncio
    async def test_list_by_duration(self, service, catalog):
        """Test the duration range is inclusive and skips hidden workouts."""
        in_range = await service.list_workouts_by_duration(10, 20)
        assert [w.id for w in in_range] == [catalog.workout_a.id, catalog.workout_b.id]

        await service.set_workout_hidden(catalog.workout_b.id, True)
        assert [w.id for w in await service.list_workouts_by_duration(15, 60)] == []

    @pytest.mark.asyncio
    async def test_list_by_duration_bad_range(self, service):
        """Test a reversed range is rejected."""
        with pytest.raises(InvalidArgumentError):
            await service.list_workouts_by_duration(30, 10)

    @pytest.mark.asyncio
    async def test_list_visible_only(self, service, catalog):
        """Test listing without hidden workouts."""
        await service.set_workout_hidden(catalog.workout_b.id, True)

        names = [w.name for w in await service.list_workouts(include_hidden=False)]
        assert names == ["Workout A"]
        assert len(await service.list_workouts()) == 2

    @pytest.mark.asyncio
    async def test_search(self, service, catalog):
        """Test searching by name."""
        results = await service.search_workouts("out b")
        assert [w.id for w in results] == [catalog.workout_b.id]

    @pytest.mark.asyncio
    async def test_delete_unreferenced_workout(self, service):
        """Test an unused custom workout is removed."""
        workout = await service.create_workout("Temp", 5)

        assert await service.delete_workout(workout.id) == WorkoutState.DELETED
        assert await service.get_workout(workout.id) is None

    @pytest.mark.asyncio
    async def test_delete_referenced_workout_is_tombstoned(self, service, catalog):
        """Test a pooled workout keeps its row but leaves selection."""
        state = await service.delete_workout(catalog.workout_a.id)

        assert state == WorkoutState.DELETED
        tombstone = await service.get_workout(catalog.workout_a.id)
        assert tombstone.state == WorkoutState.DELETED
        members = await service.get_pool_workouts(catalog.pool.id)
        assert [w.id for w in members] == [catalog.workout_b.id]
        assert catalog.workout_a.id not in [w.id for w in await service.list_workouts()]

    @pytest.mark.asyncio
    async def test_delete_preloaded_hides(self, service, db_path):
        """Test preloaded workouts are hidden instead of deleted."""
        await seed_preloaded_workouts(db_path)
        preloaded = (await service.list_workouts())[0]

        assert await service.delete_workout(preloaded.id) == WorkoutState.HIDDEN
        assert (await service.get_workout(preloaded.id)).state == WorkoutState.HIDDEN

    @pytest.mark.asyncio
    async def test_delete_missing(self, service):
        """Test deleting an unknown workout."""
        with pytest.raises(NotFoundError):
            await service.delete_workout(404)

    @pytest.mark.asyncio
    async def test_update_keeps_preloaded_flag(self, service, db_path):
        """Test edits cannot change the preloaded flag."""
        await seed_preloaded_workouts(db_path)
        workout = (await service.list_workouts())[0]
        workout.is_preloaded = False
        workout.duration_minutes = 12

        await service.update_workout(workout)

        fetched = await service.get_workout(workout.id)
        assert fetched.is_preloaded
        assert fetched.duration_minutes == 12


class TestSeeding:
    """Tests for the preloaded catalog."""

    def test_seed_is_idempotent(self, db_path):
        """Test seeding twice inserts nothing the second time."""
        assert asyncio.run(seed_preloaded_workouts(db_path)) == len(PRELOADED_WORKOUTS)
        assert asyncio.run(seed_preloaded_workouts(db_path)) == 0


class TestActions:
    """Tests for action catalog operations."""

    @pytest.mark.asyncio
    async def test_create_and_list(self, service):
        """Test creating actions."""
        await service.create_action("Walk 10k steps", 10)
        await service.create_action("Drink water", 2)

        actions = await service.list_actions()
        assert [a.point_value for a in actions] == [2, 10]

    @pytest.mark.asyncio
    async def test_create_invalid_points(self, service):
        """Test non-positive point values."""
        with pytest.raises(InvalidArgumentError):
            await service.create_action("Nothing", 0)

    @pytest.mark.asyncio
    async def test_delete_unused_action(self, service):
        """Test deleting an action without history."""
        action = await service.create_action("Stretch", 3)

        await service.delete_action(action.id)
        assert await service.get_action(action.id) is None

    @pytest.mark.asyncio
    async def test_delete_action_with_history(self, service, engine, catalog):
        """Test actions with completions cannot be deleted."""
        session = await engine.start_session("Morning", catalog.pool.id)
        await engine.complete_action(session.id, catalog.action.id)

        with pytest.raises(CatalogConflictError, match="active session"):
            await service.delete_action(catalog.action.id)

        await engine.end_session(session.id)
        with pytest.raises(CatalogConflictError, match="completion history"):
            await service.delete_action(catalog.action.id)

    @pytest.mark.asyncio
    async def test_update_keeps_past_awards(self, service, engine, catalog):
        """Test repricing an action leaves earlier completions at their old value."""
        session = await engine.start_session("Morning", catalog.pool.id)
        await engine.complete_action(session.id, catalog.action.id)

        action = await service.get_action(catalog.action.id)
        action.point_value = 8
        await service.update_action(action)
        await engine.complete_action(session.id, catalog.action.id)

        summary = await engine.get_session_summary(session.id)
        assert [c.points_awarded for c in summary.completions] == [5, 8]
        assert (await service.get_action(catalog.action.id)).point_value == 8

    @pytest.mark.asyncio
    async def test_update_missing_action(self, service, catalog):
        """Test editing an action that no longer exists."""
        action = await service.get_action(catalog.action.id)
        await service.delete_action(action.id)

        with pytest.raises(NotFoundError):
            await service.update_action(action)



class TestPools:
    """Tests for pool operations."""

    @pytest.mark.asyncio
    async def test_duplicate_membership(self, service, catalog):
        """Test a workout cannot join the same pool twice."""
        with pytest.raises(CatalogConflictError):
            await service.add_workout_to_pool(catalog.pool.id, catalog.workout_a.id)

    @pytest.mark.asyncio
    async def test_add_unknown_workout(self, service, catalog):
        """Test adding a missing workout."""
        with pytest.raises(NotFoundError):
            await service.add_workout_to_pool(catalog.pool.id, 404)

    @pytest.mark.asyncio
    async def test_remove_membership(self, service, catalog):
        """Test removing a workout from a pool."""
        await service.remove_workout_from_pool(catalog.pool.id, catalog.workout_a.id)

        members = await service.get_pool_workouts(catalog.pool.id)
        assert [w.id for w in members] == [catalog.workout_b.id]
        with pytest.raises(NotFoundError):
            await service.remove_workout_from_pool(catalog.pool.id, catalog.workout_a.id)

    @pytest.mark.asyncio
    async def test_delete_pool(self, service, catalog):
        """Test deleting an unused pool drops its memberships."""
        await service.delete_pool(catalog.pool.id)

        assert await service.get_pool(catalog.pool.id) is None
        assert await service.list_pools() == []

    @pytest.mark.asyncio
    async def test_delete_pool_in_use(self, service, engine, catalog):
        """Test a pool referenced by a session cannot be deleted."""
        session = await engine.start_session("Morning", catalog.pool.id)

        with pytest.raises(CatalogConflictError, match="active session"):
            await service.delete_pool(catalog.pool.id)

        await engine.end_session(session.id)
        with pytest.raises(CatalogConflictError, match="session history"):
            await service.delete_pool(catalog.pool.id)

    @pytest.mark.asyncio
    async def test_update_pool(self, service, catalog):
        """Test renaming a pool keeps its memberships."""
        pool = await service.get_pool(catalog.pool.id)
        pool.name = "Evening"

        await service.update_pool(pool)

        assert (await service.get_pool(catalog.pool.id)).name == "Evening"
        assert len(await service.get_pool_workouts(catalog.pool.id)) == 2

    @pytest.mark.asyncio
    async def test_update_pool_invalid(self, service, catalog):
        """Test a blank pool name is rejected."""
        pool = await service.get_pool(catalog.pool.id)
        pool.name = " "

        with pytest.raises(InvalidArgumentError):
            await service.update_pool(pool)
