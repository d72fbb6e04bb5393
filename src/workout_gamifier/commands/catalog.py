"""Catalog commands for workouts, actions and pools."""

import click

from ..errors import NotFoundError
from ..models.workout import Difficulty, WorkoutState
from .base import (
    async_command,
    echo_info,
    echo_success,
    echo_warning,
    ensure_initialized,
    format_table,
    get_catalog,
    truncate,
)

DIFFICULTY_CHOICES = [d.value for d in Difficulty]


def _workout_rows(workouts) -> list[list[str]]:
    return [
        [
            str(w.id),
            truncate(w.name),
            str(w.duration_minutes),
            w.difficulty.value,
            w.state.value,
            "yes" if w.is_preloaded else "",
        ]
        for w in workouts
    ]


WORKOUT_HEADERS = ["ID", "Name", "Minutes", "Difficulty", "State", "Preloaded"]


@click.group()
@click.pass_context
def workout(ctx):
    """Manage the workout catalog."""
    ensure_initialized(ctx)


@workout.command(name="list")
@click.option("--visible", is_flag=True, help="Only workouts eligible for selection")
@click.option("--search", "-q", help="Filter by name")
@click.option("--min-minutes", type=int, help="Only visible workouts at least this long")
@click.option("--max-minutes", type=int, help="Only visible workouts at most this long")
@click.pass_context
@async_command
async def list_workouts(
    ctx,
    visible: bool,
    search: str | None,
    min_minutes: int | None,
    max_minutes: int | None,
):
    """List workouts."""
    catalog = get_catalog(ctx)
    if min_minutes is not None or max_minutes is not None:
        policy = ctx.obj["policy"]
        workouts = await catalog.list_workouts_by_duration(
            min_minutes if min_minutes is not None else policy.min_workout_duration,
            max_minutes if max_minutes is not None else policy.max_workout_duration,
        )
        if search:
            workouts = [w for w in workouts if search.strip().lower() in w.name.lower()]
    elif search:
        workouts = await catalog.search_workouts(search)
        if visible:
            workouts = [w for w in workouts if not w.is_hidden]
    else:
        workouts = await catalog.list_workouts(include_hidden=not visible)

    if not workouts:
        echo_info("No workouts found.")
        return
    click.echo(format_table(WORKOUT_HEADERS, _workout_rows(workouts)))



@workout.command(name="add")
@click.argument("name")
@click.option("--duration", "-m", type=int, required=True, help="Duration in minutes")
@click.option(
    "--difficulty",
    "-d",
    type=click.Choice(DIFFICULTY_CHOICES, case_sensitive=False),
    default=Difficulty.BEGINNER.value,
    help="Difficulty level",
)
@click.option("--description", help="Short description")
@click.option("--instructions", help="How to perform the workout")
@click.pass_context
@async_command
async def add_workout(ctx, name, duration, difficulty, description, instructions):
    """Add a custom workout."""
    difficulty = next(d for d in Difficulty if d.value.lower() == difficulty.lower())
    created = await get_catalog(ctx).create_workout(
        name, duration, difficulty, description, instructions
    )
    echo_success(f"Created workout {created.id}: {created.get_summary()}")


@workout.command(name="edit")
@click.argument("workout_id", type=int)
@click.option("--name", help="New name")
@click.option("--duration", "-m", type=int, help="Duration in minutes")
@click.option(
    "--difficulty",
    "-d",
    type=click.Choice(DIFFICULTY_CHOICES, case_sensitive=False),
    help="Difficulty level",
)
@click.option("--description", help="Short description")
@click.option("--instructions", help="How to perform the workout")
@click.pass_context
@async_command
async def edit_workout(ctx, workout_id, name, duration, difficulty, description, instructions):
    """Edit a workout's details."""
    catalog = get_catalog(ctx)
    existing = await catalog.get_workout(workout_id)
    if existing is None or existing.state == WorkoutState.DELETED:
        raise NotFoundError("Workout", workout_id)

    # Update with provided values
    if name is not None:
        existing.name = name.strip()
    if duration is not None:
        existing.duration_minutes = duration
    if difficulty is not None:
        existing.difficulty = next(d for d in Difficulty if d.value.lower() == difficulty.lower())
    if description is not None:
        existing.description = description
    if instructions is not None:
        existing.instructions = instructions

    updated = await catalog.update_workout(existing)
    echo_success(f"Updated workout {updated.id}: {updated.get_summary()}")



@workout.command()
@click.argument("workout_id", type=int)
@click.pass_context
@async_command
async def hide(ctx, workout_id: int):
    """Hide a workout from random selection."""
    await get_catalog(ctx).set_workout_hidden(workout_id, True)
    echo_success(f"Workout {workout_id} hidden")


@workout.command()
@click.argument("workout_id", type=int)
@click.pass_context
@async_command
async def unhide(ctx, workout_id: int):
    """Make a hidden workout selectable again."""
    await get_catalog(ctx).set_workout_hidden(workout_id, False)
    echo_success(f"Workout {workout_id} visible")


@workout.command(name="delete")
@click.argument("workout_id", type=int)
@click.pass_context
@async_command
async def delete_workout(ctx, workout_id: int):
    """Delete a workout (preloaded workouts are hidden instead)."""
    state = await get_catalog(ctx).delete_workout(workout_id)
    if state == WorkoutState.HIDDEN:
        echo_warning(f"Workout {workout_id} is preloaded; it was hidden instead")
    else:
        echo_success(f"Workout {workout_id} deleted")


@click.group()
@click.pass_context
def action(ctx):
    """Manage point-earning actions."""
    ensure_initialized(ctx)


@action.command(name="list")
@click.pass_context
@async_command
async def list_actions(ctx):
    """List actions."""
    actions = await get_catalog(ctx).list_actions()
    if not actions:
        echo_info("No actions yet. Add one with 'workout-gamifier action add'.")
        return
    rows = [[str(a.id), truncate(a.description, 50), str(a.point_value)] for a in actions]
    click.echo(format_table(["ID", "Description", "Points"], rows))


@action.command(name="add")
@click.argument("description")
@click.option("--points", "-p", type=int, required=True, help="Points awarded")
@click.pass_context
@async_command
async def add_action(ctx, description: str, points: int):
    """Add an action worth POINTS."""
    created = await get_catalog(ctx).create_action(description, points)
    echo_success(f"Created action {created.id}: {created.description} ({created.point_value} pts)")


@action.command(name="edit")
@click.argument("action_id", type=int)
@click.option("--description", help="New description")
@click.option("--points", "-p", type=int, help="Points awarded from now on")
@click.pass_context
@async_command
async def edit_action(ctx, action_id: int, description: str | None, points: int | None):
    """Edit an action; past completions keep the points they earned."""
    catalog = get_catalog(ctx)
    existing = await catalog.get_action(action_id)
    if existing is None:
        raise NotFoundError("Action", action_id)

    if description is not None:
        existing.description = description.strip()
    if points is not None:
        existing.point_value = points

    updated = await catalog.update_action(existing)
    echo_success(f"Updated action {updated.id}: {updated.description} ({updated.point_value} pts)")



@action.command(name="delete")
@click.argument("action_id", type=int)
@click.pass_context
@async_command
async def delete_action(ctx, action_id: int):
    """Delete an action without completion history."""
    await get_catalog(ctx).delete_action(action_id)
    echo_success(f"Action {action_id} deleted")


@click.group()
@click.pass_context
def pool(ctx):
    """Manage workout pools."""
    ensure_initialized(ctx)


@pool.command(name="list")
@click.pass_context
@async_command
async def list_pools(ctx):
    """List pools with their visible workout counts."""
    catalog = get_catalog(ctx)
    pools = await catalog.list_pools()
    if not pools:
        echo_info("No pools yet. Create one with 'workout-gamifier pool create'.")
        return
    rows = []
    for p in pools:
        visible = await catalog.get_visible_workouts_in_pool(p.id)
        rows.append([str(p.id), truncate(p.name), str(len(visible)), truncate(p.description, 40)])
    click.echo(format_table(["ID", "Name", "Visible", "Description"], rows))


@pool.command()
@click.argument("pool_id", type=int)
@click.pass_context
@async_command
async def show(ctx, pool_id: int):
    """Show the workouts in a pool."""
    workouts = await get_catalog(ctx).get_pool_workouts(pool_id)
    if not workouts:
        echo_warning(f"Pool {pool_id} has no workouts; sessions cannot use it")
        return
    click.echo(format_table(WORKOUT_HEADERS, _workout_rows(workouts)))


@pool.command(name="create")
@click.argument("name")
@click.option("--description", "-d", help="Optional description")
@click.pass_context
@async_command
async def create_pool(ctx, name: str, description: str | None):
    """Create an empty pool."""
    created = await get_catalog(ctx).create_pool(name, description)
    echo_success(f"Created pool {created.id}: {created.name}")


@pool.command(name="edit")
@click.argument("pool_id", type=int)
@click.option("--name", help="New name")
@click.option("--description", "-d", help="New description")
@click.pass_context
@async_command
async def edit_pool(ctx, pool_id: int, name: str | None, description: str | None):
    """Rename a pool or change its description."""
    catalog = get_catalog(ctx)
    existing = await catalog.get_pool(pool_id)
    if existing is None:
        raise NotFoundError("WorkoutPool", pool_id)

    if name is not None:
        existing.name = name.strip()
    if description is not None:
        existing.description = description

    updated = await catalog.update_pool(existing)
    echo_success(f"Updated pool {updated.id}: {updated.name}")



@pool.command(name="add-workout")
@click.argument("pool_id", type=int)
@click.argument("workout_ids", type=int, nargs=-1, required=True)
@click.pass_context
@async_command
async def add_workout_to_pool(ctx, pool_id: int, workout_ids: tuple[int, ...]):
    """Add one or more workouts to a pool."""
    catalog = get_catalog(ctx)
    for workout_id in workout_ids:
        await catalog.add_workout_to_pool(pool_id, workout_id)
    echo_success(f"Added {len(workout_ids)} workout(s) to pool {pool_id}")


@pool.command(name="remove-workout")
@click.argument("pool_id", type=int)
@click.argument("workout_id", type=int)
@click.pass_context
@async_command
async def remove_workout_from_pool(ctx, pool_id: int, workout_id: int):
    """Remove a workout from a pool."""
    await get_catalog(ctx).remove_workout_from_pool(pool_id, workout_id)
    echo_success(f"Removed workout {workout_id} from pool {pool_id}")


@pool.command(name="delete")
@click.argument("pool_id", type=int)
@click.pass_context
@async_command
async def delete_pool(ctx, pool_id: int):
    """Delete a pool no session refers to."""
    await get_catalog(ctx).delete_pool(pool_id)
    echo_success(f"Pool {pool_id} deleted")
