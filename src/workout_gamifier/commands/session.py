"""Session commands."""

import click

from ..models.workout import Difficulty
from .base import (
    async_command,
    echo_error,
    echo_info,
    echo_success,
    ensure_initialized,
    format_table,
    get_catalog,
    get_engine,
    truncate,
)


@click.group()
@click.pass_context
def session(ctx):
    """Run workout sessions.

    Earn points by completing actions and spend them on random workouts
    from the session's pool.
    """
    ensure_initialized(ctx)


async def _resolve_session_id(ctx: click.Context, session_id: int | None) -> int:
    """Use the given id, or fall back to the active session."""
    if session_id is not None:
        return session_id
    active = await get_engine(ctx).get_active_session()
    if active is None:
        echo_error("No active session. Start one with 'workout-gamifier session start'.")
        ctx.exit(1)
    return active.id


@session.command()
@click.argument("name")
@click.option("--pool", "-p", "pool_id", type=int, required=True, help="Workout pool ID")
@click.option("--description", "-d", help="Optional description")
@click.pass_context
@async_command
async def start(ctx, name: str, pool_id: int, description: str | None):
    """Start a new session on a workout pool."""
    started = await get_engine(ctx).start_session(name, pool_id, description)
    echo_success(f"Started session {started.id}: {started.name}")


@session.command()
@click.argument("session_id", type=int, required=False)
@click.pass_context
@async_command
async def end(ctx, session_id: int | None):
    """End a session (defaults to the active one)."""
    session_id = await _resolve_session_id(ctx, session_id)
    engine = get_engine(ctx)
    ended = await engine.end_session(session_id)
    minutes = engine.ledger.session_duration(ended).total_seconds() / 60
    echo_success(
        f"Session {ended.id} completed after {minutes:.0f} min "
        f"({ended.points_earned} earned, {ended.points_spent} spent)"
    )


@session.command()
@click.argument("session_id", type=int, required=False)
@click.confirmation_option(prompt="Cancel this session? It cannot be resumed.")
@click.pass_context
@async_command
async def cancel(ctx, session_id: int | None):
    """Cancel a session (defaults to the active one)."""
    session_id = await _resolve_session_id(ctx, session_id)
    cancelled = await get_engine(ctx).cancel_session(session_id)
    echo_success(f"Session {cancelled.id} cancelled")


@session.command()
@click.argument("session_id", type=int, required=False)
@click.pass_context
@async_command
async def status(ctx, session_id: int | None):
    """Show balance and history of a session."""
    session_id = await _resolve_session_id(ctx, session_id)
    engine = get_engine(ctx)
    summary = await engine.get_session_summary(session_id)
    current = summary.session

    click.echo()
    click.echo(click.style(f"Session: {current.name} (ID: {current.id})", bold=True))
    click.echo("=" * 50)
    click.echo(f"Status: {current.get_status_display()}")
    click.echo(f"Pool: {current.workout_pool_id}")
    if current.start_time:
        click.echo(f"Started: {current.start_time.strftime('%Y-%m-%d %H:%M')}")
        minutes = engine.ledger.session_duration(current).total_seconds() / 60
        click.echo(f"Duration: {minutes:.0f} min")
    click.echo(f"Points: {current.points_earned} earned, {current.points_spent} spent")
    click.echo(click.style(f"Balance: {current.balance}", bold=True))

    if summary.redemptions:
        catalog = get_catalog(ctx)
        click.echo()
        click.echo(click.style("Workouts received:", bold=True))
        for received in summary.redemptions:
            workout = await catalog.get_workout(received.workout_id)
            label = workout.name if workout else f"Workout {received.workout_id}"
            click.echo(f"  - {label} ({received.points_spent} pts)")

    click.echo()
    click.echo(f"Actions completed: {len(summary.completions)}")


@session.command(name="list")
@click.pass_context
@async_command
async def list_sessions(ctx):
    """List sessions, newest first."""
    sessions = await get_engine(ctx).get_all_sessions()
    if not sessions:
        echo_info("No sessions yet.")
        return

    headers = ["ID", "Name", "Status", "Earned", "Spent", "Balance", "Started"]
    rows = [
        [
            str(s.id),
            truncate(s.name),
            s.get_status_display(),
            str(s.points_earned),
            str(s.points_spent),
            str(s.balance),
            s.start_time.strftime("%Y-%m-%d %H:%M") if s.start_time else "N/A",
        ]
        for s in sessions
    ]
    click.echo()
    click.echo(format_table(headers, rows))
    click.echo()
    click.echo(f"Total: {len(sessions)} session(s)")


@session.command()
@click.argument("action_id", type=int)
@click.option("--session", "-s", "session_id", type=int, help="Session ID (default: active)")
@click.pass_context
@async_command
async def complete(ctx, action_id: int, session_id: int | None):
    """Complete an action and earn its points."""
    session_id = await _resolve_session_id(ctx, session_id)
    engine = get_engine(ctx)
    completion = await engine.complete_action(session_id, action_id)
    updated = await engine.get_session(session_id)
    echo_success(
        f"+{completion.points_awarded} points. Balance: {updated.balance}"
    )


@session.command()
@click.argument("cost", type=int)
@click.option("--session", "-s", "session_id", type=int, help="Session ID (default: active)")
@click.option(
    "--difficulty",
    "-d",
    type=click.Choice([d.value for d in Difficulty], case_sensitive=False),
    help="Only draw workouts of this difficulty",
)
@click.pass_context
@async_command
async def redeem(ctx, cost: int, session_id: int | None, difficulty: str | None):
    """Spend COST points on a random workout from the pool."""
    session_id = await _resolve_session_id(ctx, session_id)
    engine = get_engine(ctx)

    if difficulty:
        difficulty = next(d for d in Difficulty if d.value.lower() == difficulty.lower())
    received = await engine.redeem_workout(session_id, cost, difficulty)
    workout = await get_catalog(ctx).get_workout(received.workout_id)

    echo_success(f"You received: {workout.get_summary()}")
    if workout.instructions:
        click.echo(f"  {workout.instructions}")
    updated = await engine.get_session(session_id)
    click.echo(f"Balance: {updated.balance}")
