"""Initialize database command."""

import click

from ..db import init_db, seed_preloaded_workouts
from .base import async_command, echo_info, echo_success, get_db_file


@click.command()
@click.pass_context
@async_command
async def init(ctx):
    """Initialize the workout-gamifier database.

    Creates the data directory and the SQLite schema, and loads the
    preloaded workout catalog. Safe to run again.
    """
    db_path = get_db_file(ctx)
    echo_info(f"Initializing workout-gamifier in {db_path.parent}")

    await init_db(db_path)
    echo_success("Database initialized")

    count = await seed_preloaded_workouts(db_path)
    echo_success(f"Preloaded workouts added: {count}")

    click.echo()
    click.echo("Next steps:")
    click.echo('  1. Create a pool:      workout-gamifier pool create "Morning"')
    click.echo("  2. Add workouts to it: workout-gamifier pool add-workout 1 1")
    click.echo('  3. Add an action:      workout-gamifier action add "Drink water" -p 5')
    click.echo('  4. Start a session:    workout-gamifier session start "Monday" -p 1')
