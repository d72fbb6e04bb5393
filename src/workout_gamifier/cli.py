"""CLI entry point for workout-gamifier."""

import logging
from pathlib import Path

import click

from . import __version__
from .commands import action, backup, init, pool, session, stats, workout
from .config import DATA_DIR, DEFAULT_OWNER, EconomyPolicy


@click.group()
@click.version_option(version=__version__, prog_name="workout-gamifier")
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=DATA_DIR,
    show_default=True,
    help="Directory holding the database",
)
@click.option(
    "--backup-dir",
    type=click.Path(file_okay=False, path_type=Path),
    envvar="WORKOUT_GAMIFIER_BACKUP_DIR",
    help="Directory for exported backups (default: DATA_DIR/backups)",
)
@click.option("--owner", default=DEFAULT_OWNER, show_default=True, help="Session owner")
@click.option(
    "--max-duration",
    type=int,
    default=None,
    help="Longest allowed workout in minutes",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(
    ctx,
    data_dir: Path,
    backup_dir: Path | None,
    owner: str,
    max_duration: int | None,
    verbose: bool,
):
    """workout-gamifier: earn points, spend them on random workouts.

    Complete actions during a session to earn points, then redeem points
    for a workout drawn at random from the session's pool.

    Example usage:

        # Initialize the database and preloaded workouts
        workout-gamifier init

        # Build a pool and an action
        workout-gamifier pool create "Morning"
        workout-gamifier pool add-workout 1 1 2 3
        workout-gamifier action add "Drink water" --points 5

        # Play a session
        workout-gamifier session start "Monday" --pool 1
        workout-gamifier session complete 1
        workout-gamifier session redeem 5
        workout-gamifier session end

        # Review lifetime totals
        workout-gamifier stats --history 10
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    policy = EconomyPolicy.from_env()
    if max_duration is not None:
        policy = EconomyPolicy(max_workout_duration=max_duration)

    ctx.ensure_object(dict)
    ctx.obj["data_dir"] = Path(data_dir).expanduser()
    ctx.obj["backup_dir"] = (
        Path(backup_dir).expanduser() if backup_dir else ctx.obj["data_dir"] / "backups"
    )
    ctx.obj["owner"] = owner
    ctx.obj["policy"] = policy


# Register commands
main.add_command(init)
main.add_command(session)
main.add_command(workout)
main.add_command(action)
main.add_command(pool)
main.add_command(backup)
main.add_command(stats)


def run():
    """Run the CLI."""
    main()


if __name__ == "__main__":
    run()
