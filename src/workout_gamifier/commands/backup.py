"""Backup export, validation and import commands."""

from pathlib import Path

import click

from ..errors import IntegrityViolationError
from ..services import default_backup_path
from .base import (
    async_command,
    echo_error,
    echo_info,
    echo_success,
    echo_warning,
    ensure_initialized,
    get_backup,
)


@click.group()
@click.pass_context
def backup(ctx):
    """Export and restore all data as JSON.

    Examples:
        # Write a timestamped backup to the backup directory
        workout-gamifier backup export

        # Check a file without importing it
        workout-gamifier backup validate backup.json

        # Replace all user data with a backup
        workout-gamifier backup import backup.json --overwrite
    """
    ensure_initialized(ctx)


@backup.command()
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write to this file instead of the backup directory",
)
@click.option("--stdout", "to_stdout", is_flag=True, help="Print JSON instead of saving")
@click.pass_context
@async_command
async def export(ctx, output: Path | None, to_stdout: bool):
    """Export every collection to a JSON document."""
    service = get_backup(ctx)
    text = await service.export_json()

    if to_stdout:
        click.echo(text)
        return

    path = await service.save_backup_to_file(
        text, output or default_backup_path(ctx.obj["backup_dir"])
    )
    echo_success(f"Backup written to {path}")


@backup.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
@async_command
async def validate(ctx, path: Path):
    """Check a backup file without importing it."""
    service = get_backup(ctx)
    report = service.validate_backup_json(await service.load_backup_from_file(path))

    for warning in report.warnings:
        echo_warning(warning)
    if not report.is_valid:
        for error in report.errors:
            echo_error(error)
        ctx.exit(1)

    counts = report.data.counts()
    echo_success("Backup is valid")
    for key, n in counts.items():
        click.echo(f"  {key}: {n}")


@backup.command(name="import")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--overwrite",
    is_flag=True,
    help="Replace existing data and keep backup IDs (preloaded workouts survive)",
)
@click.option("--yes", "-y", is_flag=True, help="Skip the overwrite confirmation")
@click.pass_context
@async_command
async def import_backup(ctx, path: Path, overwrite: bool, yes: bool):
    """Import a backup file.

    Without --overwrite, workouts, actions, pools and sessions are added
    under new IDs next to the existing data.
    """
    if overwrite and not yes:
        click.confirm("This will replace all existing data. Continue?", abort=True)

    service = get_backup(ctx)
    text = await service.load_backup_from_file(path)
    try:
        result = await service.import_json(text, overwrite=overwrite)
    except IntegrityViolationError as e:
        echo_error("Backup rejected; nothing was imported")
        for error in e.errors:
            click.echo(f"  - {error}")
        ctx.exit(1)

    echo_success(result.message)
    click.echo(f"  Workouts: {result.workouts_imported}")
    click.echo(f"  Actions: {result.actions_imported}")
    click.echo(f"  Pools: {result.workout_pools_imported}")
    click.echo(f"  Pool memberships: {result.workout_pool_workouts_imported}")
    click.echo(f"  Sessions: {result.sessions_imported}")
    click.echo(f"  Action completions: {result.action_completions_imported}")
    click.echo(f"  Workouts received: {result.workout_received_imported}")
    if result.warnings:
        click.echo()
        echo_info(f"{len(result.warnings)} warning(s):")
        for warning in result.warnings:
            echo_warning(warning)
