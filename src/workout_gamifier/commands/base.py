"""Shared CLI utilities."""

import asyncio
from functools import wraps
from pathlib import Path

import click

from ..config import EconomyPolicy
from ..db import get_db_path
from ..errors import GamifierError
from ..services import BackupService, CatalogService, SessionEngine, StatisticsService


def async_command(f):
    """Decorator to run async Click commands.

    Domain errors are printed and turned into exit status 1.
    """

    @wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return asyncio.run(f(*args, **kwargs))
        except GamifierError as e:
            echo_error(str(e))
            click.get_current_context().exit(1)

    return wrapper


def get_db_file(ctx: click.Context) -> Path:
    """Database path chosen on the root command."""
    return get_db_path(ctx.obj["data_dir"])


def ensure_initialized(ctx: click.Context) -> None:
    """Ensure the database is initialized."""
    db_path = get_db_file(ctx)
    if not db_path.exists():
        click.echo(
            click.style("Error: ", fg="red")
            + "Database not initialized. Run 'workout-gamifier init' first."
        )
        ctx.exit(1)


def get_engine(ctx: click.Context) -> SessionEngine:
    return SessionEngine(
        get_db_file(ctx), policy=ctx.obj["policy"], owner=ctx.obj["owner"]
    )


def get_catalog(ctx: click.Context) -> CatalogService:
    return CatalogService(get_db_file(ctx), policy=ctx.obj["policy"])


def get_statistics(ctx: click.Context) -> StatisticsService:
    return StatisticsService(get_db_file(ctx), owner=ctx.obj["owner"])


def get_backup(ctx: click.Context) -> BackupService:
    policy: EconomyPolicy = ctx.obj["policy"]
    return BackupService(get_db_file(ctx), policy=policy)


def echo_success(message: str) -> None:
    """Print a success message."""
    click.echo(click.style("[OK] ", fg="green") + message)


def echo_error(message: str) -> None:
    """Print an error message."""
    click.echo(click.style("[ERROR] ", fg="red") + message)


def echo_info(message: str) -> None:
    """Print an info message."""
    click.echo(click.style("[INFO] ", fg="blue") + message)


def echo_warning(message: str) -> None:
    """Print a warning message."""
    click.echo(click.style("[WARN] ", fg="yellow") + message)


def format_table(headers: list[str], rows: list[list[str]], padding: int = 2) -> str:
    """Format data as a simple table."""
    if not rows:
        return ""

    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(str(cell)))

    lines = ["".join(h.ljust(widths[i] + padding) for i, h in enumerate(headers))]
    lines.append("".join("-" * w + " " * padding for w in widths))
    for row in rows:
        lines.append(
            "".join(str(cell).ljust(widths[i] + padding) for i, cell in enumerate(row))
        )

    return "\n".join(line.rstrip() for line in lines)


def truncate(text: str | None, limit: int = 30) -> str:
    if not text:
        return ""
    return text[:limit] + "..." if len(text) > limit else text
