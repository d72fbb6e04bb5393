"""Statistics command."""

import click

from .base import async_command, echo_info, ensure_initialized, format_table, get_statistics


@click.command()
@click.option(
    "--history",
    "-n",
    "history",
    type=click.IntRange(min=1),
    help="Also show the last N point transactions",
)
@click.pass_context
@async_command
async def stats(ctx: click.Context, history: int | None):
    """Show lifetime totals for the current owner.

    Point totals and active time count completed sessions only.
    """
    ensure_initialized(ctx)
    service = get_statistics(ctx)
    totals = await service.get_user_statistics()

    click.echo()
    click.echo(click.style(f"Statistics for {ctx.obj['owner']}", bold=True))
    click.echo("=" * 50)
    click.echo(f"Sessions completed: {totals.total_sessions_completed}")
    click.echo(f"Points: {totals.total_points_earned} earned, {totals.total_points_spent} spent")
    click.echo(
        f"Active time: {totals.total_active_minutes} min "
        f"(average {totals.average_session_minutes:.1f} min)"
    )
    click.echo(f"Actions completed: {totals.total_actions_completed}")
    click.echo(f"Workouts received: {totals.total_workouts_received}")
    if totals.last_session_date:
        click.echo(f"Last session: {totals.last_session_date.strftime('%Y-%m-%d %H:%M')}")
    if totals.most_used_pool:
        click.echo(f"Most used pool: {totals.most_used_pool}")
    if totals.preferred_difficulty:
        click.echo(f"Preferred difficulty: {totals.preferred_difficulty}")

    usage = await service.get_pool_usage()
    if usage:
        click.echo()
        click.echo(click.style("Sessions per pool:", bold=True))
        for name, count in usage.items():
            click.echo(f"  - {name}: {count}")

    breakdown = await service.get_difficulty_breakdown()
    if breakdown:
        click.echo()
        click.echo(click.style("Workouts by difficulty:", bold=True))
        for difficulty, count in breakdown.items():
            click.echo(f"  - {difficulty}: {count}")

    if history is None:
        return

    transactions = await service.get_point_transaction_history(limit=history)
    click.echo()
    if not transactions:
        echo_info("No point transactions yet.")
        return
    rows = [
        [
            t.date.strftime("%Y-%m-%d %H:%M") if t.date else "N/A",
            t.description,
            f"{t.signed_points:+d}",
        ]
        for t in transactions
    ]
    click.echo(format_table(["Date", "Description", "Points"], rows))
