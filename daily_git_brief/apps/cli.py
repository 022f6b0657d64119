"""
Command-line interface for one-off collection runs and quick lookups.
Usage examples:
  python -m daily_git_brief.apps.cli collect
  python -m daily_git_brief.apps.cli trends --date 2024-05-01
  python -m daily_git_brief.apps.cli languages --weekly
"""

import asyncio
import datetime as dt
from typing import Awaitable, Callable, Optional, TypeVar

import click

from daily_git_brief.apps.trend_data_app import TrendDataApp, create_trend_data_app
from daily_git_brief.common.logging_utils import configure_logging
from daily_git_brief.core.config import Settings
from daily_git_brief.data_collection.orchestrator import utc_today
from daily_git_brief.exceptions import DailyGitBriefError

T = TypeVar("T")

# Swapped out in tests
app_factory: Callable[[Settings], Awaitable[TrendDataApp]] = create_trend_data_app


def _run_with_app(settings: Settings, body: Callable[[TrendDataApp], Awaitable[T]]) -> T:
    async def _main():
        app = await app_factory(settings)
        try:
            return await body(app)
        finally:
            await app.cleanup()

    return asyncio.run(_main())


def _parse_date(value: Optional[str]) -> dt.date:
    if not value:
        return utc_today()
    try:
        return dt.date.fromisoformat(value)
    except ValueError as e:
        raise click.BadParameter(f"expected YYYY-MM-DD, got {value!r}") from e


@click.group()
@click.option("--log-level", default=None, help="Overrides LOG_LEVEL for this command.")
@click.pass_context
def cli(ctx: click.Context, log_level: Optional[str]):
    settings = Settings()
    configure_logging(service="daily_git_brief_cli", level=log_level or settings.log_level)
    ctx.obj = settings


@cli.command()
@click.pass_obj
def collect(settings: Settings):
    """Run one collection in the foreground"""
    try:
        count = _run_with_app(settings, lambda app: app.run_collection_once())
    except DailyGitBriefError as e:
        click.echo(f"Collection failed: {e}", err=True)
        raise SystemExit(1)
    click.echo(f"Collected {count} repos")


@cli.command()
@click.option("--date", "date_str", default=None, help="UTC date (YYYY-MM-DD), defaults to today.")
@click.option("--limit", default=20, show_default=True, type=int)
@click.pass_obj
def trends(settings: Settings, date_str: Optional[str], limit: int):
    """List the trending repositories stored for a day"""
    day = _parse_date(date_str)
    repos = _run_with_app(settings, lambda app: app.store.get_trending_repos(day))

    if not repos:
        click.echo(f"No trending repos stored for {day.isoformat()}")
        return
    for rank, repo in enumerate(repos[:limit], start=1):
        language = repo.primary_language or "-"
        click.echo(f"{rank:>3}. {repo.repo_name} [{language}] score={repo.total_score or 0:.1f}")
        if repo.summary:
            click.echo(f"     {repo.summary}")


@cli.command()
@click.option("--date", "date_str", default=None, help="UTC date (YYYY-MM-DD), defaults to today.")
@click.option("--weekly", is_flag=True, help="Average over the week ending at --date.")
@click.pass_obj
def languages(settings: Settings, date_str: Optional[str], weekly: bool):
    """Show the normalized language trend"""
    day = _parse_date(date_str)
    if weekly:
        rows = _run_with_app(settings, lambda app: app.store.get_weekly_language_trends(day))
    else:
        rows = _run_with_app(settings, lambda app: app.store.get_daily_language_trends(day))

    if not rows:
        click.echo(f"No language trends stored for {day.isoformat()}")
        return
    for trend in rows:
        click.echo(f"{trend.language:<20} {trend.normalized_percentage:6.2f}%  ({trend.repo_count} repos)")


if __name__ == "__main__":
    cli()
