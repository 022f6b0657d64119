"""
Trends API Endpoints
Daily trending repositories and language trends
"""

import datetime as dt
import logging
import time
from typing import Optional

from fastapi import APIRouter, Depends, Query

from daily_git_brief.api.dependencies import get_store
from daily_git_brief.api.models import APIResponse, LanguageInfo, TrendingRepoResponse
from daily_git_brief.data_collection.orchestrator import utc_today
from daily_git_brief.database.services.trends import TrendStore

router = APIRouter()
logger = logging.getLogger("trends_endpoint")

GITHUB_URL_TEMPLATE = "https://github.com/{repo_name}"


def _elapsed_ms(start_time: float) -> float:
    return (time.time() - start_time) * 1000


@router.get("/trends", response_model=APIResponse)
async def get_trends(
    date: Optional[dt.date] = Query(default=None, description="UTC date, defaults to today"),
    store: TrendStore = Depends(get_store),
):
    """Trending repositories for a day, ranked by total score"""
    start_time = time.time()
    day = date or utc_today()

    try:
        repos = await store.get_trending_repos(day)
        response_repos = []
        for rank, repo in enumerate(repos, start=1):
            languages = await store.get_repo_languages(day, repo.repo_id)
            response_repos.append(
                TrendingRepoResponse(
                    rank=rank,
                    repo_id=repo.repo_id,
                    repo_name=repo.repo_name,
                    github_url=GITHUB_URL_TEMPLATE.format(repo_name=repo.repo_name),
                    primary_language=repo.primary_language,
                    languages=[LanguageInfo(language=lang.language, percentage=lang.percentage) for lang in languages],
                    description=repo.description,
                    summary=repo.summary,
                    stars=repo.stars,
                    forks=repo.forks,
                    total_score=repo.total_score,
                )
            )
        return APIResponse(success=True, data=response_repos, execution_time_ms=_elapsed_ms(start_time))

    except Exception as e:
        logger.error(f"Failed to get trending repos: {e}")
        return APIResponse(success=False, error=str(e), execution_time_ms=_elapsed_ms(start_time))


@router.get("/languages/daily", response_model=APIResponse)
async def get_daily_languages(
    date: Optional[dt.date] = Query(default=None, description="UTC date, defaults to today"),
    store: TrendStore = Depends(get_store),
):
    """Normalized language trend for one day"""
    start_time = time.time()

    try:
        trends = await store.get_daily_language_trends(date or utc_today())
        return APIResponse(success=True, data=trends, execution_time_ms=_elapsed_ms(start_time))

    except Exception as e:
        logger.error(f"Failed to get daily language trends: {e}")
        return APIResponse(success=False, error=str(e), execution_time_ms=_elapsed_ms(start_time))


@router.get("/languages/weekly", response_model=APIResponse)
async def get_weekly_languages(
    date: Optional[dt.date] = Query(default=None, description="Last UTC day of the window, defaults to today"),
    store: TrendStore = Depends(get_store),
):
    """Language trend averaged over the week ending at ``date``"""
    start_time = time.time()

    try:
        trends = await store.get_weekly_language_trends(date or utc_today())
        return APIResponse(success=True, data=trends, execution_time_ms=_elapsed_ms(start_time))

    except Exception as e:
        logger.error(f"Failed to get weekly language trends: {e}")
        return APIResponse(success=False, error=str(e), execution_time_ms=_elapsed_ms(start_time))
