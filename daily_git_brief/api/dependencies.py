"""
API Dependencies
Dependency injection for FastAPI
"""

from fastapi import HTTPException, Request

from daily_git_brief.apps.trend_data_app import TrendDataApp
from daily_git_brief.database.services.trends import TrendStore


async def get_data_app(request: Request) -> TrendDataApp:
    """Shared TrendDataApp (lives for the whole app lifecycle)"""
    data_app = getattr(request.app.state, "data_app", None)
    if data_app is None:
        raise HTTPException(status_code=503, detail="Data collection not available")
    return data_app


async def get_store(request: Request) -> TrendStore:
    data_app = await get_data_app(request)
    return data_app.store
