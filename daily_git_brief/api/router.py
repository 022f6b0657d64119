"""
Aggregated API router for the /api prefix.
"""

from fastapi import APIRouter

from daily_git_brief.api.endpoints import collection, trends


api_router = APIRouter()

# Register endpoint routers here to keep create_fastapi_app clean
api_router.include_router(trends.router, tags=["trends"])
api_router.include_router(collection.router, tags=["collection"])
