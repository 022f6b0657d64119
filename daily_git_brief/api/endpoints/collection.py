"""
Collection API Endpoints
Start a collection run and follow its progress
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse, StreamingResponse

from daily_git_brief.api.dependencies import get_data_app
from daily_git_brief.api.models import APIResponse, CollectResponse
from daily_git_brief.apps.trend_data_app import TrendDataApp

router = APIRouter()
logger = logging.getLogger("collection_endpoint")

COLLECTION_STARTED_MESSAGE = "Data collection started in background. Please check back later."
COLLECTION_ACTIVE_MESSAGE = "Data collection is already running"


@router.post("/collect", response_model=APIResponse, status_code=status.HTTP_202_ACCEPTED)
async def start_collection(data_app: TrendDataApp = Depends(get_data_app)):
    """Kick off a background collection run (409 while one is active)"""
    if not data_app.start_collection():
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content=APIResponse(success=False, error=COLLECTION_ACTIVE_MESSAGE).model_dump(),
        )

    return APIResponse(success=True, data=CollectResponse(message=COLLECTION_STARTED_MESSAGE))


@router.get("/collect/status", response_model=APIResponse)
async def collection_status(data_app: TrendDataApp = Depends(get_data_app)):
    """Latest progress event"""
    return APIResponse(success=True, data=data_app.progress.latest)


@router.get("/collect/stream")
async def collection_stream(data_app: TrendDataApp = Depends(get_data_app)):
    """Server-sent events with progress of the current run.

    The stream opens with the latest known state and closes after the run's
    terminal event (or right away when no run is active).
    """

    async def event_source():
        async for event in data_app.progress.stream():
            yield f"data: {event.model_dump_json()}\n\n"

    return StreamingResponse(
        event_source(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
