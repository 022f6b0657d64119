"""
FastAPI Application Main
HTTP surface for the Daily Git Brief
"""

import asyncio
import datetime as dt
import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from daily_git_brief import __version__
from daily_git_brief.apps.trend_data_app import TrendDataApp
from daily_git_brief.core.config import Settings
from daily_git_brief.monitoring.prometheus_metrics import PrometheusMetrics


def create_fastapi_app(
    settings: Settings,
    data_app: TrendDataApp,
    *,
    metrics: Optional[PrometheusMetrics] = None,
    manage_data_app: bool = False,
):
    """Factory function to create the FastAPI app.

    With ``manage_data_app`` the lifespan initializes and cleans up the data
    app itself and runs the daily scheduler when enabled. This is the mode
    used when the app is served directly by uvicorn; ``main.py`` owns those
    steps otherwise.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application Lifespan Management"""
        logger = logging.getLogger(__name__)
        logger.info("Starting Daily Git Brief API")

        scheduler_task = None
        if manage_data_app:
            await data_app.initialize()
            if settings.enable_scheduled_collection:
                scheduler_task = asyncio.create_task(data_app.run_scheduled_collection())

        logger.info("Application startup complete")
        yield

        logger.info("Shutting down application")
        if manage_data_app:
            await data_app.cleanup()
            if scheduler_task:
                await asyncio.gather(scheduler_task, return_exceptions=True)

    app = FastAPI(
        title="Daily Git Brief API",
        description="Daily trending GitHub repositories with summaries and language trends",
        version=__version__,
        lifespan=lifespan,
    )

    # Make apps available to endpoints
    app.state.data_app = data_app
    app.state.metrics = metrics

    # CORS Middleware (tighten in non-development)
    cors_origins = settings.cors_origins
    if settings.environment != "development":
        cors_origins = [o for o in cors_origins if o != "*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def metrics_http_middleware(request: Request, call_next):
        start = time.time()
        response = None
        try:
            response = await call_next(request)
            return response
        finally:
            if app.state.metrics:
                try:
                    app.state.metrics.record_api_request(
                        method=request.method,
                        endpoint=request.url.path,
                        status=str(getattr(response, "status_code", 500)),
                        duration=time.time() - start,
                    )
                except Exception:
                    logging.getLogger(__name__).debug("Failed to record API metrics", exc_info=True)

    @app.get("/health")
    async def health_check():
        """Basic health check endpoint"""
        return {"status": "ok", "timestamp": dt.datetime.now(dt.timezone.utc).isoformat()}

    @app.get("/metrics", response_class=PlainTextResponse)
    async def prometheus_metrics():
        if not app.state.metrics:
            return PlainTextResponse("metrics disabled", status_code=404)
        return PlainTextResponse(app.state.metrics.export_metrics().decode("utf-8"))

    # Include aggregated API router
    from daily_git_brief.api.router import api_router

    app.include_router(api_router, prefix="/api")

    return app


# ASGI app for `uvicorn daily_git_brief.api.main:app`
settings = Settings()
_metrics = PrometheusMetrics(settings) if settings.enable_metrics else None
data_app = TrendDataApp(settings, metrics=_metrics)
app = create_fastapi_app(settings, data_app, metrics=_metrics, manage_data_app=True)
