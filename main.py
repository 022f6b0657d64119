"""
Daily Git Brief - main entry point

Starts the HTTP API, the daily collection scheduler, or a single collection
run depending on RUN_MODE.
"""

import asyncio
import signal
import sys
from pathlib import Path
from typing import Optional

import uvicorn

from daily_git_brief.api.main import create_fastapi_app
from daily_git_brief.apps import TrendDataApp
from daily_git_brief.common.logging_utils import configure_logging, get_logger
from daily_git_brief.core.config import Settings
from daily_git_brief.exceptions import CollectionError, RunAlreadyActive
from daily_git_brief.monitoring import PrometheusMetrics

RUN_MODES = ("api_only", "collection_once", "full_service")


class DailyGitBriefPipeline:
    """Wires the data app, API server, scheduler and metrics for one process"""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or Settings()

        configure_logging(
            service="daily_git_brief",
            level=self.settings.log_level,
            log_file=Path(self.settings.log_file_path) / "daily_git_brief.log",
        )
        self.logger = get_logger("daily_git_brief_pipeline")

        self.data_app: Optional[TrendDataApp] = None
        self.fastapi_app = None
        self.metrics: Optional[PrometheusMetrics] = None

        self.background_tasks: list[asyncio.Task] = []
        self.shutdown_event = asyncio.Event()

    def _setup_signal_handlers(self):
        """Graceful shutdown on SIGINT/SIGTERM"""

        def signal_handler(signum, frame):
            self.logger.info(f"Received signal {signum}, initiating shutdown...")
            asyncio.create_task(self.shutdown())

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

    async def initialize(self):
        try:
            self.logger.info(f"Initializing Daily Git Brief ({self.settings.run_mode})...")

            if self.settings.enable_metrics:
                self.metrics = PrometheusMetrics(self.settings)
                self.metrics.start_metrics_server(self.settings.metrics_port)

            self.data_app = TrendDataApp(self.settings, metrics=self.metrics)
            await self.data_app.initialize()

            if self.settings.run_mode in ("api_only", "full_service"):
                self.fastapi_app = create_fastapi_app(self.settings, self.data_app, metrics=self.metrics)
                self.logger.info("FastAPI App initialized")

            self.logger.info("Daily Git Brief initialization completed")

        except Exception as e:
            self.logger.error(f"Failed to initialize Daily Git Brief: {e}")
            raise

    def start_background_tasks(self):
        if self.settings.run_mode == "full_service" and self.settings.enable_scheduled_collection:
            task = asyncio.create_task(self.data_app.run_scheduled_collection())
            self.background_tasks.append(task)
            self.logger.info(
                f"Collection scheduler started "
                f"(daily at {self.settings.collection_hour_utc:02d}:{self.settings.collection_minute_utc:02d} UTC)"
            )

    async def run_api_server(self):
        config = uvicorn.Config(
            self.fastapi_app,
            host=self.settings.api_host,
            port=self.settings.api_port,
            log_level=self.settings.log_level.lower(),
            access_log=True,
        )
        server = uvicorn.Server(config)
        # Signals are handled here, not by uvicorn
        server.install_signal_handlers = lambda: None

        self.logger.info(f"Starting API server on {self.settings.api_host}:{self.settings.api_port}")
        server_task = asyncio.create_task(server.serve())

        await self.shutdown_event.wait()

        server.should_exit = True
        await server_task

    async def run_collection_once(self) -> int:
        try:
            count = await self.data_app.run_collection_once()
            self.logger.info(f"Data collection completed: {count} repos")
            return 0
        except (CollectionError, RunAlreadyActive) as e:
            self.logger.error(f"Data collection failed: {e}")
            return 1

    async def run(self) -> int:
        """Run the configured mode; returns the process exit code"""
        if self.settings.run_mode not in RUN_MODES:
            self.logger.error(f"Unknown run mode {self.settings.run_mode!r}, expected one of {RUN_MODES}")
            return 2

        self._setup_signal_handlers()
        try:
            await self.initialize()

            if self.settings.run_mode == "collection_once":
                return await self.run_collection_once()

            self.start_background_tasks()
            await self.run_api_server()
            return 0

        except Exception as e:
            self.logger.error(f"Pipeline execution failed: {e}")
            raise
        finally:
            await self.cleanup()

    async def shutdown(self):
        """Graceful Shutdown"""
        self.logger.info("Initiating graceful shutdown...")
        self.shutdown_event.set()

        if self.data_app:
            self.data_app.scheduler.stop()

        for task in self.background_tasks:
            if not task.done():
                task.cancel()

        if self.background_tasks:
            await asyncio.gather(*self.background_tasks, return_exceptions=True)

        self.logger.info("Graceful shutdown completed")

    async def cleanup(self):
        try:
            self.logger.info("Cleaning up resources...")
            if self.data_app:
                await self.data_app.cleanup()
            self.logger.info("Resource cleanup completed")
        except Exception as e:
            self.logger.error(f"Cleanup failed: {e}")


async def main() -> int:
    pipeline = DailyGitBriefPipeline(Settings())
    return await pipeline.run()


def cli():
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        print("\nShutdown requested by user")


if __name__ == "__main__":
    cli()
