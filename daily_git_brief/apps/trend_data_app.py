"""
Trend Data App - main application class for data collection

Wires collectors, store, orchestrator, progress broadcaster and scheduler,
and owns the process-wide "collection active" guard.
"""

import asyncio
import logging
from typing import Optional

from ..core.config import Settings
from ..data_collection.collectors import GitHubCollector, LlmSummarizer, OssInsightCollector
from ..data_collection.collectors.base import CodeHostClient, Summarizer, TrendSource
from ..data_collection.orchestrator import CollectionOrchestrator
from ..data_collection.progress import ProgressBroadcaster
from ..data_collection.scheduler import CollectionScheduler, RunGuard
from ..database.manager import DatabaseManager
from ..database.services.trends import TrendStore
from ..domain.models import ProgressEvent
from ..exceptions import CollectionError
from ..monitoring import PrometheusMetrics


class TrendDataApp:
    """Main application for trending repository collection"""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        db_manager: Optional[DatabaseManager] = None,
        store: Optional[TrendStore] = None,
        trend_source: Optional[TrendSource] = None,
        code_host: Optional[CodeHostClient] = None,
        summarizer: Optional[Summarizer] = None,
        metrics: Optional[PrometheusMetrics] = None,
    ):
        self.settings = settings or Settings()
        self.db_manager = db_manager or DatabaseManager(self.settings)
        self.store = store or TrendStore(self.db_manager)
        self.trend_source = trend_source or OssInsightCollector(self.settings)
        self.code_host = code_host or GitHubCollector(self.settings)
        self.summarizer = summarizer or LlmSummarizer(self.settings)
        self.metrics = metrics

        self.progress = ProgressBroadcaster(self.settings.progress_queue_size)
        self.run_guard = RunGuard()
        self.orchestrator = CollectionOrchestrator(
            self.trend_source,
            self.code_host,
            self.summarizer,
            self.store,
            self.settings,
            metrics=self.metrics,
        )
        self.scheduler = CollectionScheduler(
            self.start_collection,
            hour=self.settings.collection_hour_utc,
            minute=self.settings.collection_minute_utc,
            error_backoff_seconds=self.settings.scheduler_error_backoff_seconds,
        )
        self._collection_task: Optional[asyncio.Task] = None

        # Logging is configured centrally in main.py
        self.logger = logging.getLogger("trend_data_app")

    @property
    def is_collecting(self) -> bool:
        return self.run_guard.is_active

    async def initialize(self):
        """Connect the database (creating tables if needed)"""
        try:
            self.logger.info("Initializing Trend Data App...")
            await self.db_manager.initialize()
            self.logger.info("Trend Data App initialized successfully")
        except Exception as e:
            self.logger.error(f"Failed to initialize Trend Data App: {e}")
            raise

    def start_collection(self) -> bool:
        """Start a collection run in the background.

        Returns immediately. False means another run is active; that run is
        left untouched.
        """
        if not self.run_guard.try_acquire():
            self.logger.warning("Collection requested while another run is active; rejected")
            if self.metrics:
                self.metrics.record_collection_rejected()
            return False

        try:
            self.progress.publish(ProgressEvent(is_running=True, message="Collection started"))
            self._collection_task = asyncio.create_task(self._run_guarded())
            # Done callbacks run even if the task is cancelled before it starts
            self._collection_task.add_done_callback(lambda _task: self.run_guard.release())
        except BaseException:
            self.run_guard.release()
            raise

        self.logger.info("Data collection started in background")
        return True

    async def _run_guarded(self) -> Optional[int]:
        """Background run body; errors are logged and reported as a terminal event"""
        try:
            count = await self.orchestrator.run(self.progress)
            self.logger.info(f"Background collection complete: {count} repos")
            return count
        except CollectionError as e:
            self.logger.error(f"Background collection failed: {e}")
            self._publish_failure(e)
        except Exception as e:
            self.logger.exception(f"Background collection crashed: {e}")
            self._publish_failure(e)
        return None

    async def run_collection_once(self) -> int:
        """Run a collection in the foreground (collection_once mode).

        Raises:
            RunAlreadyActive: if a background run holds the guard.
            CollectionError: if the candidate set cannot be fetched.
        """
        with self.run_guard.hold():
            return await self.orchestrator.run(self.progress)

    async def run_scheduled_collection(self):
        """Daily trigger loop; returns when the scheduler is stopped"""
        try:
            await self.scheduler.start_schedule()
        except Exception as e:
            self.logger.error(f"Scheduled collection failed: {e}")

    async def wait_for_collection(self) -> Optional[int]:
        """Await the current background run, if any"""
        if self._collection_task is None:
            return None
        return await self._collection_task

    def _publish_failure(self, error: Exception) -> None:
        last = self.progress.latest
        self.progress.publish(
            ProgressEvent(
                is_running=False,
                message=f"Collection failed: {error}",
                current_count=last.current_count,
                total_count=last.total_count,
            )
        )

    async def cleanup(self):
        """Stop scheduling, cancel an in-flight run and close connections"""
        try:
            self.logger.info("Cleaning up Trend Data App...")
            self.scheduler.stop()

            task = self._collection_task
            if task and not task.done():
                task.cancel()
                await asyncio.gather(task, return_exceptions=True)

            for collaborator in (self.trend_source, self.code_host, self.summarizer):
                close = getattr(collaborator, "cleanup", None)
                if close:
                    await close()

            await self.db_manager.close()
            self.logger.info("Trend Data App cleanup completed")
        except Exception as e:
            self.logger.error(f"Cleanup failed: {e}")


# Convenience Functions
async def create_trend_data_app(settings: Optional[Settings] = None) -> TrendDataApp:
    app = TrendDataApp(settings)
    await app.initialize()
    return app


__all__ = ["TrendDataApp", "create_trend_data_app"]
