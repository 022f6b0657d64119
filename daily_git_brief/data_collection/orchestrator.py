"""
Collection Orchestrator for Daily Git Brief

Drives one collection run: fetch today's trending repositories, enrich each
one with README summary and language composition, persist the results and the
normalized daily language trend, and report progress along the way.
"""

import asyncio
import datetime as dt
import logging
import time
from typing import Any, Callable, Optional

from daily_git_brief.core.config import Settings
from daily_git_brief.data_collection.aggregation import LanguageTrendAccumulator
from daily_git_brief.data_collection.collectors.base import CodeHostClient, Summarizer, TrendSource
from daily_git_brief.database.services.trends import TrendStore
from daily_git_brief.domain.models import (
    CandidateRepo,
    LanguageShare,
    PersistedRepoRecord,
    ProgressEvent,
    RepoLanguageRow,
)
from daily_git_brief.exceptions import CollectionError


def utc_today() -> dt.date:
    return dt.datetime.now(dt.timezone.utc).date()


class CollectionOrchestrator:
    """Runs the daily collection pipeline over the injected collaborators"""

    def __init__(
        self,
        trend_source: TrendSource,
        code_host: CodeHostClient,
        summarizer: Summarizer,
        store: TrendStore,
        settings: Settings,
        metrics: Optional[Any] = None,
        clock: Callable[[], dt.date] = utc_today,
    ):
        self.trend_source = trend_source
        self.code_host = code_host
        self.summarizer = summarizer
        self.store = store
        self.settings = settings
        self.metrics = metrics
        self.clock = clock
        self.logger = logging.getLogger("collection_orchestrator")

    async def run(self, progress_sink: Optional[Any] = None) -> int:
        """Run one collection and return the number of repos persisted.

        Raises:
            CollectionError: if the trending candidate set cannot be fetched.
        """
        today = self.clock()
        start_time = time.monotonic()
        self.logger.info(f"Starting data collection for {today.isoformat()}")

        try:
            candidates = await self.trend_source.fetch_trending()
        except Exception as e:
            self.logger.error(f"Failed to fetch trending repos: {e}")
            self._record_run("error", time.monotonic() - start_time, 0)
            raise CollectionError(f"could not fetch trending repos: {e}") from e

        total = len(candidates)
        self.logger.info(f"Fetched {total} repos from OSS Insight")
        self._publish(
            progress_sink,
            ProgressEvent(
                is_running=True,
                message=f"Fetched {total} repos from OSS Insight",
                current_count=0,
                total_count=total,
            ),
        )

        skip_ids = await self._resolve_skip_set(today)
        accumulator = LanguageTrendAccumulator()
        collected_count = 0

        for index, candidate in enumerate(candidates, start=1):
            if candidate.repo_id in skip_ids:
                self.logger.info(f"Skipping {candidate.repo_name} (already has summary)")
                continue

            if await self._process_candidate(candidate, today, accumulator):
                collected_count += 1

            # Courtesy delay towards the external APIs' rate limits
            await asyncio.sleep(self.settings.collection_delay_seconds)

            self._publish(
                progress_sink,
                ProgressEvent(
                    is_running=True,
                    message=f"Processed {candidate.repo_name}",
                    current_count=index,
                    total_count=total,
                ),
            )

        await self._save_language_trends(accumulator, today)

        self.logger.info(f"Data collection complete. Collected {collected_count} repos.")
        self._publish(
            progress_sink,
            ProgressEvent(
                is_running=False,
                message=f"Collection complete. Collected {collected_count} repos.",
                current_count=total,
                total_count=total,
            ),
        )
        self._record_run("success", time.monotonic() - start_time, collected_count)
        return collected_count

    async def _resolve_skip_set(self, today: dt.date) -> set[int]:
        try:
            skip_ids = set(await self.store.existing_summarized_ids(today))
        except Exception as e:
            self.logger.warning(f"Failed to load already summarized repos, processing all: {e}")
            return set()
        if skip_ids:
            self.logger.info(f"Skipping {len(skip_ids)} repos that already have summaries")
        return skip_ids

    async def _process_candidate(
        self, candidate: CandidateRepo, today: dt.date, accumulator: LanguageTrendAccumulator
    ) -> bool:
        """Enrich and persist one candidate. Returns True if its record was saved."""
        repo_name = candidate.repo_name

        summary = await self._summarize(repo_name)
        languages = await self._fetch_languages(repo_name)

        for share in languages:
            row = RepoLanguageRow(
                date=today, repo_id=candidate.repo_id, language=share.language, percentage=share.percentage
            )
            try:
                await self.store.upsert_language_row(row)
            except Exception as e:
                self.logger.warning(f"Failed to save language {share.language} for {repo_name}: {e}")
                self._record_degraded("save_language")

        accumulator.fold(languages)

        record = PersistedRepoRecord.from_candidate(candidate, today, summary)
        try:
            await self.store.upsert_repo_record(record)
        except Exception as e:
            self.logger.warning(f"Failed to save trending repo {repo_name}: {e}")
            self._record_degraded("save_repo")
            return False
        return True

    async def _summarize(self, repo_name: str) -> Optional[str]:
        try:
            readme = await self.code_host.fetch_readme(repo_name)
        except Exception as e:
            self.logger.warning(f"Failed to fetch README for {repo_name}: {e}")
            self._record_degraded("readme")
            return None
        if not readme:
            return None

        try:
            return await self.summarizer.summarize(readme, repo_name)
        except Exception as e:
            self.logger.warning(f"Failed to summarize README for {repo_name}: {e}")
            self._record_degraded("summary")
            return None

    async def _fetch_languages(self, repo_name: str) -> list[LanguageShare]:
        try:
            return list(await self.code_host.fetch_languages(repo_name, self.settings.language_threshold))
        except Exception as e:
            self.logger.warning(f"Failed to fetch languages for {repo_name}: {e}")
            self._record_degraded("languages")
            return []

    async def _save_language_trends(self, accumulator: LanguageTrendAccumulator, today: dt.date) -> None:
        trends = accumulator.normalize(today)
        if not trends:
            self.logger.info("No language data collected; skipping daily language trends")
            return

        saved = 0
        for trend in trends:
            try:
                await self.store.upsert_language_trend(trend)
                saved += 1
            except Exception as e:
                self.logger.warning(f"Failed to save language trend for {trend.language}: {e}")
                self._record_degraded("save_trend")
        self.logger.info(f"Saved {saved} language trends")

    def _publish(self, progress_sink: Optional[Any], event: ProgressEvent) -> None:
        if progress_sink is None:
            return
        try:
            progress_sink.publish(event)
        except Exception:
            self.logger.debug("Progress sink rejected event", exc_info=True)

    def _record_degraded(self, step: str) -> None:
        if self.metrics:
            self.metrics.record_degraded_step(step)

    def _record_run(self, status: str, duration: float, collected: int) -> None:
        if self.metrics:
            self.metrics.record_collection_run(status, duration, collected)
