"""In-memory fakes for the collection pipeline's collaborators."""

import datetime as dt
from typing import Iterable, Optional

from daily_git_brief.data_collection.collectors.base import CodeHostClient, Summarizer, TrendSource
from daily_git_brief.data_collection.collectors.github_collector import compute_language_shares
from daily_git_brief.domain.models import CandidateRepo, LanguageTrend, PersistedRepoRecord, RepoLanguageRow
from daily_git_brief.exceptions import CollectorError, StoreError

RUN_DATE = dt.date(2024, 5, 1)


class FakeTrendSource(TrendSource):
    def __init__(self, candidates: Iterable[CandidateRepo] = (), error: Optional[Exception] = None):
        self.candidates = list(candidates)
        self.error = error
        self.calls = 0

    async def fetch_trending(self):
        self.calls += 1
        if self.error:
            raise self.error
        return list(self.candidates)


class FakeCodeHost(CodeHostClient):
    """README and language bytes per repo name, with injectable failures."""

    def __init__(self, readmes=None, language_bytes=None, readme_errors=(), language_errors=()):
        self.readmes = readmes or {}
        self.language_bytes = language_bytes or {}
        self.readme_errors = set(readme_errors)
        self.language_errors = set(language_errors)
        self.readme_calls: list[str] = []

    async def fetch_readme(self, repo_name):
        self.readme_calls.append(repo_name)
        if repo_name in self.readme_errors:
            raise CollectorError("github", f"README request for {repo_name} failed")
        return self.readmes.get(repo_name)

    async def fetch_languages(self, repo_name, threshold):
        if repo_name in self.language_errors:
            raise CollectorError("github", f"languages request for {repo_name} failed")
        return compute_language_shares(self.language_bytes.get(repo_name, {}), threshold)


class FakeSummarizer(Summarizer):
    def __init__(self, failing=()):
        self.failing = set(failing)
        self.calls: list[str] = []

    async def summarize(self, document, repo_name):
        self.calls.append(repo_name)
        if repo_name in self.failing:
            return None
        return f"summary of {repo_name}"


class InMemoryStore:
    """Dict-backed stand-in for TrendStore with the same upsert semantics."""

    def __init__(self):
        self.repos: dict[tuple, PersistedRepoRecord] = {}
        self.languages: dict[tuple, RepoLanguageRow] = {}
        self.trends: dict[tuple, LanguageTrend] = {}
        self.fail_skip_query = False
        self.fail_repo_ids: set[int] = set()
        self.fail_reads = False

    async def existing_summarized_ids(self, date):
        if self.fail_skip_query:
            raise StoreError("store unavailable")
        return {repo_id for (day, repo_id), rec in self.repos.items() if day == date and rec.summary is not None}

    async def upsert_repo_record(self, record):
        if record.repo_id in self.fail_repo_ids:
            raise StoreError(f"cannot write repo {record.repo_id}")
        self.repos[(record.date, record.repo_id)] = record

    async def upsert_language_row(self, row):
        self.languages[(row.date, row.repo_id, row.language)] = row

    async def upsert_language_trend(self, trend):
        self.trends[(trend.date, trend.language)] = trend

    async def get_trending_repos(self, date):
        if self.fail_reads:
            raise StoreError("store unavailable")
        records = [rec for (day, _), rec in self.repos.items() if day == date]
        return sorted(records, key=lambda rec: rec.total_score or 0.0, reverse=True)

    async def get_repo_languages(self, date, repo_id):
        rows = [row for (day, rid, _), row in self.languages.items() if day == date and rid == repo_id]
        return sorted(rows, key=lambda row: row.percentage, reverse=True)

    async def get_daily_language_trends(self, date):
        if self.fail_reads:
            raise StoreError("store unavailable")
        trends = [trend for (day, _), trend in self.trends.items() if day == date]
        return sorted(trends, key=lambda trend: trend.normalized_percentage, reverse=True)

    async def get_weekly_language_trends(self, end_date):
        start = end_date - dt.timedelta(days=7)
        grouped: dict[str, list[LanguageTrend]] = {}
        for (day, language), trend in self.trends.items():
            if start <= day <= end_date:
                grouped.setdefault(language, []).append(trend)
        result = [
            LanguageTrend(
                date=end_date,
                language=language,
                normalized_percentage=sum(t.normalized_percentage for t in items) / len(items),
                repo_count=sum(t.repo_count for t in items),
            )
            for language, items in grouped.items()
        ]
        return sorted(result, key=lambda trend: trend.normalized_percentage, reverse=True)


class RecordingSink:
    def __init__(self):
        self.events = []

    def publish(self, event):
        self.events.append(event)


class FakeDatabaseManager:
    def __init__(self):
        self.initialized = False
        self.closed = False

    async def initialize(self):
        self.initialized = True

    async def close(self):
        self.closed = True


def make_candidate(repo_id: int, name: str, score: float = 100.0, **extra) -> CandidateRepo:
    return CandidateRepo(repo_id=str(repo_id), repo_name=name, total_score=str(score), **extra)

