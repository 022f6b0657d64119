"""
Database service for trending repositories and language statistics.

All writes are upserts keyed by the table's natural primary key, so repeating
a write is harmless.
"""

from __future__ import annotations

import datetime as dt

from ..manager import DatabaseManager
from daily_git_brief.domain.models import LanguageTrend, PersistedRepoRecord, RepoLanguageRow

REPO_COLUMNS = (
    "date",
    "repo_id",
    "repo_name",
    "primary_language",
    "description",
    "summary",
    "stars",
    "forks",
    "pull_requests",
    "pushes",
    "total_score",
    "contributor_logins",
    "collection_names",
)

_UPSERT_REPO = f"""
INSERT INTO trending_repos ({", ".join(REPO_COLUMNS)})
VALUES ({", ".join(f"${i + 1}" for i in range(len(REPO_COLUMNS)))})
ON CONFLICT (date, repo_id) DO UPDATE SET
    {", ".join(f"{col} = EXCLUDED.{col}" for col in REPO_COLUMNS[2:])}
"""

_UPSERT_LANGUAGE_ROW = """
INSERT INTO repo_languages (date, repo_id, language, percentage)
VALUES ($1, $2, $3, $4)
ON CONFLICT (date, repo_id, language) DO UPDATE SET percentage = EXCLUDED.percentage
"""

_UPSERT_LANGUAGE_TREND = """
INSERT INTO daily_language_trends (date, language, normalized_percentage, repo_count)
VALUES ($1, $2, $3, $4)
ON CONFLICT (date, language) DO UPDATE SET
    normalized_percentage = EXCLUDED.normalized_percentage,
    repo_count = EXCLUDED.repo_count
"""

_SELECT_SUMMARIZED_IDS = """
SELECT repo_id FROM trending_repos WHERE date = $1 AND summary IS NOT NULL
"""

_SELECT_TRENDING_REPOS = f"""
SELECT {", ".join(REPO_COLUMNS)}
FROM trending_repos
WHERE date = $1
ORDER BY total_score DESC NULLS LAST
"""

_SELECT_REPO_LANGUAGES = """
SELECT date, repo_id, language, percentage
FROM repo_languages
WHERE date = $1 AND repo_id = $2
ORDER BY percentage DESC
"""

_SELECT_DAILY_TRENDS = """
SELECT date, language, normalized_percentage, repo_count
FROM daily_language_trends
WHERE date = $1
ORDER BY normalized_percentage DESC
"""

# Window covers end_date and the seven days before it
_SELECT_WEEKLY_TRENDS = """
SELECT $1::date AS date,
       language,
       AVG(normalized_percentage) AS normalized_percentage,
       SUM(repo_count)::int AS repo_count
FROM daily_language_trends
WHERE date >= $1::date - 7 AND date <= $1::date
GROUP BY language
ORDER BY normalized_percentage DESC
"""


class TrendStore:
    """Persistence for trending_repos, repo_languages and daily_language_trends"""

    def __init__(self, db: DatabaseManager):
        self.db = db

    async def existing_summarized_ids(self, date: dt.date) -> set[int]:
        """Repo ids already carrying a summary for ``date``"""
        rows = await self.db.execute_query(_SELECT_SUMMARIZED_IDS, date)
        return {int(row["repo_id"]) for row in rows}

    async def upsert_repo_record(self, record: PersistedRepoRecord) -> None:
        values = record.model_dump()
        await self.db.execute(_UPSERT_REPO, *(values[col] for col in REPO_COLUMNS))

    async def upsert_language_row(self, row: RepoLanguageRow) -> None:
        await self.db.execute(_UPSERT_LANGUAGE_ROW, row.date, row.repo_id, row.language, row.percentage)

    async def upsert_language_trend(self, trend: LanguageTrend) -> None:
        await self.db.execute(
            _UPSERT_LANGUAGE_TREND, trend.date, trend.language, trend.normalized_percentage, trend.repo_count
        )

    async def get_trending_repos(self, date: dt.date) -> list[PersistedRepoRecord]:
        rows = await self.db.execute_query(_SELECT_TRENDING_REPOS, date)
        return [PersistedRepoRecord(**row) for row in rows]

    async def get_repo_languages(self, date: dt.date, repo_id: int) -> list[RepoLanguageRow]:
        rows = await self.db.execute_query(_SELECT_REPO_LANGUAGES, date, repo_id)
        return [RepoLanguageRow(**row) for row in rows]

    async def get_daily_language_trends(self, date: dt.date) -> list[LanguageTrend]:
        rows = await self.db.execute_query(_SELECT_DAILY_TRENDS, date)
        return [LanguageTrend(**row) for row in rows]

    async def get_weekly_language_trends(self, end_date: dt.date) -> list[LanguageTrend]:
        rows = await self.db.execute_query(_SELECT_WEEKLY_TRENDS, end_date)
        return [LanguageTrend(**row) for row in rows]
