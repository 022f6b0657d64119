"""
OSS Insight trend source
Fetches the daily trending repository list from the OSS Insight public API
"""

from typing import Any

from daily_git_brief.core.config import Settings
from daily_git_brief.domain.models import CandidateRepo
from daily_git_brief.exceptions import CollectorError
from .base import HttpCollector, TrendSource

TRENDING_ENDPOINT = "/v1/trends/repos/"


def parse_trending_rows(payload: Any) -> list[CandidateRepo]:
    """Convert an OSS Insight response body into candidates, keeping row order.

    The API answers ``{"type": "sql_endpoint", "data": {"columns": [...], "rows": [...]}}``
    with every value encoded as a string.
    """
    if not isinstance(payload, dict) or not isinstance(payload.get("data"), dict):
        raise CollectorError("oss_insight", "response has no 'data' object")

    rows = payload["data"].get("rows")
    if not isinstance(rows, list):
        raise CollectorError("oss_insight", "response has no 'data.rows' list")

    candidates = []
    for row in rows:
        if not isinstance(row, dict) or not row.get("repo_name"):
            raise CollectorError("oss_insight", f"malformed trending row: {row!r}")
        candidates.append(CandidateRepo(**row))
    return candidates


class OssInsightCollector(HttpCollector, TrendSource):
    """Trend source backed by api.ossinsight.io"""

    def __init__(self, settings: Settings):
        super().__init__("oss_insight", settings.request_timeout_seconds)
        self.base_url = settings.oss_insight_base_url.rstrip("/")

    async def fetch_trending(self) -> list[CandidateRepo]:
        url = f"{self.base_url}{TRENDING_ENDPOINT}"
        self.logger.info("Fetching trending repos from OSS Insight API")

        payload = await self._get_json(url, headers={"Accept": "application/json"})
        candidates = parse_trending_rows(payload)

        self.logger.info(f"Fetched {len(candidates)} trending repos")
        return candidates
