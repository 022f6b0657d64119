"""
Domain models for trending repositories, language statistics and run progress.
"""

from __future__ import annotations

import datetime as dt
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _parse_optional_int(value: Any) -> Optional[int]:
    """Integer metrics arrive as strings; anything unparsable becomes None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def _parse_optional_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).strip())
    except ValueError:
        return None


class CandidateRepo(BaseModel):
    """One row of the trend source for the current run."""

    model_config = ConfigDict(frozen=True)

    repo_id: int
    repo_name: str
    primary_language: Optional[str] = None
    description: Optional[str] = None
    stars: Optional[int] = None
    forks: Optional[int] = None
    pull_requests: Optional[int] = None
    pushes: Optional[int] = None
    total_score: Optional[float] = None
    contributor_logins: Optional[str] = None
    collection_names: Optional[str] = None

    @field_validator("repo_id", mode="before")
    @classmethod
    def parse_repo_id(cls, v):
        parsed = _parse_optional_int(v)
        return parsed if parsed is not None else 0

    @field_validator("stars", "forks", "pull_requests", "pushes", mode="before")
    @classmethod
    def parse_metric(cls, v):
        return _parse_optional_int(v)

    @field_validator("total_score", mode="before")
    @classmethod
    def parse_score(cls, v):
        return _parse_optional_float(v)


class LanguageShare(BaseModel):
    """A language and its share (0-100) of a repository's measured bytes."""

    language: str
    percentage: float = Field(ge=0, le=100)


class PersistedRepoRecord(BaseModel):
    """Durable row in trending_repos, keyed by (date, repo_id)."""

    date: dt.date
    repo_id: int
    repo_name: str
    primary_language: Optional[str] = None
    description: Optional[str] = None
    summary: Optional[str] = None
    stars: Optional[int] = None
    forks: Optional[int] = None
    pull_requests: Optional[int] = None
    pushes: Optional[int] = None
    total_score: Optional[float] = None
    contributor_logins: Optional[str] = None
    collection_names: Optional[str] = None

    @classmethod
    def from_candidate(
        cls, candidate: CandidateRepo, date: dt.date, summary: Optional[str]
    ) -> "PersistedRepoRecord":
        return cls(date=date, summary=summary, **candidate.model_dump())


class RepoLanguageRow(BaseModel):
    """Durable row in repo_languages, keyed by (date, repo_id, language)."""

    date: dt.date
    repo_id: int
    language: str
    percentage: float


class LanguageTrend(BaseModel):
    """Durable row in daily_language_trends, keyed by (date, language)."""

    date: dt.date
    language: str
    normalized_percentage: float
    repo_count: int


class ProgressEvent(BaseModel):
    """Transient collection status; published to observers, never stored."""

    is_running: bool
    message: str
    current_count: int = 0
    total_count: int = 0

    @classmethod
    def idle(cls) -> "ProgressEvent":
        return cls(is_running=False, message="No collection has run yet")
