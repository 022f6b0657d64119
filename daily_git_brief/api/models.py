"""
API Models
Pydantic models for API requests and responses
"""

from typing import Any, Optional

from pydantic import BaseModel


class APIResponse(BaseModel):
    """Standard API response envelope"""

    success: bool
    data: Optional[Any] = None
    error: Optional[str] = None
    execution_time_ms: Optional[float] = None


class LanguageInfo(BaseModel):
    language: str
    percentage: float


class TrendingRepoResponse(BaseModel):
    """One ranked trending repository with its language breakdown"""

    rank: int
    repo_id: int
    repo_name: str
    github_url: str
    primary_language: Optional[str] = None
    languages: list[LanguageInfo] = []
    description: Optional[str] = None
    summary: Optional[str] = None
    stars: Optional[int] = None
    forks: Optional[int] = None
    total_score: Optional[float] = None


class CollectResponse(BaseModel):
    message: str
    collected_count: int = 0
