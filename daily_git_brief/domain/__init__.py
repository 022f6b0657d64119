"""
Domain Module
Pydantic models shared by collectors, store and API
"""

from .models import (
    CandidateRepo,
    LanguageShare,
    LanguageTrend,
    PersistedRepoRecord,
    ProgressEvent,
    RepoLanguageRow,
)

__all__ = [
    "CandidateRepo",
    "LanguageShare",
    "LanguageTrend",
    "PersistedRepoRecord",
    "ProgressEvent",
    "RepoLanguageRow",
]
