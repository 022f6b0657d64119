"""
Database Module
SQLAlchemy schema, database manager and trend store
"""

from .manager import DatabaseManager
from .schema import Base, DailyLanguageTrend, RepoLanguage, TrendingRepo
from .services.trends import TrendStore

__all__ = [
    "DatabaseManager",
    "TrendStore",
    "Base",
    "TrendingRepo",
    "RepoLanguage",
    "DailyLanguageTrend",
]
