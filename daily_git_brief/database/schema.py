"""
Database Schema
SQLAlchemy models for trending repositories and language statistics
"""

from sqlalchemy import BigInteger, Column, Date, Float, Index, Integer, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class TrendingRepo(Base):
    __tablename__ = "trending_repos"

    date = Column(Date, primary_key=True)
    repo_id = Column(BigInteger, primary_key=True)
    repo_name = Column(String(255), nullable=False)
    primary_language = Column(String(100))
    description = Column(Text)
    summary = Column(Text)
    stars = Column(Integer)
    forks = Column(Integer)
    pull_requests = Column(Integer)
    pushes = Column(Integer)
    total_score = Column(Float)
    contributor_logins = Column(Text)
    collection_names = Column(Text)

    __table_args__ = (Index("idx_trending_date", "date"),)


class RepoLanguage(Base):
    __tablename__ = "repo_languages"

    date = Column(Date, primary_key=True)
    repo_id = Column(BigInteger, primary_key=True)
    language = Column(String(100), primary_key=True)
    percentage = Column(Float, nullable=False)

    __table_args__ = (Index("idx_languages_date", "date"),)


class DailyLanguageTrend(Base):
    __tablename__ = "daily_language_trends"

    date = Column(Date, primary_key=True)
    language = Column(String(100), primary_key=True)
    normalized_percentage = Column(Float, nullable=False)
    repo_count = Column(Integer, nullable=False)

    __table_args__ = (Index("idx_trends_date", "date"),)
