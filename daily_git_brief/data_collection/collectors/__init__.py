"""
Data Collection Collectors Package

External sources used by a collection run: trend source, code host, summarizer.
"""

from .base import CodeHostClient, HttpCollector, Summarizer, TrendSource
from .github_collector import GitHubCollector
from .llm_summarizer import LlmSummarizer
from .oss_insight_collector import OssInsightCollector

__all__ = [
    "TrendSource",
    "CodeHostClient",
    "Summarizer",
    "HttpCollector",
    "OssInsightCollector",
    "GitHubCollector",
    "LlmSummarizer",
]
