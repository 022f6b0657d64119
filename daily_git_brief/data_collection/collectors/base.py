"""
Base classes for the external sources used by a collection run.

The orchestrator only depends on the three abstract collaborators below;
the aiohttp implementations live next to this module.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Optional
import asyncio
import logging

import aiohttp

from daily_git_brief.domain.models import CandidateRepo, LanguageShare
from daily_git_brief.exceptions import CollectorError


class TrendSource(ABC):
    """Delivers the ordered candidate set for today."""

    @abstractmethod
    async def fetch_trending(self) -> List[CandidateRepo]:
        """Return today's trending repositories.

        Raises:
            CollectorError: if the candidate set cannot be fetched at all.
        """


class CodeHostClient(ABC):
    """Repository content and language statistics from the code host."""

    @abstractmethod
    async def fetch_readme(self, repo_name: str) -> Optional[str]:
        """Return README text, or None if the repository has none."""

    @abstractmethod
    async def fetch_languages(self, repo_name: str, threshold: float) -> List[LanguageShare]:
        """Return language shares at or above ``threshold`` (a 0-1 fraction)."""


class Summarizer(ABC):
    """Turns a README into a short natural-language summary."""

    @abstractmethod
    async def summarize(self, document: str, repo_name: str) -> Optional[str]:
        """Return a summary, or None on any upstream failure. Never raises."""


class HttpCollector:
    """Shared aiohttp session handling for collectors.

    The session is created lazily so collectors can be built at import/wiring
    time and only connect once a run starts.
    """

    def __init__(self, name: str, timeout_seconds: float):
        self.name = name
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self.session: Optional[aiohttp.ClientSession] = None
        self.logger = logging.getLogger(f"collector.{name}")

    async def initialize(self):
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(timeout=self.timeout)

    async def cleanup(self):
        if self.session and not self.session.closed:
            await self.session.close()
        self.session = None

    async def _get_session(self) -> aiohttp.ClientSession:
        await self.initialize()
        return self.session

    async def _get_json(self, url: str, headers: Optional[dict] = None) -> Any:
        """GET ``url`` and decode JSON, raising CollectorError on any failure."""
        session = await self._get_session()
        try:
            async with session.get(url, headers=headers) as response:
                response.raise_for_status()
                return await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise CollectorError(self.name, f"GET {url} failed: {e}", e) from e
