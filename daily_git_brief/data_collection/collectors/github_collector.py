"""
GitHub code-host client
README retrieval and language composition for trending repositories
"""

import asyncio
from typing import Mapping, Optional

import aiohttp

from daily_git_brief.core.config import Settings
from daily_git_brief.domain.models import LanguageShare
from daily_git_brief.exceptions import CollectorError
from .base import CodeHostClient, HttpCollector

GITHUB_API_ACCEPT_HEADER = "application/vnd.github+json"
REPO_ENDPOINT_TEMPLATE = "/repos/{full_name}"
LANGUAGES_ENDPOINT_TEMPLATE = "/repos/{full_name}/languages"
RAW_README_TEMPLATE = "{raw}/{full_name}/{branch}/{filename}"
README_FILENAMES = ("README.md", "readme.md", "Readme.md")


def compute_language_shares(language_bytes: Mapping[str, int], threshold: float) -> list[LanguageShare]:
    """Turn GitHub's ``{language: bytes}`` map into percentage shares.

    Shares below ``threshold * 100`` percent are dropped; the rest are sorted
    by percentage, largest first. An empty or all-zero map yields no shares.
    """
    total = sum(language_bytes.values())
    if total <= 0:
        return []

    cutoff = threshold * 100.0
    shares = [
        LanguageShare(language=language, percentage=(count / total) * 100.0)
        for language, count in language_bytes.items()
    ]
    shares = [share for share in shares if share.percentage >= cutoff]
    shares.sort(key=lambda share: share.percentage, reverse=True)
    return shares


def truncate_readme(content: str, max_chars: int) -> str:
    return content if len(content) <= max_chars else content[:max_chars]


class GitHubCollector(HttpCollector, CodeHostClient):
    """Code-host client for the GitHub REST API and raw.githubusercontent.com"""

    def __init__(self, settings: Settings):
        super().__init__("github", settings.request_timeout_seconds)
        self.api_url = settings.github_api_url.rstrip("/")
        self.raw_url = settings.github_raw_url.rstrip("/")
        self.token = settings.github_token or None
        self.user_agent = settings.github_user_agent
        self.readme_max_chars = settings.readme_max_chars

    def headers(self) -> dict[str, str]:
        headers = {"Accept": GITHUB_API_ACCEPT_HEADER, "User-Agent": self.user_agent}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def fetch_languages(self, repo_name: str, threshold: float) -> list[LanguageShare]:
        url = f"{self.api_url}{LANGUAGES_ENDPOINT_TEMPLATE.format(full_name=repo_name)}"
        session = await self._get_session()
        try:
            async with session.get(url, headers=self.headers()) as response:
                if response.status != 200:
                    self.logger.warning(f"Failed to fetch languages for {repo_name}: HTTP {response.status}")
                    return []
                languages = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise CollectorError(self.name, f"languages request for {repo_name} failed: {e}", e) from e

        if not isinstance(languages, dict):
            raise CollectorError(self.name, f"unexpected languages payload for {repo_name}")

        shares = compute_language_shares(languages, threshold)
        self.logger.info(f"Found {len(shares)} languages above {threshold * 100:g}% for {repo_name}")
        return shares

    async def fetch_readme(self, repo_name: str) -> Optional[str]:
        branch = await self._fetch_default_branch(repo_name)
        if branch is None:
            return None

        session = await self._get_session()
        for filename in README_FILENAMES:
            url = RAW_README_TEMPLATE.format(
                raw=self.raw_url, full_name=repo_name, branch=branch, filename=filename
            )
            try:
                async with session.get(url, headers={"User-Agent": self.user_agent}) as response:
                    if response.status != 200:
                        continue
                    content = await response.text(errors="replace")
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                raise CollectorError(self.name, f"README request for {repo_name} failed: {e}", e) from e

            readme = truncate_readme(content, self.readme_max_chars)
            self.logger.info(f"Fetched README for {repo_name} ({len(readme)} chars)")
            return readme

        self.logger.warning(f"No README found for {repo_name}")
        return None

    async def _fetch_default_branch(self, repo_name: str) -> Optional[str]:
        url = f"{self.api_url}{REPO_ENDPOINT_TEMPLATE.format(full_name=repo_name)}"
        session = await self._get_session()
        try:
            async with session.get(url, headers=self.headers()) as response:
                if response.status != 200:
                    self.logger.warning(f"Failed to fetch repo info for {repo_name}: HTTP {response.status}")
                    return None
                info = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise CollectorError(self.name, f"repo info request for {repo_name} failed: {e}", e) from e

        branch = info.get("default_branch") if isinstance(info, dict) else None
        if not branch:
            raise CollectorError(self.name, f"repo info for {repo_name} has no default_branch")
        return branch
