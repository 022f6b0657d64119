"""
README summarizer backed by an OpenAI-compatible chat completions API (DeepSeek)
"""

from typing import Any, Optional

from daily_git_brief.core.config import Settings
from .base import HttpCollector, Summarizer

CHAT_COMPLETIONS_ENDPOINT = "/chat/completions"

SYSTEM_PROMPT = """You are a technical documentation summarizer.
Your task is to summarize GitHub README content in Korean.
Focus on:
1. 프로젝트가 무엇인지 (What it does)
2. 주요 기능 (Key features)
3. 기술 스택 (Tech stack if mentioned)

Rules:
- Keep the summary under 200 characters
- Use Korean language only
- Be concise and informative
- Do not include markdown formatting
- Do not include links or code"""

USER_PROMPT_TEMPLATE = "Summarize this README for the repository '{repo_name}' in Korean:\n\n{readme}"


def build_chat_request(model: str, document: str, repo_name: str, max_tokens: int) -> dict[str, Any]:
    return {
        "model": model,
        "messages": [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": USER_PROMPT_TEMPLATE.format(repo_name=repo_name, readme=document)},
        ],
        "max_tokens": max_tokens,
    }


def extract_summary(completion: Any) -> Optional[str]:
    """First choice's message content, stripped; None if missing or blank."""
    if not isinstance(completion, dict):
        return None
    choices = completion.get("choices") or []
    if not choices:
        return None
    content = (choices[0].get("message") or {}).get("content")
    if not isinstance(content, str):
        return None
    return content.strip() or None


class LlmSummarizer(HttpCollector, Summarizer):
    """Korean README summaries via DeepSeek (or any OpenAI-compatible endpoint)"""

    def __init__(self, settings: Settings):
        super().__init__("llm_summarizer", settings.request_timeout_seconds)
        self.base_url = settings.deepseek_base_url.rstrip("/")
        self.api_key = settings.deepseek_api_key
        self.model = settings.deepseek_model
        self.max_tokens = settings.summary_max_tokens

    async def summarize(self, document: str, repo_name: str) -> Optional[str]:
        if not self.api_key:
            self.logger.warning(f"No summarizer API key configured; skipping summary for {repo_name}")
            return None

        url = f"{self.base_url}{CHAT_COMPLETIONS_ENDPOINT}"
        headers = {"Authorization": f"Bearer {self.api_key}", "Content-Type": "application/json"}
        body = build_chat_request(self.model, document, repo_name, self.max_tokens)

        try:
            session = await self._get_session()
            async with session.post(url, json=body, headers=headers) as response:
                if response.status != 200:
                    error_text = await response.text()
                    self.logger.warning(f"LLM API error for {repo_name}: {response.status} - {error_text}")
                    return None
                completion = await response.json(content_type=None)
        except Exception as e:  # noqa: BLE001 - summarizer failures never reach the caller
            self.logger.warning(f"LLM request failed for {repo_name}: {e}")
            return None

        summary = extract_summary(completion)
        if summary is None:
            self.logger.warning(f"No completion choices returned for {repo_name}")
            return None

        self.logger.info(f"Generated summary for {repo_name} ({len(summary)} chars)")
        return summary
