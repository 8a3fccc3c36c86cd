"""Translation interfaces and provider integrations.

Responsibilities:
- Define a protocol for article translation implementations.
- Provide an OpenAI-backed translator for titles and Markdown bodies.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from .openai_client import OpenAIChatClient
from .prompts import PromptLibrary
from .rate_limiter import RateLimiter


@dataclass(frozen=True, slots=True)
class TranslatedArticle:
    """Translated title and body for one target language."""

    title: str
    body: str


class Translator(Protocol):
    """Protocol for translation providers."""

    def translate(self, title: str, body: str, target_language: str) -> TranslatedArticle:
        """Translate one article into the target language."""


class OpenAITranslator:
    """OpenAI-backed translator for article titles and bodies."""

    def __init__(
        self,
        model: str = "gpt-4.1-mini",
        api_key: str | None = None,
        rate_limiter: RateLimiter | None = None,
        client: OpenAIChatClient | None = None,
    ) -> None:
        """Initialize translator settings and OpenAI client dependencies."""

        self.model = model
        self.client = client if client is not None else OpenAIChatClient(api_key=api_key)
        self.rate_limiter = rate_limiter
        self.prompts = PromptLibrary()

    def translate(self, title: str, body: str, target_language: str) -> TranslatedArticle:
        """Translate title and body with two chat-completions requests."""

        translated_title = self._complete(
            self.prompts.translate_title_prompt(title, target_language), target_language
        )
        translated_body = self._complete(
            self.prompts.translate_body_prompt(body, target_language), target_language
        )
        return TranslatedArticle(
            title=translated_title.splitlines()[0].strip(),
            body=translated_body,
        )

    def _complete(self, user_prompt: str, pacing_key: str) -> str:
        """Run one paced chat-completions request."""

        if self.rate_limiter is not None:
            self.rate_limiter.acquire(f"translate:{pacing_key}")
        return self.client.chat_completion_text(
            model=self.model,
            system_prompt=self.prompts.translation_system_prompt(),
            user_prompt=user_prompt,
            temperature=0.0,
        )
