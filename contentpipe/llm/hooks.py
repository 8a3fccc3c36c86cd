"""Social hook writing for published content.

Responsibilities:
- Define a protocol for social hook writers.
- Provide an OpenAI-backed writer that drafts a hook from a row's title and lead paragraph.
- Fit hooks to a per-language character limit.
"""

from __future__ import annotations

from typing import Protocol

from .openai_client import OpenAIChatClient
from .prompts import PromptLibrary
from .rate_limiter import RateLimiter


_ELLIPSIS = "..."
_KEY_INSIGHT_FALLBACK_CHARS = 200


class HookWriter(Protocol):
    """Protocol for social hook providers."""

    def write_hook(self, title: str, body: str, language: str) -> str:
        """Write one social hook for an article in `language`."""


def key_insight(body: str) -> str:
    """Return the first non-blank paragraph of `body`, or its opening characters."""

    for paragraph in body.split("\n\n"):
        if paragraph.strip():
            return paragraph.strip()
    return body[:_KEY_INSIGHT_FALLBACK_CHARS].strip()


def fit_hook_length(hook: str, max_length: int) -> str:
    """Shorten `hook` to at most `max_length` characters, ending with an ellipsis.

    The cut falls on the last space when that keeps more than 80% of the allowed
    text; otherwise the hook is cut mid-word.
    """

    hook = hook.strip()
    if len(hook) <= max_length:
        return hook
    if max_length <= len(_ELLIPSIS):
        return hook[:max_length]
    room = max_length - len(_ELLIPSIS)
    truncated = hook[:room]
    last_space = truncated.rfind(" ")
    if last_space > room * 0.8:
        truncated = truncated[:last_space]
    return truncated.rstrip() + _ELLIPSIS


class OpenAIHookWriter:
    """OpenAI-backed social hook writer."""

    def __init__(
        self,
        model: str = "gpt-4.1-mini",
        api_key: str | None = None,
        rate_limiter: RateLimiter | None = None,
        client: OpenAIChatClient | None = None,
    ) -> None:
        """Initialize writer settings and OpenAI client dependencies."""

        self.model = model
        self.client = client if client is not None else OpenAIChatClient(api_key=api_key)
        self.rate_limiter = rate_limiter
        self.prompts = PromptLibrary()

    def write_hook(self, title: str, body: str, language: str) -> str:
        """Draft one hook with a single chat-completions request."""

        if self.rate_limiter is not None:
            self.rate_limiter.acquire(f"hook:{language}")
        return self.client.chat_completion_text(
            model=self.model,
            system_prompt=self.prompts.social_hook_system_prompt(),
            user_prompt=self.prompts.social_hook_prompt(title, key_insight(body), language),
            temperature=0.7,
        ).strip()
