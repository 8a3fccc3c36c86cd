"""LLM-facing abstractions for translation and social hooks.

This package defines prompt templates, the translator and hook writer
interfaces, the OpenAI HTTP clients, and request pacing.
"""

from .hooks import HookWriter, OpenAIHookWriter, fit_hook_length
from .openai_client import OpenAIChatClient, OpenAIProviderError, OpenAISpeechClient
from .prompts import PromptLibrary
from .rate_limiter import RateLimiter
from .translator import OpenAITranslator, TranslatedArticle, Translator

__all__ = [
    "HookWriter",
    "OpenAIChatClient",
    "OpenAIHookWriter",
    "OpenAIProviderError",
    "OpenAISpeechClient",
    "OpenAITranslator",
    "PromptLibrary",
    "RateLimiter",
    "TranslatedArticle",
    "Translator",
    "fit_hook_length",
]
