"""Prompt templates for translation and social hook requests.

Responsibilities:
- Centralize prompt construction for title and body translation.
- Build the social hook prompt used at publication.
- Keep prompts deterministic for a given language and text.
"""

from __future__ import annotations


class PromptLibrary:
    """Build prompt strings for translation and social hook requests."""

    def translation_system_prompt(self) -> str:
        """Return deterministic system prompt for strict translation behavior."""

        return (
            "You are a precise translation assistant for short-form news and analysis. "
            "Return only translated text with no commentary."
        )

    def translate_title_prompt(self, title: str, target_language: str) -> str:
        """Return the prompt that translates one article title."""

        return (
            f"Translate this article title into {target_language}. "
            "Output a single line with only the translated title.\n\n"
            f"{title}"
        )

    def translate_body_prompt(self, body: str, target_language: str) -> str:
        """Return the prompt that translates one Markdown article body."""

        return (
            f"Translate the following Markdown article into {target_language} while "
            "preserving meaning, tone, paragraph breaks, and Markdown markup. "
            "Keep names, tickers, numbers, and URLs unchanged. "
            "Output only the translated article.\n\n"
            f"{body}"
        )

    def social_hook_system_prompt(self) -> str:
        """Return system prompt for short promotional copy."""

        return (
            "You write short social media posts that promote news and analysis podcasts. "
            "Return only the post text with no commentary."
        )

    def social_hook_prompt(self, title: str, key_insight: str, language: str) -> str:
        """Return the prompt that writes one social hook in `language`."""

        return (
            f'Create 1 engaging social media hook for "{title}" in {language}.\n\n'
            f"Key content: {key_insight}\n\n"
            "Requirements:\n"
            "- Under 200 characters\n"
            "- Compelling and shareable\n"
            f"- Match {language} social media style\n"
            "- Mention that English, Chinese, and Japanese podcast editions are available\n\n"
            "Return only the hook text, no explanations."
        )
