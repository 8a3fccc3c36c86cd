"""Deterministic spoken-text cleaning rules.

Responsibilities:
- Provide composable cleanup rules that strip Markdown markup before narration.
- Normalize whitespace while keeping paragraph breaks for chunking.
- Insert short spoken pauses between sentences.
"""

from __future__ import annotations

import re
from typing import Protocol


class CleanerRule(Protocol):
    """Protocol for text cleaning rules."""

    def apply(self, text: str) -> str:
        """Apply a single cleaning transformation."""


class RemoveCodeBlocks:
    """Remove fenced code blocks and unwrap inline code spans."""

    def apply(self, text: str) -> str:
        """Drop fenced blocks entirely and keep inline code text."""

        text = re.sub(r"```[\s\S]*?```", "", text)
        return re.sub(r"`([^`\n]*)`", r"\1", text)


class RemoveListMarkers:
    """Remove leading bullet markers from list items."""

    def apply(self, text: str) -> str:
        """Apply list-marker cleanup rule."""

        return re.sub(r"(?m)^[ \t]*[-*+][ \t]+", "", text)


class RemoveHeadingMarkers:
    """Remove leading `#` heading markers."""

    def apply(self, text: str) -> str:
        """Apply heading-marker cleanup rule."""

        return re.sub(r"(?m)^[ \t]*#{1,6}[ \t]+", "", text)


class RemoveEmphasis:
    """Unwrap bold and italic markers."""

    def apply(self, text: str) -> str:
        """Keep emphasized text and drop its markers."""

        text = re.sub(r"\*\*(.+?)\*\*", r"\1", text)
        text = re.sub(r"__(.+?)__", r"\1", text)
        return re.sub(r"\*(.+?)\*", r"\1", text)


class CollapseLinks:
    """Replace Markdown links with their visible text."""

    def apply(self, text: str) -> str:
        """Apply link cleanup rule."""

        return re.sub(r"\[([^\]]+)\]\([^)]*\)", r"\1", text)


class NormalizeSpeechWhitespace:
    """Collapse whitespace inside paragraphs and keep single blank-line paragraph breaks."""

    def apply(self, text: str) -> str:
        """Apply whitespace normalization rule."""

        text = text.replace("\r\n", "\n").replace("\r", "\n")
        paragraphs = [
            re.sub(r"\s+", " ", paragraph).strip()
            for paragraph in re.split(r"\n\s*\n", text)
        ]
        return "\n\n".join(paragraph for paragraph in paragraphs if paragraph)


class InsertSentencePauses:
    """Insert a spoken pause between sentences within a paragraph."""

    def apply(self, text: str) -> str:
        """Insert `...` between sentence-ending punctuation and a capitalized word."""

        return re.sub(r"([.!?])[ \t]+([A-Z])", r"\1 ... \2", text)


class SpeechTextCleaner:
    """Apply a sequence of deterministic cleaner rules to narration text."""

    def __init__(self, rules: list[CleanerRule] | None = None) -> None:
        """Initialize with custom rules or default rule sequence."""

        self.rules = rules or [
            RemoveCodeBlocks(),
            RemoveListMarkers(),
            RemoveHeadingMarkers(),
            RemoveEmphasis(),
            CollapseLinks(),
            NormalizeSpeechWhitespace(),
            InsertSentencePauses(),
        ]

    def clean(self, text: str) -> str:
        """Apply all configured rules in order."""

        current = text
        for rule in self.rules:
            current = rule.apply(current)
        return current
