"""Byte-bounded text chunking for speech synthesis requests.

Responsibilities:
- Split narration text into chunks whose UTF-8 encoding fits a provider byte ceiling.
- Prefer paragraph boundaries, then sentence boundaries, then hard character slices.
- Preserve source order and content so chunks can be narrated back to back.
"""

from __future__ import annotations

import re


DEFAULT_MAX_CHUNK_BYTES = 4800


def utf8_length(text: str) -> int:
    """Return the UTF-8 encoded length of `text` in bytes."""

    return len(text.encode("utf-8"))


class TextChunker:
    """Split text into ordered chunks that never exceed `max_bytes` when UTF-8 encoded."""

    _PARAGRAPH_BREAK = re.compile(r"\n\s*\n")
    _SENTENCE_END = re.compile(r"[.!?]+\s+")
    _PARAGRAPH_JOINER = "\n\n"

    def __init__(self, max_bytes: int = DEFAULT_MAX_CHUNK_BYTES) -> None:
        """Initialize the chunker with a byte ceiling.

        Raises:
            ValueError: If the ceiling cannot hold a single UTF-8 character.
        """

        if max_bytes < 4:
            raise ValueError("`max_bytes` must be at least 4 to fit any UTF-8 character.")
        self.max_bytes = max_bytes

    def split_content_into_chunks(self, text: str) -> list[str]:
        """Split text into chunks that each fit the byte ceiling.

        Args:
            text: Narration text, possibly containing blank-line paragraph breaks.

        Returns:
            Ordered chunk list. Empty input yields an empty list; any input already
            within the ceiling, blank or not, is returned as a single chunk unchanged.
        """

        if not text:
            return []
        if utf8_length(text) <= self.max_bytes:
            return [text]

        chunks: list[str] = []
        current = ""
        for paragraph in self._PARAGRAPH_BREAK.split(text):
            if not paragraph.strip():
                continue
            if utf8_length(paragraph) > self.max_bytes:
                if current:
                    chunks.append(current)
                    current = ""
                chunks.extend(self._split_oversized_paragraph(paragraph))
                continue

            candidate = f"{current}{self._PARAGRAPH_JOINER}{paragraph}" if current else paragraph
            if utf8_length(candidate) <= self.max_bytes:
                current = candidate
            else:
                chunks.append(current)
                current = paragraph

        if current:
            chunks.append(current)
        return chunks

    def _split_oversized_paragraph(self, paragraph: str) -> list[str]:
        """Split one paragraph at sentence ends, hard-slicing sentences that still overflow."""

        chunks: list[str] = []
        current = ""
        for sentence in self._sentences(paragraph):
            if utf8_length(sentence) > self.max_bytes:
                if current:
                    chunks.append(current)
                    current = ""
                chunks.extend(self._hard_slice(sentence))
                continue

            candidate = current + sentence
            if utf8_length(candidate) <= self.max_bytes:
                current = candidate
            else:
                chunks.append(current)
                current = sentence

        if current:
            chunks.append(current)
        return chunks

    def _sentences(self, paragraph: str) -> list[str]:
        """Return sentence pieces that concatenate back to `paragraph`.

        Each piece keeps its terminal punctuation and the whitespace after it.
        """

        pieces: list[str] = []
        start = 0
        for match in self._SENTENCE_END.finditer(paragraph):
            pieces.append(paragraph[start : match.end()])
            start = match.end()
        if start < len(paragraph):
            pieces.append(paragraph[start:])
        return pieces

    def _hard_slice(self, text: str) -> list[str]:
        """Slice text on character boundaries into pieces within the byte ceiling."""

        pieces: list[str] = []
        current: list[str] = []
        current_bytes = 0
        for character in text:
            width = utf8_length(character)
            if current_bytes + width > self.max_bytes:
                pieces.append("".join(current))
                current = []
                current_bytes = 0
            current.append(character)
            current_bytes += width
        if current:
            pieces.append("".join(current))
        return pieces


def split_content_into_chunks(
    text: str, max_bytes: int = DEFAULT_MAX_CHUNK_BYTES
) -> list[str]:
    """Split text with a default-configured `TextChunker`."""

    return TextChunker(max_bytes=max_bytes).split_content_into_chunks(text)
