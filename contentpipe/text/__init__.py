"""Text preparation components.

This package provides spoken-text cleanup and byte-bounded chunking used before
speech synthesis.
"""

from .chunking import TextChunker, split_content_into_chunks
from .cleaners import SpeechTextCleaner

__all__ = ["SpeechTextCleaner", "TextChunker", "split_content_into_chunks"]
