"""Text-to-speech provider abstractions.

This package contains voice profile types and synthesizer interfaces used by the
narration stage.
"""

from .synthesizer import OpenAISpeechSynthesizer, SpeechSynthesizer
from .voices import VoiceProfile

__all__ = ["OpenAISpeechSynthesizer", "SpeechSynthesizer", "VoiceProfile"]
