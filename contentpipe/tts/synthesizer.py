"""Speech synthesizer interfaces and OpenAI-backed implementation.

Responsibilities:
- Define the protocol the narration stage uses for one chunk of text.
- Provide OpenAI-backed synthesis returning a WAV payload per call.
"""

from __future__ import annotations

from typing import Protocol

from ..llm.openai_client import OpenAIProviderError, OpenAISpeechClient
from .voices import VoiceProfile


class SpeechSynthesizer(Protocol):
    """Protocol for speech provider implementations."""

    def synthesize(self, text: str, voice: VoiceProfile) -> bytes:
        """Return WAV bytes narrating `text` with `voice`."""


class OpenAISpeechSynthesizer:
    """OpenAI-backed synthesizer issuing one speech request per call."""

    def __init__(
        self,
        model: str = "gpt-4o-mini-tts",
        api_key: str | None = None,
        client: OpenAISpeechClient | None = None,
    ) -> None:
        """Initialize OpenAI-backed synthesizer settings."""

        self.model = model
        self.client = client if client is not None else OpenAISpeechClient(api_key=api_key)

    def synthesize(self, text: str, voice: VoiceProfile) -> bytes:
        """Synthesize one chunk and verify the payload looks like a RIFF/WAVE file."""

        audio = self.client.synthesize_speech(
            model=self.model,
            voice=voice.provider_voice_id,
            text=text,
            response_format="wav",
            speed=voice.speaking_rate,
        )
        if audio[:4] != b"RIFF" or audio[8:12] != b"WAVE":
            raise OpenAIProviderError("OpenAI speech response is not a WAV payload.")
        return audio
