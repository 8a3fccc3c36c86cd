"""Voice profile models for synthesis configuration.

Responsibilities:
- Represent provider voice identities and tuning metadata per language.
- Decouple stage logic from provider-specific naming.
"""

from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(frozen=True, slots=True)
class VoiceProfile:
    """Declarative voice profile used by speech synthesizers.

    Attributes:
        name: Human-readable profile name.
        provider_voice_id: Provider-native voice identifier.
        language: BCP-47 language code the voice narrates.
        speaking_rate: Relative speaking rate multiplier.
    """

    name: str
    provider_voice_id: str
    language: str
    speaking_rate: float = 1.0

    def with_voice(self, provider_voice_id: str) -> VoiceProfile:
        """Return a copy that uses a different provider voice."""

        return replace(self, provider_voice_id=provider_voice_id)
