"""Language registry for content variants.

Responsibilities:
- Declare the source language and translation targets.
- Declare which languages take part in narration, segmenting, and upload.
- Restrict the registry to the languages enabled by configuration.

Key types:
- `LanguageSettings`: per-language switches and voice.
- `LanguageRegistry`: ordered, validated collection of enabled languages.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable

from .errors import ConfigurationError
from .tts.voices import VoiceProfile


CATEGORIES: tuple[str, ...] = ("daily-news", "ethereum", "macro", "startup", "ai", "defi")


@dataclass(frozen=True, slots=True)
class LanguageSettings:
    """Static settings for one content language.

    Attributes:
        code: BCP-47 language code used as the record key.
        name: Human-readable language name passed to translation prompts.
        translation_code: Short code used when naming the translation target.
        voice: Narration voice profile.
        is_source: Whether this is the authoring language.
        audio_enabled: Whether narration is generated for this language.
        streaming_enabled: Whether narration is segmented into a playlist.
        upload_enabled: Whether playlist files are uploaded to remote storage.
        hooks_enabled: Whether a social hook is written when the row is published.
        hook_length: Maximum social hook length in characters.
    """

    code: str
    name: str
    translation_code: str
    voice: VoiceProfile
    is_source: bool = False
    audio_enabled: bool = True
    streaming_enabled: bool = True
    upload_enabled: bool = True
    hooks_enabled: bool = True
    hook_length: int = 150


DEFAULT_LANGUAGES: tuple[LanguageSettings, ...] = (
    LanguageSettings(
        code="zh-TW",
        name="Traditional Chinese",
        translation_code="zh",
        voice=VoiceProfile(name="zh-TW narrator", provider_voice_id="nova", language="zh-TW"),
        is_source=True,
        hook_length=180,
    ),
    LanguageSettings(
        code="en-US",
        name="English",
        translation_code="en",
        voice=VoiceProfile(name="en-US narrator", provider_voice_id="echo", language="en-US"),
    ),
    LanguageSettings(
        code="ja-JP",
        name="Japanese",
        translation_code="ja",
        voice=VoiceProfile(name="ja-JP narrator", provider_voice_id="shimmer", language="ja-JP"),
        hook_length=140,
    ),
)


class LanguageRegistry:
    """Ordered language collection with exactly one source language."""

    def __init__(self, languages: Iterable[LanguageSettings] = DEFAULT_LANGUAGES) -> None:
        """Initialize and validate the registry.

        Raises:
            ConfigurationError: If codes repeat or the source language is not unique.
        """

        self._languages = tuple(languages)
        codes = [language.code for language in self._languages]
        duplicates = sorted({code for code in codes if codes.count(code) > 1})
        if duplicates:
            raise ConfigurationError(f"Duplicate language code(s): {', '.join(duplicates)}.")
        sources = [language for language in self._languages if language.is_source]
        if len(sources) != 1:
            raise ConfigurationError(
                f"Exactly one source language is required; found {len(sources)}."
            )
        self._source = sources[0]

    def codes(self) -> list[str]:
        """Return language codes with the source language first."""

        return [language.code for language in self.ordered()]

    def ordered(self) -> list[LanguageSettings]:
        """Return languages with the source first, then targets in declaration order."""

        return [self._source, *self.translation_targets()]

    def source(self) -> LanguageSettings:
        """Return the source language settings."""

        return self._source

    def translation_targets(self) -> list[LanguageSettings]:
        """Return every non-source language."""

        return [language for language in self._languages if not language.is_source]

    def audio_languages(self) -> list[LanguageSettings]:
        """Return narration-enabled languages, source first."""

        return [language for language in self.ordered() if language.audio_enabled]

    def get(self, code: str) -> LanguageSettings:
        """Return settings for a language code.

        Raises:
            ConfigurationError: If the code is not registered.
        """

        for language in self._languages:
            if language.code == code:
                return language
        raise ConfigurationError(
            f"Unsupported language `{code}`; supported: {', '.join(self.codes())}."
        )

    def restrict(self, enabled_codes: Iterable[str]) -> LanguageRegistry:
        """Return a registry limited to `enabled_codes`; the source is always kept."""

        enabled = list(enabled_codes)
        if not enabled:
            return self
        for code in enabled:
            self.get(code)
        return LanguageRegistry(
            language
            for language in self._languages
            if language.is_source or language.code in enabled
        )

    def with_voice_override(self, provider_voice_id: str | None) -> LanguageRegistry:
        """Return a registry whose languages all narrate with one provider voice."""

        if provider_voice_id is None:
            return self
        return LanguageRegistry(
            replace(language, voice=language.voice.with_voice(provider_voice_id))
            for language in self._languages
        )
