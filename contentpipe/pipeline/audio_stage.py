"""Narration stage: `translated -> wav`.

Responsibilities:
- Verify the source row is translated before any synthesis starts.
- For each narration-enabled language, clean and chunk the body, synthesize every
  chunk in order, stitch the chunks, and store the WAV file.
- Record the WAV path and advance each succeeding row to `wav`.
"""

from __future__ import annotations

from pathlib import Path

from ..audio.stitcher import AudioStitcher
from ..errors import (
    LanguageStageError,
    NoEligibleInputError,
    PreconditionError,
    RecordStoreError,
)
from ..llm.rate_limiter import RateLimiter
from ..models.datatypes import ContentStatus, StageResult, StageResults
from ..text.chunking import TextChunker
from ..text.cleaners import SpeechTextCleaner
from ..tts.synthesizer import SpeechSynthesizer
from .context import StageContext
from .status import advance_status, is_at_least


STAGE_NAME = "audio"


class AudioStageService:
    """Generate one narration WAV per language for a content item."""

    def __init__(
        self,
        context: StageContext,
        synthesizer: SpeechSynthesizer,
        chunker: TextChunker | None = None,
        cleaner: SpeechTextCleaner | None = None,
        stitcher: AudioStitcher | None = None,
        rate_limiter: RateLimiter | None = None,
    ) -> None:
        """Initialize the stage with its synthesis collaborators."""

        self._context = context
        self._synthesizer = synthesizer
        self._chunker = chunker or TextChunker(max_bytes=context.config.chunk_max_bytes)
        self._cleaner = cleaner or SpeechTextCleaner()
        self._stitcher = stitcher or AudioStitcher()
        self._rate_limiter = rate_limiter or RateLimiter(
            min_interval_seconds=context.config.synthesis_interval_seconds
        )

    def generate_audio(self, content_id: str) -> StageResults:
        """Generate narration for every narration-enabled language.

        Raises:
            PreconditionError: If the source row is missing or not yet translated.
            NoEligibleInputError: If no language is configured for narration.
        """

        source = self._context.require_source(content_id, STAGE_NAME)
        if not is_at_least(source.status, ContentStatus.TRANSLATED):
            raise PreconditionError(
                stage=STAGE_NAME,
                detail=(
                    "Content must be translated before audio generation. "
                    f"Current status: {source.status.value}"
                ),
                hint="Run the translation stage first.",
            )

        languages = [language.code for language in self._context.languages.audio_languages()]
        if not languages:
            raise NoEligibleInputError(
                stage=STAGE_NAME,
                detail=f"No languages configured for audio generation found for content: {content_id}",
            )

        self._context.log_start(STAGE_NAME, content_id, languages)
        results = self._context.fanout(STAGE_NAME).run(
            languages, lambda language: self._generate_for_language(content_id, language)
        )
        self._context.log_complete(STAGE_NAME, content_id, results)
        return results

    def _generate_for_language(self, content_id: str, language: str) -> StageResult:
        """Narrate one language row and persist its WAV path."""

        store = self._context.store
        record = store.get(content_id, language)
        if record is None:
            raise LanguageStageError(f"No {language} content found for {content_id}")

        if (
            is_at_least(record.status, ContentStatus.WAV)
            and record.audio_file_path
            and Path(record.audio_file_path).is_file()
        ):
            return StageResult.ok(record.audio_file_path, skipped=True)

        text = self._cleaner.clean(record.body)
        if not text.strip():
            raise LanguageStageError(f"No narratable text in {language} content for {content_id}")
        chunks = self._chunker.split_content_into_chunks(text)

        voice = self._context.languages.get(language).voice
        buffers: list[bytes] = []
        for chunk in chunks:
            self._rate_limiter.acquire(f"speech:{language}")
            buffers.append(self._synthesizer.synthesize(chunk, voice))

        audio = self._stitcher.combine(buffers)
        path = self._context.artifacts.save_audio(record, audio)
        try:
            store.update(
                content_id,
                language,
                audio_file_path=str(path),
                status=advance_status(record.status, ContentStatus.WAV),
            )
        except RecordStoreError as exc:
            return StageResult.failed(f"Database update failed: {exc}")
        return StageResult.ok(str(path), chunk_count=len(chunks), audio_bytes=len(audio))
