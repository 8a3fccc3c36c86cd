"""Streaming stage: `wav -> m3u8`.

Responsibilities:
- Select rows whose narration exists and whose language is segmenting-enabled.
- Run the external segmenter to produce an HLS playlist plus ordered segments.
- Record the playlist path and advance each succeeding row to `m3u8`.
"""

from __future__ import annotations

from pathlib import Path

from ..errors import LanguageStageError, NoEligibleInputError, RecordStoreError
from ..io.commands import CommandExecutor
from ..models.datatypes import ContentRecord, ContentStatus, StageResult, StageResults, StreamingUrls
from ..streaming.segments import SegmentListParser
from .context import StageContext
from .status import advance_status, is_at_least


STAGE_NAME = "streaming"
PLAYLIST_FILENAME = "audio.m3u8"
SEGMENT_PATTERN = "segment_%03d.ts"


def segmenter_args(wav_path: str, output_dir: Path, segment_duration: int) -> list[str]:
    """Return `ffmpeg` arguments that transcode a WAV file into an AAC HLS playlist."""

    return [
        "-y",
        "-i",
        wav_path,
        "-c:a",
        "aac",
        "-b:a",
        "128k",
        "-ac",
        "2",
        "-ar",
        "44100",
        "-f",
        "hls",
        "-hls_time",
        str(segment_duration),
        "-hls_list_size",
        "0",
        "-hls_segment_filename",
        str(output_dir / SEGMENT_PATTERN),
        str(output_dir / PLAYLIST_FILENAME),
    ]


class StreamingStageService:
    """Convert narration WAV files into HLS playlists per language."""

    def __init__(
        self,
        context: StageContext,
        commands: CommandExecutor,
        segment_parser: SegmentListParser | None = None,
    ) -> None:
        """Initialize the stage with its command runner."""

        self._context = context
        self._commands = commands
        self._segments = segment_parser or SegmentListParser()

    def convert_to_streaming(self, content_id: str) -> StageResults:
        """Segment every eligible language's narration.

        Raises:
            NoEligibleInputError: If no row has narration in a segmenting-enabled language.
        """

        enabled = {
            language.code
            for language in self._context.languages.audio_languages()
            if language.streaming_enabled
        }
        records = {
            record.language: record
            for record in self._context.store.select(id=content_id)
            if record.language in enabled and record.audio_file_path
        }
        if not records:
            raise NoEligibleInputError(
                stage=STAGE_NAME,
                detail=f"No eligible WAV files found for streaming conversion: {content_id}",
                hint="Run the audio stage first.",
            )

        languages = [code for code in self._context.languages.codes() if code in records]
        self._context.log_start(STAGE_NAME, content_id, languages)
        results = self._context.fanout(STAGE_NAME).run(
            languages, lambda language: self._convert_record(records[language])
        )
        self._context.log_complete(STAGE_NAME, content_id, results)
        return results

    def _convert_record(self, record: ContentRecord) -> StageResult:
        """Segment one row's narration and persist its playlist path."""

        output_dir = self._context.artifacts.streaming_dir(record)
        playlist_path = output_dir / PLAYLIST_FILENAME
        if is_at_least(record.status, ContentStatus.M3U8) and playlist_path.is_file():
            segments = self._local_segments(output_dir)
            return StageResult.ok(
                str(playlist_path), segment_count=len(segments), skipped=True
            )

        self._context.artifacts.prepare_streaming_dir(record)
        result = self._commands.run(
            "ffmpeg",
            segmenter_args(
                record.audio_file_path or "",
                output_dir,
                self._context.config.segment_duration_seconds,
            ),
        )
        if not result.success:
            raise LanguageStageError(f"Segmenter failed: {result.error.strip()}")

        segments = self._local_segments(output_dir)
        if not playlist_path.is_file():
            raise LanguageStageError(f"Segmenter produced no playlist in {output_dir}")
        if not segments:
            raise LanguageStageError(f"Segmenter produced no segments in {output_dir}")

        remote = record.streaming_urls.remote if record.streaming_urls is not None else None
        try:
            self._context.store.update(
                record.id,
                record.language,
                streaming_urls=StreamingUrls(m3u8=str(playlist_path), remote=remote),
                status=advance_status(record.status, ContentStatus.M3U8),
            )
        except RecordStoreError as exc:
            return StageResult.failed(f"Database update failed: {exc}")

        return StageResult.ok(str(playlist_path), segment_count=len(segments))

    def _local_segments(self, output_dir: Path) -> list[str]:
        """Return segment filenames in `output_dir`, ordered by sequence number."""

        if not output_dir.is_dir():
            return []
        return self._segments.sort(
            [path.name for path in output_dir.iterdir() if path.suffix == ".ts"]
        )
