"""Upload stages: `m3u8 -> remote-upload` and `remote-upload -> content-upload`.

Responsibilities:
- Push playlist and segment files to remote object storage and record the public URL.
- Push a JSON snapshot of each row, cross-referenced with its uploaded segments.
- Always remove transient snapshot files, whatever the upload outcome.
"""

from __future__ import annotations

from pathlib import Path

from ..errors import (
    LanguageStageError,
    NoEligibleInputError,
    NoUploadableFilesError,
    RecordStoreError,
    SourceDirectoryNotFoundError,
)
from ..io.commands import CommandExecutor
from ..models.datatypes import (
    ContentRecord,
    ContentStatus,
    SegmentFile,
    StageResult,
    StageResults,
    StreamingUrls,
)
from ..streaming.segments import SegmentListParser
from .context import StageContext
from .status import advance_status, is_at_least
from .streaming_stage import PLAYLIST_FILENAME


AUDIO_STAGE_NAME = "upload-audio"
CONTENT_STAGE_NAME = "upload-content"
_UPLOADABLE_SUFFIXES = (".m3u8", ".ts")


class UploadStageService:
    """Publish streaming files and content snapshots to remote object storage."""

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

    def remote_audio_path(self, record: ContentRecord) -> str:
        """Return `<remote>:<bucket>/audio/<language>/<category>/<id>/`."""

        config = self._context.config
        return (
            f"{config.remote_name}:{config.bucket}/audio/"
            f"{record.language}/{record.category}/{record.id}/"
        )

    def remote_content_path(self, record: ContentRecord) -> str:
        """Return `<remote>:<bucket>/content/<language>/<category>/<id>.json`."""

        config = self._context.config
        return (
            f"{config.remote_name}:{config.bucket}/content/"
            f"{record.language}/{record.category}/{record.id}.json"
        )

    def public_audio_url(self, record: ContentRecord) -> str:
        """Return the public playlist URL of a row."""

        return (
            f"{self._context.config.public_base}/audio/"
            f"{record.language}/{record.category}/{record.id}/{PLAYLIST_FILENAME}"
        )

    def public_content_url(self, record: ContentRecord) -> str:
        """Return the public content snapshot URL of a row."""

        return (
            f"{self._context.config.public_base}/content/"
            f"{record.language}/{record.category}/{record.id}.json"
        )

    def upload_audio(self, content_id: str) -> StageResults:
        """Upload each eligible language's playlist directory.

        Raises:
            NoEligibleInputError: If no upload-enabled row has a local playlist.
        """

        enabled = {
            language.code
            for language in self._context.languages.audio_languages()
            if language.upload_enabled
        }
        records = {
            record.language: record
            for record in self._context.store.select(id=content_id)
            if record.language in enabled
            and record.streaming_urls is not None
            and record.streaming_urls.m3u8
        }
        if not records:
            raise NoEligibleInputError(
                stage=AUDIO_STAGE_NAME,
                detail=f"No eligible playlists found for upload: {content_id}",
                hint="Run the streaming stage first.",
            )

        languages = [code for code in self._context.languages.codes() if code in records]
        self._context.log_start(AUDIO_STAGE_NAME, content_id, languages)
        results = self._context.fanout(AUDIO_STAGE_NAME).run(
            languages, lambda language: self._upload_record_audio(records[language])
        )
        self._context.log_complete(AUDIO_STAGE_NAME, content_id, results)
        return results

    def upload_content_snapshot(self, content_id: str) -> StageResults:
        """Upload a JSON snapshot of each row whose audio is already uploaded.

        Raises:
            NoEligibleInputError: If no row has reached `remote-upload`.
        """

        records = {
            record.language: record
            for record in self._context.store.select(id=content_id)
            if is_at_least(record.status, ContentStatus.REMOTE_UPLOAD)
        }
        if not records:
            raise NoEligibleInputError(
                stage=CONTENT_STAGE_NAME,
                detail=f"No uploaded audio found for content snapshot: {content_id}",
                hint="Run the audio upload stage first.",
            )

        languages = [code for code in self._context.languages.codes() if code in records]
        self._context.log_start(CONTENT_STAGE_NAME, content_id, languages)
        results = self._context.fanout(CONTENT_STAGE_NAME).run(
            languages, lambda language: self._upload_record_snapshot(records[language])
        )
        self._context.log_complete(CONTENT_STAGE_NAME, content_id, results)
        return results

    def list_remote_segments(self, record: ContentRecord) -> list[SegmentFile]:
        """Return ordered segments already uploaded for a row.

        A failed listing yields an empty list.
        """

        result = self._commands.run("rclone", ["ls", self.remote_audio_path(record)])
        if not result.success:
            if self._context.run_logger is not None:
                self._context.run_logger.log_warning(
                    CONTENT_STAGE_NAME,
                    "segment_listing_failed",
                    content_id=record.id,
                    language=record.language,
                    exit_code=result.exit_code,
                )
            return []
        return self._segments.to_segment_files(self._segments.parse(result.output))

    def _upload_record_audio(self, record: ContentRecord) -> StageResult:
        """Upload one row's playlist directory and persist its public URL."""

        streaming = record.streaming_urls or StreamingUrls()
        source_dir = Path(streaming.m3u8 or "").parent
        if not source_dir.is_dir():
            raise SourceDirectoryNotFoundError(f"Source directory not found: {source_dir}")

        uploadable = sorted(
            path.name for path in source_dir.iterdir() if path.suffix in _UPLOADABLE_SUFFIXES
        )
        if not uploadable:
            raise NoUploadableFilesError(
                f"No playlist or segment files found in source directory: {source_dir}"
            )

        result = self._commands.run(
            "rclone",
            [
                "copy",
                str(source_dir),
                self.remote_audio_path(record),
                "--include",
                "*.m3u8",
                "--include",
                "*.ts",
                "-v",
            ],
        )
        if not result.success:
            raise LanguageStageError(f"Sync failed: {result.error.strip()}")

        public_url = self.public_audio_url(record)
        try:
            self._context.store.update(
                record.id,
                record.language,
                streaming_urls=StreamingUrls(m3u8=streaming.m3u8, remote=public_url),
                status=advance_status(record.status, ContentStatus.REMOTE_UPLOAD),
            )
        except RecordStoreError as exc:
            return StageResult.failed(f"Database update failed: {exc}")

        return StageResult.ok(public_url, files_uploaded=len(uploadable))

    def _upload_record_snapshot(self, record: ContentRecord) -> StageResult:
        """Upload one row's JSON snapshot and persist its public URL."""

        content_url = self.public_content_url(record)
        payload = record.with_changes(content_url=content_url).to_payload()
        segments = self.list_remote_segments(record)
        payload["segments"] = [segment.filename for segment in segments]

        snapshot_path = self._context.artifacts.save_snapshot(record, payload)
        try:
            result = self._commands.run(
                "rclone", ["copyto", str(snapshot_path), self.remote_content_path(record)]
            )
        finally:
            snapshot_path.unlink(missing_ok=True)

        if not result.success:
            raise LanguageStageError(f"Sync failed: {result.error.strip()}")

        try:
            self._context.store.update(
                record.id,
                record.language,
                content_url=content_url,
                status=advance_status(record.status, ContentStatus.CONTENT_UPLOAD),
            )
        except RecordStoreError as exc:
            return StageResult.failed(f"Database update failed: {exc}")

        return StageResult.ok(content_url, segment_count=len(segments))
