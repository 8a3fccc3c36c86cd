"""Shared deterministic fakes and record builders for the contentpipe test suite."""

from __future__ import annotations

import io
from pathlib import Path
from typing import Sequence
import wave

from contentpipe.errors import RecordStoreError
from contentpipe.io.commands import CommandResult
from contentpipe.io.records import InMemoryRecordStore
from contentpipe.llm.translator import TranslatedArticle
from contentpipe.models.datatypes import ContentRecord, ContentStatus
from contentpipe.tts.voices import VoiceProfile


def wav_bytes(frame_count: int = 240, frame_rate: int = 24000) -> bytes:
    """Return a small mono 16-bit silent WAV payload with a canonical 44-byte header."""

    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wav_file:
        wav_file.setnchannels(1)
        wav_file.setsampwidth(2)
        wav_file.setframerate(frame_rate)
        wav_file.writeframes(b"\x00\x00" * frame_count)
    return buffer.getvalue()


def make_record(
    content_id: str = "post-1",
    language: str = "zh-TW",
    status: ContentStatus = ContentStatus.REVIEWED,
    **overrides: object,
) -> ContentRecord:
    """Build a content row with readable defaults."""

    fields: dict[str, object] = {
        "id": content_id,
        "language": language,
        "category": "ai",
        "status": status,
        "title": "Model releases this week",
        "body": "First paragraph about models.\n\nSecond paragraph about tooling.",
        "date": "2026-10-01",
    }
    fields.update(overrides)
    return ContentRecord(**fields)  # type: ignore[arg-type]


class FakeCommandRunner:
    """Command executor that simulates `ffmpeg` and `rclone` without spawning processes."""

    def __init__(
        self,
        segment_count: int = 3,
        failures: dict[str, str] | None = None,
        remote_listing: str | None = None,
    ) -> None:
        """Initialize simulated tool behavior.

        Args:
            segment_count: Number of segments a simulated `ffmpeg` run writes.
            failures: Map of `<command>` or `<command> <subcommand>` to stderr text.
            remote_listing: Raw `rclone ls` output; generated from `segment_count` when omitted.
        """

        self.segment_count = segment_count
        self.failures = dict(failures or {})
        self.remote_listing = remote_listing
        self.calls: list[tuple[str, list[str]]] = []

    def run(self, command: str, args: Sequence[str]) -> CommandResult:
        """Record the call and return a simulated result."""

        arguments = list(args)
        self.calls.append((command, arguments))
        subcommand = arguments[0] if arguments else ""
        for key in (f"{command} {subcommand}", command):
            if key in self.failures:
                return CommandResult(
                    success=False, output="", error=self.failures[key], exit_code=1
                )

        if command == "ffmpeg":
            self._write_hls_output(arguments)
            return CommandResult(success=True, output="", error="", exit_code=0)
        if command == "rclone" and subcommand == "ls":
            return CommandResult(
                success=True, output=self._listing(), error="", exit_code=0
            )
        return CommandResult(success=True, output="", error="", exit_code=0)

    def calls_for(self, command: str, subcommand: str | None = None) -> list[list[str]]:
        """Return argument lists of recorded calls for one command."""

        return [
            arguments
            for name, arguments in self.calls
            if name == command and (subcommand is None or arguments[:1] == [subcommand])
        ]

    def _write_hls_output(self, arguments: list[str]) -> None:
        """Write a playlist and numbered segments where the real segmenter would."""

        playlist_path = Path(arguments[-1])
        pattern = arguments[arguments.index("-hls_segment_filename") + 1]
        playlist_path.parent.mkdir(parents=True, exist_ok=True)
        lines = ["#EXTM3U"]
        for index in range(self.segment_count):
            segment_path = Path(pattern % index)
            segment_path.write_bytes(b"\x47" * 188)
            lines.extend(["#EXTINF:10.0,", segment_path.name])
        lines.append("#EXT-X-ENDLIST")
        playlist_path.write_text("\n".join(lines) + "\n", encoding="utf-8")

    def _listing(self) -> str:
        """Return `rclone ls`-style output."""

        if self.remote_listing is not None:
            return self.remote_listing
        rows = [f"      188 segment_{index:03d}.ts" for index in range(self.segment_count)]
        rows.append("      120 audio.m3u8")
        return "\n".join(rows) + "\n"


class FakeSynthesizer:
    """Speech synthesizer returning silent WAV payloads and recording requests."""

    def __init__(self, failing_languages: set[str] | None = None) -> None:
        """Initialize with languages whose synthesis should raise."""

        self.failing_languages = set(failing_languages or ())
        self.calls: list[tuple[str, str]] = []

    def synthesize(self, text: str, voice: VoiceProfile) -> bytes:
        """Return a silent WAV payload or raise for a failing language."""

        self.calls.append((voice.language, text))
        if voice.language in self.failing_languages:
            raise RuntimeError(f"speech provider unavailable for {voice.language}")
        return wav_bytes()


class FakeTranslator:
    """Translator that tags text with the target language name."""

    def __init__(self, failing_languages: set[str] | None = None) -> None:
        """Initialize with language names whose translation should raise."""

        self.failing_languages = set(failing_languages or ())
        self.calls: list[str] = []

    def translate(self, title: str, body: str, target_language: str) -> TranslatedArticle:
        """Return a tagged translation or raise for a failing language."""

        self.calls.append(target_language)
        if target_language in self.failing_languages:
            raise RuntimeError(f"translation failed for {target_language}")
        return TranslatedArticle(
            title=f"[{target_language}] {title}",
            body=f"[{target_language}] {body}",
        )


class FailingUpdateStore(InMemoryRecordStore):
    """In-memory record store whose updates fail for selected languages."""

    def __init__(
        self, failing_languages: set[str] | None = None, message: str = "connection reset"
    ) -> None:
        """Initialize with languages whose updates should fail; `None` fails every update."""

        super().__init__()
        self.failing_languages = failing_languages
        self.message = message

    def update(self, content_id: str, language: str, /, **changes: object) -> ContentRecord:
        """Raise a store error for failing languages, otherwise apply the update."""

        if self.failing_languages is None or language in self.failing_languages:
            raise RecordStoreError(self.message)
        return super().update(content_id, language, **changes)


class FakeHookWriter:
    """Hook writer returning a tagged hook and recording requests."""

    def __init__(self, failing_languages: set[str] | None = None, hook: str | None = None) -> None:
        """Initialize with language names whose hook should raise and an optional fixed hook."""

        self.failing_languages = set(failing_languages or ())
        self.hook = hook
        self.calls: list[str] = []

    def write_hook(self, title: str, body: str, language: str) -> str:
        """Return a hook or raise for a failing language."""

        self.calls.append(language)
        if language in self.failing_languages:
            raise RuntimeError(f"hook writer unavailable for {language}")
        return self.hook if self.hook is not None else f"[{language}] {title}"
