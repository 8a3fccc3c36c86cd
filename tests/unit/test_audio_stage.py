"""Unit tests for the narration stage service."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

import pytest

from contentpipe.errors import PreconditionError
from contentpipe.io.records import InMemoryRecordStore
from contentpipe.models.datatypes import ContentStatus
from contentpipe.pipeline.audio_stage import AudioStageService
from contentpipe.pipeline.context import StageContext
from tests.support import FailingUpdateStore, FakeSynthesizer, make_record


def _seed_translated(store: InMemoryRecordStore, languages: tuple[str, ...]) -> None:
    """Insert translated rows for `post-1` in each language."""

    for language in languages:
        store.upsert(make_record(language=language, status=ContentStatus.TRANSLATED))


def test_generate_audio_writes_one_wav_per_language(
    stage_context: StageContext, record_store: InMemoryRecordStore, tmp_path: Path
) -> None:
    """Every narration-enabled language should get a stored WAV and advance to `wav`."""

    _seed_translated(record_store, ("zh-TW", "en-US", "ja-JP"))
    synthesizer = FakeSynthesizer()

    results = AudioStageService(stage_context, synthesizer).generate_audio("post-1")

    assert list(results) == ["zh-TW", "en-US", "ja-JP"]
    english_path = tmp_path / "audio" / "en-US" / "ai" / "post-1.wav"
    assert results["en-US"].artifact == str(english_path)
    assert results["en-US"].details["chunk_count"] == 1
    assert english_path.read_bytes()[:4] == b"RIFF"
    english = record_store.get("post-1", "en-US")
    assert english is not None
    assert english.status is ContentStatus.WAV
    assert english.audio_file_path == str(english_path)
    assert {language for language, _ in synthesizer.calls} == {"zh-TW", "en-US", "ja-JP"}


def test_generate_audio_skips_languages_with_existing_narration(
    stage_context: StageContext, record_store: InMemoryRecordStore
) -> None:
    """A second run should reuse WAV files instead of calling the provider again."""

    _seed_translated(record_store, ("zh-TW", "en-US", "ja-JP"))
    synthesizer = FakeSynthesizer()
    service = AudioStageService(stage_context, synthesizer)
    service.generate_audio("post-1")
    call_count = len(synthesizer.calls)

    rerun = service.generate_audio("post-1")

    assert len(synthesizer.calls) == call_count
    assert all(result.details.get("skipped") is True for result in rerun.values())


def test_generate_audio_isolates_failures_and_missing_rows(
    stage_context: StageContext, record_store: InMemoryRecordStore
) -> None:
    """Provider errors and missing rows should fail only their own language."""

    _seed_translated(record_store, ("zh-TW", "en-US"))

    results = AudioStageService(
        stage_context, FakeSynthesizer(failing_languages={"en-US"})
    ).generate_audio("post-1")

    assert results["zh-TW"].success is True
    assert results["en-US"].error == "RuntimeError: speech provider unavailable for en-US"
    assert results["ja-JP"].error == "No ja-JP content found for post-1"
    english = record_store.get("post-1", "en-US")
    assert english is not None and english.status is ContentStatus.TRANSLATED


def test_generate_audio_requires_translated_source(
    stage_context: StageContext, record_store: InMemoryRecordStore
) -> None:
    """Narration should not start before translation."""

    record_store.upsert(make_record(status=ContentStatus.REVIEWED))

    with pytest.raises(
        PreconditionError,
        match="Content must be translated before audio generation. Current status: reviewed",
    ):
        AudioStageService(stage_context, FakeSynthesizer()).generate_audio("post-1")


def test_generate_audio_reports_store_failures_after_synthesis(
    stage_context: StageContext, tmp_path: Path
) -> None:
    """A failed record update after narration is written should fail only that language."""

    store = FailingUpdateStore(failing_languages={"ja-JP"}, message="disk quota exceeded")
    _seed_translated(store, ("zh-TW", "ja-JP"))
    context = replace(stage_context, store=store)

    results = AudioStageService(context, FakeSynthesizer()).generate_audio("post-1")

    assert results["zh-TW"].success is True
    assert results["ja-JP"].success is False
    assert results["ja-JP"].error == "Database update failed: disk quota exceeded"
    assert (tmp_path / "audio" / "ja-JP" / "ai" / "post-1.wav").is_file()
    japanese = store.get("post-1", "ja-JP")
    assert japanese is not None
    assert japanese.status is ContentStatus.TRANSLATED
    assert japanese.audio_file_path is None


def test_generate_audio_fails_languages_without_narratable_text(
    stage_context: StageContext, record_store: InMemoryRecordStore
) -> None:
    """A blank body should fail its language before any synthesis request."""

    record_store.upsert(make_record(status=ContentStatus.TRANSLATED))
    record_store.upsert(
        make_record(language="en-US", status=ContentStatus.TRANSLATED, body=" \n\n ")
    )
    synthesizer = FakeSynthesizer()

    results = AudioStageService(stage_context, synthesizer).generate_audio("post-1")

    assert results["en-US"].error == "No narratable text in en-US content for post-1"
    assert results["zh-TW"].success is True
    assert {language for language, _ in synthesizer.calls} == {"zh-TW"}
