"""Unit tests for content records and stage result datatypes."""

from __future__ import annotations

import pytest

from contentpipe.models.datatypes import (
    ContentRecord,
    ContentStatus,
    ReviewDecision,
    RunSummary,
    StageResult,
    StreamingUrls,
    count_successes,
)


def test_content_record_payload_uses_storage_field_names() -> None:
    """Record payloads should store the body under `content` and enums as values."""

    record = ContentRecord(
        id="post-1",
        language="en-US",
        category="defi",
        status=ContentStatus.REMOTE_UPLOAD,
        title="Title",
        body="Body text",
        streaming_urls=StreamingUrls(m3u8="/tmp/a.m3u8", remote="https://cdn/a.m3u8"),
        review_decision=ReviewDecision.ACCEPTED,
        references=("https://example.com/a",),
        social_hook="New models this week.",
    )

    payload = record.to_payload()

    assert payload["content"] == "Body text"
    assert payload["status"] == "remote-upload"
    assert payload["review_decision"] == "accepted"
    assert payload["streaming_urls"] == {"m3u8": "/tmp/a.m3u8", "remote": "https://cdn/a.m3u8"}
    assert payload["references"] == ["https://example.com/a"]
    assert payload["social_hook"] == "New models this week."
    assert ContentRecord.from_payload(payload) == record


def test_content_record_from_payload_requires_key_fields() -> None:
    """Decoding should reject payloads without id, language, category, or status."""

    with pytest.raises(ValueError, match="missing required key\\(s\\): category, status"):
        ContentRecord.from_payload({"id": "post-1", "language": "zh-TW"})

    with pytest.raises(ValueError):
        ContentRecord.from_payload(
            {"id": "p", "language": "zh-TW", "category": "ai", "status": "mp3"}
        )


def test_stage_result_builders_and_success_count() -> None:
    """Result builders should carry artifacts, errors, and details."""

    results = {
        "zh-TW": StageResult.ok("/audio/zh.wav", chunk_count=2),
        "en-US": StageResult.failed("Segmenter failed: boom"),
        "ja-JP": StageResult.ok("/audio/ja.wav"),
    }

    assert results["zh-TW"].details == {"chunk_count": 2}
    assert results["en-US"].success is False
    assert results["en-US"].error == "Segmenter failed: boom"
    assert count_successes(results) == 2
    assert count_successes({}) == 0


def test_run_summary_completed_only_at_published() -> None:
    """A run summary should report completion only for the terminal status."""

    assert RunSummary("p", ContentStatus.REVIEWED, ContentStatus.PUBLISHED).completed is True
    assert RunSummary("p", ContentStatus.REVIEWED, ContentStatus.WAV).completed is False
