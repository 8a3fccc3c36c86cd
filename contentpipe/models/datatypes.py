"""Core datatypes shared across contentpipe modules.

Responsibilities:
- Represent content rows and the values exchanged between pipeline stages.
- Provide explicit typing and a stable JSON payload form for storage and snapshots.

Key types:
- `ContentStatus`, `ReviewDecision`, `StreamingUrls`, `ContentRecord`,
  `StageResult`, `SegmentFile`, `PipelineStepRecord`, and `RunSummary`.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Mapping


class ContentStatus(str, Enum):
    """Closed, ordered set of pipeline statuses."""

    DRAFT = "draft"
    REVIEWED = "reviewed"
    TRANSLATED = "translated"
    WAV = "wav"
    M3U8 = "m3u8"
    REMOTE_UPLOAD = "remote-upload"
    CONTENT_UPLOAD = "content-upload"
    PUBLISHED = "published"

    @property
    def rank(self) -> int:
        """Return the 0-based position of this status in pipeline order."""

        return _STATUS_ORDER.index(self)

    def __str__(self) -> str:
        return self.value


_STATUS_ORDER: tuple[ContentStatus, ...] = tuple(ContentStatus)


class ReviewDecision(str, Enum):
    """Outcome recorded by the external review step."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


@dataclass(frozen=True, slots=True)
class StreamingUrls:
    """Streaming locations for one language row.

    Attributes:
        m3u8: Local playlist path written by the segmenting stage.
        remote: Public playlist URL written by the audio upload stage.
    """

    m3u8: str | None = None
    remote: str | None = None

    def to_payload(self) -> dict[str, str | None]:
        """Return a JSON-serializable mapping."""

        return {"m3u8": self.m3u8, "remote": self.remote}

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any] | None) -> StreamingUrls | None:
        """Build from a stored mapping, returning `None` for missing payloads."""

        if not payload:
            return None
        return cls(m3u8=payload.get("m3u8"), remote=payload.get("remote"))


@dataclass(frozen=True, slots=True)
class ContentRecord:
    """One language variant of a content item.

    Records are keyed by `(id, language)`. The source-language row carries the
    authoritative pipeline status.

    Attributes:
        id: Content identifier shared by all language variants.
        language: Language code of this row.
        category: Category slug used in storage paths.
        status: Last stage completed for this row.
        title: Title text in this row's language.
        body: Body text in this row's language.
        audio_file_path: Local WAV path once narration exists.
        streaming_urls: Playlist locations once segmenting/upload has run.
        content_url: Public content snapshot URL once uploaded.
        date: Publication date (`YYYY-MM-DD`) used for queue ordering.
        review_decision: External review outcome for draft rows.
        references: Source reference URLs carried into the content snapshot.
        social_hook: Short promotional text written when the row is published.
        updated_at: ISO-8601 timestamp of the last store write.
    """

    id: str
    language: str
    category: str
    status: ContentStatus
    title: str = ""
    body: str = ""
    audio_file_path: str | None = None
    streaming_urls: StreamingUrls | None = None
    content_url: str | None = None
    date: str | None = None
    review_decision: ReviewDecision | None = None
    references: tuple[str, ...] = field(default_factory=tuple)
    social_hook: str | None = None
    updated_at: str | None = None

    def with_changes(self, **changes: object) -> ContentRecord:
        """Return a copy with the given fields replaced."""

        return replace(self, **changes)

    def to_payload(self) -> dict[str, object]:
        """Return the JSON-serializable storage form of this record."""

        return {
            "id": self.id,
            "language": self.language,
            "category": self.category,
            "status": self.status.value,
            "title": self.title,
            "content": self.body,
            "audio_file_path": self.audio_file_path,
            "streaming_urls": (
                self.streaming_urls.to_payload() if self.streaming_urls is not None else None
            ),
            "content_url": self.content_url,
            "date": self.date,
            "review_decision": (
                self.review_decision.value if self.review_decision is not None else None
            ),
            "references": list(self.references),
            "social_hook": self.social_hook,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> ContentRecord:
        """Build a record from its JSON storage form.

        Raises:
            ValueError: If required keys are missing or status/decision values are unknown.
        """

        missing = [key for key in ("id", "language", "category", "status") if not payload.get(key)]
        if missing:
            raise ValueError(f"Content payload is missing required key(s): {', '.join(missing)}.")
        decision = payload.get("review_decision")
        return cls(
            id=str(payload["id"]),
            language=str(payload["language"]),
            category=str(payload["category"]),
            status=ContentStatus(payload["status"]),
            title=str(payload.get("title") or ""),
            body=str(payload.get("content") or ""),
            audio_file_path=payload.get("audio_file_path"),
            streaming_urls=StreamingUrls.from_payload(payload.get("streaming_urls")),
            content_url=payload.get("content_url"),
            date=payload.get("date"),
            review_decision=ReviewDecision(decision) if decision else None,
            references=tuple(payload.get("references") or ()),
            social_hook=payload.get("social_hook"),
            updated_at=payload.get("updated_at"),
        )


@dataclass(frozen=True, slots=True)
class StageResult:
    """Outcome of one stage for one language.

    Attributes:
        success: Whether the language completed the stage.
        artifact: Output path or URL produced on success.
        error: Human-readable failure message on failure.
        details: Stage-specific metadata such as `segment_count` or `files_uploaded`.
    """

    success: bool
    artifact: str | None = None
    error: str | None = None
    details: Mapping[str, object] = field(default_factory=dict)

    @classmethod
    def ok(cls, artifact: str | None = None, **details: object) -> StageResult:
        """Build a successful result."""

        return cls(success=True, artifact=artifact, details=details)

    @classmethod
    def failed(cls, error: str, **details: object) -> StageResult:
        """Build a failed result."""

        return cls(success=False, error=error, details=details)


StageResults = dict[str, StageResult]


def count_successes(results: Mapping[str, StageResult]) -> int:
    """Return how many languages succeeded in a result map."""

    return sum(1 for result in results.values() if result.success)


@dataclass(frozen=True, slots=True)
class SegmentFile:
    """One media segment filename with its parsed sequence number."""

    filename: str
    ordinal: int


@dataclass(frozen=True, slots=True)
class PipelineStepRecord:
    """One executed orchestrator step.

    Attributes:
        from_status: Status before the step.
        to_status: Status the step targets.
        description: Human-readable stage label.
        success: Whether the step advanced the pipeline.
        results: Per-language results, empty for record-only steps.
        error: Setup or precondition failure message, if any.
    """

    from_status: ContentStatus
    to_status: ContentStatus
    description: str
    success: bool
    results: Mapping[str, StageResult] = field(default_factory=dict)
    error: str | None = None


@dataclass(frozen=True, slots=True)
class RunSummary:
    """Outcome of one `process_content` invocation."""

    content_id: str
    start_status: ContentStatus
    final_status: ContentStatus
    steps: tuple[PipelineStepRecord, ...] = field(default_factory=tuple)
    halted_reason: str | None = None

    @property
    def completed(self) -> bool:
        """Return whether the run reached the terminal status."""

        return self.final_status is ContentStatus.PUBLISHED
