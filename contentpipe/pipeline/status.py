"""Content status model and stage transition table.

Responsibilities:
- Define the ordered status set and the stage that advances each status.
- Validate status values at input boundaries.
- Provide forward-only comparison helpers used by stage services.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ..errors import ConfigurationError, InvalidStatusError
from ..models.datatypes import ContentStatus


class StageKind(str, Enum):
    """Stage identifiers keyed by the status they advance from."""

    REVIEW = "review"
    TRANSLATE = "translate"
    SYNTHESIZE_AUDIO = "synthesize_audio"
    SEGMENT_STREAMING = "segment_streaming"
    UPLOAD_AUDIO = "upload_audio"
    UPLOAD_CONTENT = "upload_content"
    PUBLISH = "publish"


@dataclass(frozen=True, slots=True)
class StatusTransition:
    """One row of the transition table."""

    status: ContentStatus
    next_status: ContentStatus
    stage: StageKind
    description: str


TRANSITIONS: tuple[StatusTransition, ...] = (
    StatusTransition(
        ContentStatus.DRAFT, ContentStatus.REVIEWED, StageKind.REVIEW, "Content review"
    ),
    StatusTransition(
        ContentStatus.REVIEWED, ContentStatus.TRANSLATED, StageKind.TRANSLATE, "Translation"
    ),
    StatusTransition(
        ContentStatus.TRANSLATED,
        ContentStatus.WAV,
        StageKind.SYNTHESIZE_AUDIO,
        "Audio generation",
    ),
    StatusTransition(
        ContentStatus.WAV,
        ContentStatus.M3U8,
        StageKind.SEGMENT_STREAMING,
        "Streaming conversion",
    ),
    StatusTransition(
        ContentStatus.M3U8,
        ContentStatus.REMOTE_UPLOAD,
        StageKind.UPLOAD_AUDIO,
        "Audio upload",
    ),
    StatusTransition(
        ContentStatus.REMOTE_UPLOAD,
        ContentStatus.CONTENT_UPLOAD,
        StageKind.UPLOAD_CONTENT,
        "Content upload",
    ),
    StatusTransition(
        ContentStatus.CONTENT_UPLOAD,
        ContentStatus.PUBLISHED,
        StageKind.PUBLISH,
        "Publication",
    ),
)


def validate_transition_table(
    transitions: tuple[StatusTransition, ...] = TRANSITIONS,
) -> None:
    """Verify that every non-terminal status has exactly one forward transition."""

    statuses = list(ContentStatus)
    expected = statuses[:-1]
    actual = [transition.status for transition in transitions]
    if actual != expected:
        missing = [status.value for status in expected if status not in actual]
        raise ConfigurationError(
            "Status transition table does not cover the status set in order"
            + (f"; missing: {', '.join(missing)}." if missing else ".")
        )
    for transition in transitions:
        if transition.next_status.rank != transition.status.rank + 1:
            raise ConfigurationError(
                f"Transition from `{transition.status.value}` must target the next status, "
                f"not `{transition.next_status.value}`."
            )


validate_transition_table()

_BY_STATUS = {transition.status: transition for transition in TRANSITIONS}


def parse_status(value: object) -> ContentStatus:
    """Convert a raw value into a `ContentStatus` or raise `InvalidStatusError`."""

    if isinstance(value, ContentStatus):
        return value
    token = str(value).strip().lower() if value is not None else ""
    try:
        return ContentStatus(token)
    except ValueError as exc:
        raise InvalidStatusError(value, [status.value for status in ContentStatus]) from exc


def pipeline_statuses() -> list[ContentStatus]:
    """Return every status in pipeline order."""

    return list(ContentStatus)


def transition_for(status: ContentStatus) -> StatusTransition | None:
    """Return the transition out of a status, or `None` at the terminal status."""

    return _BY_STATUS.get(status)


def next_status(status: ContentStatus) -> ContentStatus | None:
    """Return the status following `status`, or `None` when `status` is terminal."""

    transition = transition_for(status)
    return transition.next_status if transition is not None else None


def stage_for(status: ContentStatus) -> StageKind:
    """Return the stage that advances `status`."""

    transition = transition_for(status)
    if transition is None:
        raise ConfigurationError(f"No stage advances terminal status `{status.value}`.")
    return transition.stage


def is_terminal(status: ContentStatus) -> bool:
    """Return whether no stage follows `status`."""

    return transition_for(status) is None


def is_at_least(status: ContentStatus, floor: ContentStatus) -> bool:
    """Return whether `status` is at or after `floor` in pipeline order."""

    return status.rank >= floor.rank


def advance_status(current: ContentStatus, target: ContentStatus) -> ContentStatus:
    """Return the later of two statuses so a row never moves backward."""

    return target if target.rank > current.rank else current


def can_transition(current: ContentStatus, target: ContentStatus) -> bool:
    """Return whether moving `current` to `target` is allowed.

    Forward moves are allowed. The only sideways move is `draft -> draft`,
    used when a review outcome is reset.
    """

    if current is ContentStatus.DRAFT and target is ContentStatus.DRAFT:
        return True
    return target.rank > current.rank
