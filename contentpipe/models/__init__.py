"""Shared typed data models for contentpipe.

This package contains dataclasses and enums used across pipeline modules to avoid
cross-module coupling and circular imports.
"""

from .datatypes import (
    ContentRecord,
    ContentStatus,
    PipelineStepRecord,
    ReviewDecision,
    RunSummary,
    SegmentFile,
    StageResult,
    StageResults,
    StreamingUrls,
    count_successes,
)

__all__ = [
    "ContentRecord",
    "ContentStatus",
    "PipelineStepRecord",
    "ReviewDecision",
    "RunSummary",
    "SegmentFile",
    "StageResult",
    "StageResults",
    "StreamingUrls",
    "count_successes",
]
