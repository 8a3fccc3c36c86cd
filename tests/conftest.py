"""Shared pytest fixtures for the full contentpipe test suite."""

from __future__ import annotations

from pathlib import Path

import pytest

from contentpipe.config import PipelineConfig
from contentpipe.io.records import InMemoryRecordStore
from contentpipe.io.storage import ArtifactStore
from contentpipe.pipeline.context import StageContext


@pytest.fixture
def pipeline_config(tmp_path: Path) -> PipelineConfig:
    """Provide a config rooted in `tmp_path` with request pacing disabled."""

    return PipelineConfig(
        content_root=tmp_path / "content",
        audio_root=tmp_path / "audio",
        synthesis_interval_seconds=0.0,
    )


@pytest.fixture
def record_store() -> InMemoryRecordStore:
    """Provide an empty in-memory record store with a fixed clock."""

    return InMemoryRecordStore(clock=lambda: "2026-10-18T00:00:00+00:00")


@pytest.fixture
def stage_context(
    pipeline_config: PipelineConfig, record_store: InMemoryRecordStore, tmp_path: Path
) -> StageContext:
    """Provide a stage context whose artifacts and scratch files stay in `tmp_path`."""

    return StageContext(
        config=pipeline_config,
        store=record_store,
        artifacts=ArtifactStore(
            audio_root=pipeline_config.audio_root,
            streaming_root=pipeline_config.resolved_streaming_root,
            scratch_root=tmp_path / "scratch",
        ),
        languages=pipeline_config.language_registry(),
    )
