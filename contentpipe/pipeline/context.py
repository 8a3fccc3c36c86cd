"""Shared collaborators for stage services.

Responsibilities:
- Bundle configuration, record store, artifact layout, and logger for stage services.
- Provide the source-row lookup every stage starts from.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..config import PipelineConfig
from ..errors import PreconditionError
from ..io.records import RecordStore
from ..io.storage import ArtifactStore
from ..languages import LanguageRegistry
from ..models.datatypes import ContentRecord, StageResults, count_successes
from ..telemetry.logger import RunLogger
from .fanout import LanguageFanout


@dataclass(slots=True)
class StageContext:
    """Collaborators shared by every stage service in one pipeline."""

    config: PipelineConfig
    store: RecordStore
    artifacts: ArtifactStore
    languages: LanguageRegistry
    run_logger: RunLogger | None = None

    @classmethod
    def from_config(
        cls,
        config: PipelineConfig,
        store: RecordStore,
        run_logger: RunLogger | None = None,
    ) -> StageContext:
        """Build a context whose artifact layout and languages follow `config`."""

        return cls(
            config=config,
            store=store,
            artifacts=ArtifactStore(
                audio_root=config.audio_root,
                streaming_root=config.resolved_streaming_root,
            ),
            languages=config.language_registry(),
            run_logger=run_logger,
        )

    def fanout(self, stage: str) -> LanguageFanout:
        """Return a bounded fan-out for one stage."""

        return LanguageFanout(
            stage=stage,
            max_workers=self.config.stage_concurrency,
            run_logger=self.run_logger,
        )

    def require_source(self, content_id: str, stage: str) -> ContentRecord:
        """Return the source-language row or raise `PreconditionError`."""

        source_code = self.languages.source().code
        record = self.store.get(content_id, source_code)
        if record is None:
            raise PreconditionError(
                stage=stage,
                detail=f"No {source_code} content found for {content_id}",
                hint="Create the source draft before running pipeline stages.",
            )
        return record

    def log_start(self, stage: str, content_id: str, languages: list[str]) -> None:
        """Emit a stage-start event when a logger is configured."""

        if self.run_logger is not None:
            self.run_logger.log_stage_start(
                stage, content_id=content_id, languages=",".join(languages)
            )

    def log_complete(self, stage: str, content_id: str, results: StageResults) -> None:
        """Emit a stage-complete event with success counts."""

        if self.run_logger is not None:
            self.run_logger.log_stage_complete(
                stage,
                content_id=content_id,
                succeeded=count_successes(results),
                total=len(results),
            )
