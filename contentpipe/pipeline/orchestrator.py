"""Status-driven pipeline orchestration for contentpipe.

Responsibilities:
- Walk a content item through the status transition table, one stage at a time.
- Advance the source row only when a stage succeeded for at least one language.
- Turn stage setup failures into a halted run summary instead of a crash.
- Select the content items that still have pipeline work pending.

Key types:
- `PipelineOrchestrator`: orchestration facade used by the CLI.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from ..config import PipelineConfig
from ..errors import ConfigurationError, PipelineStageError, RecordStoreError
from ..io.commands import CommandExecutor, SubprocessCommandRunner
from ..io.records import JsonFileRecordStore, RecordStore
from ..llm.hooks import HookWriter, OpenAIHookWriter
from ..llm.rate_limiter import RateLimiter
from ..llm.translator import OpenAITranslator, Translator
from ..models.datatypes import (
    ContentRecord,
    ContentStatus,
    PipelineStepRecord,
    ReviewDecision,
    RunSummary,
    StageResults,
    count_successes,
)
from ..telemetry.logger import RunLogger
from ..tts.synthesizer import OpenAISpeechSynthesizer, SpeechSynthesizer
from .audio_stage import AudioStageService
from .context import StageContext
from .publish_stage import PublishStageService
from .status import (
    StageKind,
    can_transition,
    is_terminal,
    parse_status,
    transition_for,
)
from .streaming_stage import StreamingStageService
from .translation_stage import TranslationStageService
from .upload_stage import UploadStageService

if TYPE_CHECKING:
    from .status import StatusTransition


StageProgressCallback = Callable[[str, int, int], None]

_ORCHESTRATOR_STAGE = "orchestrator"


class PipelineOrchestrator:
    """Coordinate stage services for content items, one status at a time."""

    def __init__(
        self,
        context: StageContext,
        translation: TranslationStageService,
        audio: AudioStageService,
        streaming: StreamingStageService,
        upload: UploadStageService,
        publish: PublishStageService,
        stage_progress_callback: StageProgressCallback | None = None,
    ) -> None:
        """Initialize the orchestrator with one service per runnable stage."""

        self._context = context
        self._handlers: dict[StageKind, Callable[[str], StageResults]] = {
            StageKind.TRANSLATE: translation.translate,
            StageKind.SYNTHESIZE_AUDIO: audio.generate_audio,
            StageKind.SEGMENT_STREAMING: streaming.convert_to_streaming,
            StageKind.UPLOAD_AUDIO: upload.upload_audio,
            StageKind.UPLOAD_CONTENT: upload.upload_content_snapshot,
            StageKind.PUBLISH: publish.publish,
        }
        self._stage_progress_callback = stage_progress_callback

    @classmethod
    def from_config(
        cls,
        config: PipelineConfig,
        store: RecordStore | None = None,
        run_logger: RunLogger | None = None,
        commands: CommandExecutor | None = None,
        synthesizer: SpeechSynthesizer | None = None,
        translator: Translator | None = None,
        hook_writer: HookWriter | None = None,
        stage_progress_callback: StageProgressCallback | None = None,
    ) -> PipelineOrchestrator:
        """Build an orchestrator wired to default providers for `config`.

        Raises:
            ConfigurationError: If the configuration is invalid.
        """

        try:
            config.validate()
        except ValueError as exc:
            raise ConfigurationError(str(exc), hint="Fix config values and rerun.") from exc

        runtime = config.resolved_provider_runtime()
        resolved_store = store if store is not None else JsonFileRecordStore(config.content_root)
        resolved_commands = (
            commands
            if commands is not None
            else SubprocessCommandRunner(timeout_seconds=config.command_timeout_seconds)
        )
        resolved_translator = (
            translator
            if translator is not None
            else OpenAITranslator(
                model=runtime.translate_model,
                api_key=runtime.api_key,
                rate_limiter=RateLimiter(min_interval_seconds=config.synthesis_interval_seconds),
            )
        )
        resolved_synthesizer = (
            synthesizer
            if synthesizer is not None
            else OpenAISpeechSynthesizer(model=runtime.tts_model, api_key=runtime.api_key)
        )
        resolved_hook_writer = (
            hook_writer
            if hook_writer is not None
            else OpenAIHookWriter(
                model=runtime.translate_model,
                api_key=runtime.api_key,
                rate_limiter=RateLimiter(min_interval_seconds=config.synthesis_interval_seconds),
            )
        )

        context = StageContext.from_config(config, resolved_store, run_logger=run_logger)
        return cls(
            context=context,
            translation=TranslationStageService(context, resolved_translator),
            audio=AudioStageService(context, resolved_synthesizer),
            streaming=StreamingStageService(context, resolved_commands),
            upload=UploadStageService(context, resolved_commands),
            publish=PublishStageService(context, resolved_hook_writer),
            stage_progress_callback=stage_progress_callback,
        )

    @property
    def context(self) -> StageContext:
        """Return the shared stage context."""

        return self._context

    def process_content(
        self, content_id: str, start_status: ContentStatus | str | None = None
    ) -> RunSummary:
        """Drive one content item forward until it is published or a stage halts.

        Args:
            content_id: Content identifier.
            start_status: Optional status to start from instead of the stored one.

        Raises:
            PreconditionError: If the source row does not exist.
            InvalidStatusError: If `start_status` is not a known status.
        """

        source = self._context.require_source(content_id, _ORCHESTRATOR_STAGE)
        start = parse_status(start_status) if start_status is not None else source.status
        current = start
        steps: list[PipelineStepRecord] = []
        halted_reason: str | None = None
        total_stages = self._remaining_stage_count(start)
        stage_index = 0

        while not is_terminal(current):
            transition = transition_for(current)
            if transition is None:
                break

            if transition.stage is StageKind.REVIEW:
                step = self._review_step(source, transition)
                if step is None:
                    halted_reason = (
                        f"Content `{content_id}` is a draft awaiting review "
                        f"(decision: {self._decision_label(source)})."
                    )
                    break
                steps.append(step)
                current = transition.next_status
                continue

            stage_index += 1
            self._notify_progress(transition.description, stage_index, total_stages)
            try:
                results = self.run_stage(transition.stage, content_id)
            except (PipelineStageError, RecordStoreError) as exc:
                detail = exc.detail if isinstance(exc, PipelineStageError) else str(exc)
                stage_name = (
                    exc.stage if isinstance(exc, PipelineStageError) else transition.stage.value
                )
                self._log_halt(stage_name, type(exc).__name__, content_id, current)
                steps.append(
                    PipelineStepRecord(
                        from_status=current,
                        to_status=transition.next_status,
                        description=transition.description,
                        success=False,
                        error=detail,
                    )
                )
                halted_reason = f"{transition.description} failed: {detail}"
                break

            succeeded = count_successes(results) > 0
            persist_error: str | None = None
            if succeeded:
                try:
                    self._persist_source_status(content_id, transition.next_status)
                except RecordStoreError as exc:
                    succeeded = False
                    persist_error = f"Database update failed: {exc}"
            steps.append(
                PipelineStepRecord(
                    from_status=current,
                    to_status=transition.next_status,
                    description=transition.description,
                    success=succeeded,
                    error=persist_error,
                    results=results,
                )
            )
            if persist_error is not None:
                self._log_halt(transition.stage.value, "RecordStoreError", content_id, current)
                halted_reason = f"{transition.description} failed: {persist_error}"
                break
            if not succeeded:
                self._log_halt(transition.stage.value, "NoLanguageSucceeded", content_id, current)
                halted_reason = f"{transition.description} failed for every language."
                break

            current = transition.next_status

        return RunSummary(
            content_id=content_id,
            start_status=start,
            final_status=self._stored_status(content_id, fallback=current),
            steps=tuple(steps),
            halted_reason=halted_reason,
        )

    def run_stage(self, stage: StageKind | str, content_id: str) -> StageResults:
        """Invoke one stage service directly.

        Raises:
            ConfigurationError: If `stage` is unknown or has no runnable service.
        """

        try:
            kind = StageKind(stage)
        except ValueError as exc:
            raise ConfigurationError(
                f"Unknown stage `{stage}`.",
                hint=f"Use one of: {', '.join(kind.value for kind in StageKind)}.",
            ) from exc
        handler = self._handlers.get(kind)
        if handler is None:
            raise ConfigurationError(
                f"Stage `{kind.value}` is handled by the external review flow.",
                hint="Mark the content reviewed through the review flow, then run `process`.",
            )
        return handler(content_id)

    def get_all_pending_content(self) -> list[ContentRecord]:
        """Return source rows with pipeline work left, newest first.

        A `draft` row qualifies only with an explicit `accepted` review decision.
        """

        source_code = self._context.languages.source().code
        pending = [
            record
            for record in self._context.store.select(language=source_code)
            if self._is_pending(record)
        ]
        return sorted(pending, key=lambda record: (record.date or "", record.id), reverse=True)

    @staticmethod
    def _is_pending(record: ContentRecord) -> bool:
        if record.status is ContentStatus.DRAFT:
            return record.review_decision is ReviewDecision.ACCEPTED
        return not is_terminal(record.status)

    def _review_step(
        self, source: ContentRecord, transition: StatusTransition
    ) -> PipelineStepRecord | None:
        """Return a replayed review step, or `None` while the source is still a draft.

        Only the external review flow moves a draft to `reviewed`.
        """

        if source.status is ContentStatus.DRAFT:
            return None
        # An override below the stored status replays review as already done.
        return PipelineStepRecord(
            from_status=transition.status,
            to_status=transition.next_status,
            description=transition.description,
            success=True,
        )

    def _persist_source_status(self, content_id: str, status: ContentStatus) -> None:
        """Advance the source row's status without ever moving it backwards."""

        source_code = self._context.languages.source().code
        record = self._context.require_source(content_id, _ORCHESTRATOR_STAGE)
        if can_transition(record.status, status) and record.status is not status:
            self._context.store.update(content_id, source_code, status=status)

    def _stored_status(self, content_id: str, fallback: ContentStatus) -> ContentStatus:
        """Return the persisted source status, or `fallback` when it cannot be read."""

        try:
            record = self._context.store.get(content_id, self._context.languages.source().code)
        except RecordStoreError:
            return fallback
        return record.status if record is not None else fallback

    def _remaining_stage_count(self, status: ContentStatus) -> int:
        count = 0
        transition = transition_for(status)
        while transition is not None:
            if transition.stage is not StageKind.REVIEW:
                count += 1
            transition = transition_for(transition.next_status)
        return count

    def _notify_progress(self, stage_name: str, stage_index: int, stage_total: int) -> None:
        if self._stage_progress_callback is not None:
            self._stage_progress_callback(stage_name, stage_index, stage_total)

    def _log_halt(
        self, stage: str, error_type: str, content_id: str, status: ContentStatus
    ) -> None:
        if self._context.run_logger is not None:
            self._context.run_logger.log_stage_failure(
                stage, error_type, content_id=content_id, status=status.value
            )

    @staticmethod
    def _decision_label(record: ContentRecord) -> str:
        if record.review_decision is None:
            return "none"
        return record.review_decision.value
