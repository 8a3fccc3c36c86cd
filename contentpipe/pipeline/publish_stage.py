"""Publication stage: `content-upload -> published`.

Responsibilities:
- Mark rows with an uploaded content snapshot as published.
- Write a social hook for each newly published row when a hook writer is configured.
"""

from __future__ import annotations

from ..errors import LanguageStageError, NoEligibleInputError, RecordStoreError
from ..llm.hooks import HookWriter, fit_hook_length
from ..models.datatypes import ContentRecord, ContentStatus, StageResult, StageResults
from .context import StageContext
from .status import is_at_least


STAGE_NAME = "publish"


class PublishStageService:
    """Mark rows with an uploaded content snapshot as published."""

    def __init__(self, context: StageContext, hook_writer: HookWriter | None = None) -> None:
        self._context = context
        self._hook_writer = hook_writer

    def publish(self, content_id: str) -> StageResults:
        """Advance every `content-upload` row of a content item to `published`.

        Rows that are already published are reported as skipped successes. A row
        whose hook cannot be written stays at `content-upload`.
        """

        eligible = {
            record.language
            for record in self._context.store.select(id=content_id)
            if is_at_least(record.status, ContentStatus.CONTENT_UPLOAD)
        }
        if not eligible:
            raise NoEligibleInputError(
                stage=STAGE_NAME,
                detail=f"No uploaded content snapshot found to publish: {content_id}",
                hint="Run the content upload stage first.",
            )

        languages = [code for code in self._context.languages.codes() if code in eligible]
        self._context.log_start(STAGE_NAME, content_id, languages)
        results = self._context.fanout(STAGE_NAME).run(
            languages, lambda language: self._publish_language(content_id, language)
        )
        self._context.log_complete(STAGE_NAME, content_id, results)
        return results

    def _publish_language(self, content_id: str, language: str) -> StageResult:
        current = self._context.store.get(content_id, language)
        if current is None:
            raise LanguageStageError(f"No {language} record found for {content_id}")
        if current.status is ContentStatus.PUBLISHED:
            return StageResult.ok(current.content_url, skipped=True)

        changes: dict[str, object] = {"status": ContentStatus.PUBLISHED}
        hook = self._hook_for(current)
        if hook is not None:
            changes["social_hook"] = hook
        try:
            record = self._context.store.update(content_id, language, **changes)
        except RecordStoreError as exc:
            return StageResult.failed(f"Database update failed: {exc}")
        if record.social_hook is not None:
            return StageResult.ok(record.content_url, social_hook=record.social_hook)
        return StageResult.ok(record.content_url)

    def _hook_for(self, record: ContentRecord) -> str | None:
        """Return a new hook for `record`, or `None` when none should be written."""

        settings = self._context.languages.get(record.language)
        if self._hook_writer is None or not settings.hooks_enabled:
            return None
        if record.social_hook and record.social_hook.strip():
            return None
        drafted = self._hook_writer.write_hook(record.title, record.body, settings.name)
        hook = fit_hook_length(drafted, settings.hook_length)
        if not hook:
            raise LanguageStageError(f"Social hook for {record.language} is empty")
        return hook
