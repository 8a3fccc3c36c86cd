"""Translation stage: `reviewed -> translated`.

Responsibilities:
- Translate the source row's title and body into every target language.
- Create or refresh each target row and advance it to `translated`.
- Advance the source row to `translated` once any target succeeds.
"""

from __future__ import annotations

from ..errors import NoEligibleInputError, PreconditionError
from ..llm.translator import Translator
from ..models.datatypes import (
    ContentRecord,
    ContentStatus,
    StageResult,
    StageResults,
    count_successes,
)
from .context import StageContext
from .status import advance_status, is_at_least


STAGE_NAME = "translate"


class TranslationStageService:
    """Produce target-language rows from the source row."""

    def __init__(self, context: StageContext, translator: Translator) -> None:
        """Initialize the stage with a translator implementation."""

        self._context = context
        self._translator = translator

    def translate(self, content_id: str) -> StageResults:
        """Translate the source row into every enabled target language.

        Raises:
            PreconditionError: If the source row is missing or not yet reviewed.
            NoEligibleInputError: If no target language is enabled.
        """

        source = self._context.require_source(content_id, STAGE_NAME)
        if not is_at_least(source.status, ContentStatus.REVIEWED):
            raise PreconditionError(
                stage=STAGE_NAME,
                detail=(
                    "Content must be reviewed before translation. "
                    f"Current status: {source.status.value}"
                ),
                hint="Accept the draft in review first.",
            )

        languages = [language.code for language in self._context.languages.translation_targets()]
        if not languages:
            raise NoEligibleInputError(
                stage=STAGE_NAME,
                detail=f"No translation target languages are enabled for content: {content_id}",
            )

        self._context.log_start(STAGE_NAME, content_id, languages)
        results = self._context.fanout(STAGE_NAME).run(
            languages, lambda language: self._translate_into(source, language)
        )
        if count_successes(results) > 0:
            self._context.store.update(
                content_id,
                source.language,
                status=advance_status(source.status, ContentStatus.TRANSLATED),
            )
        self._context.log_complete(STAGE_NAME, content_id, results)
        return results

    def _translate_into(self, source: ContentRecord, language: str) -> StageResult:
        """Translate into one language and upsert its row."""

        settings = self._context.languages.get(language)
        article = self._translator.translate(source.title, source.body, settings.name)

        existing = self._context.store.get(source.id, language)
        if existing is None:
            record = ContentRecord(
                id=source.id,
                language=language,
                category=source.category,
                status=ContentStatus.TRANSLATED,
                title=article.title,
                body=article.body,
                date=source.date,
                references=source.references,
            )
        else:
            record = existing.with_changes(
                category=source.category,
                title=article.title,
                body=article.body,
                date=source.date,
                references=source.references,
                status=advance_status(existing.status, ContentStatus.TRANSLATED),
            )
        stored = self._context.store.upsert(record)
        return StageResult.ok(f"{stored.id}:{stored.language}", title=stored.title)
