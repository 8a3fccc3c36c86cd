"""Bounded per-language fan-out for stage services.

Responsibilities:
- Run one stage's language work items on a bounded thread pool.
- Isolate failures so one language never aborts or corrupts its siblings.
- Return results keyed in the caller's language order.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Sequence

from ..errors import LanguageStageError
from ..models.datatypes import StageResult, StageResults
from ..telemetry.logger import RunLogger


LanguageWorker = Callable[[str], StageResult]


class LanguageFanout:
    """Execute a per-language worker with at most `max_workers` in flight."""

    def __init__(
        self,
        stage: str,
        max_workers: int = 2,
        run_logger: RunLogger | None = None,
    ) -> None:
        """Initialize fan-out settings for one stage."""

        if max_workers < 1:
            raise ValueError("`max_workers` must be at least 1.")
        self.stage = stage
        self.max_workers = max_workers
        self.run_logger = run_logger

    def run(self, languages: Sequence[str], worker: LanguageWorker) -> StageResults:
        """Run `worker` for each language and collect one result per language."""

        if not languages:
            return {}

        collected: dict[str, tuple[StageResult, str | None]] = {}
        with ThreadPoolExecutor(
            max_workers=min(self.max_workers, len(languages)),
            thread_name_prefix=f"contentpipe-{self.stage}",
        ) as executor:
            futures = {
                executor.submit(self._run_guarded, worker, language): language
                for language in languages
            }
            for future in as_completed(futures):
                collected[futures[future]] = future.result()

        results: StageResults = {}
        for language in languages:
            result, error_type = collected[language]
            results[language] = result
            if self.run_logger is not None:
                self.run_logger.log_language_result(
                    self.stage,
                    language,
                    result.success,
                    error_type=error_type,
                    skipped=result.details.get("skipped"),
                )
        return results

    @staticmethod
    def _run_guarded(
        worker: LanguageWorker, language: str
    ) -> tuple[StageResult, str | None]:
        """Run one work item, turning raised errors into failed results."""

        try:
            return worker(language), None
        except LanguageStageError as exc:
            return StageResult.failed(str(exc)), type(exc).__name__
        except Exception as exc:
            return StageResult.failed(f"{type(exc).__name__}: {exc}"), type(exc).__name__
