"""Domain exceptions for pipeline and CLI diagnostics.

Two failure families exist:
- Stage-level setup failures (`PipelineStageError` and subclasses) abort a stage
  before any language work starts and are surfaced by the orchestrator as a
  failed step.
- Language-level failures (`LanguageStageError` and subclasses) are captured into
  the per-language result map and never abort sibling languages.
"""

from __future__ import annotations


class PipelineStageError(RuntimeError):
    """Raised when a specific pipeline stage fails."""

    def __init__(
        self,
        *,
        stage: str,
        detail: str,
        hint: str | None = None,
    ) -> None:
        """Initialize a stage-scoped pipeline error."""

        super().__init__(detail)
        self.stage = stage
        self.detail = detail
        self.hint = hint


class PreconditionError(PipelineStageError):
    """Raised when the source record is missing or not yet eligible for a stage."""


class NoEligibleInputError(PipelineStageError):
    """Raised when a stage finds no language rows it could work on."""


class ConfigurationError(PipelineStageError):
    """Raised when static pipeline configuration is inconsistent."""

    def __init__(self, detail: str, hint: str | None = None) -> None:
        """Initialize a configuration error scoped to the `config` stage."""

        super().__init__(stage="config", detail=detail, hint=hint)


class InvalidStatusError(ValueError):
    """Raised when a status value outside the closed status set is supplied."""

    def __init__(self, value: object, allowed: list[str]) -> None:
        """Initialize with the rejected value and the accepted status values."""

        super().__init__(
            f"Unknown content status `{value}`; expected one of: {', '.join(allowed)}."
        )
        self.value = value
        self.allowed = allowed


class LanguageStageError(RuntimeError):
    """Raised inside one language's stage work; captured into that language's result."""


class SourceDirectoryNotFoundError(LanguageStageError):
    """Raised when the local directory to upload does not exist."""


class NoUploadableFilesError(LanguageStageError):
    """Raised when the local upload directory holds no playlist or segment files."""


class EmptyInputError(ValueError):
    """Raised when an operation receives an empty collection it cannot work on."""


class RecordStoreError(RuntimeError):
    """Raised when a record store read or write fails."""
