"""Unit tests for CLI output and error rendering helpers."""

from __future__ import annotations

import pytest
import typer

from contentpipe.cli_rendering import (
    echo_pending,
    echo_run_summary,
    echo_stage_results,
    exit_with_command_error,
)
from contentpipe.errors import PipelineStageError
from contentpipe.models.datatypes import (
    ContentStatus,
    PipelineStepRecord,
    RunSummary,
    StageResult,
)
from tests.support import make_record


def test_exit_with_command_error_renders_stage_error_with_hint(
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Renderer should print stage diagnostics and hint before exiting with code 1."""

    error = PipelineStageError(
        stage="streaming",
        detail="No eligible WAV files found for streaming conversion: post-1",
        hint="Run the audio stage first.",
    )

    with pytest.raises(typer.Exit) as exc_info:
        exit_with_command_error("convert-streaming", error)

    captured = capsys.readouterr()
    assert exc_info.value.exit_code == 1
    assert "convert-streaming failed at stage `streaming`" in captured.err
    assert "Hint: Run the audio stage first." in captured.err


def test_exit_with_command_error_renders_non_stage_fallback(
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Renderer should print fallback exception text for non-stage failures."""

    with pytest.raises(typer.Exit) as exc_info:
        exit_with_command_error("process", RuntimeError("unexpected store error"))

    captured = capsys.readouterr()
    assert exc_info.value.exit_code == 1
    assert "process failed: unexpected store error" in captured.err


def test_echo_stage_results_marks_skips_and_failures(
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Each language should render on its own row in result order."""

    echo_stage_results(
        {
            "zh-TW": StageResult.ok("/audio/zh-TW/ai/post-1.wav", skipped=True),
            "en-US": StageResult.ok("/audio/en-US/ai/post-1.wav"),
            "ja-JP": StageResult.failed("Segmenter failed: bad input"),
        }
    )

    assert capsys.readouterr().out.splitlines() == [
        "zh-TW: ok /audio/zh-TW/ai/post-1.wav (skipped, already complete)",
        "en-US: ok /audio/en-US/ai/post-1.wav",
        "ja-JP: failed Segmenter failed: bad input",
    ]


def test_echo_run_summary_lists_steps_and_halt_reason(
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Run summaries should list numbered steps with nested language outcomes."""

    summary = RunSummary(
        content_id="post-1",
        start_status=ContentStatus.REVIEWED,
        final_status=ContentStatus.TRANSLATED,
        steps=(
            PipelineStepRecord(
                from_status=ContentStatus.REVIEWED,
                to_status=ContentStatus.TRANSLATED,
                description="Translation",
                success=True,
                results={"en-US": StageResult.ok("post-1:en-US")},
            ),
            PipelineStepRecord(
                from_status=ContentStatus.TRANSLATED,
                to_status=ContentStatus.WAV,
                description="Audio generation",
                success=False,
                error="Content must be translated before audio generation.",
            ),
        ),
        halted_reason="Audio generation failed: Content must be translated.",
    )

    echo_run_summary(summary)

    assert capsys.readouterr().out.splitlines() == [
        "Content: post-1",
        "Start status: reviewed",
        "1. Translation: reviewed -> translated [ok]",
        "   en-US: ok post-1:en-US",
        "2. Audio generation: translated -> wav [failed]",
        "   error: Content must be translated before audio generation.",
        "Final status: translated",
        "Halted: Audio generation failed: Content must be translated.",
    ]


def test_echo_pending_renders_rows_or_empty_message(
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Pending output should be tab-separated, with a placeholder for missing dates."""

    echo_pending([])
    echo_pending([make_record("post-2", date=None), make_record("post-1")])

    assert capsys.readouterr().out.splitlines() == [
        "No pending content.",
        "post-2\treviewed\tai\t-",
        "post-1\treviewed\tai\t2026-10-01",
    ]
