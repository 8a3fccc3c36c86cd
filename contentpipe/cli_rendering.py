"""CLI output and error rendering helpers.

This module centralizes user-facing CLI presentation for command diagnostics,
run summaries, per-language stage outcomes, and the pending content queue.
"""

from __future__ import annotations

from typing import Mapping, NoReturn

import typer

from .errors import PipelineStageError
from .models.datatypes import ContentRecord, RunSummary, StageResult


def exit_with_command_error(command_name: str, exc: Exception) -> NoReturn:
    """Print concise diagnostics for command failures and exit with code 1."""

    if isinstance(exc, PipelineStageError):
        typer.secho(
            f"{command_name} failed at stage `{exc.stage}`: {exc.detail}",
            fg=typer.colors.RED,
            err=True,
        )
        if exc.hint:
            typer.secho(f"Hint: {exc.hint}", fg=typer.colors.YELLOW, err=True)
    else:
        typer.secho(f"{command_name} failed: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1) from exc


def echo_stage_results(results: Mapping[str, StageResult], indent: str = "") -> None:
    """Print one deterministic row per language outcome."""

    for language in results:
        result = results[language]
        if result.success:
            suffix = " (skipped, already complete)" if result.details.get("skipped") else ""
            typer.echo(f"{indent}{language}: ok {result.artifact or ''}{suffix}".rstrip())
        else:
            typer.echo(f"{indent}{language}: failed {result.error or 'unknown error'}")


def echo_run_summary(summary: RunSummary) -> None:
    """Print each executed step, its language outcomes, and the final status."""

    typer.echo(f"Content: {summary.content_id}")
    typer.echo(f"Start status: {summary.start_status.value}")
    for index, step in enumerate(summary.steps, start=1):
        outcome = "ok" if step.success else "failed"
        typer.echo(
            f"{index}. {step.description}: {step.from_status.value} -> "
            f"{step.to_status.value} [{outcome}]"
        )
        if step.error:
            typer.echo(f"   error: {step.error}")
        echo_stage_results(step.results, indent="   ")
    typer.echo(f"Final status: {summary.final_status.value}")
    if summary.halted_reason:
        typer.echo(f"Halted: {summary.halted_reason}")


def echo_pending(records: list[ContentRecord]) -> None:
    """Print the pending content queue, one row per content item."""

    if not records:
        typer.echo("No pending content.")
        return
    for record in records:
        typer.echo(
            f"{record.id}\t{record.status.value}\t{record.category}\t{record.date or '-'}"
        )
