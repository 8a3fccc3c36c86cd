"""Command-line interface for contentpipe.

Responsibilities:
- Expose user-facing commands for full pipeline runs and single stages.
- Convert CLI arguments into `PipelineConfig` and render run outcomes.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

from dataclasses import replace
import os
from pathlib import Path
from typing import Annotated

import typer

from .cli_rendering import (
    echo_pending,
    echo_run_summary,
    echo_stage_results,
    exit_with_command_error,
)
from .cli_runtime import ProviderOptions, api_key_source, with_provider_options
from .config import ConfigLoader, PipelineConfig, RuntimeConfigSources
from .credentials import create_credential_store
from .errors import InvalidStatusError, PipelineStageError
from .models.datatypes import ContentStatus, count_successes
from .parsing import normalize_optional_string
from .pipeline import PipelineOrchestrator
from .pipeline.status import (
    StageKind,
    next_status,
    parse_status,
    pipeline_statuses,
    stage_for,
)
from .telemetry.logger import RunLogger

app = typer.Typer(
    name="contentpipe",
    no_args_is_help=True,
    help="contentpipe CLI.",
)

ContentIdArgument = Annotated[str, typer.Argument(help="Content identifier.")]
ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", help="Path to YAML config file with pipeline settings."),
]
ContentRootOption = Annotated[
    Path | None,
    typer.Option(
        "--content-root",
        help="Content record directory (overrides config file and environment).",
    ),
]
ModelTranslateOption = Annotated[
    str | None, typer.Option("--model-translate", help="Translation model id override.")
]
ModelTtsOption = Annotated[
    str | None, typer.Option("--model-tts", help="Speech model id override.")
]
ApiKeyOption = Annotated[
    str | None,
    typer.Option(
        "--api-key",
        help="Provider API key override. Prefer `--prompt-api-key` to avoid shell history.",
    ),
]
PromptApiKeyOption = Annotated[
    bool,
    typer.Option("--prompt-api-key", help="Prompt for API key with hidden input (never echoed)."),
]
StoreApiKeyOption = Annotated[
    bool,
    typer.Option(
        "--store-api-key/--no-store-api-key",
        help="Persist CLI-entered API key to secure credential storage.",
    ),
]


class StageProgressIndicator:
    """Render deterministic per-stage progress lines for long-running commands."""

    _SPINNER_FRAMES = "|/-\\"

    def __init__(self, command_name: str) -> None:
        """Initialize progress indicator metadata for a command invocation."""

        self._command_name = command_name

    def on_stage_start(self, stage_name: str, stage_index: int, stage_total: int) -> None:
        """Print one progress line for a stage start transition."""

        spinner = self._SPINNER_FRAMES[(stage_index - 1) % len(self._SPINNER_FRAMES)]
        typer.echo(
            f"[progress] command={self._command_name} "
            f"{spinner} {stage_index}/{stage_total} stage={stage_name}"
        )


def _load_yaml_config(config_path: Path | None) -> PipelineConfig | None:
    """Load a YAML config file when requested and map failures to stage errors."""

    if config_path is None:
        return None

    try:
        return ConfigLoader.from_yaml(config_path)
    except FileNotFoundError as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Config file not found: `{config_path}`.",
            hint="Provide an existing path via `--config <path.yaml>`.",
        ) from exc
    except ValueError as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Invalid config file `{config_path}`: {exc}",
            hint="Fix config schema/values and rerun.",
        ) from exc
    except Exception as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Failed to load config file `{config_path}`: {exc}",
            hint="Verify YAML syntax and file permissions.",
        ) from exc


def _resolve_command_base_config(
    config_file: Path | None,
    content_root: Path | None,
) -> PipelineConfig:
    """Resolve effective config from YAML, environment, and the `--content-root` override."""

    loaded_config = _load_yaml_config(config_file)
    if loaded_config is not None:
        if content_root is not None:
            loaded_config = replace(loaded_config, content_root=content_root)
        return loaded_config

    if content_root is not None:
        env_with_root = {**os.environ, "CONTENTPIPE_CONTENT_ROOT": str(content_root)}
    else:
        env_with_root = dict(os.environ)
    try:
        return ConfigLoader.from_env(env_with_root)
    except ValueError as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Invalid environment configuration: {exc}",
            hint=(
                "Pass `--content-root <dir>`, `--config <path.yaml>`, or set "
                "`CONTENTPIPE_CONTENT_ROOT`."
            ),
        ) from exc


def _build_orchestrator(
    command_name: str,
    config_file: Path | None,
    content_root: Path | None,
    model_translate: str | None = None,
    model_tts: str | None = None,
    api_key: str | None = None,
    prompt_api_key: bool = False,
    store_api_key: bool = True,
) -> PipelineOrchestrator:
    """Resolve configuration and provider sources, then wire an orchestrator."""

    options = ProviderOptions(
        model_translate=model_translate,
        model_tts=model_tts,
        api_key=api_key,
        prompt_api_key=prompt_api_key,
        store_api_key=store_api_key,
    )
    config = with_provider_options(
        _resolve_command_base_config(config_file, content_root),
        options,
        create_credential_store(),
    )
    progress = StageProgressIndicator(command_name=command_name)
    return PipelineOrchestrator.from_config(
        config,
        run_logger=RunLogger(),
        stage_progress_callback=progress.on_stage_start,
    )


def _parse_start_status(value: str | None) -> ContentStatus | None:
    """Validate a `--from` status option."""

    normalized = normalize_optional_string(value)
    if normalized is None:
        return None
    try:
        return parse_status(normalized)
    except InvalidStatusError as exc:
        raise PipelineStageError(
            stage="input",
            detail=str(exc),
            hint="Run `contentpipe statuses` to list valid statuses.",
        ) from exc


def _run_single_stage(
    command_name: str,
    stage: StageKind,
    content_id: str,
    config_file: Path | None,
    content_root: Path | None,
    model_translate: str | None = None,
    model_tts: str | None = None,
    api_key: str | None = None,
    prompt_api_key: bool = False,
    store_api_key: bool = True,
) -> None:
    """Run one stage service and exit non-zero when no language succeeded."""

    try:
        orchestrator = _build_orchestrator(
            command_name,
            config_file,
            content_root,
            model_translate=model_translate,
            model_tts=model_tts,
            api_key=api_key,
            prompt_api_key=prompt_api_key,
            store_api_key=store_api_key,
        )
        results = orchestrator.run_stage(stage, content_id)
    except Exception as exc:
        exit_with_command_error(command_name, exc)

    echo_stage_results(results)
    succeeded = count_successes(results)
    typer.echo(f"Succeeded: {succeeded}/{len(results)}")
    if succeeded == 0:
        raise typer.Exit(code=1)


@app.command("process")
def process_command(
    content_id: ContentIdArgument,
    from_status: Annotated[
        str | None,
        typer.Option(
            "--from",
            help="Start from this status instead of the stored one (see `statuses`).",
        ),
    ] = None,
    config_file: ConfigOption = None,
    content_root: ContentRootOption = None,
    model_translate: ModelTranslateOption = None,
    model_tts: ModelTtsOption = None,
    api_key: ApiKeyOption = None,
    prompt_api_key: PromptApiKeyOption = False,
    store_api_key: StoreApiKeyOption = True,
) -> None:
    """Drive one content item through every remaining pipeline stage."""

    try:
        start_status = _parse_start_status(from_status)
        orchestrator = _build_orchestrator(
            "process",
            config_file,
            content_root,
            model_translate=model_translate,
            model_tts=model_tts,
            api_key=api_key,
            prompt_api_key=prompt_api_key,
            store_api_key=store_api_key,
        )
        summary = orchestrator.process_content(content_id, start_status=start_status)
    except Exception as exc:
        exit_with_command_error("process", exc)

    echo_run_summary(summary)
    if summary.steps and not summary.steps[-1].success:
        raise typer.Exit(code=1)


@app.command("pending")
def pending_command(
    config_file: ConfigOption = None,
    content_root: ContentRootOption = None,
) -> None:
    """List content items with pipeline work pending, newest first."""

    try:
        orchestrator = PipelineOrchestrator.from_config(
            _resolve_command_base_config(config_file, content_root)
        )
        records = orchestrator.get_all_pending_content()
    except Exception as exc:
        exit_with_command_error("pending", exc)

    echo_pending(records)


@app.command("translate")
def translate_command(
    content_id: ContentIdArgument,
    config_file: ConfigOption = None,
    content_root: ContentRootOption = None,
    model_translate: ModelTranslateOption = None,
    api_key: ApiKeyOption = None,
    prompt_api_key: PromptApiKeyOption = False,
    store_api_key: StoreApiKeyOption = True,
) -> None:
    """Translate the reviewed source row into every target language."""

    _run_single_stage(
        "translate",
        StageKind.TRANSLATE,
        content_id,
        config_file,
        content_root,
        model_translate=model_translate,
        api_key=api_key,
        prompt_api_key=prompt_api_key,
        store_api_key=store_api_key,
    )


@app.command("generate-audio")
def generate_audio_command(
    content_id: ContentIdArgument,
    config_file: ConfigOption = None,
    content_root: ContentRootOption = None,
    model_tts: ModelTtsOption = None,
    api_key: ApiKeyOption = None,
    prompt_api_key: PromptApiKeyOption = False,
    store_api_key: StoreApiKeyOption = True,
) -> None:
    """Narrate every translated language row into a WAV file."""

    _run_single_stage(
        "generate-audio",
        StageKind.SYNTHESIZE_AUDIO,
        content_id,
        config_file,
        content_root,
        model_tts=model_tts,
        api_key=api_key,
        prompt_api_key=prompt_api_key,
        store_api_key=store_api_key,
    )


@app.command("convert-streaming")
def convert_streaming_command(
    content_id: ContentIdArgument,
    config_file: ConfigOption = None,
    content_root: ContentRootOption = None,
) -> None:
    """Segment narration WAV files into HLS playlists."""

    _run_single_stage(
        "convert-streaming", StageKind.SEGMENT_STREAMING, content_id, config_file, content_root
    )


@app.command("upload-audio")
def upload_audio_command(
    content_id: ContentIdArgument,
    config_file: ConfigOption = None,
    content_root: ContentRootOption = None,
) -> None:
    """Upload playlists and segments to remote object storage."""

    _run_single_stage(
        "upload-audio", StageKind.UPLOAD_AUDIO, content_id, config_file, content_root
    )


@app.command("upload-content")
def upload_content_command(
    content_id: ContentIdArgument,
    config_file: ConfigOption = None,
    content_root: ContentRootOption = None,
) -> None:
    """Upload JSON content snapshots to remote object storage."""

    _run_single_stage(
        "upload-content", StageKind.UPLOAD_CONTENT, content_id, config_file, content_root
    )


@app.command("publish")
def publish_command(
    content_id: ContentIdArgument,
    config_file: ConfigOption = None,
    content_root: ContentRootOption = None,
) -> None:
    """Mark rows with an uploaded content snapshot as published."""

    _run_single_stage("publish", StageKind.PUBLISH, content_id, config_file, content_root)


@app.command("statuses")
def statuses_command() -> None:
    """List pipeline statuses in order with the stage that advances each one."""

    for status in pipeline_statuses():
        following = next_status(status)
        if following is None:
            typer.echo(f"{status.value}\t(terminal)")
            continue
        typer.echo(f"{status.value}\t-> {following.value}\t{stage_for(status).value}")


@app.command("credentials")
def credentials_command(
    set_api_key: Annotated[
        bool,
        typer.Option(
            "--set-api-key",
            help="Prompt for API key with hidden input and store it securely.",
        ),
    ] = False,
    clear_api_key: Annotated[
        bool,
        typer.Option(
            "--clear-api-key",
            help="Clear stored API key from secure credential storage.",
        ),
    ] = False,
) -> None:
    """Manage securely stored CLI credentials."""

    if set_api_key and clear_api_key:
        exit_with_command_error(
            "credentials",
            PipelineStageError(
                stage="credentials",
                detail="`--set-api-key` and `--clear-api-key` cannot be used together.",
                hint="Run one credentials action per command invocation.",
            ),
        )

    credential_store = create_credential_store()
    if set_api_key:
        prompted_api_key = normalize_optional_string(
            typer.prompt(
                "OpenAI API key (hidden input)",
                default="",
                hide_input=True,
                show_default=False,
            )
        )
        if prompted_api_key is None:
            exit_with_command_error(
                "credentials",
                PipelineStageError(
                    stage="credentials",
                    detail="No API key entered.",
                    hint="Provide a non-empty API key when using `--set-api-key`.",
                ),
            )
        try:
            credential_store.set_api_key(prompted_api_key)
        except Exception as exc:
            exit_with_command_error(
                "credentials",
                PipelineStageError(
                    stage="credentials",
                    detail=f"Failed to store API key securely: {exc}",
                    hint="Install and configure a keyring backend and retry.",
                ),
            )
        typer.echo("API key stored in secure credential storage.")
        return

    if clear_api_key:
        removed = credential_store.clear_api_key()
        if removed:
            typer.echo("Stored API key cleared from secure credential storage.")
        else:
            typer.echo("No stored API key found in secure credential storage.")
        return

    availability = "available" if credential_store.is_available() else "unavailable"
    stored_key = credential_store.get_api_key()
    status = "present" if stored_key is not None else "not set"
    sources = RuntimeConfigSources(
        secure={"api_key": stored_key} if stored_key is not None else {},
        env=os.environ,
    )
    typer.echo(f"Secure credential storage: {availability}")
    typer.echo(f"Stored OpenAI API key: {status}")
    typer.echo(f"OpenAI API key source: {api_key_source(sources)}")


def main() -> None:
    """CLI entrypoint for console scripts."""
    app()


if __name__ == "__main__":
    main()
