"""Provider runtime wiring for CLI commands.

Responsibilities:
- Collect one command's model and API-key overrides as `ProviderOptions`.
- Turn them, the stored key, and the environment into `RuntimeConfigSources`.
- Persist a key entered during a run unless the caller opts out.
- Report which source will supply the OpenAI key.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
import os
from typing import Mapping, Protocol

import typer

from .config import PipelineConfig, RuntimeConfigSources
from .errors import PipelineStageError
from .parsing import normalize_optional_string


API_KEY_ENV_VAR = "OPENAI_API_KEY"


class ApiKeyStore(Protocol):
    """Secure storage operations needed to resolve the OpenAI key."""

    def get_api_key(self) -> str | None:
        """Return the stored API key, if any."""

    def set_api_key(self, api_key: str) -> None:
        """Persist an API key."""


@dataclass(frozen=True, slots=True)
class ProviderOptions:
    """Provider overrides passed to one pipeline command.

    Attributes:
        model_translate: `--model-translate` value.
        model_tts: `--model-tts` value.
        api_key: `--api-key` value.
        prompt_api_key: Ask for the key with hidden input when `api_key` is absent.
        store_api_key: Save a key entered during the run in secure storage.
    """

    model_translate: str | None = None
    model_tts: str | None = None
    api_key: str | None = None
    prompt_api_key: bool = False
    store_api_key: bool = True

    def cli_values(self) -> dict[str, str]:
        """Return the non-blank overrides keyed by runtime setting name."""

        values: dict[str, str] = {}
        for key, raw in (
            ("model_translate", self.model_translate),
            ("model_tts", self.model_tts),
            ("api_key", self.api_key),
        ):
            normalized = normalize_optional_string(raw)
            if normalized is not None:
                values[key] = normalized
        return values


def prompt_for_api_key() -> str | None:
    """Read an OpenAI key from hidden input; blank input means no key."""

    return normalize_optional_string(
        typer.prompt(
            "OpenAI API key (hidden; leave blank to skip)",
            default="",
            hide_input=True,
            show_default=False,
        )
    )


def runtime_sources_for(
    options: ProviderOptions,
    key_store: ApiKeyStore,
    env: Mapping[str, str] | None = None,
) -> RuntimeConfigSources:
    """Build runtime sources for one command run.

    A key passed or prompted during the run is written to `key_store` when
    `options.store_api_key` is set and it differs from the stored key.

    Raises:
        PipelineStageError: If the entered key cannot be stored.
    """

    cli_values = options.cli_values()
    if options.prompt_api_key and "api_key" not in cli_values:
        prompted = prompt_for_api_key()
        if prompted is not None:
            cli_values["api_key"] = prompted

    stored_key = key_store.get_api_key()
    entered_key = cli_values.get("api_key")
    if entered_key is not None and options.store_api_key and entered_key != stored_key:
        try:
            key_store.set_api_key(entered_key)
        except Exception as exc:
            raise PipelineStageError(
                stage="credentials",
                detail=f"Failed to store API key securely: {exc}",
                hint=(
                    "Install and configure a keyring backend, or rerun with "
                    "`--no-store-api-key` for one-off usage."
                ),
            ) from exc
        typer.echo("Stored API key in secure credential storage.")

    return RuntimeConfigSources(
        cli=cli_values,
        secure={"api_key": stored_key} if stored_key is not None else {},
        env=os.environ if env is None else env,
    )


def with_provider_options(
    config: PipelineConfig,
    options: ProviderOptions,
    key_store: ApiKeyStore,
    env: Mapping[str, str] | None = None,
) -> PipelineConfig:
    """Return `config` carrying the runtime sources for `options`."""

    return replace(config, runtime_sources=runtime_sources_for(options, key_store, env))


def api_key_source(sources: RuntimeConfigSources, config_value: str | None = None) -> str:
    """Name the source that supplies the OpenAI key under runtime precedence."""

    for label, mapping, key in (
        ("--api-key", sources.cli, "api_key"),
        ("secure storage", sources.secure, "api_key"),
        (API_KEY_ENV_VAR, sources.env, API_KEY_ENV_VAR),
    ):
        if normalize_optional_string(mapping.get(key)) is not None:
            return label
    if normalize_optional_string(config_value) is not None:
        return "config file"
    return "not configured"
