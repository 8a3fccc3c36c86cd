"""Configuration model and loaders for contentpipe.

Responsibilities:
- Define pipeline configuration as a typed dataclass constructed once per run.
- Provide deterministic precedence resolution for provider model and key settings.
- Provide loader entry points for file- and environment-based configuration.

Key types:
- `PipelineConfig`: normalized settings shared by every stage service.
- `ProviderRuntimeConfig`: resolved provider model/key values.
- `RuntimeConfigSources`: optional value sources for precedence resolution.
- `ConfigLoader`: static construction helpers for `PipelineConfig`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from .languages import LanguageRegistry
from .parsing import normalize_optional_string, parse_language_list


_DEFAULT_TRANSLATION_MODEL = "gpt-4.1-mini"
_DEFAULT_TTS_MODEL = "gpt-4o-mini-tts"
_DEFAULT_REMOTE_NAME = "r2"
_DEFAULT_BUCKET = "audio-streaming"
_DEFAULT_PUBLIC_BASE_URL = "https://audio.example.com"
_MAX_STAGE_CONCURRENCY = 8


@dataclass(frozen=True, slots=True)
class RuntimeConfigSources:
    """Source mappings used for deterministic runtime value precedence.

    Attributes:
        cli: Values explicitly provided by CLI arguments.
        secure: Values loaded from secure local credential storage.
        env: Values loaded from environment variables.
    """

    cli: Mapping[str, str] = field(default_factory=dict)
    secure: Mapping[str, str] = field(default_factory=dict)
    env: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ProviderRuntimeConfig:
    """Resolved provider settings for one run.

    Attributes:
        translate_model: Chat model used by the translation stage.
        tts_model: Speech model used by the narration stage.
        api_key: Provider API key (resolved but never logged).
    """

    translate_model: str
    tts_model: str
    api_key: str | None = None


@dataclass(slots=True)
class PipelineConfig:
    """Settings for one pipeline process.

    Attributes:
        content_root: Directory holding content record JSON files.
        audio_root: Directory receiving narration WAV files.
        streaming_root: Directory receiving playlists; defaults to `<audio_root>/m3u8`.
        remote_name: Object-sync remote name (for example `r2`).
        bucket: Remote bucket name.
        public_base_url: Public base URL that serves the bucket.
        segment_duration_seconds: Target HLS segment duration.
        chunk_max_bytes: UTF-8 byte ceiling for one speech request.
        stage_concurrency: Maximum languages processed in parallel per stage.
        synthesis_interval_seconds: Minimum pause between speech requests per language.
        command_timeout_seconds: Timeout for one external command.
        model_translate: Translation chat model.
        model_tts: Speech synthesis model.
        tts_voice: Optional provider voice applied to every language.
        api_key: Optional provider API key.
        languages: Enabled language codes; empty enables every registered language.
        runtime_sources: Optional runtime source overrides injected by CLI.
    """

    content_root: Path
    audio_root: Path = Path("audio")
    streaming_root: Path | None = None
    remote_name: str = _DEFAULT_REMOTE_NAME
    bucket: str = _DEFAULT_BUCKET
    public_base_url: str = _DEFAULT_PUBLIC_BASE_URL
    segment_duration_seconds: int = 10
    chunk_max_bytes: int = 4800
    stage_concurrency: int = 2
    synthesis_interval_seconds: float = 0.5
    command_timeout_seconds: int = 600
    model_translate: str = _DEFAULT_TRANSLATION_MODEL
    model_tts: str = _DEFAULT_TTS_MODEL
    tts_voice: str | None = None
    api_key: str | None = None
    languages: tuple[str, ...] = ()
    runtime_sources: RuntimeConfigSources = field(default_factory=RuntimeConfigSources)

    def validate(self) -> None:
        """Validate configuration values before any stage runs."""

        self._require_non_empty(self.remote_name, "remote_name")
        self._require_non_empty(self.bucket, "bucket")
        self._require_non_empty(self.model_translate, "model_translate")
        self._require_non_empty(self.model_tts, "model_tts")
        if not self.public_base_url.startswith(("http://", "https://")):
            raise ValueError("`public_base_url` must start with `http://` or `https://`.")
        if self.segment_duration_seconds <= 0:
            raise ValueError("`segment_duration_seconds` must be a positive integer.")
        if self.chunk_max_bytes < 4:
            raise ValueError("`chunk_max_bytes` must be at least 4.")
        if not 1 <= self.stage_concurrency <= _MAX_STAGE_CONCURRENCY:
            raise ValueError(
                f"`stage_concurrency` must be between 1 and {_MAX_STAGE_CONCURRENCY}."
            )
        if self.synthesis_interval_seconds < 0:
            raise ValueError("`synthesis_interval_seconds` must not be negative.")
        if self.command_timeout_seconds <= 0:
            raise ValueError("`command_timeout_seconds` must be a positive integer.")
        try:
            self.language_registry()
        except Exception as exc:
            raise ValueError(str(exc)) from exc

    @property
    def resolved_streaming_root(self) -> Path:
        """Return the playlist root, defaulting to `<audio_root>/m3u8`."""

        if self.streaming_root is not None:
            return self.streaming_root
        return self.audio_root / "m3u8"

    @property
    def public_base(self) -> str:
        """Return the public base URL without a trailing slash."""

        return self.public_base_url.rstrip("/")

    def language_registry(self) -> LanguageRegistry:
        """Return the enabled language registry, applying any voice override."""

        return LanguageRegistry().restrict(self.languages).with_voice_override(self.tts_voice)

    def resolved_provider_runtime(
        self, sources: RuntimeConfigSources | None = None
    ) -> ProviderRuntimeConfig:
        """Resolve provider settings with deterministic source precedence.

        Precedence for each key is:
        `cli` > `secure` > `env` > config field value.
        """

        resolved_sources = sources if sources is not None else self.runtime_sources
        translate_model = self._resolve_runtime_value(
            key="model_translate",
            env_key="CONTENTPIPE_MODEL_TRANSLATE",
            default_value=self.model_translate,
            sources=resolved_sources,
        )
        tts_model = self._resolve_runtime_value(
            key="model_tts",
            env_key="CONTENTPIPE_MODEL_TTS",
            default_value=self.model_tts,
            sources=resolved_sources,
        )
        api_key = self._resolve_optional_runtime_value(
            key="api_key",
            env_key="OPENAI_API_KEY",
            default_value=self.api_key,
            sources=resolved_sources,
        )
        return ProviderRuntimeConfig(
            translate_model=translate_model,
            tts_model=tts_model,
            api_key=api_key,
        )

    def _resolve_runtime_value(
        self,
        key: str,
        env_key: str,
        default_value: str | None,
        sources: RuntimeConfigSources,
    ) -> str:
        """Resolve a required runtime value in precedence order."""

        resolved = self._resolve_optional_runtime_value(key, env_key, default_value, sources)
        if resolved is None:
            raise ValueError(
                f"`{key}` could not be resolved from CLI, secure storage, env, or defaults."
            )
        return resolved

    def _resolve_optional_runtime_value(
        self,
        key: str,
        env_key: str,
        default_value: str | None,
        sources: RuntimeConfigSources,
    ) -> str | None:
        """Resolve an optional runtime value in precedence order."""

        for mapping, lookup_key in (
            (sources.cli, key),
            (sources.secure, key),
            (sources.env, env_key),
        ):
            value = self._normalized_lookup(mapping, lookup_key)
            if value is not None:
                return value
        return normalize_optional_string(default_value)

    @staticmethod
    def _normalized_lookup(mapping: Mapping[str, str], key: str) -> str | None:
        """Return a stripped mapping value for a key or `None` when missing/blank."""

        if key not in mapping:
            return None
        return normalize_optional_string(mapping.get(key))

    @staticmethod
    def _require_non_empty(value: str, field_name: str) -> None:
        """Validate that string fields are not empty."""

        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"`{field_name}` must be a non-empty string.")


class ConfigLoader:
    """Factory methods for creating `PipelineConfig` from external sources."""

    _REQUIRED_YAML_KEYS = frozenset({"content_root"})
    _SUPPORTED_YAML_KEYS = frozenset(
        {
            "content_root",
            "audio_root",
            "streaming_root",
            "remote_name",
            "bucket",
            "public_base_url",
            "segment_duration_seconds",
            "chunk_max_bytes",
            "stage_concurrency",
            "synthesis_interval_seconds",
            "command_timeout_seconds",
            "model_translate",
            "model_tts",
            "tts_voice",
            "api_key",
            "languages",
        }
    )
    _RUNTIME_ENV_KEYS = frozenset(
        {
            "CONTENTPIPE_MODEL_TRANSLATE",
            "CONTENTPIPE_MODEL_TTS",
            "OPENAI_API_KEY",
        }
    )

    @staticmethod
    def from_yaml(path: Path) -> PipelineConfig:
        """Create a validated config from a YAML file."""

        payload = yaml.safe_load(path.read_text(encoding="utf-8"))
        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ValueError(f"YAML config `{path}` must contain a top-level mapping/object.")
        return ConfigLoader.from_mapping(payload, source_label=f"YAML `{path}`")

    @staticmethod
    def from_mapping(payload: Mapping[str, Any], source_label: str) -> PipelineConfig:
        """Build a validated config from a mapping payload."""

        ConfigLoader._validate_keys(payload, source_label)
        get_string = ConfigLoader._optional_non_empty_string

        audio_root = get_string(payload, "audio_root")
        streaming_root = get_string(payload, "streaming_root")
        config = PipelineConfig(
            content_root=ConfigLoader._required_path(payload, "content_root", source_label),
            audio_root=Path(audio_root) if audio_root is not None else Path("audio"),
            streaming_root=Path(streaming_root) if streaming_root is not None else None,
            remote_name=get_string(payload, "remote_name") or _DEFAULT_REMOTE_NAME,
            bucket=get_string(payload, "bucket") or _DEFAULT_BUCKET,
            public_base_url=get_string(payload, "public_base_url") or _DEFAULT_PUBLIC_BASE_URL,
            segment_duration_seconds=ConfigLoader._optional_positive_int(
                payload, "segment_duration_seconds", source_label, default=10
            ),
            chunk_max_bytes=ConfigLoader._optional_positive_int(
                payload, "chunk_max_bytes", source_label, default=4800
            ),
            stage_concurrency=ConfigLoader._optional_positive_int(
                payload, "stage_concurrency", source_label, default=2
            ),
            synthesis_interval_seconds=ConfigLoader._optional_non_negative_float(
                payload, "synthesis_interval_seconds", source_label, default=0.5
            ),
            command_timeout_seconds=ConfigLoader._optional_positive_int(
                payload, "command_timeout_seconds", source_label, default=600
            ),
            model_translate=get_string(payload, "model_translate") or _DEFAULT_TRANSLATION_MODEL,
            model_tts=get_string(payload, "model_tts") or _DEFAULT_TTS_MODEL,
            tts_voice=get_string(payload, "tts_voice"),
            api_key=get_string(payload, "api_key"),
            languages=ConfigLoader._optional_languages(payload, "languages", source_label),
        )
        ConfigLoader._validate(config, source_label)
        return config

    @staticmethod
    def from_env(env: Mapping[str, str] | None = None) -> PipelineConfig:
        """Create a validated config from environment variables."""

        env_map: Mapping[str, str] = os.environ if env is None else env
        payload: dict[str, Any] = {}
        for key in ConfigLoader._SUPPORTED_YAML_KEYS - {"api_key"}:
            env_key = f"CONTENTPIPE_{key.upper()}"
            value = normalize_optional_string(env_map.get(env_key))
            if value is not None:
                payload[key] = value
        api_key = normalize_optional_string(env_map.get("OPENAI_API_KEY"))
        if api_key is not None:
            payload["api_key"] = api_key
        if "content_root" not in payload:
            raise ValueError("Environment variable `CONTENTPIPE_CONTENT_ROOT` is required.")

        config = ConfigLoader.from_mapping(payload, source_label="Environment")
        config.runtime_sources = RuntimeConfigSources(
            env={
                key: value
                for key, value in env_map.items()
                if key in ConfigLoader._RUNTIME_ENV_KEYS
                and normalize_optional_string(value) is not None
            }
        )
        return config

    @staticmethod
    def _validate(config: PipelineConfig, source_label: str) -> None:
        """Run dataclass validation and prefix errors with the source label."""

        try:
            config.validate()
        except ValueError as exc:
            raise ValueError(f"{source_label}: {exc}") from exc

    @staticmethod
    def _validate_keys(payload: Mapping[str, Any], source_label: str) -> None:
        """Validate supported and required keys."""

        unknown = sorted(set(payload).difference(ConfigLoader._SUPPORTED_YAML_KEYS))
        if unknown:
            raise ValueError(f"{source_label} includes unsupported key(s): {', '.join(unknown)}.")

        missing = sorted(key for key in ConfigLoader._REQUIRED_YAML_KEYS if key not in payload)
        if missing:
            raise ValueError(f"{source_label} is missing required key(s): {', '.join(missing)}.")

    @staticmethod
    def _required_path(payload: Mapping[str, Any], key: str, source_label: str) -> Path:
        """Read a required non-empty path-like field from a payload."""

        value = ConfigLoader._optional_non_empty_string(payload, key)
        if value is None:
            raise ValueError(f"{source_label} requires non-empty `{key}`.")
        return Path(value)

    @staticmethod
    def _optional_non_empty_string(payload: Mapping[str, Any], key: str) -> str | None:
        """Read an optional string field and normalize blank values to `None`."""

        if key not in payload:
            return None
        return normalize_optional_string(payload[key])

    @staticmethod
    def _optional_positive_int(
        payload: Mapping[str, Any], key: str, source_label: str, default: int
    ) -> int:
        """Read and validate a positive integer payload field."""

        if key not in payload:
            return default

        raw_value = payload[key]
        if isinstance(raw_value, bool):
            raise ValueError(f"{source_label} field `{key}` must be a positive integer.")
        if isinstance(raw_value, int):
            parsed = raw_value
        else:
            normalized = normalize_optional_string(raw_value)
            if normalized is None:
                return default
            try:
                parsed = int(normalized)
            except ValueError as exc:
                raise ValueError(
                    f"{source_label} field `{key}` must be a positive integer."
                ) from exc

        if parsed <= 0:
            raise ValueError(f"{source_label} field `{key}` must be a positive integer.")
        return parsed

    @staticmethod
    def _optional_non_negative_float(
        payload: Mapping[str, Any], key: str, source_label: str, default: float
    ) -> float:
        """Read and validate a non-negative number payload field."""

        if key not in payload:
            return default

        raw_value = payload[key]
        if isinstance(raw_value, bool):
            raise ValueError(f"{source_label} field `{key}` must be a non-negative number.")
        try:
            parsed = float(raw_value)
        except (TypeError, ValueError) as exc:
            raise ValueError(
                f"{source_label} field `{key}` must be a non-negative number."
            ) from exc
        if parsed < 0:
            raise ValueError(f"{source_label} field `{key}` must be a non-negative number.")
        return parsed

    @staticmethod
    def _optional_languages(
        payload: Mapping[str, Any], key: str, source_label: str
    ) -> tuple[str, ...]:
        """Read an optional language list from a comma string or YAML list."""

        if key not in payload:
            return ()
        try:
            return parse_language_list(payload[key])
        except ValueError as exc:
            raise ValueError(f"{source_label} field `{key}`: {exc}") from exc
