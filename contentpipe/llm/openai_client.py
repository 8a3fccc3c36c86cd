"""OpenAI HTTP clients for the translation and narration stages.

Responsibilities:
- Send chat-completions and speech requests to OpenAI's REST API via `requests`.
- Normalize failures into `OpenAIProviderError` with a stable `failure_kind`.
- Keep API keys out of error messages.
"""

from __future__ import annotations

import json
import re
from typing import Any

import requests


_FAILURE_HEADLINES = {
    "invalid_api_key": "OpenAI authentication failed",
    "insufficient_quota": "OpenAI quota is insufficient for this request",
    "rate_limited": "OpenAI rate limit reached",
    "invalid_model": "OpenAI rejected the selected model",
    "input_too_long": "OpenAI rejected the input length",
    "timeout": "OpenAI request timed out",
}


class OpenAIProviderError(RuntimeError):
    """Raised when an OpenAI request fails or returns malformed output."""

    def __init__(
        self,
        message: str,
        *,
        failure_kind: str = "unknown",
        status_code: int | None = None,
        provider_code: str | None = None,
    ) -> None:
        """Initialize provider error metadata for stage-aware diagnostics."""

        super().__init__(message)
        self.failure_kind = failure_kind
        self.status_code = status_code
        self.provider_code = provider_code


def redact_secrets(text: str) -> str:
    """Replace API-key-like and bearer tokens in `text`."""

    redacted = re.sub(r"\bsk-[A-Za-z0-9_-]{8,}\b", "[redacted-key]", text)
    return re.sub(r"(?i)bearer\s+[A-Za-z0-9._-]{12,}", "Bearer [redacted-token]", redacted)


def classify_http_failure(status_code: int, message: str, provider_code: str | None) -> str:
    """Classify an OpenAI HTTP failure into a diagnostic kind."""

    lowered = message.lower()
    code = (provider_code or "").lower()
    if status_code == 401 or "api key" in lowered:
        return "invalid_api_key"
    if code == "insufficient_quota" or (status_code == 429 and "quota" in lowered):
        return "insufficient_quota"
    if status_code == 429:
        return "rate_limited"
    if code == "model_not_found" or ("model" in lowered and "not found" in lowered):
        return "invalid_model"
    if code == "string_above_max_length" or "maximum length" in lowered:
        return "input_too_long"
    if status_code in {408, 504} or "timed out" in lowered:
        return "timeout"
    return "http_error"


class _OpenAIBaseClient:
    """Shared OpenAI HTTP settings used by the chat and speech clients."""

    _MAX_MESSAGE_CHARS = 180

    def __init__(
        self,
        *,
        api_key: str | None,
        base_url: str = "https://api.openai.com/v1",
        timeout_seconds: float = 60.0,
    ) -> None:
        """Initialize OpenAI HTTP client settings."""

        self.api_key = api_key.strip() if isinstance(api_key, str) else ""
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds

    def _post(self, endpoint_path: str, payload: dict[str, Any]) -> bytes:
        """POST a JSON payload and return the raw response body."""

        if not self.api_key:
            raise OpenAIProviderError(
                "Missing OpenAI API key. Set `OPENAI_API_KEY`, pass `--api-key`, or run "
                "`contentpipe credentials --set-api-key`.",
                failure_kind="invalid_api_key",
            )

        try:
            response = requests.post(
                f"{self.base_url}{endpoint_path}",
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                json=payload,
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
        except requests.HTTPError as exc:
            raise self._to_provider_error(exc) from exc
        except requests.Timeout as exc:
            raise OpenAIProviderError(
                "OpenAI request timed out.", failure_kind="timeout"
            ) from exc
        except requests.RequestException as exc:
            raise OpenAIProviderError(
                f"OpenAI request transport error: {self._shorten(str(exc))}",
                failure_kind="transport",
            ) from exc
        return bytes(response.content)

    @classmethod
    def _shorten(cls, text: str) -> str:
        """Redact secrets from a provider message and cap its length."""

        compact = " ".join(redact_secrets(text).split())
        if len(compact) <= cls._MAX_MESSAGE_CHARS:
            return compact
        return f"{compact[: cls._MAX_MESSAGE_CHARS - 3]}..."

    @classmethod
    def _to_provider_error(cls, exc: requests.HTTPError) -> OpenAIProviderError:
        """Convert an HTTP error into a normalized provider exception."""

        response = exc.response
        status_code = response.status_code if response is not None else 0
        body = response.text if response is not None else ""
        message, provider_code = cls._error_message_and_code(body)
        failure_kind = classify_http_failure(status_code, message, provider_code)
        headline = _FAILURE_HEADLINES.get(failure_kind, "OpenAI request failed")
        detail = f"{headline} (HTTP {status_code})"
        detail = f"{detail}: {message}" if message else f"{detail}."
        return OpenAIProviderError(
            detail,
            failure_kind=failure_kind,
            status_code=status_code,
            provider_code=provider_code,
        )

    @classmethod
    def _error_message_and_code(cls, body: str) -> tuple[str, str | None]:
        """Extract the provider message and error code from an error body."""

        if not body.strip():
            return "", None
        try:
            payload = json.loads(body)
        except json.JSONDecodeError:
            return cls._shorten(body), None

        error = payload.get("error") if isinstance(payload, dict) else None
        if not isinstance(error, dict):
            return cls._shorten(body), None
        code = error.get("code")
        message = error.get("message")
        return (
            cls._shorten(message if isinstance(message, str) else body),
            code.strip() if isinstance(code, str) and code.strip() else None,
        )


class OpenAIChatClient(_OpenAIBaseClient):
    """Minimal requests-based OpenAI chat-completions client."""

    def chat_completion_text(
        self,
        *,
        model: str,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.0,
    ) -> str:
        """Return the first assistant text response from a chat-completions request."""

        raw = self._post(
            "/chat/completions",
            {
                "model": model,
                "messages": [
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                "temperature": temperature,
            },
        )
        try:
            payload = json.loads(raw.decode("utf-8"))
            content = payload["choices"][0]["message"]["content"]
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise OpenAIProviderError("OpenAI returned invalid JSON payload.") from exc
        except (KeyError, IndexError, TypeError) as exc:
            raise OpenAIProviderError(
                "OpenAI response missing `choices[0].message.content`."
            ) from exc

        if isinstance(content, list):
            content = "".join(
                part.get("text", "")
                for part in content
                if isinstance(part, dict) and part.get("type") == "text"
            )
        text = content.strip() if isinstance(content, str) else ""
        if not text:
            raise OpenAIProviderError("OpenAI response message content is empty.")
        return text


class OpenAISpeechClient(_OpenAIBaseClient):
    """Minimal requests-based OpenAI speech client."""

    def synthesize_speech(
        self,
        *,
        model: str,
        voice: str,
        text: str,
        response_format: str = "wav",
        speed: float = 1.0,
    ) -> bytes:
        """Return synthesized audio bytes from OpenAI `/audio/speech`."""

        audio = self._post(
            "/audio/speech",
            {
                "model": model,
                "voice": voice,
                "input": text,
                "response_format": response_format,
                "speed": max(0.25, min(4.0, speed)),
            },
        )
        if not audio:
            raise OpenAIProviderError("OpenAI speech response is empty.")
        return audio
