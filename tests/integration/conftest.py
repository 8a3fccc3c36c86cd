"""Integration-test fixtures for deterministic provider, tool, and credential behavior."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Sequence

import pytest

from contentpipe.io.commands import CommandResult, SubprocessCommandRunner
from contentpipe.io.records import JsonFileRecordStore
from contentpipe.llm.openai_client import OpenAIChatClient, OpenAISpeechClient
from tests.support import FakeCommandRunner, wav_bytes


class InMemoryCredentialStore:
    """Simple in-memory credential store used for CLI tests."""

    def __init__(self, initial_api_key: str | None = None) -> None:
        """Initialize the store with an optional pre-seeded API key."""

        self._api_key = initial_api_key

    def is_available(self) -> bool:
        """Return availability flag expected by the CLI status command."""

        return True

    def get_api_key(self) -> str | None:
        """Return currently stored API key value."""

        return self._api_key

    def set_api_key(self, api_key: str) -> None:
        """Persist a normalized API key value."""

        self._api_key = api_key.strip()

    def clear_api_key(self) -> bool:
        """Clear API key and return whether one existed."""

        existed = self._api_key is not None
        self._api_key = None
        return existed


@pytest.fixture(autouse=True)
def _mock_openai_calls(monkeypatch: pytest.MonkeyPatch) -> None:
    """Mock OpenAI calls in integration tests to avoid network/key requirements."""

    def _mock_chat_completion(self, **kwargs: object) -> str:
        """Return deterministic placeholder text for translation requests."""

        _ = self
        _ = kwargs
        return "integration-mocked-llm-text"

    def _mock_synthesize_speech(self, **kwargs: object) -> bytes:
        """Return deterministic placeholder WAV payload for narration requests."""

        _ = self
        _ = kwargs
        return wav_bytes(frame_count=2400)

    monkeypatch.setattr(OpenAIChatClient, "chat_completion_text", _mock_chat_completion)
    monkeypatch.setattr(OpenAISpeechClient, "synthesize_speech", _mock_synthesize_speech)


@pytest.fixture(autouse=True)
def fake_commands(monkeypatch: pytest.MonkeyPatch) -> FakeCommandRunner:
    """Route `ffmpeg` and `rclone` invocations to a simulated runner."""

    runner = FakeCommandRunner()

    def _run(self: SubprocessCommandRunner, command: str, args: Sequence[str]) -> CommandResult:
        """Delegate to the shared fake runner."""

        _ = self
        return runner.run(command, args)

    monkeypatch.setattr(SubprocessCommandRunner, "run", _run)
    return runner


@pytest.fixture(autouse=True)
def credential_store(monkeypatch: pytest.MonkeyPatch) -> InMemoryCredentialStore:
    """Replace OS keyring access with an in-memory store for every CLI command."""

    store = InMemoryCredentialStore()
    monkeypatch.setattr("contentpipe.cli.create_credential_store", lambda: store)
    return store


@pytest.fixture(autouse=True)
def workspace_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Point environment configuration at `tmp_path` and clear unrelated settings."""

    for key in list(os.environ):
        if key.startswith("CONTENTPIPE_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("OPENAI_API_KEY", "integration-key")
    monkeypatch.setenv("CONTENTPIPE_CONTENT_ROOT", str(tmp_path / "content"))
    monkeypatch.setenv("CONTENTPIPE_AUDIO_ROOT", str(tmp_path / "audio"))
    monkeypatch.setenv("CONTENTPIPE_SYNTHESIS_INTERVAL_SECONDS", "0")
    return tmp_path


@pytest.fixture
def content_store(workspace_env: Path) -> JsonFileRecordStore:
    """Provide the JSON record store the CLI reads from."""

    return JsonFileRecordStore(workspace_env / "content")
