"""Integration tests for CLI model overrides and secure credential flows."""

from __future__ import annotations

from pytest import MonkeyPatch
from typer.testing import CliRunner

from contentpipe.cli import app
from contentpipe.io.records import JsonFileRecordStore
from contentpipe.llm.translator import OpenAITranslator
from contentpipe.models.datatypes import ContentStatus
from tests.support import make_record


def test_credentials_command_reports_set_and_clear(credential_store: object) -> None:
    """Credentials command should report status and manage the stored key."""

    runner = CliRunner()

    status = runner.invoke(app, ["credentials"])
    stored = runner.invoke(app, ["credentials", "--set-api-key"], input="sk-new-key\n")
    status_after = runner.invoke(app, ["credentials"])
    cleared = runner.invoke(app, ["credentials", "--clear-api-key"])
    cleared_again = runner.invoke(app, ["credentials", "--clear-api-key"])

    assert "Secure credential storage: available" in status.output
    assert "Stored OpenAI API key: not set" in status.output
    assert "OpenAI API key source: OPENAI_API_KEY" in status.output
    assert stored.exit_code == 0, stored.output
    assert "API key stored in secure credential storage." in stored.output
    assert "Stored OpenAI API key: present" in status_after.output
    assert "OpenAI API key source: secure storage" in status_after.output
    assert "Stored API key cleared from secure credential storage." in cleared.output
    assert "No stored API key found in secure credential storage." in cleared_again.output


def test_credentials_command_rejects_conflicting_and_blank_input() -> None:
    """Conflicting flags and blank prompted keys should fail with exit code 1."""

    runner = CliRunner()

    both = runner.invoke(app, ["credentials", "--set-api-key", "--clear-api-key"])
    blank = runner.invoke(app, ["credentials", "--set-api-key"], input="\n")

    assert both.exit_code == 1
    assert "cannot be used together" in both.output
    assert blank.exit_code == 1
    assert "No API key entered." in blank.output


def test_cli_api_key_is_stored_unless_disabled(
    content_store: JsonFileRecordStore, credential_store: object
) -> None:
    """`--api-key` should be persisted by default and skipped with `--no-store-api-key`."""

    content_store.upsert(make_record())
    runner = CliRunner()

    skipped = runner.invoke(
        app, ["translate", "post-1", "--api-key", "sk-once", "--no-store-api-key"]
    )
    assert skipped.exit_code == 0, skipped.output
    assert credential_store.get_api_key() is None  # type: ignore[attr-defined]

    stored = runner.invoke(app, ["translate", "post-1", "--api-key", "sk-keep"])
    assert stored.exit_code == 0, stored.output
    assert "Stored API key in secure credential storage." in stored.output
    assert credential_store.get_api_key() == "sk-keep"  # type: ignore[attr-defined]


def test_cli_model_override_reaches_translator(
    content_store: JsonFileRecordStore, monkeypatch: MonkeyPatch
) -> None:
    """`--model-translate` should take precedence over environment model settings."""

    monkeypatch.setenv("CONTENTPIPE_MODEL_TRANSLATE", "env-model")
    content_store.upsert(make_record())
    seen_models: list[str] = []
    original_init = OpenAITranslator.__init__

    def _recording_init(self: OpenAITranslator, *args: object, **kwargs: object) -> None:
        """Record the model passed to the translator before delegating."""

        seen_models.append(str(kwargs.get("model")))
        original_init(self, *args, **kwargs)  # type: ignore[arg-type]

    monkeypatch.setattr(OpenAITranslator, "__init__", _recording_init)

    cli_result = CliRunner().invoke(
        app, ["translate", "post-1", "--model-translate", "cli-model"]
    )
    env_result = CliRunner().invoke(app, ["translate", "post-1"])

    assert cli_result.exit_code == 0, cli_result.output
    assert env_result.exit_code == 0, env_result.output
    assert seen_models == ["cli-model", "env-model"]
    english = content_store.get("post-1", "en-US")
    assert english is not None and english.status is ContentStatus.TRANSLATED


def test_prompt_api_key_reads_hidden_input(
    content_store: JsonFileRecordStore, credential_store: object
) -> None:
    """`--prompt-api-key` should read the key from hidden input."""

    content_store.upsert(make_record())

    result = CliRunner().invoke(
        app, ["translate", "post-1", "--prompt-api-key"], input="sk-prompted\n"
    )

    assert result.exit_code == 0, result.output
    assert "sk-prompted" not in result.output
    assert credential_store.get_api_key() == "sk-prompted"  # type: ignore[attr-defined]
