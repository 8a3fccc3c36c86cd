"""Unit tests for external command execution and executable resolution."""

from __future__ import annotations

from pathlib import Path
import subprocess

from pytest import MonkeyPatch

from contentpipe.io import commands
from contentpipe.io.commands import SubprocessCommandRunner


def test_resolve_executable_prefers_bundled_bin_over_path(
    monkeypatch: MonkeyPatch,
    tmp_path: Path,
) -> None:
    """Bundled `bin` executable should take precedence over PATH discovery."""

    bundled_tool = tmp_path / "bin" / "rclone"
    bundled_tool.parent.mkdir(parents=True)
    bundled_tool.write_text("stub", encoding="utf-8")
    monkeypatch.setattr(commands, "_app_root", lambda: tmp_path)
    monkeypatch.setattr(commands.shutil, "which", lambda _: "/usr/bin/rclone")

    assert commands.resolve_executable("rclone") == str(bundled_tool)


def test_resolve_executable_falls_back_to_path_then_raw_name(
    monkeypatch: MonkeyPatch,
    tmp_path: Path,
) -> None:
    """PATH lookup should be used when nothing is bundled, then the raw name."""

    monkeypatch.setattr(commands, "_app_root", lambda: tmp_path)
    monkeypatch.setattr(commands.shutil, "which", lambda _: "/usr/bin/ffmpeg")
    assert commands.resolve_executable("ffmpeg") == "/usr/bin/ffmpeg"

    monkeypatch.setattr(commands.shutil, "which", lambda _: None)
    assert commands.resolve_executable("ffmpeg") == "ffmpeg"


def test_runner_reports_exit_code_and_streams(monkeypatch: MonkeyPatch) -> None:
    """Completed processes should map to results with captured output."""

    captured: dict[str, object] = {}

    def _fake_run(argv: list[str], **kwargs: object) -> subprocess.CompletedProcess[str]:
        """Record invocation arguments and return a failed completion."""

        captured["argv"] = argv
        captured.update(kwargs)
        return subprocess.CompletedProcess(argv, 3, stdout="partial", stderr="bad input")

    monkeypatch.setattr(commands, "resolve_executable", lambda name: f"/opt/{name}")
    monkeypatch.setattr(commands.subprocess, "run", _fake_run)

    result = SubprocessCommandRunner(timeout_seconds=12).run("ffmpeg", ["-i", "a.wav"])

    assert captured["argv"] == ["/opt/ffmpeg", "-i", "a.wav"]
    assert captured["timeout"] == 12
    assert captured["check"] is False
    assert result.success is False
    assert result.exit_code == 3
    assert result.output == "partial"
    assert result.error == "bad input"


def test_runner_converts_launch_failures_into_results(monkeypatch: MonkeyPatch) -> None:
    """Missing binaries and timeouts should never raise out of the runner."""

    def _missing(argv: list[str], **kwargs: object) -> subprocess.CompletedProcess[str]:
        """Simulate a missing executable."""

        raise FileNotFoundError(argv[0])

    def _slow(argv: list[str], **kwargs: object) -> subprocess.CompletedProcess[str]:
        """Simulate a command that exceeds its timeout."""

        raise subprocess.TimeoutExpired(argv, 1)

    runner = SubprocessCommandRunner(timeout_seconds=1)
    monkeypatch.setattr(commands.subprocess, "run", _missing)
    missing = runner.run("rclone", ["ls", "r2:bucket"])
    monkeypatch.setattr(commands.subprocess, "run", _slow)
    slow = runner.run("rclone", ["ls", "r2:bucket"])

    assert (missing.success, missing.exit_code) == (False, -1)
    assert "was not found" in missing.error
    assert (slow.success, slow.exit_code) == (False, -1)
    assert "timed out after 1 seconds" in slow.error
