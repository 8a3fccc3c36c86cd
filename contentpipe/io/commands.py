"""External command execution for segmenting and object-sync tools.

Responsibilities:
- Resolve tool executables with bundled-first precedence, then `PATH`.
- Run one command and report its outcome as a value, never as an exception.

Key types:
- `CommandResult`: captured exit status and output streams.
- `CommandExecutor`: protocol consumed by stage services.
- `SubprocessCommandRunner`: default `subprocess`-backed executor.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import shutil
import subprocess
import sys
from typing import Protocol, Sequence


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Outcome of one external command.

    Attributes:
        success: `True` only when the process ran and exited with code 0.
        output: Captured standard output.
        error: Captured standard error, or a launch failure message.
        exit_code: Process exit code, or `-1` when the process never completed.
    """

    success: bool
    output: str
    error: str
    exit_code: int


class CommandExecutor(Protocol):
    """Protocol for running external tools."""

    def run(self, command: str, args: Sequence[str]) -> CommandResult:
        """Run `command` with `args` and return its captured result."""


class SubprocessCommandRunner:
    """Run external tools with `subprocess.run` and capture their output."""

    def __init__(self, timeout_seconds: float | None = 600.0) -> None:
        """Initialize the runner with an optional per-command timeout."""

        self.timeout_seconds = timeout_seconds

    def run(self, command: str, args: Sequence[str]) -> CommandResult:
        """Run one command; launch failures and timeouts become failed results."""

        executable = resolve_executable(command)
        try:
            completed = subprocess.run(
                [executable, *args],
                capture_output=True,
                text=True,
                timeout=self.timeout_seconds,
                check=False,
            )
        except FileNotFoundError:
            return CommandResult(
                success=False,
                output="",
                error=f"Executable `{command}` was not found.",
                exit_code=-1,
            )
        except subprocess.TimeoutExpired:
            return CommandResult(
                success=False,
                output="",
                error=f"`{command}` timed out after {self.timeout_seconds} seconds.",
                exit_code=-1,
            )
        except OSError as exc:
            return CommandResult(
                success=False,
                output="",
                error=f"Failed to start `{command}`: {exc}",
                exit_code=-1,
            )

        return CommandResult(
            success=completed.returncode == 0,
            output=completed.stdout or "",
            error=completed.stderr or "",
            exit_code=completed.returncode,
        )


def resolve_executable(command_name: str) -> str:
    """Resolve an executable with bundled-first precedence, then PATH.

    Resolution order:
    1. Bundled app directories (`./bin/<tool>` then `./<tool>` from app root).
    2. System `PATH`.
    3. Raw command name (the launch then fails with a missing-binary result).
    """

    normalized = command_name.strip()
    if not normalized:
        return command_name

    app_root = _app_root()
    for name in _candidate_names(normalized):
        for candidate in (app_root / "bin" / name, app_root / name):
            if candidate.is_file():
                return str(candidate)

    resolved_path = shutil.which(normalized)
    if resolved_path is not None:
        return resolved_path
    return normalized


def _candidate_names(command_name: str) -> tuple[str, ...]:
    """Return command name variants including Windows `.exe` fallback."""

    if command_name.lower().endswith(".exe"):
        return (command_name,)
    return (command_name, f"{command_name}.exe")


def _app_root() -> Path:
    """Resolve runtime application root for frozen and non-frozen execution."""

    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve().parent
    return Path(__file__).resolve().parents[2]
