"""Input/output components for contentpipe.

This package contains external command execution, content record persistence,
and artifact storage used by the pipeline stages.
"""

from .commands import CommandExecutor, CommandResult, SubprocessCommandRunner
from .records import InMemoryRecordStore, JsonFileRecordStore, RecordStore
from .storage import ArtifactStore

__all__ = [
    "ArtifactStore",
    "CommandExecutor",
    "CommandResult",
    "InMemoryRecordStore",
    "JsonFileRecordStore",
    "RecordStore",
    "SubprocessCommandRunner",
]
