"""Artifact storage layout.

Responsibilities:
- Map content rows to deterministic local paths for narration and playlist output.
- Write audio and snapshot artifacts, creating parent directories as needed.
"""

from __future__ import annotations

import json
from pathlib import Path
import tempfile

from ..models.datatypes import ContentRecord


class ArtifactStore:
    """Filesystem-backed artifact layout for one pipeline configuration."""

    def __init__(
        self,
        audio_root: Path,
        streaming_root: Path,
        scratch_root: Path | None = None,
    ) -> None:
        """Initialize the store with narration, playlist, and scratch roots."""

        self.audio_root = audio_root
        self.streaming_root = streaming_root
        self.scratch_root = (
            scratch_root
            if scratch_root is not None
            else Path(tempfile.gettempdir()) / "contentpipe"
        )

    def audio_path(self, record: ContentRecord) -> Path:
        """Return `<audio_root>/<language>/<category>/<id>.wav`."""

        return self.audio_root / record.language / record.category / f"{record.id}.wav"

    def streaming_dir(self, record: ContentRecord) -> Path:
        """Return `<streaming_root>/<language>/<category>/<id>/`."""

        return self.streaming_root / record.language / record.category / record.id

    def save_audio(self, record: ContentRecord, data: bytes) -> Path:
        """Save narration bytes for a row and return the final path."""

        path = self.audio_path(record)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return path

    def prepare_streaming_dir(self, record: ContentRecord) -> Path:
        """Create the playlist output directory for a row and clear earlier HLS output.

        Segments left by an interrupted or differently-configured run would
        otherwise be counted and uploaded with the new playlist.
        """

        path = self.streaming_dir(record)
        path.mkdir(parents=True, exist_ok=True)
        for stale in path.iterdir():
            if stale.is_file() and stale.suffix in (".ts", ".m3u8"):
                stale.unlink()
        return path

    def save_snapshot(self, record: ContentRecord, payload: dict[str, object]) -> Path:
        """Write a content snapshot to the scratch area and return its path."""

        path = self.scratch_root / f"{record.language}-{record.category}-{record.id}.json"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True),
            encoding="utf-8",
        )
        return path
