"""Audio assembly components.

This package joins synthesized WAV chunks into one narration file.
"""

from .stitcher import AudioStitcher

__all__ = ["AudioStitcher"]
