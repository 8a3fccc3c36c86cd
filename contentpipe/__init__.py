"""Top-level package for contentpipe.

This package drives written content through review, translation, narration,
streaming conversion, remote upload, and publication. The main orchestration
entry point is `PipelineOrchestrator`.
"""

from .pipeline import PipelineOrchestrator

__all__ = ["PipelineOrchestrator", "__version__"]

__version__ = "0.1.0"
