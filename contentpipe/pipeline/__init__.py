"""contentpipe pipeline package.

This package contains the status transition table, the per-language stage
services, and the orchestrator that drives content through them.
"""

from .orchestrator import PipelineOrchestrator
from .status import StageKind, TRANSITIONS

__all__ = ["PipelineOrchestrator", "StageKind", "TRANSITIONS"]
