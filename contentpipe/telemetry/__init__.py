"""Telemetry helpers.

This package emits deterministic run events for pipeline auditing.
"""

from .logger import RunLogger

__all__ = ["RunLogger"]
