"""Streaming segment helpers.

This package parses and orders HLS segment listings used by the upload stages.
"""

from .segments import SegmentListParser

__all__ = ["SegmentListParser"]
