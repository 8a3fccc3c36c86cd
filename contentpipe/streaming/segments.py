"""Segment listing parser for remote object listings.

Responsibilities:
- Extract media segment filenames from `<size> <filename>` listing output.
- Order segment filenames by their embedded sequence number.
"""

from __future__ import annotations

import re

from ..models.datatypes import SegmentFile


class SegmentListParser:
    """Parse and order segment filenames from a size-prefixed listing."""

    _LISTING_LINE = re.compile(r"^\s*\d+\s+(\S.*)$")
    _ORDINAL = re.compile(r"(\d+)(?=\.\w+$)")

    def parse(self, raw_listing: str, extension: str = ".ts") -> list[str]:
        """Return filenames ending in `extension`, in listing order.

        Lines that do not look like `<whitespace><size><whitespace><filename>` are
        skipped, as are files with other extensions.
        """

        if not raw_listing:
            return []

        filenames: list[str] = []
        for line in raw_listing.splitlines():
            match = self._LISTING_LINE.match(line.rstrip())
            if match is None:
                continue
            filename = match.group(1)
            if filename.endswith(extension):
                filenames.append(filename)
        return filenames

    def ordinal_of(self, filename: str) -> int:
        """Return the number just before the extension of `filename`, or 0 when none exists."""

        match = self._ORDINAL.search(filename)
        return int(match.group(1)) if match is not None else 0

    def sort(self, filenames: list[str]) -> list[str]:
        """Return filenames ordered numerically by embedded sequence number."""

        return sorted(filenames, key=lambda name: (self.ordinal_of(name), name))

    def to_segment_files(self, filenames: list[str]) -> list[SegmentFile]:
        """Return ordered `SegmentFile` records for the given filenames."""

        return [
            SegmentFile(filename=name, ordinal=self.ordinal_of(name))
            for name in self.sort(filenames)
        ]
