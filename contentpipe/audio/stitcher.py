"""WAV chunk stitching.

Responsibilities:
- Concatenate synthesized WAV chunks into one playable WAV payload.
- Patch RIFF and data size fields so the result header matches its length.
"""

from __future__ import annotations

import struct

from ..errors import EmptyInputError


WAV_HEADER_BYTES = 44
_RIFF_SIZE_OFFSET = 4
_DATA_SIZE_OFFSET = 40


class AudioStitcher:
    """Combine same-format WAV buffers produced for consecutive text chunks.

    All buffers are assumed to share one canonical 44-byte header layout and one
    audio format. The first buffer keeps its header; later buffers contribute only
    their audio data.
    """

    def combine(self, buffers: list[bytes]) -> bytes:
        """Return one WAV payload holding every buffer's audio in order.

        Raises:
            EmptyInputError: If `buffers` is empty.
        """

        if not buffers:
            raise EmptyInputError("Cannot combine an empty list of audio buffers.")
        if len(buffers) == 1:
            return buffers[0]

        combined = bytearray(buffers[0])
        for buffer in buffers[1:]:
            # Header-only chunks carry no frames.
            combined.extend(buffer[WAV_HEADER_BYTES:])

        if len(combined) >= WAV_HEADER_BYTES:
            struct.pack_into("<I", combined, _RIFF_SIZE_OFFSET, len(combined) - 8)
            struct.pack_into(
                "<I", combined, _DATA_SIZE_OFFSET, len(combined) - WAV_HEADER_BYTES
            )
        return bytes(combined)
