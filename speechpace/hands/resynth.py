"""Pause resynthesizer — rebuilds a waveform with scaled pauses.

Each speech chunk is copied into a fresh zero-filled buffer, followed by a
gap of ``duration * pause_multiplier`` samples. Gaps are the untouched
zeros of the destination, so no silence is written explicitly.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np
import structlog

from speechpace.buffer import SampleBuffer, SpeechChunk
from speechpace.config import PaceSettings
from speechpace.errors import EmptyResynthesis

logger = structlog.get_logger()


def output_length(chunks: Sequence[SpeechChunk], pause_multiplier: float) -> int:
    """Samples needed to hold every chunk plus its scaled trailing pause."""
    total = 0.0
    for chunk in chunks:
        total += chunk.duration * (1 + pause_multiplier)
    return math.ceil(total)


def write_offsets(chunks: Sequence[SpeechChunk], pause_multiplier: float) -> list[int]:
    """Destination index of each chunk.

    The cursor advances in floating point and is rounded only when used, so
    rounding error never accumulates across chunks.
    """
    offsets: list[int] = []
    cursor = 0.0
    for chunk in chunks:
        offsets.append(int(round(cursor)))
        cursor += chunk.duration
        cursor += chunk.duration * pause_multiplier
    return offsets


def resynthesize(
    buffer: SampleBuffer,
    chunks: Sequence[SpeechChunk],
    settings: PaceSettings,
) -> SampleBuffer:
    """Build a new buffer with every inter-speech gap rescaled."""
    if not chunks:
        msg = "No speech chunks to resynthesize. Try adjusting the silence threshold."
        raise EmptyResynthesis(msg)

    multiplier = settings.pause_multiplier
    total = output_length(chunks, multiplier)
    if total <= 0:
        msg = f"Resynthesized length is {total} samples; nothing to write."
        raise EmptyResynthesis(msg)

    offsets = write_offsets(chunks, multiplier)
    out = np.zeros((buffer.n_channels, total), dtype=np.float32)

    for ch in range(buffer.n_channels):
        source = buffer.channel(ch)
        dest = out[ch]
        for chunk, offset in zip(chunks, offsets):
            # Rounding can push the last chunk a sample past the end.
            n = min(chunk.duration, total - offset)
            if n <= 0:
                continue
            dest[offset : offset + n] = source[chunk.start : chunk.start + n]

    logger.debug(
        "Resynthesized audio",
        chunks=len(chunks),
        pause_multiplier=multiplier,
        input_length=buffer.length,
        output_length=total,
    )
    return SampleBuffer(out, buffer.sample_rate)
