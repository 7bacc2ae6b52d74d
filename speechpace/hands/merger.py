"""Buffer merger — validates and concatenates decoded inputs in order."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np
import structlog

from speechpace.buffer import SampleBuffer
from speechpace.errors import (
    ChannelCountMismatch,
    InvalidInputCount,
    SampleRateMismatch,
)

logger = structlog.get_logger()


def validate(buffers: Sequence[SampleBuffer]) -> int:
    """Check every buffer against the first; return the total length.

    Raises on the first mismatch, before anything is allocated.
    """
    if len(buffers) < 2:
        raise InvalidInputCount(len(buffers))

    first = buffers[0]
    total = 0
    for i, buf in enumerate(buffers):
        if buf.sample_rate != first.sample_rate:
            raise SampleRateMismatch(first.sample_rate, buf.sample_rate, i)
        if buf.n_channels != first.n_channels:
            raise ChannelCountMismatch(first.n_channels, buf.n_channels, i)
        total += buf.length
    return total


def concatenate(buffers: Sequence[SampleBuffer], total: int) -> SampleBuffer:
    """Copy inputs back to back; callers must have run ``validate`` first."""
    first = buffers[0]
    out = np.empty((first.n_channels, total), dtype=np.float32)
    offset = 0
    for buf in buffers:
        out[:, offset : offset + buf.length] = buf.channels
        offset += buf.length
    return SampleBuffer(out, first.sample_rate)


def merge(buffers: Sequence[SampleBuffer]) -> SampleBuffer:
    """Validate then concatenate ``buffers`` in the given order."""
    total = validate(buffers)
    merged = concatenate(buffers, total)
    logger.debug(
        "Merged buffers",
        inputs=len(buffers),
        sample_rate=merged.sample_rate,
        channels=merged.n_channels,
        length=merged.length,
    )
    return merged
