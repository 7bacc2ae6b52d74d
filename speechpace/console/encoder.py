"""MP3 encoding — float buffers to compressed bytes via a block encoder.

The encoder is a capability: anything exposing ``encode_block`` and
``flush`` can stand in for LAME (tests use a fake).
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

import numpy as np
import structlog
from numpy.typing import NDArray

from speechpace.buffer import SampleBuffer
from speechpace.config import settings
from speechpace.errors import EncoderUnavailable

logger = structlog.get_logger()

BLOCK_SIZE = 1152  # samples per channel per MPEG-1 Layer III frame
INT16_SCALE = 32767


class BlockEncoder(Protocol):
    """Stateful encoder fed in fixed-size int16 blocks."""

    def encode_block(
        self, left: NDArray[np.int16], right: NDArray[np.int16] | None = None
    ) -> bytes: ...

    def flush(self) -> bytes: ...


EncoderFactory = Callable[[int, int], BlockEncoder]


# ── PCM conversion ───────────────────────────────────────


def to_int16(samples: NDArray[np.floating]) -> NDArray[np.int16]:
    """Clamp to [-1, 1], scale by 32767 and truncate toward zero."""
    clipped = np.clip(samples, -1.0, 1.0).astype(np.float64)
    return np.trunc(clipped * INT16_SCALE).astype(np.int16)


# ── LAME backend ─────────────────────────────────────────


def _check_lameenc_available() -> bool:
    """Check if the lameenc (LAME) binding is installed."""
    try:
        import lameenc  # noqa: F401

        return True
    except ImportError:
        return False


class LameBlockEncoder:
    """``BlockEncoder`` backed by LAME through ``lameenc``.

    lameenc takes interleaved little-endian int16 bytes, so stereo blocks
    are interleaved before being fed in.
    """

    def __init__(
        self,
        n_channels: int,
        sample_rate: int,
        bitrate_kbps: int = 128,
        quality: int = 2,
    ) -> None:
        import lameenc

        self.n_channels = min(n_channels, 2)
        self._encoder = lameenc.Encoder()
        self._encoder.set_bit_rate(bitrate_kbps)
        self._encoder.set_in_sample_rate(sample_rate)
        self._encoder.set_channels(self.n_channels)
        self._encoder.set_quality(quality)

    def encode_block(
        self, left: NDArray[np.int16], right: NDArray[np.int16] | None = None
    ) -> bytes:
        if right is None:
            pcm = left.astype("<i2", copy=False)
        else:
            pcm = np.empty(len(left) * 2, dtype="<i2")
            pcm[0::2] = left
            pcm[1::2] = right
        return bytes(self._encoder.encode(pcm.tobytes()))

    def flush(self) -> bytes:
        return bytes(self._encoder.flush())


def create_block_encoder(
    n_channels: int,
    sample_rate: int,
    bitrate_kbps: int | None = None,
    quality: int | None = None,
) -> BlockEncoder:
    """Default ``EncoderFactory``: a LAME encoder configured from settings."""
    if not _check_lameenc_available():
        raise EncoderUnavailable("mp3/lameenc", "Install: pip install lameenc")
    return LameBlockEncoder(
        n_channels,
        sample_rate,
        bitrate_kbps=bitrate_kbps or settings.mp3_bitrate_kbps,
        quality=settings.mp3_quality if quality is None else quality,
    )


# ── Encode ───────────────────────────────────────────────


def encode(buffer: SampleBuffer, block_encoder: BlockEncoder | None) -> bytes:
    """Feed ``buffer`` through ``block_encoder`` in 1152-sample blocks.

    Only the first two channels are encoded. Mono input never passes a
    right channel.
    """
    if block_encoder is None:
        raise EncoderUnavailable("block encoder")

    left = to_int16(buffer.channel(0))
    right = to_int16(buffer.channel(1)) if buffer.n_channels > 1 else None

    fragments: list[bytes] = []
    for i in range(0, len(left), BLOCK_SIZE):
        left_block = left[i : i + BLOCK_SIZE]
        if right is None:
            data = block_encoder.encode_block(left_block)
        else:
            data = block_encoder.encode_block(left_block, right[i : i + BLOCK_SIZE])
        if len(data) > 0:
            fragments.append(data)

    tail = block_encoder.flush()
    if len(tail) > 0:
        fragments.append(tail)

    out = b"".join(fragments)
    logger.debug(
        "Encoded audio",
        blocks=-(-len(left) // BLOCK_SIZE),
        fragments=len(fragments),
        bytes=len(out),
    )
    return out
