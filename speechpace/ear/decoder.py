"""Decoder capability — compressed/uncompressed bytes to a SampleBuffer.

The pipelines take a ``Decoder`` explicitly; there is no shared decoding
context. ``SoundfileDecoder`` is the production implementation (libsndfile
handles WAV, FLAC, OGG and, from 1.1 on, MP3).
"""

from __future__ import annotations

import asyncio
import io
from typing import Protocol

import numpy as np
import soundfile as sf
import structlog

from speechpace.buffer import SampleBuffer
from speechpace.errors import DecodeFailure

logger = structlog.get_logger()


class Decoder(Protocol):
    """Turns a file's bytes into a decoded buffer."""

    async def decode(self, data: bytes, name: str = "<bytes>") -> SampleBuffer: ...


class SoundfileDecoder:
    """Decode audio bytes with soundfile in a worker thread."""

    def __init__(self, dtype: str = "float32") -> None:
        self.dtype = dtype

    def decode_sync(self, data: bytes, name: str = "<bytes>") -> SampleBuffer:
        if not data:
            raise DecodeFailure(name, "file is empty")
        try:
            samples, sr = sf.read(io.BytesIO(data), dtype=self.dtype, always_2d=True)
        except (sf.SoundFileError, RuntimeError) as e:
            raise DecodeFailure(name, str(e)) from e

        if samples.shape[0] == 0:
            raise DecodeFailure(name, "no audio frames")

        # soundfile yields (frames, channels); the buffer is channel-major.
        buffer = SampleBuffer(np.ascontiguousarray(samples.T), sr)
        logger.debug(
            "Decoded audio",
            source=name,
            sample_rate=sr,
            channels=buffer.n_channels,
            duration_s=round(buffer.duration_s, 3),
        )
        return buffer

    async def decode(self, data: bytes, name: str = "<bytes>") -> SampleBuffer:
        return await asyncio.to_thread(self.decode_sync, data, name)
