"""Fakes and signal builders shared by the tests."""

from __future__ import annotations

import numpy as np

from speechpace.buffer import SampleBuffer
from speechpace.errors import DecodeFailure


class FakeBlockEncoder:
    """Records every block; emits one byte per 576 input samples."""

    def __init__(self, n_channels: int, sample_rate: int) -> None:
        self.n_channels = n_channels
        self.sample_rate = sample_rate
        self.blocks: list[tuple[np.ndarray, np.ndarray | None]] = []
        self.flushed = False

    def encode_block(self, left, right=None) -> bytes:
        self.blocks.append((np.array(left), None if right is None else np.array(right)))
        return b"F" * (len(left) // 576)

    def flush(self) -> bytes:
        self.flushed = True
        return b"END"


class FakeEncoderFactory:
    """EncoderFactory that keeps every encoder it builds."""

    def __init__(self) -> None:
        self.created: list[FakeBlockEncoder] = []

    def __call__(self, n_channels: int, sample_rate: int) -> FakeBlockEncoder:
        enc = FakeBlockEncoder(n_channels, sample_rate)
        self.created.append(enc)
        return enc


class FakeDecoder:
    """Looks buffers up by source name; unknown names fail to decode."""

    def __init__(self, buffers: dict[str, SampleBuffer]) -> None:
        self.buffers = buffers
        self.calls: list[str] = []

    async def decode(self, data: bytes, name: str = "<bytes>") -> SampleBuffer:
        self.calls.append(name)
        if name not in self.buffers:
            raise DecodeFailure(name, "unsupported format")
        return self.buffers[name]


def speech_buffer(
    segments: list[tuple[int, int]],
    length: int,
    sample_rate: int = 1000,
    level: float = 0.5,
    n_channels: int = 1,
) -> SampleBuffer:
    """Silence with constant-level 'speech' over each ``[start, end)``."""
    data = np.zeros((n_channels, length), dtype=np.float32)
    for start, end in segments:
        data[:, start:end] = level
    return SampleBuffer(data, sample_rate)
