"""SPEECHPACE data model — decoded waveforms and speech regions.

``SampleBuffer`` is the common currency between every stage. A buffer owns
a private, read-only copy of its samples, so a stage can never alter a
buffer that an earlier stage (or the caller) still holds.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike, NDArray


@dataclass(frozen=True)
class SpeechChunk:
    """Contiguous speech region as sample offsets ``[start, end)``."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0 or self.end <= self.start:
            msg = f"Invalid speech chunk [{self.start}, {self.end})"
            raise ValueError(msg)

    @property
    def duration(self) -> int:
        return self.end - self.start


class SampleBuffer:
    """Multi-channel float32 waveform, shaped ``(n_channels, length)``."""

    __slots__ = ("_data", "_sample_rate")

    def __init__(self, channels: ArrayLike, sample_rate: int) -> None:
        data = np.array(channels, dtype=np.float32, copy=True)
        if data.ndim == 1:
            data = data[np.newaxis, :]
        if data.ndim != 2:
            msg = f"Expected (channels, samples) array, got shape {data.shape}"
            raise ValueError(msg)
        if data.shape[0] < 1 or data.shape[1] < 1:
            msg = f"Buffer must hold at least one sample per channel, got shape {data.shape}"
            raise ValueError(msg)
        if int(sample_rate) <= 0:
            msg = f"Sample rate must be positive, got {sample_rate}"
            raise ValueError(msg)
        data.setflags(write=False)
        self._data = data
        self._sample_rate = int(sample_rate)

    @classmethod
    def from_channels(
        cls, channels: Sequence[ArrayLike], sample_rate: int
    ) -> SampleBuffer:
        """Build from one 1-D sequence per channel (all equal length)."""
        lengths = {len(np.asarray(ch)) for ch in channels}
        if len(lengths) > 1:
            msg = f"All channels must have identical length, got {sorted(lengths)}"
            raise ValueError(msg)
        return cls(np.stack([np.asarray(ch) for ch in channels]), sample_rate)

    @property
    def channels(self) -> NDArray[np.float32]:
        return self._data

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    @property
    def n_channels(self) -> int:
        return int(self._data.shape[0])

    @property
    def length(self) -> int:
        return int(self._data.shape[1])

    @property
    def duration_s(self) -> float:
        return self.length / self._sample_rate

    def channel(self, index: int) -> NDArray[np.float32]:
        """Read-only view of one channel."""
        return self._data[index]

    def __len__(self) -> int:
        return self.length

    def __repr__(self) -> str:
        return (
            f"SampleBuffer(n_channels={self.n_channels}, length={self.length}, "
            f"sample_rate={self._sample_rate})"
        )
