"""Silence segmenter — splits a waveform into speech regions.

Scans the first channel only; further channels are assumed time-aligned.

The scan is a small state machine:

  SCANNING ──onset──▶ IN_SPEECH ──dip──▶ IN_SILENCE_LOOKAHEAD
      ▲                   ▲                    │
      │                   └────interrupted─────┤
      └──────────────────────confirmed─────────┘

A dip is the first sample quieter than the threshold. The lookahead window
is ``min_silence_samples`` long; any louder sample inside it means the dip
was an interior pause and the scan continues in speech from that sample.
A fully quiet window closes the chunk where the dip began and scanning
resumes at the end of the window.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

import numpy as np
import structlog
from numpy.typing import NDArray

from speechpace.buffer import SampleBuffer, SpeechChunk
from speechpace.config import PaceSettings

logger = structlog.get_logger()


# ── State Machine ────────────────────────────────────────


class ScanState(StrEnum):
    SCANNING = "scanning"
    IN_SPEECH = "in_speech"
    IN_SILENCE_LOOKAHEAD = "in_silence_lookahead"
    FINISHED = "finished"


class ScanEvent(StrEnum):
    ONSET = "onset"
    DIP = "dip"
    INTERRUPTED = "interrupted"
    CONFIRMED = "confirmed"
    END = "end"


TRANSITIONS: dict[tuple[ScanState, ScanEvent], ScanState] = {
    (ScanState.SCANNING, ScanEvent.ONSET): ScanState.IN_SPEECH,
    (ScanState.SCANNING, ScanEvent.END): ScanState.FINISHED,
    (ScanState.IN_SPEECH, ScanEvent.DIP): ScanState.IN_SILENCE_LOOKAHEAD,
    (ScanState.IN_SPEECH, ScanEvent.END): ScanState.FINISHED,
    (ScanState.IN_SILENCE_LOOKAHEAD, ScanEvent.INTERRUPTED): ScanState.IN_SPEECH,
    (ScanState.IN_SILENCE_LOOKAHEAD, ScanEvent.CONFIRMED): ScanState.SCANNING,
}


class _Scanner:
    """Walks one channel, emitting chunks as transitions fire."""

    def __init__(self, samples: NDArray[np.float32], threshold: float, window: int) -> None:
        magnitude = np.abs(samples)
        self.length = len(samples)
        self.window = window
        # Sorted positions of loud / quiet samples; equal-to-threshold is neither.
        self._loud = np.flatnonzero(magnitude > threshold)
        self._quiet = np.flatnonzero(magnitude < threshold)

        self.state = ScanState.SCANNING
        self.pos = 0
        self.speech_start = -1
        self.dip = -1
        self.chunks: list[SpeechChunk] = []

    @staticmethod
    def _next(positions: NDArray[np.intp], at: int) -> int | None:
        k = int(np.searchsorted(positions, at, side="left"))
        if k < len(positions):
            return int(positions[k])
        return None

    # Each step inspects the current state and returns the event it saw.

    def _step_scanning(self) -> ScanEvent:
        onset = self._next(self._loud, self.pos)
        if onset is None:
            return ScanEvent.END
        self.speech_start = onset
        self.pos = onset
        return ScanEvent.ONSET

    def _step_in_speech(self) -> ScanEvent:
        dip = self._next(self._quiet, self.pos)
        if dip is None:
            self.chunks.append(SpeechChunk(self.speech_start, self.length))
            return ScanEvent.END
        self.dip = dip
        return ScanEvent.DIP

    def _step_lookahead(self) -> ScanEvent:
        window_end = min(self.dip + self.window, self.length)
        louder = self._next(self._loud, self.dip)
        if louder is not None and louder < window_end:
            self.pos = louder
            return ScanEvent.INTERRUPTED
        self.chunks.append(SpeechChunk(self.speech_start, self.dip))
        self.speech_start = -1
        self.pos = self.dip + self.window
        return ScanEvent.CONFIRMED

    def run(self) -> list[SpeechChunk]:
        steps = {
            ScanState.SCANNING: self._step_scanning,
            ScanState.IN_SPEECH: self._step_in_speech,
            ScanState.IN_SILENCE_LOOKAHEAD: self._step_lookahead,
        }
        while self.state is not ScanState.FINISHED:
            event = steps[self.state]()
            self.state = TRANSITIONS[(self.state, event)]
        return self.chunks


# ── Public API ───────────────────────────────────────────


@dataclass
class SegmentationStats:
    """Summary of a segmentation pass."""

    chunk_count: int
    speech_samples: int
    speech_ratio: float


def segment(buffer: SampleBuffer, settings: PaceSettings) -> list[SpeechChunk]:
    """Detect speech chunks on the buffer's first channel.

    Returns an empty list when no sample rises above the threshold.
    """
    window = settings.min_silence_samples(buffer.sample_rate)
    scanner = _Scanner(buffer.channel(0), settings.silence_threshold, window)
    chunks = scanner.run()

    logger.debug(
        "Segmentation complete",
        chunks=len(chunks),
        threshold=settings.silence_threshold,
        min_silence_samples=window,
        length=buffer.length,
    )
    return chunks


def summarize(chunks: list[SpeechChunk], buffer: SampleBuffer) -> SegmentationStats:
    """How much of ``buffer`` the chunks cover."""
    speech = sum(c.duration for c in chunks)
    return SegmentationStats(
        chunk_count=len(chunks),
        speech_samples=speech,
        speech_ratio=speech / buffer.length,
    )
