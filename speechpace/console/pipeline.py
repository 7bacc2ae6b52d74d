"""SPEECHPACE pipelines — Pace and Merge orchestration.

Pace:  decode → segment → resynthesize → encode   (4 steps)
Merge: decode each input → validate → concatenate → encode   (N + 2 steps)

The pipelines hold no state of their own. Progress is pushed into a
caller-supplied sink; the caller owns the Idle/Ready/Processing/Done/Error
state machine (see ``speechpace.console.session``).
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
from dataclasses import dataclass

import structlog

from speechpace.buffer import SampleBuffer
from speechpace.config import PaceSettings, settings
from speechpace.console.encoder import EncoderFactory, create_block_encoder, encode
from speechpace.ear.decoder import Decoder
from speechpace.ear.segmenter import segment, summarize
from speechpace.errors import Cancelled, InvalidInputCount, NoSpeechDetected
from speechpace.hands.merger import concatenate, validate
from speechpace.hands.resynth import resynthesize

logger = structlog.get_logger()

ProgressSink = Callable[[str], None]

MP3_MEDIA_TYPE = "audio/mpeg"


# ── Types ────────────────────────────────────────────────


@dataclass(frozen=True)
class AudioSource:
    """A named, not-yet-decoded audio file handed in by the caller."""

    name: str
    data: bytes


@dataclass
class PipelineResult:
    """Encoded output of a pipeline run."""

    audio: bytes
    sample_rate: int
    n_channels: int
    duration_s: float
    chunk_count: int | None = None
    media_type: str = MP3_MEDIA_TYPE


class CancelToken:
    """Cooperative cancellation flag checked at each suspension point."""

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            msg = "Processing was cancelled."
            raise Cancelled(msg)


# ── Helpers ──────────────────────────────────────────────


def _report(progress: ProgressSink | None, message: str) -> None:
    """Forward a status line; a failing sink never aborts the run."""
    logger.info("Progress", message=message)
    if progress is None:
        return
    try:
        progress(message)
    except Exception as e:
        logger.warning("Progress sink failed", error=str(e))


def _checkpoint(cancel: CancelToken | None) -> None:
    if cancel is not None:
        cancel.raise_if_cancelled()


async def _encode(buffer: SampleBuffer, encoder_factory: EncoderFactory) -> bytes:
    block_encoder = encoder_factory(buffer.n_channels, buffer.sample_rate)
    return await asyncio.to_thread(encode, buffer, block_encoder)


# ── Pace ─────────────────────────────────────────────────


async def process_audio(
    source: AudioSource,
    pace: PaceSettings,
    *,
    decoder: Decoder,
    encoder_factory: EncoderFactory = create_block_encoder,
    progress: ProgressSink | None = None,
    cancel: CancelToken | None = None,
) -> PipelineResult:
    """Re-time one file so every pause is scaled by ``pace.pause_multiplier``."""
    _checkpoint(cancel)
    _report(progress, "Step 1/4: Decoding audio...")
    original = await decoder.decode(source.data, source.name)
    _checkpoint(cancel)

    _report(progress, "Step 2/4: Analyzing for speech...")
    chunks = segment(original, pace)
    if not chunks:
        raise NoSpeechDetected()

    stats = summarize(chunks, original)
    logger.info(
        "Speech detected",
        source=source.name,
        chunks=stats.chunk_count,
        speech_ratio=round(stats.speech_ratio, 3),
    )

    _report(
        progress,
        f"Step 3/4: Reconstructing audio with pauses... (found {len(chunks)} phrases)",
    )
    paced = resynthesize(original, chunks, pace)

    _report(progress, "Step 4/4: Encoding final MP3 file...")
    _checkpoint(cancel)
    audio = await _encode(paced, encoder_factory)
    _checkpoint(cancel)

    return PipelineResult(
        audio=audio,
        sample_rate=paced.sample_rate,
        n_channels=paced.n_channels,
        duration_s=paced.duration_s,
        chunk_count=len(chunks),
    )


# ── Merge ────────────────────────────────────────────────


async def merge_audio(
    sources: Sequence[AudioSource],
    *,
    decoder: Decoder,
    encoder_factory: EncoderFactory = create_block_encoder,
    progress: ProgressSink | None = None,
    cancel: CancelToken | None = None,
    yield_s: float | None = None,
) -> PipelineResult:
    """Concatenate ``sources`` in order into one MP3.

    Inputs are decoded strictly one after another, in list order.
    """
    if len(sources) < 2:
        raise InvalidInputCount(len(sources))

    pause = settings.merge_yield_s if yield_s is None else yield_s
    count = len(sources)
    total_steps = count + 2

    _checkpoint(cancel)
    _report(progress, f"Step 1/{total_steps}: Decoding audio files...")
    buffers: list[SampleBuffer] = []
    for i, source in enumerate(sources):
        _report(progress, f"Decoding {i + 1}/{count}: {source.name}...")
        buffers.append(await decoder.decode(source.data, source.name))
        _checkpoint(cancel)

    _report(progress, f"Step {count + 1}/{total_steps}: Validating audio properties...")
    await asyncio.sleep(pause)
    _checkpoint(cancel)
    total = validate(buffers)

    _report(progress, f"Step {count + 2}/{total_steps}: Merging audio...")
    await asyncio.sleep(pause)
    _checkpoint(cancel)
    merged = concatenate(buffers, total)

    logger.info(
        "Merged audio",
        inputs=count,
        sample_rate=merged.sample_rate,
        duration_s=round(merged.duration_s, 3),
    )

    _checkpoint(cancel)
    audio = await _encode(merged, encoder_factory)
    _checkpoint(cancel)

    return PipelineResult(
        audio=audio,
        sample_rate=merged.sample_rate,
        n_channels=merged.n_channels,
        duration_s=merged.duration_s,
    )
