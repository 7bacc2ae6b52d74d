"""Caller-side sessions for the Pace and Merge workflows.

Each session owns the Idle → Ready → Processing → Done/Error state machine,
the latest progress line, and the result of the last run. Pipelines report
into a session but never change its state themselves.
"""

from __future__ import annotations

import time
from enum import StrEnum
from pathlib import PurePath

import structlog

from speechpace.config import PaceSettings, settings
from speechpace.console.encoder import EncoderFactory, create_block_encoder
from speechpace.console.pipeline import (
    AudioSource,
    CancelToken,
    PipelineResult,
    merge_audio,
    process_audio,
)
from speechpace.ear.decoder import Decoder
from speechpace.errors import InvalidInputCount, SpeechPaceError

logger = structlog.get_logger()


class ProcessingState(StrEnum):
    IDLE = "idle"
    READY = "ready"
    PROCESSING = "processing"
    DONE = "done"
    ERROR = "error"


def paced_file_name(source_name: str) -> str:
    """``lesson.wav`` → ``lesson_paced.mp3``. Output is always MP3."""
    stem = PurePath(source_name).stem or "audio"
    return f"{stem}_paced.mp3"


def merged_file_name(timestamp_ms: int | None = None) -> str:
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return f"merged_audio_{timestamp_ms}.mp3"


class _Session:
    def __init__(
        self,
        decoder: Decoder,
        encoder_factory: EncoderFactory = create_block_encoder,
    ) -> None:
        self.decoder = decoder
        self.encoder_factory = encoder_factory
        self.state = ProcessingState.IDLE
        self.progress_message = ""
        self.error: str | None = None
        self.result: PipelineResult | None = None
        self.output_name = ""
        self._cancel: CancelToken | None = None

    def _set_progress(self, message: str) -> None:
        self.progress_message = message

    def _begin(self) -> CancelToken:
        self.state = ProcessingState.PROCESSING
        self.error = None
        self.result = None
        self.output_name = ""
        self._cancel = CancelToken()
        return self._cancel

    def _fail(self, error: Exception) -> None:
        logger.error("Processing failed", error=str(error), kind=type(error).__name__)
        self.error = str(error)
        self.state = ProcessingState.ERROR
        self.progress_message = ""

    def _require_not_running(self, action: str) -> None:
        if self.state is ProcessingState.PROCESSING:
            msg = f"Cannot {action} while processing"
            raise RuntimeError(msg)

    def cancel(self) -> None:
        """Abort the running job at its next suspension point."""
        if self._cancel is not None:
            self._cancel.cancel()

    def _clear(self) -> None:
        self.state = ProcessingState.IDLE
        self.progress_message = ""
        self.error = None
        self.result = None
        self.output_name = ""
        self._cancel = None


# ── Pace ─────────────────────────────────────────────────


class PaceSession(_Session):
    """One file in, one paced MP3 out."""

    def __init__(
        self,
        decoder: Decoder,
        encoder_factory: EncoderFactory = create_block_encoder,
        pace: PaceSettings | None = None,
    ) -> None:
        super().__init__(decoder, encoder_factory)
        self.pace = pace or settings.default_pace_settings()
        self.source: AudioSource | None = None

    def select(self, source: AudioSource) -> None:
        self._require_not_running("select a file")
        self.source = source
        self.error = None
        self.state = ProcessingState.READY

    def update_settings(self, pace: PaceSettings) -> None:
        self._require_not_running("change settings")
        self.pace = pace

    async def process(self) -> PipelineResult | None:
        if self.source is None or self.state is ProcessingState.PROCESSING:
            msg = f"Cannot process from state '{self.state}'"
            raise RuntimeError(msg)

        cancel = self._begin()
        try:
            result = await process_audio(
                self.source,
                self.pace,
                decoder=self.decoder,
                encoder_factory=self.encoder_factory,
                progress=self._set_progress,
                cancel=cancel,
            )
        except SpeechPaceError as e:
            self._fail(e)
            return None
        except Exception as e:
            self._fail(e)
            raise

        self.result = result
        self.output_name = paced_file_name(self.source.name)
        self.state = ProcessingState.DONE
        self.progress_message = "Processing complete!"
        return result

    def reset(self) -> None:
        self.source = None
        self._clear()


# ── Merge ────────────────────────────────────────────────


class MergeSession(_Session):
    """An ordered list of files concatenated into one MP3."""

    def __init__(
        self,
        decoder: Decoder,
        encoder_factory: EncoderFactory = create_block_encoder,
        yield_s: float | None = None,
    ) -> None:
        super().__init__(decoder, encoder_factory)
        self.sources: list[AudioSource] = []
        self.yield_s = yield_s

    def add(self, *sources: AudioSource) -> None:
        self._require_not_running("add files")
        self.sources.extend(sources)
        self.state = ProcessingState.READY

    def remove(self, index: int) -> AudioSource:
        self._require_not_running("remove files")
        item = self.sources.pop(index)
        if not self.sources:
            self._clear()
        return item

    def move(self, src: int, dst: int) -> None:
        """Move the source at ``src`` so it ends up at ``dst``."""
        self._require_not_running("reorder files")
        item = self.sources.pop(src)
        self.sources.insert(dst, item)

    @property
    def names(self) -> list[str]:
        return [s.name for s in self.sources]

    async def merge(self) -> PipelineResult | None:
        if self.state is ProcessingState.PROCESSING:
            msg = "A merge is already running"
            raise RuntimeError(msg)
        if len(self.sources) < 2:
            self.error = str(InvalidInputCount(len(self.sources)))
            return None

        cancel = self._begin()
        try:
            result = await merge_audio(
                list(self.sources),
                decoder=self.decoder,
                encoder_factory=self.encoder_factory,
                progress=self._set_progress,
                cancel=cancel,
                yield_s=self.yield_s,
            )
        except SpeechPaceError as e:
            self._fail(e)
            return None
        except Exception as e:
            self._fail(e)
            raise

        self.result = result
        self.output_name = merged_file_name()
        self.state = ProcessingState.DONE
        self.progress_message = "Merging complete!"
        return result

    def reset(self) -> None:
        self.sources = []
        self._clear()
