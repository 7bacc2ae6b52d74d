"""EAR — Analysis layer.

- Decoder: bytes → SampleBuffer (soundfile)
- Segmenter: threshold-based speech/silence detection
"""

from speechpace.ear.decoder import Decoder, SoundfileDecoder
from speechpace.ear.segmenter import (
    ScanEvent,
    ScanState,
    SegmentationStats,
    segment,
    summarize,
)

__all__ = [
    "Decoder",
    "SoundfileDecoder",
    "ScanEvent",
    "ScanState",
    "SegmentationStats",
    "segment",
    "summarize",
]
