"""CONSOLE — Encoding and orchestration layer.

Modules:
  encoder: float buffers → MP3 via a block encoder (LAME)
  pipeline: Pace and Merge orchestration with progress reporting
  session: caller-side state machine around a pipeline run
"""

from speechpace.console.encoder import (
    BLOCK_SIZE,
    BlockEncoder,
    LameBlockEncoder,
    create_block_encoder,
    encode,
)
from speechpace.console.pipeline import (
    AudioSource,
    CancelToken,
    PipelineResult,
    merge_audio,
    process_audio,
)
from speechpace.console.session import MergeSession, PaceSession, ProcessingState

__all__ = [
    "BLOCK_SIZE",
    "BlockEncoder",
    "LameBlockEncoder",
    "create_block_encoder",
    "encode",
    "AudioSource",
    "CancelToken",
    "PipelineResult",
    "merge_audio",
    "process_audio",
    "MergeSession",
    "PaceSession",
    "ProcessingState",
]
