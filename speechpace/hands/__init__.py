"""HANDS — Waveform construction layer.

- Resynth: rebuild speech with rescaled pauses
- Merger: validated, order-preserving concatenation
"""

from speechpace.hands.merger import concatenate, merge, validate
from speechpace.hands.resynth import output_length, resynthesize, write_offsets

__all__ = [
    "concatenate",
    "merge",
    "validate",
    "output_length",
    "resynthesize",
    "write_offsets",
]
