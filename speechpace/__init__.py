"""SPEECHPACE — Re-time speech audio by rescaling its pauses, or merge files.

Layers:
  ear      analysis (decoding, speech segmentation)
  hands    waveform construction (pause resynthesis, merging)
  console  MP3 encoding, pipelines, caller sessions
"""

__version__ = "0.1.0"
