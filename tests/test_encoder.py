"""SPEECHPACE encoder tests — PCM conversion and block feeding."""

from __future__ import annotations

import numpy as np
import pytest

from helpers import FakeBlockEncoder
from speechpace.buffer import SampleBuffer
from speechpace.console import encoder as encoder_mod
from speechpace.console.encoder import BLOCK_SIZE, create_block_encoder, encode, to_int16
from speechpace.errors import EncoderUnavailable


# ── PCM conversion ───────────────────────────────────────


def test_to_int16_clamps_scales_and_truncates() -> None:
    samples = np.array([0.0, 1.0, -1.0, 2.0, -3.0, 0.5, -0.5, 1e-5], dtype=np.float32)
    out = to_int16(samples)
    assert out.dtype == np.int16
    assert out.tolist() == [0, 32767, -32767, 32767, -32767, 16383, -16383, 0]


# ── Block feeding ────────────────────────────────────────


def test_mono_blocks_omit_right_channel() -> None:
    buf = SampleBuffer(np.full(2500, 0.25, dtype=np.float32), 16000)
    enc = FakeBlockEncoder(1, 16000)

    data = encode(buf, enc)

    assert [len(left) for left, _ in enc.blocks] == [BLOCK_SIZE, BLOCK_SIZE, 196]
    assert all(right is None for _, right in enc.blocks)
    assert enc.flushed
    # 2 bytes per full block, nothing for the short one, then the flush tail
    assert data == b"FF" + b"FF" + b"END"


def test_stereo_blocks_are_fed_in_lockstep() -> None:
    left = np.linspace(-1, 1, 3000, dtype=np.float32)
    right = -left
    buf = SampleBuffer(np.stack([left, right]), 44100)
    enc = FakeBlockEncoder(2, 44100)

    encode(buf, enc)

    assert len(enc.blocks) == 3
    fed_left = np.concatenate([blk[0] for blk in enc.blocks])
    fed_right = np.concatenate([blk[1] for blk in enc.blocks])
    np.testing.assert_array_equal(fed_left, to_int16(left))
    np.testing.assert_array_equal(fed_right, to_int16(right))


def test_missing_block_encoder_is_fatal() -> None:
    buf = SampleBuffer(np.zeros(10, dtype=np.float32), 8000)
    with pytest.raises(EncoderUnavailable):
        encode(buf, None)


def test_factory_reports_missing_lame(monkeypatch) -> None:
    monkeypatch.setattr(encoder_mod, "_check_lameenc_available", lambda: False)
    with pytest.raises(EncoderUnavailable) as exc:
        create_block_encoder(2, 44100)
    assert exc.value.capability == "mp3/lameenc"
    assert "lameenc" in str(exc.value)


# ── LAME backend ─────────────────────────────────────────


@pytest.mark.parametrize("channels", [1, 2])
def test_lame_produces_mp3_bytes(channels: int) -> None:
    pytest.importorskip("lameenc")
    sr = 44100
    t = np.arange(sr) / sr
    tone = (0.4 * np.sin(2 * np.pi * 440 * t)).astype(np.float32)
    buf = SampleBuffer(np.tile(tone, (channels, 1)), sr)

    data = encode(buf, create_block_encoder(channels, sr))

    assert len(data) > 1000
