"""SPEECHPACE merger tests — validation and ordered concatenation."""

from __future__ import annotations

import numpy as np
import pytest

from speechpace.buffer import SampleBuffer
from speechpace.errors import (
    ChannelCountMismatch,
    IncompatibleBuffers,
    InvalidInputCount,
    SampleRateMismatch,
)
from speechpace.hands import merger as merger_mod
from speechpace.hands.merger import merge, validate


def _noise(length: int, sr: int = 16000, channels: int = 1, seed: int = 0) -> SampleBuffer:
    rng = np.random.default_rng(seed)
    return SampleBuffer(rng.uniform(-1, 1, size=(channels, length)).astype(np.float32), sr)


def test_two_mono_buffers_concatenate_in_order() -> None:
    a = _noise(1000, seed=1)
    b = _noise(2000, seed=2)
    out = merge([a, b])

    assert out.length == 3000
    assert out.sample_rate == 16000
    np.testing.assert_array_equal(out.channel(0)[:1000], a.channel(0))
    np.testing.assert_array_equal(out.channel(0)[1000:], b.channel(0))


def test_order_is_caller_controlled() -> None:
    a = _noise(10, seed=1)
    b = _noise(20, seed=2)
    ab = merge([a, b])
    ba = merge([b, a])
    np.testing.assert_array_equal(ba.channel(0)[:20], b.channel(0))
    assert not np.array_equal(ab.channels, ba.channels)


def test_stereo_channels_stay_separate() -> None:
    a = _noise(300, channels=2, seed=4)
    b = _noise(500, channels=2, seed=5)
    out = merge([a, b])
    assert out.n_channels == 2
    for ch in range(2):
        np.testing.assert_array_equal(out.channel(ch)[300:], b.channel(ch))


def test_merge_is_associative() -> None:
    a, b, c = _noise(700, seed=1), _noise(1100, seed=2), _noise(333, seed=3)
    stepwise = merge([merge([a, b]), c])
    at_once = merge([a, b, c])
    assert stepwise.length == a.length + b.length + c.length
    np.testing.assert_array_equal(stepwise.channels, at_once.channels)


# ── Failures ─────────────────────────────────────────────


@pytest.mark.parametrize("count", [0, 1])
def test_fewer_than_two_inputs(count: int) -> None:
    with pytest.raises(InvalidInputCount) as exc:
        merge([_noise(10)] * count)
    assert exc.value.count == count


def test_sample_rate_mismatch_names_both_rates(monkeypatch) -> None:
    """44.1 kHz + 48 kHz fails during validation; nothing is copied."""

    def _never(*args, **kwargs):
        raise AssertionError("concatenate must not run after a failed validation")

    monkeypatch.setattr(merger_mod, "concatenate", _never)

    with pytest.raises(SampleRateMismatch) as exc:
        merge([_noise(100, sr=44100), _noise(100, sr=48000)])

    err = exc.value
    assert (err.expected, err.actual, err.index) == (44100, 48000, 1)
    assert "44100" in str(err) and "48000" in str(err)
    assert isinstance(err, IncompatibleBuffers)


def test_channel_count_mismatch() -> None:
    with pytest.raises(ChannelCountMismatch) as exc:
        validate([_noise(100), _noise(100), _noise(100, channels=2)])
    assert (exc.value.expected, exc.value.actual, exc.value.index) == (1, 2, 2)


def test_validate_returns_total_length() -> None:
    assert validate([_noise(5), _noise(7), _noise(11)]) == 23
