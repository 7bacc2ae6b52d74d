"""Pytest fixtures."""

from __future__ import annotations

import pytest

from helpers import FakeEncoderFactory


@pytest.fixture
def encoder_factory() -> FakeEncoderFactory:
    return FakeEncoderFactory()
