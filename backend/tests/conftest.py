"""Shared fixtures: synthetic sample buffers and option builders.

Puts ``backend/`` on ``sys.path`` so ``ai``, ``core`` and ``routers`` import
the same way they do under ``uvicorn --app-dir backend``.
"""

from __future__ import annotations

import sys
from pathlib import Path

import numpy as np
import pytest

BACKEND = Path(__file__).resolve().parent.parent
if str(BACKEND) not in sys.path:
    sys.path.insert(0, str(BACKEND))

from ai.desilence.schema import ProcessingOptions, SampleBuffer  # noqa: E402

SCENARIO_RATE = 1000
SCENARIO_FRAMES = 5000
SCENARIO_SILENCE = (1000, 3000)


def make_options(
    threshold_db: float = -20.0,
    min_silence_sec: float = 1.0,
    padding_sec: float = 0.0,
    new_silence_sec: float = 0.1,
) -> ProcessingOptions:
    return ProcessingOptions.build(
        threshold_db=threshold_db,
        min_silence_sec=min_silence_sec,
        padding_sec=padding_sec,
        new_silence_sec=new_silence_sec,
    )


@pytest.fixture
def scenario_buffer() -> SampleBuffer:
    """1000 Hz mono, 5 s: 0.5 everywhere except zeros in [1000, 3000)."""
    y = np.full(SCENARIO_FRAMES, 0.5, dtype=np.float32)
    y[SCENARIO_SILENCE[0] : SCENARIO_SILENCE[1]] = 0.0
    return SampleBuffer.from_array(y, SCENARIO_RATE)


@pytest.fixture
def silent_buffer() -> SampleBuffer:
    return SampleBuffer.from_array(np.zeros(3000, dtype=np.float32), SCENARIO_RATE)


@pytest.fixture
def loud_buffer() -> SampleBuffer:
    rng = np.random.default_rng(7)
    y = rng.uniform(0.2, 0.9, size=(2, 4000)).astype(np.float32)
    y[:, ::2] *= -1
    return SampleBuffer.from_array(y, 8000)


@pytest.fixture
def options_factory():
    return make_options
