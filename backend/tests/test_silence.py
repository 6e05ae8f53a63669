"""Tests for silence detection on the reference channel."""

from __future__ import annotations

import numpy as np
import pytest

from ai.desilence.schema import Interval, SampleBuffer
from ai.desilence.silence import db_to_amplitude, detect_silence


def test_db_to_amplitude() -> None:
    assert db_to_amplitude(-20) == pytest.approx(0.1)
    assert db_to_amplitude(-40) == pytest.approx(0.01)
    assert db_to_amplitude(-60) == pytest.approx(0.001)


def test_scenario_single_silence(scenario_buffer: SampleBuffer) -> None:
    assert detect_silence(scenario_buffer, -20) == [Interval(1000, 3000)]


def test_all_silent_is_one_interval(silent_buffer: SampleBuffer) -> None:
    assert detect_silence(silent_buffer, -40) == [Interval(0, silent_buffer.frames)]


def test_all_loud_is_empty(loud_buffer: SampleBuffer) -> None:
    assert detect_silence(loud_buffer, -20) == []


def test_zero_length_is_empty() -> None:
    buffer = SampleBuffer.from_array(np.zeros(0, dtype=np.float32), 44100)
    assert detect_silence(buffer, -40) == []


def test_leading_and_trailing_runs() -> None:
    y = np.array([0, 0, 0.5, 0.5, 0, 0.9, 0, 0], dtype=np.float32)
    buffer = SampleBuffer.from_array(y, 8)
    assert detect_silence(buffer, -20) == [Interval(0, 2), Interval(4, 5), Interval(6, 8)]


def test_cutoff_is_strict() -> None:
    # Sample equal to the cutoff is not silent; negative samples use magnitude
    y = np.array([0.1, -0.05, 0.05, -0.5], dtype=np.float32)
    buffer = SampleBuffer.from_array(y, 4)
    assert detect_silence(buffer, -20) == [Interval(1, 3)]


def test_only_reference_channel_is_inspected() -> None:
    y = np.zeros((2, 100), dtype=np.float32)
    y[1, :] = 0.9
    y[0, 50:] = 0.9
    buffer = SampleBuffer.from_array(y, 100)
    assert detect_silence(buffer, -20) == [Interval(0, 50)]


def test_intervals_disjoint_and_increasing() -> None:
    rng = np.random.default_rng(0)
    y = rng.uniform(-1, 1, size=20000).astype(np.float32)
    y[rng.random(20000) < 0.4] = 0.0
    buffer = SampleBuffer.from_array(y, 16000)

    intervals = detect_silence(buffer, -30)

    assert intervals
    for iv in intervals:
        assert 0 <= iv.start < iv.end <= buffer.frames
    for prev, cur in zip(intervals, intervals[1:]):
        # Maximal runs: never adjacent, always separated by a loud frame
        assert prev.end < cur.start
