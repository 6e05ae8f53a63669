"""
Silence module: find runs of near-zero amplitude on the reference channel.

Only the first channel is inspected; the other channels follow its decisions.
"""

import logging

import numpy as np

from .schema import Interval, SampleBuffer

logger = logging.getLogger(__name__)


def db_to_amplitude(threshold_db: float) -> float:
    """Convert a dBFS threshold to a linear amplitude cutoff."""
    return 10 ** (threshold_db / 20)


def detect_silence(buffer: SampleBuffer, threshold_db: float) -> list[Interval]:
    """
    Find every maximal run of silent frames.

    A frame is silent when the absolute value of its reference-channel sample
    is strictly below the linear cutoff derived from threshold_db.

    Args:
        buffer: Decoded audio.
        threshold_db: Silence threshold in dBFS (negative).

    Returns:
        Ordered, disjoint list of Interval(start, end), end exclusive.
    """
    if buffer.frames == 0:
        return []

    cutoff = db_to_amplitude(threshold_db)
    silent = np.abs(buffer.audio[0]) < cutoff

    # Edges of each run: +1 where silence starts, -1 where it ends
    edges = np.diff(np.concatenate(([0], silent.astype(np.int8), [0])))
    starts = np.flatnonzero(edges == 1)
    ends = np.flatnonzero(edges == -1)

    intervals = [Interval(int(s), int(e)) for s, e in zip(starts, ends)]
    logger.info("Silence detect: %d intervals (cutoff=%.4f)", len(intervals), cutoff)
    return intervals
