"""
Chunk module: turn silent intervals into the spans of audio to keep.

Short pauses stay in the audio; only silences at least min_silence_sec long
are removed. Kept spans are padded with original audio and merged when the
padding makes them touch.
"""

import logging
import math

from .schema import Interval, ProcessingOptions

logger = logging.getLogger(__name__)


def _gaps(silences: list[Interval], frames: int) -> list[Interval]:
    """Spans between (and around) the removable silences, skipping empty ones."""
    chunks: list[Interval] = []
    last_end = 0
    for silence in silences:
        if silence.start > last_end:
            chunks.append(Interval(last_end, silence.start))
        last_end = silence.end
    if last_end < frames:
        chunks.append(Interval(last_end, frames))
    return chunks


def merge_overlapping(chunks: list[Interval]) -> list[Interval]:
    """Merge chunks whose start falls before the end of the previous one."""
    merged: list[Interval] = []
    for current in sorted(chunks):
        if merged and current.start < merged[-1].end:
            last = merged[-1]
            merged[-1] = Interval(last.start, max(last.end, current.end))
        else:
            merged.append(current)
    return merged


def extract_chunks(
    silences: list[Interval],
    frames: int,
    sample_rate: int,
    options: ProcessingOptions,
) -> list[Interval]:
    """
    Compute the kept chunks for a buffer.

    Args:
        silences: Ordered silent intervals from detect_silence.
        frames: Frame count of the buffer.
        sample_rate: Sample rate (Hz).
        options: Processing options (min silence and padding are used here).

    Returns:
        Ordered, disjoint, strictly increasing list of kept Interval.
    """
    if frames <= 0:
        return []

    # Not floored: a silence must be at least this many (fractional) frames long
    min_silence_frames = sample_rate * options.min_silence_sec
    padding_frames = math.floor(sample_rate * options.padding_sec)

    removable = [s for s in silences if s.length >= min_silence_frames]
    if not removable:
        logger.info("Chunk: no silence >= %.3fs, keeping whole buffer", options.min_silence_sec)
        return [Interval(0, frames)]

    raw = _gaps(removable, frames)
    padded = [
        Interval(max(0, c.start - padding_frames), min(frames, c.end + padding_frames))
        for c in raw
    ]
    chunks = merge_overlapping(padded)

    logger.info(
        "Chunk: %d removable silences -> %d chunks (padding=%d frames, %d merged)",
        len(removable),
        len(chunks),
        padding_frames,
        len(padded) - len(chunks),
    )
    return chunks
