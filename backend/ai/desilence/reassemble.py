"""
Reassemble module: join kept chunks with a uniform synthetic silence gap.
"""

import logging
import math

import numpy as np

from .schema import Interval, SampleBuffer

logger = logging.getLogger(__name__)


def output_frames(chunks: list[Interval], silence_frames: int) -> int:
    """Frame count of the reassembled buffer."""
    total = sum(c.length for c in chunks)
    if len(chunks) > 1:
        total += silence_frames * (len(chunks) - 1)
    return total


def reassemble(
    buffer: SampleBuffer,
    chunks: list[Interval],
    new_silence_sec: float,
) -> SampleBuffer:
    """
    Copy the kept chunks of every channel into a new buffer.

    A gap of floor(sample_rate * new_silence_sec) zero frames separates
    consecutive chunks; nothing is inserted before the first or after the last.

    Args:
        buffer: Source audio (not modified).
        chunks: Ordered, disjoint kept chunks.
        new_silence_sec: Gap length in seconds.

    Returns:
        New SampleBuffer with the same channel count and sample rate. Zero
        frames when nothing is kept.
    """
    silence_frames = math.floor(buffer.sample_rate * new_silence_sec)
    total = output_frames(chunks, silence_frames)

    if not chunks or total <= 0:
        logger.warning("Reassemble: nothing kept, returning empty buffer")
        return SampleBuffer.empty(buffer.channels, buffer.sample_rate)

    out = np.zeros((buffer.channels, total), dtype=np.float32)
    cursor = 0
    for i, c in enumerate(chunks):
        out[:, cursor : cursor + c.length] = buffer.audio[:, c.start : c.end]
        cursor += c.length
        if i < len(chunks) - 1:
            cursor += silence_frames

    logger.info(
        "Reassemble: %d chunks, gap=%d frames -> %d frames (%.2f s)",
        len(chunks),
        silence_frames,
        total,
        total / buffer.sample_rate,
    )
    return SampleBuffer(audio=out, sample_rate=buffer.sample_rate)
