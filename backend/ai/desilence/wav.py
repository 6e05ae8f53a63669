"""
WAV module: serialize a sample buffer as canonical 16-bit PCM RIFF/WAVE.

Layout is a single "fmt " chunk followed by a single "data" chunk, so the
file is always 44 header bytes plus frames * channels * 2 data bytes.
"""

import logging
import struct
from pathlib import Path

import numpy as np

from .schema import WAV_MIME_TYPE, EncodedAudio, SampleBuffer

logger = logging.getLogger(__name__)

HEADER_SIZE = 44
BITS_PER_SAMPLE = 16
BYTES_PER_SAMPLE = BITS_PER_SAMPLE // 8
FMT_CHUNK_SIZE = 16
FORMAT_PCM = 1


class ByteWriter:
    """Write cursor over a fixed-size little-endian byte buffer."""

    def __init__(self, size: int) -> None:
        self.buf = bytearray(size)
        self.pos = 0

    def _advance(self, n: int) -> int:
        start = self.pos
        if start + n > len(self.buf):
            raise IndexError(f"write of {n} bytes at {start} overruns {len(self.buf)}-byte buffer")
        self.pos += n
        return start

    def write_ascii(self, tag: str) -> None:
        raw = tag.encode("ascii")
        start = self._advance(len(raw))
        self.buf[start : start + len(raw)] = raw

    def write_uint16(self, value: int) -> None:
        struct.pack_into("<H", self.buf, self._advance(2), value)

    def write_uint32(self, value: int) -> None:
        struct.pack_into("<I", self.buf, self._advance(4), value)

    def write_bytes(self, data: bytes) -> None:
        start = self._advance(len(data))
        self.buf[start : start + len(data)] = data

    def getvalue(self) -> bytes:
        return bytes(self.buf)


def quantize(audio: np.ndarray) -> np.ndarray:
    """
    Convert float samples to int16.

    Samples are clamped to [-1, 1]; negatives scale by 32768 and the rest by
    32767, then truncate toward zero. NaN becomes 0.
    """
    y = np.clip(np.nan_to_num(audio.astype(np.float64), nan=0.0), -1.0, 1.0)
    scaled = np.where(y < 0, y * 32768, y * 32767)
    return np.trunc(scaled).astype(np.int16)


def encode_wav(buffer: SampleBuffer) -> bytes:
    """
    Encode a buffer as 16-bit PCM WAV bytes.

    Samples are interleaved frame by frame in channel order.
    """
    channels = buffer.channels
    data_size = buffer.frames * channels * BYTES_PER_SAMPLE
    writer = ByteWriter(HEADER_SIZE + data_size)

    writer.write_ascii("RIFF")
    writer.write_uint32(HEADER_SIZE + data_size - 8)
    writer.write_ascii("WAVE")
    writer.write_ascii("fmt ")
    writer.write_uint32(FMT_CHUNK_SIZE)
    writer.write_uint16(FORMAT_PCM)
    writer.write_uint16(channels)
    writer.write_uint32(buffer.sample_rate)
    writer.write_uint32(buffer.sample_rate * BYTES_PER_SAMPLE * channels)
    writer.write_uint16(channels * BYTES_PER_SAMPLE)
    writer.write_uint16(BITS_PER_SAMPLE)
    writer.write_ascii("data")
    writer.write_uint32(data_size)

    # (channels, frames) -> (frames, channels) gives frame-major interleaving
    samples = quantize(buffer.audio).T.astype("<i2")
    writer.write_bytes(samples.tobytes())

    logger.info(
        "WAV encode: %d frames x %d ch @ %d Hz -> %d bytes",
        buffer.frames,
        channels,
        buffer.sample_rate,
        len(writer.buf),
    )
    return writer.getvalue()


def trimmed_filename(source: str | Path | None) -> str:
    """Download name for a trimmed file: '<stem>_trimmed.wav'."""
    if not source:
        return "trimmed.wav"
    stem = Path(str(source)).stem or "audio"
    return f"{stem}_trimmed.wav"


def to_encoded_audio(buffer: SampleBuffer, source: str | Path | None = None) -> EncodedAudio:
    """Encode a buffer and wrap it with its MIME type and download name."""
    return EncodedAudio(
        data=encode_wav(buffer),
        mime_type=WAV_MIME_TYPE,
        filename=trimmed_filename(source),
    )
