"""
Ingest module: decode an audio file into a SampleBuffer.

Keeps the native sample rate and every channel; trimming never resamples.
Uses librosa, which handles WAV/FLAC/OGG via soundfile and MP3/M4A via FFmpeg.
"""

import logging
from pathlib import Path
from typing import Callable

import librosa

from .errors import DecodeFailure
from .schema import SampleBuffer

logger = logging.getLogger(__name__)

VALID_EXTENSIONS = {".wav", ".mp3", ".m4a", ".ogg", ".flac"}

Decoder = Callable[[Path], SampleBuffer]


def validate_path(input_path: str | Path) -> Path:
    """
    Check the file exists, is non-empty and has a supported extension.

    Raises:
        DecodeFailure: If any check fails.
    """
    path = Path(input_path).resolve()
    if not path.is_file():
        raise DecodeFailure(f"File not found: {path}")

    ext = path.suffix.lower()
    if ext not in VALID_EXTENSIONS:
        raise DecodeFailure(
            f"Unsupported format: {ext or '(none)'}. Supported: {', '.join(sorted(VALID_EXTENSIONS))}"
        )
    if path.stat().st_size == 0:
        raise DecodeFailure(f"Audio file is empty: {path.name}")
    return path


def decode_audio(input_path: str | Path) -> SampleBuffer:
    """
    Load an audio file at its native rate with all channels.

    Args:
        input_path: Path to the input audio file.

    Returns:
        SampleBuffer with float32 samples in [-1, 1].

    Raises:
        DecodeFailure: If the file is missing, unsupported, corrupted or empty.
    """
    path = validate_path(input_path)

    try:
        y, sr = librosa.load(str(path), sr=None, mono=False)
    except Exception as e:
        err_msg = str(e).lower()
        if "ffmpeg" in err_msg or "audioread" in err_msg or "decoder" in err_msg:
            raise DecodeFailure(
                f"FFmpeg failed to decode audio. Ensure FFmpeg is installed and on PATH: {e}"
            ) from e
        raise DecodeFailure(f"Corrupted or invalid audio file: {e}") from e

    if y.size == 0:
        raise DecodeFailure(f"Audio file is empty after loading: {path.name}")

    try:
        buffer = SampleBuffer.from_array(y, int(sr))
    except ValueError as e:
        raise DecodeFailure(f"Decoded audio is unusable: {e}") from e

    logger.info(
        "Decoded %s: %d frames x %d ch at %d Hz (%.2f s)",
        path.name,
        buffer.frames,
        buffer.channels,
        buffer.sample_rate,
        buffer.duration_sec,
    )
    return buffer
