"""
Pipeline module: orchestrates decode, silence detection, chunking, reassembly and WAV encoding.

CLI: python -m ai.desilence.pipeline path/to/audio.wav [-o out.wav] [--threshold-db -40] [--stats]
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from pathlib import Path

# Allow running as script: python ai/desilence/pipeline.py
# Remove script dir from path to avoid "chunk" resolving to ai/desilence/chunk.py (name clash)
if __package__ is None:
    _script_dir = Path(__file__).resolve().parent
    _root = _script_dir.parent.parent
    if str(_script_dir) in sys.path:
        sys.path.remove(str(_script_dir))
    if str(_root) not in sys.path:
        sys.path.insert(0, str(_root))

from ai.desilence.chunk import extract_chunks
from ai.desilence.errors import DesilenceError, EmptyResult, ProcessingFailure
from ai.desilence.ingest import Decoder, decode_audio
from ai.desilence.reassemble import reassemble
from ai.desilence.schema import (
    EncodedAudio,
    Interval,
    PipelineError,
    ProcessingOptions,
    SampleBuffer,
    TrimStats,
)
from ai.desilence.silence import detect_silence
from ai.desilence.wav import to_encoded_audio

FLOAT_PRECISION = 3

logger = logging.getLogger(__name__)


def compute_stats(
    original: SampleBuffer,
    processed: SampleBuffer,
    silences: list[Interval],
    chunks: list[Interval],
) -> TrimStats:
    """Before/after durations and how much time the trim saved."""
    original_sec = original.duration_sec
    processed_sec = processed.duration_sec
    saved = original_sec - processed_sec
    percent = 100 * saved / original_sec if original_sec > 0 else 0.0
    return TrimStats(
        sample_rate=original.sample_rate,
        channels=original.channels,
        original_frames=original.frames,
        processed_frames=processed.frames,
        original_duration_sec=round(original_sec, FLOAT_PRECISION),
        processed_duration_sec=round(processed_sec, FLOAT_PRECISION),
        silences_detected=len(silences),
        chunks_kept=len(chunks),
        time_saved_sec=round(saved, FLOAT_PRECISION),
        percent_saved=round(percent, 1),
    )


def process_buffer(
    buffer: SampleBuffer,
    options: ProcessingOptions,
    *,
    allow_empty: bool = False,
    timings: dict[str, float] | None = None,
) -> tuple[SampleBuffer, TrimStats]:
    """
    Trim silence from a decoded buffer.

    Args:
        buffer: Decoded audio (not modified).
        options: Trimming parameters.
        allow_empty: Return a zero-frame buffer instead of raising EmptyResult.
        timings: Optional dict that receives per-stage seconds.

    Returns:
        Tuple of (processed_buffer, stats).

    Raises:
        EmptyResult: If every frame was removed and allow_empty is False.
        ProcessingFailure: On unexpected internal faults.
    """
    if timings is None:
        timings = {}

    try:
        t0 = time.perf_counter()
        silences = detect_silence(buffer, options.threshold_db)
        timings["silence"] = time.perf_counter() - t0
        logger.info("[silence] %.3fs -> %d intervals", timings["silence"], len(silences))

        t0 = time.perf_counter()
        chunks = extract_chunks(silences, buffer.frames, buffer.sample_rate, options)
        timings["chunk"] = time.perf_counter() - t0
        logger.info("[chunk] %.3fs -> %d chunks", timings["chunk"], len(chunks))

        t0 = time.perf_counter()
        processed = reassemble(buffer, chunks, options.new_silence_sec)
        timings["reassemble"] = time.perf_counter() - t0
        logger.info("[reassemble] %.3fs -> %d frames", timings["reassemble"], processed.frames)
    except MemoryError as e:
        raise ProcessingFailure(
            f"Out of memory while processing {buffer.frames} frames x {buffer.channels} channels"
        ) from e

    stats = compute_stats(buffer, processed, silences, chunks)
    if processed.frames == 0 and not allow_empty:
        raise EmptyResult(
            "Processing produced empty audio: every frame was classified as silence. "
            "Try lowering the silence threshold (e.g. -50 dB) or raising the minimum silence duration."
        )
    return processed, stats


def encode_result(
    processed: SampleBuffer,
    source: str | Path | None = None,
    *,
    timings: dict[str, float] | None = None,
) -> EncodedAudio:
    """Encode a processed buffer as WAV; MemoryError becomes ProcessingFailure."""
    t0 = time.perf_counter()
    try:
        encoded = to_encoded_audio(processed, source=source)
    except MemoryError as e:
        raise ProcessingFailure(f"Out of memory while encoding {processed.frames} frames") from e
    elapsed = time.perf_counter() - t0
    if timings is not None:
        timings["encode"] = elapsed
    logger.info("[encode] %.3fs -> %d bytes", elapsed, len(encoded.data))
    return encoded


def run_pipeline(
    input_path: str | Path,
    options: ProcessingOptions | None = None,
    *,
    decoder: Decoder = decode_audio,
) -> tuple[EncodedAudio, TrimStats, dict[str, float]]:
    """
    Run the full trim pipeline on an audio file.

    Args:
        input_path: Path to input audio file.
        options: Trimming parameters; environment defaults when None.
        decoder: Callable turning a path into a SampleBuffer.

    Returns:
        Tuple of (EncodedAudio, TrimStats, timings_dict). timings_dict has per-stage seconds.

    Raises:
        DecodeFailure, InvalidConfig, EmptyResult, ProcessingFailure.
    """
    if options is None:
        from core.config import default_options

        options = default_options()

    path = Path(input_path)
    timings: dict[str, float] = {}

    # --- Decode ---
    t0 = time.perf_counter()
    buffer = decoder(path)
    timings["decode"] = time.perf_counter() - t0
    logger.info("[decode] %.3fs -> %d frames @ %d Hz", timings["decode"], buffer.frames, buffer.sample_rate)

    # --- Silence, chunk, reassemble ---
    processed, stats = process_buffer(buffer, options, timings=timings)

    # --- Encode ---
    encoded = encode_result(processed, source=path.name, timings=timings)

    logger.info(
        "Trimmed %s: %.2fs -> %.2fs (saved %.1f%%)",
        path.name,
        stats.original_duration_sec,
        stats.processed_duration_sec,
        stats.percent_saved,
    )
    return encoded, stats, timings


def to_pipeline_error(exc: Exception) -> PipelineError:
    """Convert an exception into the JSON error payload."""
    if isinstance(exc, DesilenceError):
        return PipelineError(error=str(exc), error_code=exc.error_code)
    return PipelineError(error=f"Pipeline failed: {exc}", error_code="PIPELINE_ERROR")


def _print_timings(stats: TrimStats, timings: dict[str, float]) -> None:
    """Print stage timings."""
    total = sum(timings.values())
    print("\n--- Timings ---", file=sys.stderr)
    print(f"  Duration:     {stats.original_duration_sec:.2f} s -> {stats.processed_duration_sec:.2f} s", file=sys.stderr)
    print(f"  Process time: {total:.3f} s", file=sys.stderr)
    for stage, t in timings.items():
        pct = 100 * t / total if total > 0 else 0
        print(f"    {stage}: {t:.3f}s ({pct:.0f}%)", file=sys.stderr)
    print("---------------\n", file=sys.stderr)


def main(argv: list[str] | None = None) -> int:
    from core import config

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    parser = argparse.ArgumentParser(
        description="Remove long silences from an audio file and write a 16-bit PCM WAV."
    )
    parser.add_argument("audio_path", help="Path to input audio file (.wav, .mp3, .m4a, .ogg, .flac)")
    parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Output WAV path (default: <input stem>_trimmed.wav next to the input)",
    )
    parser.add_argument(
        "--threshold-db",
        type=float,
        default=config.THRESHOLD_DB,
        help=f"Silence threshold in dB (default: {config.THRESHOLD_DB})",
    )
    parser.add_argument(
        "--min-silence",
        type=float,
        default=config.MIN_SILENCE_SEC,
        help=f"Shortest silence to remove, seconds (default: {config.MIN_SILENCE_SEC})",
    )
    parser.add_argument(
        "--padding",
        type=float,
        default=config.PADDING_SEC,
        help=f"Original audio kept around each chunk, seconds (default: {config.PADDING_SEC})",
    )
    parser.add_argument(
        "--new-silence",
        type=float,
        default=config.NEW_SILENCE_SEC,
        help=f"Silence inserted between chunks, seconds (default: {config.NEW_SILENCE_SEC})",
    )
    parser.add_argument(
        "--stats",
        action="store_true",
        help="Print per-stage timings to stderr",
    )
    args = parser.parse_args(argv)

    try:
        options = ProcessingOptions.build(
            threshold_db=args.threshold_db,
            min_silence_sec=args.min_silence,
            padding_sec=args.padding,
            new_silence_sec=args.new_silence,
        )
        encoded, stats, timings = run_pipeline(args.audio_path, options)
        out_path = Path(args.output) if args.output else Path(args.audio_path).with_name(encoded.filename)
        out_path.write_bytes(encoded.data)
        logger.info("Wrote %s (%d bytes)", out_path, len(encoded.data))
        if args.stats:
            _print_timings(stats, timings)
        print(json.dumps(stats.model_dump(), indent=2))
        return 0
    except DesilenceError as e:
        logger.error("%s", e)
        print(json.dumps(to_pipeline_error(e).model_dump(), indent=2))
        return 1
    except Exception as e:
        logger.exception("Pipeline failed: %s", e)
        print(json.dumps(to_pipeline_error(e).model_dump(), indent=2))
        return 1


if __name__ == "__main__":
    sys.exit(main())
