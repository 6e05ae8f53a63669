"""Silence trimming: detect, cut and re-join silent stretches of a recording, then encode as WAV."""

from .errors import DecodeFailure, DesilenceError, EmptyResult, InvalidConfig, ProcessingFailure
from .pipeline import process_buffer, run_pipeline
from .schema import EncodedAudio, Interval, PipelineError, ProcessingOptions, SampleBuffer, TrimStats

__all__ = [
    "run_pipeline",
    "process_buffer",
    "SampleBuffer",
    "Interval",
    "ProcessingOptions",
    "EncodedAudio",
    "TrimStats",
    "PipelineError",
    "DesilenceError",
    "DecodeFailure",
    "EmptyResult",
    "InvalidConfig",
    "ProcessingFailure",
]
