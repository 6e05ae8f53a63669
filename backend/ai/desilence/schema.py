"""
Data model for the silence-trimming pipeline.

Sample buffers and intervals are lightweight NamedTuples over numpy arrays;
options and outputs that cross the CLI/API boundary are Pydantic models.
"""

import math
from typing import NamedTuple

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import InvalidConfig

WAV_MIME_TYPE = "audio/wav"


class Interval(NamedTuple):
    """Half-open range [start, end) of frame indices."""

    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start


class SampleBuffer(NamedTuple):
    """Decoded audio: float32 samples shaped (channels, frames)."""

    audio: np.ndarray
    sample_rate: int

    @property
    def channels(self) -> int:
        return self.audio.shape[0]

    @property
    def frames(self) -> int:
        return self.audio.shape[1]

    @property
    def duration_sec(self) -> float:
        return self.frames / self.sample_rate

    @classmethod
    def from_array(cls, y: np.ndarray, sample_rate: int) -> "SampleBuffer":
        """
        Build a buffer from a mono (frames,) or multi-channel (channels, frames) array.

        Raises:
            ValueError: If the array rank, channel count or sample rate is invalid.
        """
        y = np.asarray(y, dtype=np.float32)
        if y.ndim == 1:
            y = y[np.newaxis, :]
        if y.ndim != 2:
            raise ValueError(f"Expected 1-D or 2-D audio array, got {y.ndim}-D")
        if y.shape[0] < 1:
            raise ValueError("Audio must have at least one channel")
        if sample_rate <= 0 or not float(sample_rate).is_integer():
            raise ValueError(f"Invalid sample rate: {sample_rate} (must be a positive integer)")
        return cls(audio=y, sample_rate=int(sample_rate))

    @classmethod
    def empty(cls, channels: int, sample_rate: int) -> "SampleBuffer":
        """Zero-frame buffer keeping the channel layout and rate."""
        return cls(audio=np.zeros((channels, 0), dtype=np.float32), sample_rate=sample_rate)


class ProcessingOptions(BaseModel):
    """User-chosen trimming parameters, fixed for one pipeline run."""

    threshold_db: float = Field(lt=0)
    min_silence_sec: float = Field(ge=0)
    padding_sec: float = Field(ge=0)
    new_silence_sec: float = Field(ge=0)

    model_config = ConfigDict(frozen=True)

    @field_validator("threshold_db", "min_silence_sec", "padding_sec", "new_silence_sec")
    @classmethod
    def _finite(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError("must be a finite number")
        return v

    @classmethod
    def build(
        cls,
        threshold_db: float,
        min_silence_sec: float,
        padding_sec: float,
        new_silence_sec: float,
    ) -> "ProcessingOptions":
        """Validate and build options; raises InvalidConfig on bad values."""
        try:
            return cls(
                threshold_db=threshold_db,
                min_silence_sec=min_silence_sec,
                padding_sec=padding_sec,
                new_silence_sec=new_silence_sec,
            )
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            raise InvalidConfig(f"Invalid processing options: {problems}") from e


class EncodedAudio(BaseModel):
    """Serialized WAV file, the final artifact of a run."""

    data: bytes
    mime_type: str = WAV_MIME_TYPE
    filename: str = "trimmed.wav"

    model_config = ConfigDict(frozen=True)


class TrimStats(BaseModel):
    """Before/after summary of a trim."""

    sample_rate: int
    channels: int
    original_frames: int
    processed_frames: int
    original_duration_sec: float
    processed_duration_sec: float
    silences_detected: int
    chunks_kept: int
    time_saved_sec: float
    percent_saved: float


class PipelineError(BaseModel):
    """Error response when the pipeline fails gracefully."""

    success: bool = False
    error: str
    error_code: str
