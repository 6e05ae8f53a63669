from pydantic import BaseModel


class OptionRange(BaseModel):
    min: float
    max: float


class TrimDefaults(BaseModel):
    threshold_db: float
    min_silence_sec: float
    padding_sec: float
    new_silence_sec: float
    ranges: dict[str, OptionRange]
