import os
from pathlib import Path

from dotenv import load_dotenv  # type: ignore

# Load .env from backend/ (parent of core/)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path)


def _env_float(key: str, default: float) -> float:
    try:
        return float(os.getenv(key, str(default)))
    except ValueError:
        return default


# Defaults for the trim parameters (match the frontend's initial slider values)
THRESHOLD_DB = _env_float("DESILENCE_THRESHOLD_DB", -40.0)
MIN_SILENCE_SEC = _env_float("DESILENCE_MIN_SILENCE_SEC", 0.5)
PADDING_SEC = _env_float("DESILENCE_PADDING_SEC", 0.1)
NEW_SILENCE_SEC = _env_float("DESILENCE_NEW_SILENCE_SEC", 0.2)

# Slider ranges exposed by the frontend: (min, max)
THRESHOLD_DB_RANGE = (-60.0, -20.0)
MIN_SILENCE_SEC_RANGE = (0.0, 2.0)
PADDING_SEC_RANGE = (0.0, 0.5)
NEW_SILENCE_SEC_RANGE = (0.0, 1.0)

MAX_UPLOAD_MB = _env_float("DESILENCE_MAX_UPLOAD_MB", 100.0)

CORS_ORIGINS = [
    o.strip()
    for o in os.getenv(
        "DESILENCE_CORS_ORIGINS", "http://localhost:5173,http://frontend:5173"
    ).split(",")
    if o.strip()
]


def default_options():
    """Build ProcessingOptions from the environment defaults. Raises InvalidConfig if .env is off."""
    from ai.desilence.schema import ProcessingOptions

    return ProcessingOptions.build(
        threshold_db=THRESHOLD_DB,
        min_silence_sec=MIN_SILENCE_SEC,
        padding_sec=PADDING_SEC,
        new_silence_sec=NEW_SILENCE_SEC,
    )
