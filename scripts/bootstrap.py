#!/usr/bin/env python3
"""
Bootstrap script: verify Python version, ffmpeg, and the trim defaults in backend/.env.
Run from repo root: python scripts/bootstrap.py
Exits 0 if all checks pass; 1 with friendly error messages otherwise.
"""
from __future__ import annotations

import math
import os
import shutil
import subprocess
import sys
from pathlib import Path

REQUIRED_PYTHON = (3, 10)
# env key -> sign rule
OPTION_ENV = {
    "DESILENCE_THRESHOLD_DB": "negative",
    "DESILENCE_MIN_SILENCE_SEC": "non-negative",
    "DESILENCE_PADDING_SEC": "non-negative",
    "DESILENCE_NEW_SILENCE_SEC": "non-negative",
}


def _python_ok() -> tuple[bool, str]:
    if sys.version_info < REQUIRED_PYTHON:
        return False, (
            f"Python {REQUIRED_PYTHON[0]}.{REQUIRED_PYTHON[1]}+ required; "
            f"current: {sys.version_info.major}.{sys.version_info.minor}"
        )
    return True, f"Python {sys.version_info.major}.{sys.version_info.minor} OK"


def _ffmpeg_ok() -> tuple[bool, str]:
    ffmpeg = shutil.which("ffmpeg")
    if not ffmpeg:
        return False, (
            "ffmpeg not found on PATH. Decoding MP3/M4A uploads needs it (WAV/FLAC/OGG work without).\n"
            "  macOS:  brew install ffmpeg\n"
            "  Ubuntu/Debian:  sudo apt install ffmpeg\n"
            "  Windows:  choco install ffmpeg  or download from https://ffmpeg.org"
        )
    try:
        out = subprocess.run(
            [ffmpeg, "-version"],
            capture_output=True,
            text=True,
            timeout=5,
        )
        if out.returncode != 0:
            return False, "ffmpeg -version failed"
        first_line = (out.stdout or out.stderr or "").split("\n")[0].strip()
        return True, first_line or "ffmpeg found"
    except (OSError, subprocess.SubprocessError) as e:
        return False, f"ffmpeg check failed: {e}"


def _options_ok() -> tuple[bool, list[str]]:
    problems = []
    for key, rule in OPTION_ENV.items():
        raw = os.environ.get(key)
        if raw is None or not raw.strip():
            continue
        try:
            val = float(raw)
        except ValueError:
            problems.append(f"{key}={raw!r} is not a number")
            continue
        if not math.isfinite(val):
            problems.append(f"{key}={raw!r} must be finite")
        elif rule == "negative" and val >= 0:
            problems.append(f"{key}={raw!r} must be negative (dB)")
        elif rule == "non-negative" and val < 0:
            problems.append(f"{key}={raw!r} must be >= 0 (seconds)")
    return not problems, problems


def _load_dotenv_simple(path: Path) -> None:
    """Parse backend/.env and set os.environ (stdlib-only, no python-dotenv required)."""
    if not path.exists():
        return
    try:
        with open(path) as f:
            for line in f:
                line = line.strip()
                if not line or line.startswith("#"):
                    continue
                if "=" in line:
                    k, _, v = line.partition("=")
                    key = k.strip()
                    val = v.strip().strip("'\"").strip()
                    if key:
                        os.environ.setdefault(key, val)
    except OSError:
        pass


def main() -> int:
    repo_root = Path(__file__).resolve().parent.parent
    _load_dotenv_simple(repo_root / "backend" / ".env")

    checks: list[tuple[str, bool, str]] = []
    ok, msg = _python_ok()
    checks.append(("Python", ok, msg))
    ok, msg = _ffmpeg_ok()
    checks.append(("ffmpeg", ok, msg))
    ok, problems = _options_ok()
    if ok:
        checks.append(("Trim defaults", True, "DESILENCE_* values valid (or unset)"))
    else:
        checks.append(("Trim defaults", False, "; ".join(problems) + ". Fix them in backend/.env."))

    for name, ok, msg in checks:
        if ok:
            print(f"  {name}: {msg}")
    sys.stdout.flush()

    errors = [(n, m) for n, o, m in checks if not o]
    if errors:
        for name, msg in errors:
            print(f"  [{name}] {msg}", file=sys.stderr)
        print(file=sys.stderr)
        print("Bootstrap failed. Fix the above and run it again.", file=sys.stderr)
        return 1
    print("\nBootstrap OK. Run: uvicorn main:app --app-dir backend")
    return 0


if __name__ == "__main__":
    sys.exit(main())
