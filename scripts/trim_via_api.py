#!/usr/bin/env python3
"""
Upload an audio file to the trim API and save the trimmed WAV.
Run from repo root: python scripts/trim_via_api.py <audio_file> [--threshold-db -40] [--out out.wav]
Requires the API server to be running (uvicorn main:app --app-dir backend).
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

try:
    import httpx
except ImportError:
    print("Missing dependency: httpx. Install with: pip install httpx", file=sys.stderr)
    sys.exit(1)

API_URL = "http://localhost:8000/api/audio/trim"


def main() -> int:
    parser = argparse.ArgumentParser(description="Trim silence from an audio file via the API.")
    parser.add_argument("audio_path")
    parser.add_argument("--out", default=None, help="Output path (default: server-suggested name)")
    parser.add_argument("--threshold-db", type=float, default=None)
    parser.add_argument("--min-silence", type=float, default=None)
    parser.add_argument("--padding", type=float, default=None)
    parser.add_argument("--new-silence", type=float, default=None)
    args = parser.parse_args()

    audio_path = Path(args.audio_path)
    if not audio_path.exists():
        print(f"File not found: {audio_path}", file=sys.stderr)
        return 1

    params = {
        k: v
        for k, v in {
            "threshold_db": args.threshold_db,
            "min_silence_sec": args.min_silence,
            "padding_sec": args.padding,
            "new_silence_sec": args.new_silence,
        }.items()
        if v is not None
    }

    print(f"Uploading {audio_path} to {API_URL}...", flush=True)
    try:
        with open(audio_path, "rb") as f:
            files = {"file": (audio_path.name, f, "application/octet-stream")}
            with httpx.Client(timeout=300.0) as client:
                response = client.post(API_URL, files=files, params=params)
                response.raise_for_status()
    except httpx.HTTPStatusError as e:
        print(f"HTTP error: {e.response.status_code} - {e.response.text}", file=sys.stderr)
        return 1
    except httpx.ConnectError:
        print(f"Connection error: Could not reach {API_URL}. Is the server running?", file=sys.stderr)
        return 1

    disposition = response.headers.get("content-disposition", "")
    suggested = disposition.split("filename=")[-1].strip('"') if "filename=" in disposition else "trimmed.wav"
    out_path = Path(args.out) if args.out else audio_path.with_name(suggested)
    out_path.write_bytes(response.content)

    print("\n--- Trim successful ---")
    print(f"  saved:     {out_path} ({len(response.content)} bytes)")
    print(f"  duration:  {response.headers.get('x-desilence-original-duration')} s -> "
          f"{response.headers.get('x-desilence-processed-duration')} s")
    print(f"  chunks:    {response.headers.get('x-desilence-chunks')}")
    print(f"  time saved: {response.headers.get('x-desilence-percent-saved')}%")
    return 0


if __name__ == "__main__":
    sys.exit(main())
