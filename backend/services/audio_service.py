import asyncio
import logging
import os
import tempfile
from pathlib import Path
from typing import final

from ai.desilence.ingest import Decoder, decode_audio  # pyright: ignore[reportImplicitRelativeImport]
from ai.desilence.pipeline import encode_result, process_buffer  # pyright: ignore[reportImplicitRelativeImport]
from ai.desilence.schema import (  # pyright: ignore[reportImplicitRelativeImport]
    EncodedAudio,
    ProcessingOptions,
    TrimStats,
)

logger = logging.getLogger(__name__)


@final
class AudioService:
    """Runs the trim pipeline on uploaded bytes, off the event loop."""

    def __init__(self, decoder: Decoder = decode_audio):
        self.decoder = decoder

    def _decode_upload(self, content: bytes, filename: str | None):
        suffix = Path(filename or "audio").suffix or ".wav"
        with tempfile.NamedTemporaryFile(delete=False, suffix=suffix) as tmp:
            tmp.write(content)
            tmp_path = Path(tmp.name)
        try:
            return self.decoder(tmp_path)
        finally:
            try:
                os.remove(tmp_path)
            except OSError:
                pass

    def _trim(
        self, content: bytes, filename: str | None, options: ProcessingOptions
    ) -> tuple[EncodedAudio, TrimStats]:
        buffer = self._decode_upload(content, filename)
        processed, stats = process_buffer(buffer, options)
        return encode_result(processed, source=filename), stats

    def _analyze(
        self, content: bytes, filename: str | None, options: ProcessingOptions
    ) -> TrimStats:
        buffer = self._decode_upload(content, filename)
        _, stats = process_buffer(buffer, options, allow_empty=True)
        return stats

    async def trim(
        self, content: bytes, filename: str | None, options: ProcessingOptions
    ) -> tuple[EncodedAudio, TrimStats]:
        # CPU heavy: run in executor
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, lambda: self._trim(content, filename, options))

    async def analyze(
        self, content: bytes, filename: str | None, options: ProcessingOptions
    ) -> TrimStats:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, lambda: self._analyze(content, filename, options))


_audio_service = AudioService()


def get_audio_service() -> AudioService:
    return _audio_service
