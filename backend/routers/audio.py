import re
from typing import Annotated
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException, Query, Response, UploadFile, status

from ai.desilence.errors import (  # pyright: ignore[reportImplicitRelativeImport]
    DecodeFailure,
    EmptyResult,
    InvalidConfig,
)
from ai.desilence.pipeline import to_pipeline_error  # pyright: ignore[reportImplicitRelativeImport]
from ai.desilence.schema import ProcessingOptions, TrimStats  # pyright: ignore[reportImplicitRelativeImport]
from core import config
from schemas.audio import OptionRange, TrimDefaults
from services.audio_service import AudioService, get_audio_service

router = APIRouter(prefix="/audio")

_ERROR_STATUS = {
    InvalidConfig: 422,
    EmptyResult: 422,
    DecodeFailure: status.HTTP_400_BAD_REQUEST,
}


def _http_error(exc: Exception) -> HTTPException:
    code = status.HTTP_500_INTERNAL_SERVER_ERROR
    for kind, kind_code in _ERROR_STATUS.items():
        if isinstance(exc, kind):
            code = kind_code
            break
    return HTTPException(status_code=code, detail=to_pipeline_error(exc).model_dump())


def get_options(
    threshold_db: Annotated[float, Query()] = config.THRESHOLD_DB,
    min_silence_sec: Annotated[float, Query()] = config.MIN_SILENCE_SEC,
    padding_sec: Annotated[float, Query()] = config.PADDING_SEC,
    new_silence_sec: Annotated[float, Query()] = config.NEW_SILENCE_SEC,
) -> ProcessingOptions:
    try:
        return ProcessingOptions.build(
            threshold_db=threshold_db,
            min_silence_sec=min_silence_sec,
            padding_sec=padding_sec,
            new_silence_sec=new_silence_sec,
        )
    except InvalidConfig as exc:
        raise _http_error(exc) from exc


def _content_disposition(filename: str) -> str:
    # Header values are latin-1; non-ASCII names go in the RFC 5987 filename* form
    fallback = re.sub(r'[^\x20-\x7e]|["\\]', "_", filename)
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"


async def _read_upload(file: UploadFile) -> bytes:
    content = await file.read()
    if not content:
        raise _http_error(DecodeFailure("Uploaded file is empty"))
    if len(content) > config.MAX_UPLOAD_MB * 1024 * 1024:
        raise HTTPException(
            status_code=413,
            detail=f"Upload exceeds {config.MAX_UPLOAD_MB:g} MB",
        )
    return content


@router.get("/defaults", response_model=TrimDefaults)
def trim_defaults():
    return TrimDefaults(
        threshold_db=config.THRESHOLD_DB,
        min_silence_sec=config.MIN_SILENCE_SEC,
        padding_sec=config.PADDING_SEC,
        new_silence_sec=config.NEW_SILENCE_SEC,
        ranges={
            "threshold_db": OptionRange(min=config.THRESHOLD_DB_RANGE[0], max=config.THRESHOLD_DB_RANGE[1]),
            "min_silence_sec": OptionRange(min=config.MIN_SILENCE_SEC_RANGE[0], max=config.MIN_SILENCE_SEC_RANGE[1]),
            "padding_sec": OptionRange(min=config.PADDING_SEC_RANGE[0], max=config.PADDING_SEC_RANGE[1]),
            "new_silence_sec": OptionRange(min=config.NEW_SILENCE_SEC_RANGE[0], max=config.NEW_SILENCE_SEC_RANGE[1]),
        },
    )


@router.post("/trim")
async def trim_audio(
    file: UploadFile,
    options: Annotated[ProcessingOptions, Depends(get_options)],
    service: Annotated[AudioService, Depends(get_audio_service)],
):
    """
    Trim long silences from an uploaded recording:
    - Decodes the upload at its native rate and channel layout
    - Removes silences longer than min_silence_sec, keeps padding_sec around speech
    - Re-joins the kept audio with new_silence_sec gaps
    - Returns a 16-bit PCM WAV attachment; before/after stats in X-Desilence-* headers
    """
    content = await _read_upload(file)
    try:
        encoded, stats = await service.trim(content, file.filename, options)
    except Exception as exc:
        raise _http_error(exc) from exc

    return Response(
        content=encoded.data,
        media_type=encoded.mime_type,
        headers={
            "Content-Disposition": _content_disposition(encoded.filename),
            "X-Desilence-Original-Duration": str(stats.original_duration_sec),
            "X-Desilence-Processed-Duration": str(stats.processed_duration_sec),
            "X-Desilence-Chunks": str(stats.chunks_kept),
            "X-Desilence-Percent-Saved": str(stats.percent_saved),
        },
    )


@router.post("/analyze", response_model=TrimStats)
async def analyze_audio(
    file: UploadFile,
    options: Annotated[ProcessingOptions, Depends(get_options)],
    service: Annotated[AudioService, Depends(get_audio_service)],
):
    """Preview what /trim would do without returning the audio."""
    content = await _read_upload(file)
    try:
        return await service.analyze(content, file.filename, options)
    except Exception as exc:
        raise _http_error(exc) from exc
