"""
Errors raised by the silence-trimming pipeline.

Every error carries a stable error_code so the CLI and the API can report it
in the PipelineError shape without inspecting the message.
"""


class DesilenceError(ValueError):
    """Base class for pipeline errors the caller can act on."""

    error_code = "DESILENCE_ERROR"


class DecodeFailure(DesilenceError):
    """Source file could not be decoded into a sample buffer."""

    error_code = "DECODE_FAILURE"


class EmptyResult(DesilenceError):
    """Trimming removed every frame of the recording."""

    error_code = "EMPTY_RESULT"


class InvalidConfig(DesilenceError):
    """A processing option is outside its accepted range."""

    error_code = "INVALID_CONFIG"


class ProcessingFailure(DesilenceError):
    """Unexpected fault while processing a valid buffer."""

    error_code = "PROCESSING_FAILURE"