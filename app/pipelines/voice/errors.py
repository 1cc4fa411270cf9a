"""Error taxonomy for the voice pipeline.

Terminal errors derive from :class:`VoicePipelineError` and abort the request
with a short caller-facing message. ``IdentityResolutionFailed`` and
``LogWriteFailed`` are non-terminal: stages catch them where they happen and
record them on their result values instead of propagating.
"""

from __future__ import annotations

from fastapi import status


class VoicePipelineError(Exception):
    """Base class for errors that end the request."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "Internal server error"

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.message)
        self.detail = detail or self.message


class InvalidRequest(VoicePipelineError):
    """The multipart body is missing fields or has the wrong shape."""

    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid request"


class InvalidAudio(VoicePipelineError):
    """Transcription produced no usable text."""

    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid audio"


class RateLimited(VoicePipelineError):
    """An upstream collaborator rejected the call with a rate limit."""

    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    message = "Too many requests"


class EmptyCompletion(VoicePipelineError):
    """The chat completion collaborator returned nothing usable."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Invalid response"


class SynthesisFailed(VoicePipelineError):
    """The text-to-speech collaborator rejected the request."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Voice synthesis failed"


class IdentityResolutionFailed(Exception):
    """A bearer credential was presented but could not be resolved."""


class LogWriteFailed(Exception):
    """A conversation log write was rejected by the message log."""


__all__ = [
    "VoicePipelineError",
    "InvalidRequest",
    "InvalidAudio",
    "RateLimited",
    "EmptyCompletion",
    "SynthesisFailed",
    "IdentityResolutionFailed",
    "LogWriteFailed",
]
