"""Telemetry helpers and metrics."""

from .metrics import (
    ERROR_COUNTER,
    IDENTITY_FALLBACKS,
    LOG_WRITE_FAILURES,
    PIPELINE_FAILURES,
    REQUEST_COUNT,
    REQUEST_LATENCY,
    STAGE_LATENCY,
    increment_identity_fallback,
    increment_log_write_failure,
    increment_pipeline_failure,
    observe_request,
    observe_stage,
)

__all__ = [
    "ERROR_COUNTER",
    "IDENTITY_FALLBACKS",
    "LOG_WRITE_FAILURES",
    "PIPELINE_FAILURES",
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "STAGE_LATENCY",
    "increment_identity_fallback",
    "increment_log_write_failure",
    "increment_pipeline_failure",
    "observe_request",
    "observe_stage",
]
