"""Prometheus metrics definitions and helpers."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests processed",
    ("method", "route", "status"),
)

REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ("method", "route"),
    buckets=(
        0.005,
        0.01,
        0.025,
        0.05,
        0.1,
        0.25,
        0.5,
        1.0,
        2.5,
        5.0,
        10.0,
    ),
)

ERROR_COUNTER = Counter(
    "app_internal_errors_total",
    "Number of requests ending in internal server error responses",
    ("method", "route"),
)

STAGE_LATENCY = Histogram(
    "voice_pipeline_stage_seconds",
    "Duration of each voice pipeline stage in seconds",
    ("stage",),
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 4.0, 8.0, 15.0, 30.0),
)

PIPELINE_FAILURES = Counter(
    "voice_pipeline_failures_total",
    "Voice requests aborted by a terminal pipeline error",
    ("error",),
)

IDENTITY_FALLBACKS = Counter(
    "voice_identity_fallbacks_total",
    "Bearer credentials that could not be resolved and fell back to anonymous",
)

LOG_WRITE_FAILURES = Counter(
    "conversation_log_failures_total",
    "Conversation log writes rejected by the message log",
    ("role",),
)


def observe_request(
    method: str,
    route: str,
    status_code: int,
    duration_seconds: float,
) -> None:
    """Record metrics for a completed HTTP request."""

    safe_route = route or "unknown"
    safe_method = method or "UNKNOWN"
    status_label = str(status_code)
    observed_duration = duration_seconds if duration_seconds >= 0 else 0

    REQUEST_COUNT.labels(
        method=safe_method,
        route=safe_route,
        status=status_label,
    ).inc()
    REQUEST_LATENCY.labels(
        method=safe_method,
        route=safe_route,
    ).observe(observed_duration)

    if status_code >= 500:
        ERROR_COUNTER.labels(
            method=safe_method,
            route=safe_route,
        ).inc()


def observe_stage(stage: str, duration_seconds: float) -> None:
    """Record how long one pipeline stage took."""

    STAGE_LATENCY.labels(stage=stage).observe(max(duration_seconds, 0.0))


def increment_pipeline_failure(error: str) -> None:
    PIPELINE_FAILURES.labels(error=error).inc()


def increment_identity_fallback() -> None:
    IDENTITY_FALLBACKS.inc()


def increment_log_write_failure(role: str) -> None:
    LOG_WRITE_FAILURES.labels(role=role).inc()
