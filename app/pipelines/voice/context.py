"""Ambient context derived from edge-network request headers."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo
from typing import Mapping
from urllib.parse import unquote
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.config.settings import VoiceConfig, settings

from .types import AmbientContext

logger = logging.getLogger("app.services.voice_pipeline")

UNKNOWN_LOCATION = "unknown"


@dataclass(frozen=True)
class RequestGeo:
    """Caller-supplied location hints; any field may be missing."""

    country: str | None = None
    region: str | None = None
    city: str | None = None
    timezone: str | None = None


def _header(headers: Mapping[str, str], name: str) -> str | None:
    value = headers.get(name)
    if value is None:
        return None
    value = value.strip()
    return value or None


def read_request_geo(headers: Mapping[str, str], config: VoiceConfig | None = None) -> RequestGeo:
    config = config or settings.voice
    city = _header(headers, config.city_header)
    return RequestGeo(
        country=_header(headers, config.country_header),
        region=_header(headers, config.region_header),
        city=unquote(city) if city else None,
        timezone=_header(headers, config.timezone_header),
    )


def location_label(geo: RequestGeo) -> str:
    if not geo.country or not geo.region or not geo.city:
        return UNKNOWN_LOCATION
    return f"{geo.city}, {geo.region}, {geo.country}"


def _load_zone(name: str | None) -> tzinfo | None:
    if not name:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.debug("Ignoring unknown timezone hint %r", name)
        return None


def format_local_time(
    now: datetime,
    timezone_name: str | None,
    default_timezone: str | None = None,
) -> str:
    """Format ``now`` like ``10/19/2026, 3:04:05 PM`` in the caller's zone.

    Falls back to ``default_timezone`` and then to the server's local zone.
    """

    zone = _load_zone(timezone_name) or _load_zone(default_timezone)
    local = now.astimezone(zone) if zone else now.astimezone()
    hour = local.hour % 12 or 12
    meridiem = "AM" if local.hour < 12 else "PM"
    return f"{local.month}/{local.day}/{local.year}, {hour}:{local:%M:%S} {meridiem}"


def resolve_ambient_context(
    headers: Mapping[str, str],
    config: VoiceConfig | None = None,
    *,
    now: datetime | None = None,
) -> AmbientContext:
    config = config or settings.voice
    geo = read_request_geo(headers, config)
    current = now or datetime.now(timezone.utc)
    return AmbientContext(
        location_label=location_label(geo),
        local_time=format_local_time(current, geo.timezone, config.default_timezone),
    )


__all__ = [
    "RequestGeo",
    "UNKNOWN_LOCATION",
    "format_local_time",
    "location_label",
    "read_request_geo",
    "resolve_ambient_context",
]
