from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from pydantic import TypeAdapter, ValidationError

from weather_pusher.schemas.observations import NormalizedObservation

MISSING_MARKER = "N/A"
UNKNOWN_LOCATION = "Unknown"

_datetime_adapter = TypeAdapter(datetime)


def _get(doc: Any, *path: str) -> Any:
    """
    Walk `path` through nested mappings.

    Returns None as soon as a level is missing or is not a mapping.
    """
    cur = doc
    for key in path:
        if not isinstance(cur, Mapping):
            return None
        cur = cur.get(key)
    return cur


def parse_number(value: Any) -> Optional[float]:
    """
    Coerce a source value to float.

    None, the "N/A" marker, blanks, booleans, structures, non-numeric
    strings and non-finite numbers all map to None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value or value == MISSING_MARKER:
            return None
    elif not isinstance(value, (int, float)):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def parse_text(value: Any, default: Optional[str] = None) -> Optional[str]:
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        return default
    if isinstance(value, float) and not math.isfinite(value):
        return default
    text = str(value)
    return text if text else default


def parse_observed_at(value: Any, now: Optional[datetime] = None) -> datetime:
    """
    Parse the source timestamp into an aware UTC datetime.

    Naive values are taken as UTC. Missing or unparseable values fall
    back to `now` (current time by default).
    """
    fallback = now or datetime.now(timezone.utc)
    if value is None or isinstance(value, (bool, Mapping, list)):
        return fallback
    try:
        parsed = _datetime_adapter.validate_python(value)
    except ValidationError:
        return fallback
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    try:
        return parsed.astimezone(timezone.utc)
    except (OverflowError, ValueError):
        # offset pushes the instant outside datetime's year range
        return fallback


def normalize(raw: Any, now: Optional[datetime] = None) -> NormalizedObservation:
    """
    Map a raw telemetry document to a flat `NormalizedObservation`.

    Never raises: missing, null or wrong-typed fields degrade to None
    (or "Unknown" for the location). Only the fields listed here are
    carried over; anything else in the document is dropped.

    Args:
        raw: Decoded JSON document from the weather source.
        now: Fallback observation time, defaults to the current UTC time.
    """
    rain_3h = parse_number(_get(raw, "precipitation", "rain_3h_mm"))
    snow_3h = parse_number(_get(raw, "precipitation", "snow_3h_mm"))

    raw_payload: Dict[str, Any] = {
        "icon": parse_text(_get(raw, "weather", "icon")),
        "humidity": parse_number(_get(raw, "main", "humidity_percent")),
        "pressure": parse_number(_get(raw, "main", "pressure_hpa")),
        "wind_gust": parse_number(_get(raw, "wind", "gust_ms")),
        "wind_deg": parse_number(_get(raw, "wind", "direction_degrees")),
        "rain_3h": rain_3h,
        "snow_3h": snow_3h,
    }

    return NormalizedObservation(
        observed_at=parse_observed_at(_get(raw, "datetime_utc"), now=now),
        location=parse_text(_get(raw, "location", "name"), default=UNKNOWN_LOCATION),
        clouds=parse_number(_get(raw, "clouds", "cloudiness_percent")),
        main=parse_number(_get(raw, "main", "temperature_c")),
        # first reported wins, never summed
        precipitation=rain_3h if rain_3h is not None else snow_3h,
        weather=parse_text(_get(raw, "weather", "description")),
        wind=parse_number(_get(raw, "wind", "speed_ms")),
        raw_payload=raw_payload,
    )
