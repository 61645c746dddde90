# backend/src/foodshare/utils/validators.py
from __future__ import annotations

import math
from datetime import datetime
from typing import Optional

from foodshare.core.errors import InvalidInput

from .clock import as_naive_utc, utcnow


def require_text(value: Optional[str], field: str) -> str:
    text = (value or "").strip()
    if not text:
        raise InvalidInput(f"{field} is required")
    return text


def validate_coordinates(latitude: float, longitude: float) -> None:
    try:
        lat, lon = float(latitude), float(longitude)
    except (TypeError, ValueError):
        raise InvalidInput("Please enter valid latitude and longitude values")
    if math.isnan(lat) or math.isnan(lon) or math.isinf(lat) or math.isinf(lon):
        raise InvalidInput("Please enter valid latitude and longitude values")
    if not -90 <= lat <= 90:
        raise InvalidInput("Latitude must be between -90 and 90")
    if not -180 <= lon <= 180:
        raise InvalidInput("Longitude must be between -180 and 180")


def validate_radius(radius_km: float) -> float:
    if radius_km is None or math.isnan(radius_km) or radius_km <= 0:
        raise InvalidInput("radius_km must be positive")
    return float(radius_km)


def validate_pickup_window(
    start: datetime,
    end: datetime,
    now: Optional[datetime] = None,
) -> tuple[datetime, datetime]:
    """Normalize to naive UTC; start must lie in the future and end after start."""
    start, end = as_naive_utc(start), as_naive_utc(end)
    now = as_naive_utc(now) if now is not None else utcnow()
    if end <= start:
        raise InvalidInput("Pickup end time must be after pickup start time")
    if start <= now:
        raise InvalidInput("Pickup start time must be in the future")
    return start, end
