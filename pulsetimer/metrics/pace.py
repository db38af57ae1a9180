"""Pace and speed derivations for cardio sessions.

A result of ``0`` means "not computable" (missing distance or duration)
and is rendered with a placeholder rather than as a real zero pace.
"""

from __future__ import annotations

import math


MILES_PER_KM = 0.621371192

PACE_PLACEHOLDER = "--:-- /km"
SPEED_PLACEHOLDER = "-- km/h"


def km_to_miles(km: float) -> float:
    return km * MILES_PER_KM


def miles_to_km(miles: float) -> float:
    return miles / MILES_PER_KM


def pace_sec_per_km(distance_km: float, duration_sec: float) -> float:
    if not (distance_km > 0 and duration_sec > 0):
        return 0.0
    pace = duration_sec / distance_km
    return pace if math.isfinite(pace) else 0.0


def speed_km_per_hour(distance_km: float, duration_sec: float) -> float:
    if not duration_sec > 0:
        return 0.0
    speed = distance_km * 3600.0 / duration_sec
    return speed if math.isfinite(speed) else 0.0


def format_pace(sec_per_km: float) -> str:
    if not (sec_per_km > 0 and math.isfinite(sec_per_km)):
        return PACE_PLACEHOLDER
    minutes = int(sec_per_km // 60)
    seconds = int(sec_per_km % 60)
    return f"{minutes:d}:{seconds:02d} /km"


def format_speed(km_per_hour: float) -> str:
    if not (km_per_hour > 0 and math.isfinite(km_per_hour)):
        return SPEED_PLACEHOLDER
    return f"{km_per_hour:.1f} km/h"


def format_pace_for(distance_km: float, duration_sec: float) -> str:
    return format_pace(pace_sec_per_km(distance_km, duration_sec))


def format_speed_for(distance_km: float, duration_sec: float) -> str:
    if not distance_km > 0:
        return SPEED_PLACEHOLDER
    return format_speed(speed_km_per_hour(distance_km, duration_sec))
