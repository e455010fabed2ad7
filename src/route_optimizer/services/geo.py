from __future__ import annotations

import math

EARTH_RADIUS_KM = 6371.0
MINUTES_PER_KM = 2


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    lat1_rad = math.radians(lat1)
    lon1_rad = math.radians(lon1)
    lat2_rad = math.radians(lat2)
    lon2_rad = math.radians(lon2)

    dlat = lat2_rad - lat1_rad
    dlon = lon2_rad - lon1_rad

    a = (
        math.sin(dlat / 2.0) ** 2
        + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlon / 2.0) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up, not to the even neighbour."""
    return math.floor(value + 0.5)


def round_tenths(value: float) -> float:
    return round_half_up(value * 10) / 10


def estimate_minutes(distance_km: float) -> int:
    return round_half_up(distance_km * MINUTES_PER_KM)


def straight_line(
    start_lon: float, start_lat: float, end_lon: float, end_lat: float
) -> dict:
    return {
        "type": "LineString",
        "coordinates": [[start_lon, start_lat], [end_lon, end_lat]],
    }
