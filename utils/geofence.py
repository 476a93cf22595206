# utils/geofence.py

from math import atan2, cos, floor, radians, sin, sqrt

EARTH_RADIUS_M = 6371000


def haversine_dist(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    φ1, φ2 = radians(lat1), radians(lat2)
    Δφ = radians(lat2 - lat1)
    Δλ = radians(lng2 - lng1)

    a = sin(Δφ / 2) ** 2 + cos(φ1) * cos(φ2) * sin(Δλ / 2) ** 2
    # Float noise can push a a hair past 1 for antipodal points
    a = min(1.0, max(0.0, a))
    c = 2 * atan2(sqrt(a), sqrt(1 - a))
    return EARTH_RADIUS_M * c


def is_within_radius(
    lat: float,
    lng: float,
    center_lat: float,
    center_lng: float,
    radius_m: float
) -> bool:

    return haversine_dist(lat, lng, center_lat, center_lng) <= radius_m


def round_meters(distance_m: float) -> int:
    """Round half up to whole meters, for display only."""
    return int(floor(distance_m + 0.5))
