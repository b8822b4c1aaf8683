"""
Geospatial helpers.

Great-circle distance between decimal-degree coordinates and the
kilometer/mile conversions used when talking to upstream providers.
"""

import math

KM_PER_MILE = 1.609344

# Mean earth radius (IUGG)
EARTH_RADIUS_KM = 6371.0088


def distance_km(point_a: tuple[float, float], point_b: tuple[float, float]) -> float:
    """
    Haversine distance in kilometers between two (lat, lng) points.

    Args:
        point_a: (latitude, longitude) in decimal degrees.
        point_b: (latitude, longitude) in decimal degrees.

    Returns:
        The unrounded great-circle distance in kilometers.
    """
    lat1, lng1 = point_a
    lat2, lng2 = point_b

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lam = math.radians(lng2 - lng1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lam / 2) ** 2
    # Clamp for float drift on antipodal points
    c = 2 * math.asin(math.sqrt(min(1.0, a)))
    return EARTH_RADIUS_KM * c


def distance_miles(point_a: tuple[float, float], point_b: tuple[float, float]) -> float:
    """Haversine distance in miles between two (lat, lng) points. Not rounded."""
    return km_to_miles(distance_km(point_a, point_b))


def miles_to_km(miles: float) -> float:
    """Convert miles to kilometers."""
    return miles * KM_PER_MILE


def km_to_miles(km: float) -> float:
    """Convert kilometers to miles."""
    return km / KM_PER_MILE


def round_distance(value: float, places: int = 2) -> float:
    """Round a distance for display; callers sort on the unrounded value."""
    return round(value, places)
