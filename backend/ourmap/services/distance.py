"""Great-circle distance between coordinate pairs."""
import math

EARTH_RADIUS_KM = 6371.0


def _check_coordinates(lat: float, lng: float) -> None:
    if not -90.0 <= lat <= 90.0:
        raise ValueError(f"Latitude out of range: {lat}")
    if not -180.0 <= lng <= 180.0:
        raise ValueError(f"Longitude out of range: {lng}")


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Haversine distance in kilometres.

    Raises ValueError for latitudes outside [-90, 90] or longitudes outside
    [-180, 180].
    """
    _check_coordinates(lat1, lng1)
    _check_coordinates(lat2, lng2)

    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    dlat = lat2_rad - lat1_rad
    dlng = math.radians(lng2 - lng1)

    a = math.sin(dlat / 2) ** 2 + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlng / 2) ** 2
    # Rounding can push a fractionally above 1 for antipodal points.
    c = 2 * math.asin(math.sqrt(min(1.0, a)))
    return EARTH_RADIUS_KM * c
