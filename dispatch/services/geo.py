import math

EARTH_RADIUS_KM = 6371.0
# Length of one degree of latitude on the sphere above.
KM_PER_DEGREE = math.pi * EARTH_RADIUS_KM / 180.0


def validate_point(lat: float, lng: float) -> None:
    if not -90.0 <= lat <= 90.0:
        raise ValueError('latitude must be between -90 and 90')
    if not -180.0 <= lng <= 180.0:
        raise ValueError('longitude must be between -180 and 180')


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in kilometres between two lat/lng points."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = math.sin(d_lat / 2) ** 2 + math.cos(math.radians(lat1)) * \
        math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    # rounding can push a past 1 for antipodal points
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def bounding_box(lat: float, lng: float, radius_km: float) -> tuple[float, float, float, float]:
    """Return ``(min_lat, max_lat, min_lng, max_lng)`` enclosing a circle.

    The box is a superset of the circle; callers still filter candidates
    by exact distance.  Near the poles the longitude span covers the whole
    globe.
    """
    d_lat = radius_km / KM_PER_DEGREE
    min_lat, max_lat = max(-90.0, lat - d_lat), min(90.0, lat + d_lat)
    cos_lat = math.cos(math.radians(max(abs(min_lat), abs(max_lat))))
    if cos_lat < 1e-9:
        return min_lat, max_lat, -180.0, 180.0
    d_lng = radius_km / (KM_PER_DEGREE * cos_lat)
    if d_lng >= 180.0:
        return min_lat, max_lat, -180.0, 180.0
    return min_lat, max_lat, lng - d_lng, lng + d_lng
