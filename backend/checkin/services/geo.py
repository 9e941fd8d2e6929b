import math
from typing import Optional

from checkin.models.session import GeoPoint

EARTH_RADIUS_METERS = 6371000

def haversine_meters(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance between two coordinates in meters."""
    lat1_rad = math.radians(a.lat)
    lat2_rad = math.radians(b.lat)
    delta_lat = math.radians(b.lat - a.lat)
    delta_lng = math.radians(b.lng - a.lng)

    h = (math.sin(delta_lat / 2) ** 2 +
         math.cos(lat1_rad) * math.cos(lat2_rad) *
         math.sin(delta_lng / 2) ** 2)
    # Rounding can push h just past 1 for near-antipodal points
    h = min(1.0, max(0.0, h))
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))

    return EARTH_RADIUS_METERS * c

def resolve_distance(
    distance: Optional[float],
    location: Optional[GeoPoint],
    venue: Optional[GeoPoint],
) -> Optional[float]:
    """
    Pick the distance to evaluate for a request.
    An explicit client distance wins; otherwise compute it from the
    client's coordinates when the venue has both coordinates set.
    """
    if distance is not None:
        return distance
    if location is None or venue is None or not venue.is_complete():
        return None
    if not location.is_complete():
        return None
    return haversine_meters(location, venue)
