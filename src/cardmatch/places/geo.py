import math

from cardmatch.domain.models import Coordinates

EARTH_RADIUS_METERS = 6_371_000
METERS_PER_MILE = 1609.344


def haversine_meters(a: Coordinates, b: Coordinates) -> float:
    lat1 = math.radians(a.lat)
    lat2 = math.radians(b.lat)
    d_lat = math.radians(b.lat - a.lat)
    d_lng = math.radians(b.lng - a.lng)
    s = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lng / 2) ** 2
    return 2 * EARTH_RADIUS_METERS * math.asin(math.sqrt(s))


def meters_to_miles(meters: float) -> float:
    return meters / METERS_PER_MILE
