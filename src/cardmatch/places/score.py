import math

from cardmatch.domain.models import Business, Coordinates
from cardmatch.places.geo import haversine_meters

UNKNOWN_DISTANCE_METERS = 5000


def score_place(business: Business, origin: Coordinates) -> float:
    """Blend rating, review volume, distance and open-now into one sort key."""
    if business.business_status and business.business_status != "OPERATIONAL":
        return -math.inf

    rating = business.rating or 0
    reviews = business.user_ratings_total or 0
    open_boost = 0.2 if business.open_now else 0
    price = business.price_level if business.price_level is not None else 2

    if business.coordinates is not None:
        distance_m = haversine_meters(origin, business.coordinates)
    else:
        distance_m = UNKNOWN_DISTANCE_METERS

    distance_km = distance_m / 1000
    distance_score = max(0.0, 1 - math.log1p(distance_km) / math.log(10))
    rating_score = rating / 5
    review_weight = min(1.0, math.log1p(reviews) / math.log(1000))
    price_penalty = max(0.0, (price - 2) * 0.05)

    return rating_score * (0.55 + 0.25 * review_weight) + distance_score * 0.25 + open_boost - price_penalty


def rank_places(businesses: list[Business], origin: Coordinates) -> list[Business]:
    scored = [(score_place(item, origin), item) for item in businesses]
    scored = [pair for pair in scored if pair[0] != -math.inf]
    scored.sort(key=lambda pair: pair[0], reverse=True)
    return [item for _, item in scored]
