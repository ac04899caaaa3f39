import logging

import requests

from cardmatch.domain.errors import UpstreamLookupError
from cardmatch.domain.models import Business, Coordinates, Taxonomy
from cardmatch.places.categories import CATEGORY_MAP, search_keyword

logger = logging.getLogger(__name__)

NEARBY_SEARCH_URL = "https://maps.googleapis.com/maps/api/place/nearbysearch/json"
MAX_RADIUS_METERS = 50_000


def _to_business(place: dict, category_hint: Taxonomy | None) -> Business | None:
    place_id = place.get("place_id")
    name = place.get("name")
    if not place_id or not name:
        return None

    location = (place.get("geometry") or {}).get("location") or {}
    coordinates = None
    if "lat" in location and "lng" in location:
        coordinates = Coordinates(lat=location["lat"], lng=location["lng"])

    return Business(
        id=place_id,
        name=name,
        category=category_hint.value if category_hint else None,
        address=place.get("vicinity") or place.get("formatted_address"),
        coordinates=coordinates,
        provider_types=list(place.get("types") or []),
        rating=place.get("rating"),
        user_ratings_total=place.get("user_ratings_total"),
        price_level=place.get("price_level"),
        open_now=(place.get("opening_hours") or {}).get("open_now"),
        business_status=place.get("business_status"),
    )


class GooglePlacesClient:
    def __init__(self, api_key: str, timeout: float = 5.0, session: requests.Session | None = None):
        self.api_key = api_key
        self.timeout = timeout
        self.session = session or requests.Session()

    def search(
        self,
        lat: float,
        lng: float,
        radius: int = 5000,
        category_hint: Taxonomy | None = None,
    ) -> list[Business]:
        if not self.api_key:
            raise UpstreamLookupError("GOOGLE_PLACES_API_KEY is not configured.")

        params: dict[str, str | int] = {
            "location": f"{lat},{lng}",
            "radius": max(1, min(int(radius), MAX_RADIUS_METERS)),
            "key": self.api_key,
        }
        if category_hint is not None and category_hint in CATEGORY_MAP:
            params["type"] = CATEGORY_MAP[category_hint].google_types[0]
            keyword = search_keyword(category_hint)
            if keyword:
                params["keyword"] = keyword

        try:
            response = self.session.get(NEARBY_SEARCH_URL, params=params, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as exc:
            raise UpstreamLookupError(f"Places nearby search failed: {exc}") from exc

        status = payload.get("status")
        if status == "ZERO_RESULTS":
            return []
        if status != "OK":
            raise UpstreamLookupError(f"Places nearby search returned {status}: {payload.get('error_message', '')}")

        businesses = [_to_business(place, category_hint) for place in payload.get("results", [])]
        found = [item for item in businesses if item is not None]
        logger.info("Places search near %.4f,%.4f returned %d businesses", lat, lng, len(found))
        return found
