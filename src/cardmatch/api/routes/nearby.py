import logging

from fastapi import APIRouter, Query, Request

from cardmatch.classification.classifier import resolve_category
from cardmatch.domain.errors import UpstreamLookupError
from cardmatch.domain.models import Coordinates
from cardmatch.places.score import rank_places
from cardmatch.schemas.responses import NearbyResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["places"])


@router.get("/businesses/nearby", response_model=NearbyResponse)
def nearby_businesses(
    request: Request,
    lat: float = Query(ge=-90, le=90),
    lng: float = Query(ge=-180, le=180),
    radius: int = Query(default=5000, gt=0, le=50_000),
    category: str | None = None,
) -> NearbyResponse:
    category_hint = None
    if category:
        taxonomy, _, recognized = resolve_category(category)
        category_hint = taxonomy if recognized else None

    try:
        businesses = request.app.state.places.search(lat, lng, radius, category_hint)
    except UpstreamLookupError as exc:
        logger.warning("Nearby search degraded: %s", exc)
        return NearbyResponse(businesses=[], degraded=True)

    return NearbyResponse(businesses=rank_places(businesses, Coordinates(lat=lat, lng=lng)))
