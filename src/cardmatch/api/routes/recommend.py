from typing import Any

from fastapi import APIRouter, Body, Query, Request

from cardmatch.schemas.requests import parse_recommend_request
from cardmatch.schemas.responses import RecommendResponse

router = APIRouter(tags=["recommend"])


@router.get("/cards/recommendations", response_model=RecommendResponse)
async def card_recommendations(
    request: Request,
    category: str | None = None,
    business_id: str | None = Query(default=None, alias="businessId"),
    business_name: str | None = Query(default=None, alias="businessName"),
    lat: str | None = None,
    lng: str | None = None,
) -> RecommendResponse:
    # Query values arrive as strings; the request schema does the coercion and range checks.
    raw = {
        "category": category,
        "businessId": business_id,
        "businessName": business_name,
        "lat": lat or None,
        "lng": lng or None,
    }
    payload = parse_recommend_request({key: value for key, value in raw.items() if value is not None})
    return await request.app.state.orchestrator.recommend(payload)


@router.post("/recommend", response_model=RecommendResponse)
async def recommend(request: Request, body: dict[str, Any] | None = Body(default=None)) -> RecommendResponse:
    return await request.app.state.orchestrator.recommend(parse_recommend_request(body or {}))
