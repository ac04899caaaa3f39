from pydantic import BaseModel, Field

from cardmatch.domain.models import Business, Classification


class CardSummary(BaseModel):
    card_id: str
    card_name: str
    issuer: str
    annual_fee: float
    bonus_offer: str | None = None
    popular: bool = False


class RecommendationItem(BaseModel):
    card: CardSummary
    estimated_points: int
    annual_value: float
    match_score: int = Field(ge=0, le=100)
    reasons: list[str]
    reward_multiplier: float
    target_category: str


class BusinessRef(BaseModel):
    id: str
    name: str


class RecommendResponse(BaseModel):
    success: bool = True
    recommendations: list[RecommendationItem]
    business: BusinessRef | None = None
    category: str
    classification: Classification
    catalog_version: str


class NearbyResponse(BaseModel):
    success: bool = True
    businesses: list[Business]
    degraded: bool = False
