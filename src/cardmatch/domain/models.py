import hashlib
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Taxonomy(str, Enum):
    DINING = "dining"
    COFFEE = "coffee"
    GROCERIES = "groceries"
    GAS = "gas"
    SHOPPING = "shopping"
    PHARMACY = "pharmacy"
    ENTERTAINMENT = "entertainment"
    TRAVEL = "travel"
    ELECTRONICS = "electronics"
    HOTELS = "hotels"
    HOME_IMPROVEMENT = "home_improvement"
    OTHER = "other"


class Coordinates(BaseModel):
    model_config = ConfigDict(frozen=True)

    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)


class Business(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    name: str
    category: str | None = None
    address: str | None = None
    coordinates: Coordinates | None = None
    provider_types: list[str] = Field(default_factory=list)

    # Listing metadata, only used to rank nearby results.
    rating: float | None = None
    user_ratings_total: int | None = None
    price_level: int | None = None
    open_now: bool | None = None
    business_status: str | None = None

    @staticmethod
    def synthetic_id(name: str) -> str:
        normalized = " ".join(name.lower().split())
        return "tmp_" + hashlib.sha256(normalized.encode("utf-8")).hexdigest()[:16]

    @classmethod
    def synthesize(cls, name: str, category: str | None = None) -> "Business":
        return cls(id=cls.synthetic_id(name), name=name, category=category)


class Classification(BaseModel):
    model_config = ConfigDict(frozen=True)

    taxonomy: Taxonomy
    brand_id: str | None = None
    confidence: float = Field(ge=0, le=1)
    mcc_candidates: list[int] = Field(default_factory=list)
    source: str = "fallback"


class BonusRule(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    taxonomy: Taxonomy | None = None
    brand_ids: list[str] = Field(default_factory=list)
    mcc: list[int] = Field(default_factory=list)
    rate: float = Field(gt=0)


class CardRule(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(min_length=1)
    name: str
    issuer: str
    program: str = "Other"
    base_rate: float = Field(ge=0)
    bonus_rules: list[BonusRule] = Field(default_factory=list)
    point_value_cents: float = Field(gt=0)
    annual_fee: float = Field(default=0, ge=0)
    popular: bool = False
    bonus_offer: str | None = None


class CardEval(BaseModel):
    card_id: str
    card_name: str
    rate: float
    est_value_per_dollar: float
    reasons: list[str] = Field(min_length=1)
    matched_on: str | None = None
