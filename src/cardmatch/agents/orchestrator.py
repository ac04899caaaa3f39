import asyncio
import logging
import math
from typing import Any

from cardmatch.classification.brands import BRANDS_BY_ID
from cardmatch.classification.classifier import FALLBACK_CONFIDENCE, classify, classify_category, resolve_category
from cardmatch.classification.mcc import mccs_for_taxonomy
from cardmatch.config import Settings
from cardmatch.domain.errors import ValidationError
from cardmatch.domain.models import Business, CardEval, CardRule, Classification, Coordinates, Taxonomy
from cardmatch.engine.selectors import evaluate_cards
from cardmatch.nlp.llm_classifier import LLMRefiner
from cardmatch.places.geo import haversine_meters, meters_to_miles
from cardmatch.repository.business_store import BusinessStore
from cardmatch.repository.catalog_store import CatalogProvider
from cardmatch.schemas.requests import RecommendRequest, parse_recommend_request
from cardmatch.schemas.responses import BusinessRef, CardSummary, RecommendationItem, RecommendResponse

logger = logging.getLogger(__name__)

# Rough monthly spend per category in dollars; only feeds the annual_value estimate.
ASSUMED_MONTHLY_SPEND: dict[Taxonomy, float] = {
    Taxonomy.DINING: 400,
    Taxonomy.COFFEE: 60,
    Taxonomy.GROCERIES: 500,
    Taxonomy.GAS: 200,
    Taxonomy.SHOPPING: 300,
    Taxonomy.PHARMACY: 50,
    Taxonomy.ENTERTAINMENT: 100,
    Taxonomy.TRAVEL: 250,
    Taxonomy.ELECTRONICS: 100,
    Taxonomy.HOTELS: 200,
    Taxonomy.HOME_IMPROVEMENT: 150,
    Taxonomy.OTHER: 500,
}

CATEGORY_HINT_CONFIDENCE = 0.5
LOW_ANNUAL_FEE = 100
NEARBY_MILES = 1.0
VERY_CLOSE_MILES = 0.1
POINTS_SAMPLE_SPEND = 100


def match_score(value: float, best_value: float) -> int:
    if best_value <= 0:
        return 100
    return max(0, min(100, math.floor(value / best_value * 100)))


def annual_value(est_value_per_dollar: float, taxonomy: Taxonomy) -> float:
    monthly = ASSUMED_MONTHLY_SPEND.get(taxonomy, ASSUMED_MONTHLY_SPEND[Taxonomy.OTHER])
    return round(est_value_per_dollar * monthly * 12 / 100, 2)


def distance_reason(business: Business | None, origin: Coordinates | None) -> str | None:
    if business is None or business.coordinates is None or origin is None:
        return None
    miles = meters_to_miles(haversine_meters(origin, business.coordinates))
    if miles < VERY_CLOSE_MILES:
        return "Less than 0.1 mi away"
    if miles <= NEARBY_MILES:
        return f"Available nearby ({miles:.1f} mi away)"
    return None


def target_category(evaluation: CardEval, classification: Classification) -> str:
    if evaluation.matched_on == "brand" and classification.brand_id:
        return classification.brand_id
    if evaluation.matched_on in ("taxonomy", "mcc"):
        return classification.taxonomy.value
    return "everything_else"


class RecommendationOrchestrator:
    def __init__(
        self,
        catalog: CatalogProvider,
        business_store: BusinessStore,
        settings: Settings,
        refiner: LLMRefiner | None = None,
    ):
        self.catalog = catalog
        self.business_store = business_store
        self.settings = settings
        self.refiner = refiner

    async def _lookup_business(self, business_id: str) -> Business | None:
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(self.business_store.find_by_id, business_id),
                timeout=self.settings.store_lookup_timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning("Business lookup for %s timed out, falling back", business_id)
        except Exception:
            logger.warning("Business lookup for %s failed, falling back", business_id, exc_info=True)
        return None

    async def _resolve_business(self, request: RecommendRequest) -> Business | None:
        business = None
        if request.business_id:
            business = await self._lookup_business(request.business_id)

        if business is None and request.business_name:
            # The request location is the shopper's, not the merchant's, so it is not copied over.
            business = Business.synthesize(request.business_name, category=request.category)
            logger.info("Using synthesized business %s for %r", business.id, business.name)
        return business

    async def _classify(self, request: RecommendRequest, business: Business | None) -> Classification:
        if business is None or not business.name.strip():
            return classify_category(request.category)

        classification = classify(
            business.name,
            provider_types=business.provider_types,
            freeform_location_text=business.address,
        )

        if classification.confidence <= FALLBACK_CONFIDENCE:
            taxonomy, brand_id, recognized = resolve_category(business.category or request.category)
            if recognized:
                classification = Classification(
                    taxonomy=taxonomy,
                    brand_id=brand_id,
                    confidence=CATEGORY_HINT_CONFIDENCE,
                    mcc_candidates=mccs_for_taxonomy(taxonomy),
                    source="category_hint",
                )

        if self.refiner is not None:
            classification = await asyncio.to_thread(self.refiner.refine, business, classification)
        return classification

    def _reasons(
        self,
        card: CardRule,
        evaluation: CardEval,
        classification: Classification,
        business: Business | None,
        nearby: str | None,
    ) -> list[str]:
        reasons = list(evaluation.reasons)
        if evaluation.matched_on == "brand" and classification.brand_id:
            brand = BRANDS_BY_ID.get(classification.brand_id)
            brand_name = brand.display_name if brand else classification.brand_id
            subject = business.name if business else brand_name
            reasons.append(f"Perfect for {subject} - {brand_name} brand card")
        elif evaluation.matched_on in ("taxonomy", "mcc"):
            reasons.append(f"Perfect for {classification.taxonomy.value} category")

        if card.bonus_offer:
            reasons.append(f"Sign-up bonus: {card.bonus_offer}")
        if card.popular:
            reasons.append("Popular choice")
        if card.annual_fee <= LOW_ANNUAL_FEE:
            reasons.append("Low annual fee")
        if nearby:
            reasons.append(nearby)
        return reasons

    async def recommend(self, request: RecommendRequest | dict[str, Any]) -> RecommendResponse:
        if not isinstance(request, RecommendRequest):
            request = parse_recommend_request(request)
        if not request.has_target():
            raise ValidationError("Category, business ID or business name is required.")

        business = await self._resolve_business(request)
        classification = await self._classify(request, business)

        snapshot = self.catalog.snapshot()
        cards_by_id = {card.id: card for card in snapshot.cards}
        evaluations = evaluate_cards(classification, snapshot.cards)

        best_value = evaluations[0].est_value_per_dollar if evaluations else 0
        nearby = distance_reason(business, request.coordinates)

        items: list[RecommendationItem] = []
        for evaluation in evaluations[: self.settings.max_recommendations]:
            card = cards_by_id[evaluation.card_id]
            items.append(
                RecommendationItem(
                    card=CardSummary(
                        card_id=card.id,
                        card_name=card.name,
                        issuer=card.issuer,
                        annual_fee=card.annual_fee,
                        bonus_offer=card.bonus_offer,
                        popular=card.popular,
                    ),
                    estimated_points=round(evaluation.rate * POINTS_SAMPLE_SPEND),
                    annual_value=annual_value(evaluation.est_value_per_dollar, classification.taxonomy),
                    match_score=match_score(evaluation.est_value_per_dollar, best_value),
                    reasons=self._reasons(card, evaluation, classification, business, nearby),
                    reward_multiplier=evaluation.rate,
                    target_category=target_category(evaluation, classification),
                )
            )

        logger.info(
            "Recommended %s for %s (taxonomy=%s brand=%s confidence=%.2f)",
            items[0].card.card_id if items else None,
            business.name if business else request.category,
            classification.taxonomy.value,
            classification.brand_id,
            classification.confidence,
        )

        return RecommendResponse(
            recommendations=items,
            business=BusinessRef(id=business.id, name=business.name) if business else None,
            category=classification.taxonomy.value,
            classification=classification,
            catalog_version=snapshot.version,
        )
