import asyncio
import time

import pytest

from cardmatch.agents.orchestrator import RecommendationOrchestrator, annual_value, match_score
from cardmatch.domain.errors import UpstreamLookupError, ValidationError
from cardmatch.domain.models import Business, Coordinates, Taxonomy
from cardmatch.repository.business_store import InMemoryBusinessStore, JsonBusinessStore


class ExplodingCatalog:
    def snapshot(self):
        raise AssertionError("catalog must not be read")


class ExplodingStore:
    def find_by_id(self, business_id):
        raise UpstreamLookupError("store is down")


class SlowStore:
    def find_by_id(self, business_id):
        time.sleep(0.5)
        return None


class RecordingStore:
    def __init__(self):
        self.calls = []

    def find_by_id(self, business_id):
        self.calls.append(business_id)
        return None


def _run(orchestrator, request):
    return asyncio.run(orchestrator.recommend(request))


@pytest.fixture
def orchestrator(catalog_provider, settings) -> RecommendationOrchestrator:
    return RecommendationOrchestrator(catalog_provider, JsonBusinessStore(settings.business_store_file), settings)


def test_empty_request_fails_before_any_lookup(settings) -> None:
    store = RecordingStore()
    orchestrator = RecommendationOrchestrator(ExplodingCatalog(), store, settings)

    with pytest.raises(ValidationError):
        _run(orchestrator, {})
    assert store.calls == []


def test_blank_fields_count_as_missing(orchestrator) -> None:
    with pytest.raises(ValidationError):
        _run(orchestrator, {"category": "  ", "businessName": ""})


def test_invalid_coordinates_are_validation_errors(orchestrator) -> None:
    with pytest.raises(ValidationError, match="lat"):
        _run(orchestrator, {"category": "dining", "lat": 123, "lng": 0})

    with pytest.raises(ValidationError):
        _run(orchestrator, {"category": "dining", "lat": 10})


def test_category_only(orchestrator) -> None:
    result = _run(orchestrator, {"category": "dining"})

    assert result.success
    assert result.business is None
    assert result.category == "dining"
    assert result.classification.confidence == 1.0
    top = result.recommendations[0]
    assert top.card.card_id == "amex_gold"
    assert top.match_score == 100
    assert top.target_category == "dining"
    assert "Perfect for dining category" in top.reasons
    assert top.estimated_points == 400


def test_business_name_is_synthesized_and_classified(orchestrator) -> None:
    result = _run(orchestrator, {"businessName": "Marriott Downtown Hotel", "category": "hotels"})

    assert result.business.id == Business.synthetic_id("Marriott Downtown Hotel")
    assert result.classification.brand_id == "marriott"
    top = result.recommendations[0]
    assert top.card.card_id == "marriott_bonvoy_brilliant"
    assert top.target_category == "marriott"
    assert "Brand bonus" in top.reasons
    assert "Perfect for Marriott Downtown Hotel - Marriott brand card" in top.reasons


def test_synthesized_ids_are_deterministic() -> None:
    assert Business.synthetic_id("Joe's  Diner") == Business.synthetic_id("joe's diner")
    assert Business.synthetic_id("Joe's Diner") != Business.synthetic_id("Joe's Grill")


def test_business_looked_up_by_id(orchestrator) -> None:
    result = _run(orchestrator, {"businessId": "biz_local_kitchen"})

    assert result.business.name == "Local Kitchen"
    assert result.category == "dining"
    assert result.classification.source == "provider_type"


def test_unknown_business_id_without_name_uses_category(orchestrator) -> None:
    result = _run(orchestrator, {"businessId": "does-not-exist", "category": "gas"})

    assert result.business is None
    assert result.category == "gas"
    assert result.recommendations[0].card.card_id == "citi_custom_cash"


def test_store_failure_degrades_to_synthesized_business(catalog_provider, settings) -> None:
    orchestrator = RecommendationOrchestrator(catalog_provider, ExplodingStore(), settings)

    result = _run(orchestrator, {"businessId": "biz_1", "businessName": "Starbucks"})

    assert result.success
    assert result.business.name == "Starbucks"
    assert result.category == "coffee"


def test_store_timeout_degrades(catalog_provider, settings) -> None:
    settings.store_lookup_timeout_seconds = 0.05
    orchestrator = RecommendationOrchestrator(catalog_provider, SlowStore(), settings)

    result = _run(orchestrator, {"businessId": "biz_1", "category": "groceries"})

    assert result.success
    assert result.category == "groceries"


def test_category_hint_rescues_unclassifiable_name(orchestrator) -> None:
    result = _run(orchestrator, {"businessName": "Zzyzx", "category": "groceries"})

    assert result.category == "groceries"
    assert result.classification.source == "category_hint"


def test_unclassifiable_name_without_hint_falls_back(orchestrator) -> None:
    result = _run(orchestrator, {"businessName": "xyz123 unknown biz"})

    assert result.category == "shopping"
    assert result.classification.confidence <= 0.4


def test_distance_reason_is_display_only(catalog_provider, settings) -> None:
    here = Coordinates(lat=29.7550, lng=-95.3600)
    store = InMemoryBusinessStore([Business(id="b1", name="Local Kitchen", coordinates=here, provider_types=["restaurant"])])
    orchestrator = RecommendationOrchestrator(catalog_provider, store, settings)

    near = _run(orchestrator, {"businessId": "b1", "lat": here.lat, "lng": here.lng})
    far = _run(orchestrator, {"businessId": "b1", "lat": 40.7128, "lng": -74.0060})

    assert "Less than 0.1 mi away" in near.recommendations[0].reasons
    assert not any("mi away" in reason for item in far.recommendations for reason in item.reasons)
    assert [item.card.card_id for item in near.recommendations] == [item.card.card_id for item in far.recommendations]


def test_half_mile_reason_reports_distance(catalog_provider, settings) -> None:
    here = Coordinates(lat=29.7550, lng=-95.3600)
    store = InMemoryBusinessStore([Business(id="b1", name="Local Kitchen", coordinates=here, provider_types=["restaurant"])])
    orchestrator = RecommendationOrchestrator(catalog_provider, store, settings)

    # 0.00725 degrees of latitude is about 806 m.
    walk = _run(orchestrator, {"businessId": "b1", "lat": here.lat + 0.00725, "lng": here.lng})
    far = _run(orchestrator, {"businessId": "b1", "lat": 40.7128, "lng": -74.0060})

    assert "Available nearby (0.5 mi away)" in walk.recommendations[0].reasons
    assert [item.card.card_id for item in walk.recommendations] == [item.card.card_id for item in far.recommendations]
    assert [item.match_score for item in walk.recommendations] == [item.match_score for item in far.recommendations]


def test_match_scores_and_limit(orchestrator, settings) -> None:
    result = _run(orchestrator, {"category": "hotels"})

    scores = [item.match_score for item in result.recommendations]
    assert scores[0] == 100
    assert all(0 <= score <= 100 for score in scores)
    assert scores == sorted(scores, reverse=True)
    assert len(result.recommendations) == settings.max_recommendations


def test_fee_and_popularity_reasons(orchestrator) -> None:
    result = _run(orchestrator, {"category": "other"})
    by_id = {item.card.card_id: item for item in result.recommendations}

    assert "Low annual fee" in by_id["wells_fargo_active_cash"].reasons
    assert "Popular choice" in by_id["wells_fargo_active_cash"].reasons
    assert "Low annual fee" not in by_id["venture_x"].reasons
    assert by_id["wells_fargo_active_cash"].target_category == "everything_else"


def test_match_score_helper() -> None:
    assert match_score(3.0, 6.0) == 50
    assert match_score(6.0, 6.0) == 100
    assert match_score(0.0, 6.0) == 0
    assert match_score(0.0, 0.0) == 100


def test_annual_value_helper() -> None:
    # 3 cents per dollar on $400 a month for a year.
    assert annual_value(3.0, Taxonomy.DINING) == 144.0
