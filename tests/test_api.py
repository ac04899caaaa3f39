import pytest
from fastapi.testclient import TestClient

from cardmatch.api.app import create_app
from cardmatch.domain.errors import UpstreamLookupError
from cardmatch.domain.models import Business, Coordinates


class FakePlaces:
    def __init__(self, businesses=None, error=None):
        self.businesses = businesses or []
        self.error = error
        self.calls = []

    def search(self, lat, lng, radius=5000, category_hint=None):
        self.calls.append((lat, lng, radius, category_hint))
        if self.error:
            raise self.error
        return self.businesses


@pytest.fixture
def places() -> FakePlaces:
    return FakePlaces(
        [
            Business(id="far", name="Far Cafe", coordinates=Coordinates(lat=29.90, lng=-95.50), rating=4.9),
            Business(id="near", name="Near Cafe", coordinates=Coordinates(lat=29.7551, lng=-95.3601), rating=4.6),
            Business(id="closed", name="Closed Cafe", business_status="CLOSED_PERMANENTLY", rating=5.0),
        ]
    )


@pytest.fixture
def client(settings, places):
    with TestClient(create_app(settings, places_client=places)) as test_client:
        yield test_client


def test_health(client) -> None:
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"
    assert resp.json()["cards"] > 0


def test_get_recommendations_by_category(client) -> None:
    resp = client.get("/cards/recommendations", params={"category": "dining"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["category"] == "dining"
    first = body["recommendations"][0]
    assert first["card"]["card_name"] == "American Express Gold Card"
    assert first["match_score"] == 100
    assert set(first) >= {
        "card",
        "estimated_points",
        "annual_value",
        "match_score",
        "reasons",
        "reward_multiplier",
        "target_category",
    }


def test_get_recommendations_with_business_name(client) -> None:
    resp = client.get(
        "/cards/recommendations",
        params={"businessName": "Marriott Downtown Hotel", "lat": "29.75", "lng": "-95.36"},
    )

    body = resp.json()
    assert resp.status_code == 200
    assert body["business"]["name"] == "Marriott Downtown Hotel"
    assert body["recommendations"][0]["target_category"] == "marriott"


def test_missing_fields_is_400(client) -> None:
    resp = client.get("/cards/recommendations")

    assert resp.status_code == 400
    assert resp.json()["success"] is False


def test_bad_coordinates_is_400(client) -> None:
    resp = client.get("/cards/recommendations", params={"category": "dining", "lat": "abc", "lng": "1"})
    assert resp.status_code == 400


def test_post_recommend(client) -> None:
    resp = client.post("/recommend", json={"businessId": "biz_marriott_marquis_houston"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["business"]["id"] == "biz_marriott_marquis_houston"
    assert body["classification"]["brand_id"] == "marriott"


def test_post_rejects_unknown_fields(client) -> None:
    resp = client.post("/recommend", json={"category": "dining", "amount": 20})
    assert resp.status_code == 400


def test_nearby_ranks_and_drops_closed(client, places) -> None:
    resp = client.get("/businesses/nearby", params={"lat": 29.7550, "lng": -95.3600, "category": "coffee"})

    assert resp.status_code == 200
    body = resp.json()
    assert [item["id"] for item in body["businesses"]] == ["near", "far"]
    assert places.calls[0][3].value == "coffee"


def test_nearby_degrades_on_upstream_failure(settings) -> None:
    failing = FakePlaces(error=UpstreamLookupError("quota exceeded"))
    with TestClient(create_app(settings, places_client=failing)) as client:
        resp = client.get("/businesses/nearby", params={"lat": 1, "lng": 2})

    assert resp.status_code == 200
    assert resp.json() == {"success": True, "businesses": [], "degraded": True}
