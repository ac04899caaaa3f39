from pathlib import Path

import pytest

from cardmatch.config import Settings
from cardmatch.domain.models import BonusRule, CardRule, Classification, Taxonomy
from cardmatch.repository.catalog_store import CardCatalogStore, CatalogProvider

PROJECT_ROOT = Path(__file__).resolve().parents[1]
CATALOG_PATH = PROJECT_ROOT / "data" / "cards" / "catalog.json"
BUSINESSES_PATH = PROJECT_ROOT / "data" / "businesses" / "businesses.json"


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        card_catalog_file=str(CATALOG_PATH),
        business_store_file=str(BUSINESSES_PATH),
        google_places_api_key="",
        openai_api_key="",
        store_lookup_timeout_seconds=0.5,
    )


@pytest.fixture
def catalog_provider() -> CatalogProvider:
    provider = CatalogProvider(CardCatalogStore(str(CATALOG_PATH)))
    provider.refresh()
    return provider


@pytest.fixture
def catalog(catalog_provider) -> list[CardRule]:
    return list(catalog_provider.snapshot().cards)


def make_card(card_id: str, base_rate: float = 1, point_value_cents: float = 1.0, bonus_rules=(), **extra) -> CardRule:
    return CardRule(
        id=card_id,
        name=card_id.replace("_", " ").title(),
        issuer="Test Bank",
        base_rate=base_rate,
        point_value_cents=point_value_cents,
        bonus_rules=[BonusRule(**rule) for rule in bonus_rules],
        **extra,
    )


def make_classification(taxonomy: Taxonomy, brand_id: str | None = None, mcc=()) -> Classification:
    return Classification(taxonomy=taxonomy, brand_id=brand_id, confidence=1.0, mcc_candidates=list(mcc))
