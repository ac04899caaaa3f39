"""Rule-based merchant classifier.

Tiers are tried in order and the first one that resolves wins:

1. brand lexicon match on the business name (confidence 0.95)
2. provider place types, e.g. Google ``restaurant`` / ``gas_station``
3. curated keywords in the name or free-form location text
4. fallback to ``shopping`` with low confidence

The classifier is a pure function; it never raises for string input.
"""

import re

from cardmatch.classification.brands import BRANDS_BY_ID, find_brand
from cardmatch.classification.mcc import mccs_for_taxonomy
from cardmatch.domain.models import Classification, Taxonomy
from cardmatch.places.categories import taxonomies_for_type

BRAND_CONFIDENCE = 0.95
SHARED_TYPE_CONFIDENCE = 0.5
DEFAULT_TYPE_CONFIDENCE = 0.8
FALLBACK_CONFIDENCE = 0.3
FALLBACK_TAXONOMY = Taxonomy.SHOPPING

TYPE_CONFIDENCE: dict[str, float] = {
    "cafe": 0.9,
    "restaurant": 0.85,
    "meal_takeaway": 0.85,
    "meal_delivery": 0.85,
    "lodging": 0.85,
    "gas_station": 0.8,
    "grocery_or_supermarket": 0.8,
    "supermarket": 0.8,
    "pharmacy": 0.8,
    "drugstore": 0.8,
    "convenience_store": 0.7,
    "electronics_store": 0.7,
    "hardware_store": 0.7,
    "home_goods_store": 0.6,
    "bakery": 0.6,
    "bar": 0.6,
    # Broad tags that say little about the merchant.
    "food": SHARED_TYPE_CONFIDENCE,
    "store": SHARED_TYPE_CONFIDENCE,
}

KEYWORD_RULES: tuple[tuple[re.Pattern[str], Taxonomy, float], ...] = tuple(
    (re.compile(pattern, re.IGNORECASE), taxonomy, weight)
    for pattern, taxonomy, weight in (
        (r"\bhome\s?improvement\b", Taxonomy.HOME_IMPROVEMENT, 0.7),
        (r"\bgas\s+station\b|\bfuel\b", Taxonomy.GAS, 0.7),
        (r"\bpharmacy\b|\bdrugstore\b", Taxonomy.PHARMACY, 0.7),
        (r"\bhotel\b|\bmotel\b|\binn\b|\blodging\b|\bresort\b", Taxonomy.HOTELS, 0.65),
        (r"\bsupermarket\b|\bgrocery\b|\bgroceries\b", Taxonomy.GROCERIES, 0.65),
        (r"\bcoffee\b|\bcafe\b|\bespresso\b|\blatte\b", Taxonomy.COFFEE, 0.6),
        (r"\brestaurant\b|\blunch\b|\bdinner\b|\bdiner\b|\bkitchen\b|\bbistro\b|\beatery\b", Taxonomy.DINING, 0.6),
        (r"\bhardware\b|\bhome\s?goods\b", Taxonomy.HOME_IMPROVEMENT, 0.6),
        (r"\bairlines?\b|\bairport\b|\btravel\b|\btours\b", Taxonomy.TRAVEL, 0.6),
        (r"\bcinema\b|\bmovies?\b|\btheat(?:er|re)\b|\bbowling\b", Taxonomy.ENTERTAINMENT, 0.6),
        (r"\bgrill\b|\bpizza\b|\bsushi\b|\btaqueria\b|\bnoodles?\b|\bbbq\b|\bdeli\b|\bbar\b", Taxonomy.DINING, 0.55),
        (r"\bmarket\b|\bbodega\b", Taxonomy.GROCERIES, 0.5),
        (r"\bgas\b", Taxonomy.GAS, 0.5),
        (r"\belectronics\b|\bgadgets\b", Taxonomy.ELECTRONICS, 0.5),
        (r"\boutlet\b|\bmall\b|\bboutique\b", Taxonomy.SHOPPING, 0.5),
    )
)


def _result(taxonomy: Taxonomy, confidence: float, source: str, brand_id: str | None = None) -> Classification:
    return Classification(
        taxonomy=taxonomy,
        brand_id=brand_id,
        confidence=confidence,
        mcc_candidates=mccs_for_taxonomy(taxonomy),
        source=source,
    )


def _classify_provider_types(provider_types: list[str]) -> Classification | None:
    best: tuple[Taxonomy, float] | None = None
    for provider_type in provider_types:
        candidates = taxonomies_for_type(provider_type)
        if not candidates:
            continue

        if len(candidates) > 1:
            confidence = SHARED_TYPE_CONFIDENCE
        else:
            confidence = TYPE_CONFIDENCE.get(provider_type.lower(), DEFAULT_TYPE_CONFIDENCE)

        if best is None or confidence > best[1]:
            best = (candidates[0], confidence)

    if best is None:
        return None
    return _result(best[0], best[1], "provider_type")


def _classify_keywords(text: str) -> Classification | None:
    best: tuple[Taxonomy, float] | None = None
    for pattern, taxonomy, weight in KEYWORD_RULES:
        if pattern.search(text) and (best is None or weight > best[1]):
            best = (taxonomy, weight)

    if best is None:
        return None
    return _result(best[0], best[1], "keyword")


def classify(
    name: str,
    provider_types: list[str] | None = None,
    freeform_location_text: str | None = None,
) -> Classification:
    name = name or ""

    brand = find_brand(name)
    if brand is not None:
        return _result(brand.taxonomy, BRAND_CONFIDENCE, "brand", brand_id=brand.id)

    if provider_types:
        by_type = _classify_provider_types(provider_types)
        if by_type is not None:
            return by_type

    text = " ".join(part for part in (name, freeform_location_text or "") if part)
    by_keyword = _classify_keywords(text)
    if by_keyword is not None:
        return by_keyword

    return _result(FALLBACK_TAXONOMY, FALLBACK_CONFIDENCE, "fallback")


CATEGORY_ALIASES: dict[str, Taxonomy] = {
    "general": Taxonomy.OTHER,
    "everything_else": Taxonomy.OTHER,
    "drugstores": Taxonomy.PHARMACY,
    "grocery": Taxonomy.GROCERIES,
    "restaurants": Taxonomy.DINING,
    "hotel": Taxonomy.HOTELS,
    "airlines": Taxonomy.TRAVEL,
    "department_stores": Taxonomy.SHOPPING,
    "online_shopping": Taxonomy.SHOPPING,
    "streaming": Taxonomy.ENTERTAINMENT,
}


def resolve_category(category: str | None) -> tuple[Taxonomy, str | None, bool]:
    """Map a request category string to ``(taxonomy, brand_id, recognized)``.

    Accepts taxonomy values, a few legacy aliases and brand ids such as
    ``marriott``. Unknown strings resolve to ``Taxonomy.OTHER`` with
    ``recognized`` False.
    """
    key = (category or "").strip().lower().replace(" ", "_").replace("-", "_")
    if not key:
        return Taxonomy.OTHER, None, False

    try:
        return Taxonomy(key), None, True
    except ValueError:
        pass

    if key in CATEGORY_ALIASES:
        return CATEGORY_ALIASES[key], None, True

    brand = BRANDS_BY_ID.get(key)
    if brand is not None:
        return brand.taxonomy, brand.id, True

    return Taxonomy.OTHER, None, False


def classify_category(category: str | None) -> Classification:
    """Classification for a bare category hint, trusted as-is."""
    taxonomy, brand_id, _ = resolve_category(category)
    return _result(taxonomy, 1.0, "category", brand_id=brand_id)
