from dataclasses import dataclass

from cardmatch.domain.models import Taxonomy


@dataclass(frozen=True)
class ProviderMapping:
    google_types: tuple[str, ...]
    google_keywords: tuple[str, ...]


CATEGORY_MAP: dict[Taxonomy, ProviderMapping] = {
    Taxonomy.DINING: ProviderMapping(
        ("restaurant", "meal_takeaway", "meal_delivery", "bakery", "bar", "food"),
        ("restaurant", "eat", "lunch", "dinner", "food"),
    ),
    Taxonomy.COFFEE: ProviderMapping(("cafe",), ("coffee", "espresso", "latte", "cafe")),
    Taxonomy.GROCERIES: ProviderMapping(
        ("grocery_or_supermarket", "supermarket", "convenience_store"),
        ("groceries", "supermarket", "market", "bodega"),
    ),
    Taxonomy.GAS: ProviderMapping(("gas_station",), ("gas", "fuel")),
    Taxonomy.SHOPPING: ProviderMapping(
        ("department_store", "shopping_mall", "clothing_store", "store"),
        ("shopping", "retail", "outlet", "store"),
    ),
    Taxonomy.PHARMACY: ProviderMapping(("pharmacy", "drugstore"), ("pharmacy", "drugstore", "medication")),
    Taxonomy.ENTERTAINMENT: ProviderMapping(
        ("movie_theater", "tourist_attraction", "bowling_alley", "amusement_park"),
        ("entertainment", "theater", "cinema", "bowling"),
    ),
    Taxonomy.TRAVEL: ProviderMapping(
        ("travel_agency", "airport", "tourist_attraction"),
        ("travel", "tours"),
    ),
    Taxonomy.ELECTRONICS: ProviderMapping(
        ("electronics_store", "department_store"),
        ("electronics", "gadgets", "tech store"),
    ),
    Taxonomy.HOTELS: ProviderMapping(("lodging",), ("hotel", "lodging")),
    Taxonomy.HOME_IMPROVEMENT: ProviderMapping(
        ("home_goods_store", "hardware_store"),
        ("home improvement", "hardware", "home goods"),
    ),
}


def search_keyword(taxonomy: Taxonomy | None) -> str | None:
    """First provider search keyword for a taxonomy, used to narrow nearby searches."""
    if taxonomy is None or taxonomy not in CATEGORY_MAP:
        return None
    return CATEGORY_MAP[taxonomy].google_keywords[0]


def taxonomies_for_type(provider_type: str) -> list[Taxonomy]:
    """All taxonomies that list the provider type, in CATEGORY_MAP order."""
    key = provider_type.lower()
    return [taxonomy for taxonomy, mapping in CATEGORY_MAP.items() if key in mapping.google_types]
