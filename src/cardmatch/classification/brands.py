import re
from dataclasses import dataclass

from cardmatch.domain.models import Taxonomy


@dataclass(frozen=True)
class Brand:
    id: str
    display_name: str
    taxonomy: Taxonomy
    keywords: tuple[str, ...]


# Declaration order is the tie-break when a name carries keywords of several brands.
BRANDS: tuple[Brand, ...] = (
    # Hotels
    Brand(
        "marriott",
        "Marriott",
        Taxonomy.HOTELS,
        (
            "marriott",
            "bonvoy",
            "courtyard by marriott",
            "residence inn",
            "fairfield inn",
            "springhill suites",
            "towneplace suites",
            "aloft",
            "w hotel",
            "st regis",
            "luxury collection",
            "ritz carlton",
        ),
    ),
    Brand(
        "hilton",
        "Hilton",
        Taxonomy.HOTELS,
        (
            "hilton",
            "hampton inn",
            "doubletree",
            "embassy suites",
            "homewood suites",
            "home2 suites",
            "waldorf astoria",
        ),
    ),
    Brand(
        "hyatt",
        "Hyatt",
        Taxonomy.HOTELS,
        ("hyatt", "andaz", "alila"),
    ),
    Brand(
        "ihg",
        "IHG",
        Taxonomy.HOTELS,
        (
            "holiday inn",
            "ihg",
            "intercontinental",
            "crowne plaza",
            "hotel indigo",
            "staybridge suites",
            "candlewood suites",
        ),
    ),
    Brand(
        "wyndham",
        "Wyndham",
        Taxonomy.HOTELS,
        (
            "wyndham",
            "ramada",
            "days inn",
            "super 8",
            "howard johnson",
            "travelodge",
            "wingate",
            "baymont",
            "microtel",
            "la quinta",
        ),
    ),
    Brand(
        "choice",
        "Choice",
        Taxonomy.HOTELS,
        (
            "comfort inn",
            "comfort suites",
            "quality inn",
            "clarion",
            "sleep inn",
            "mainstay suites",
            "econo lodge",
            "rodeway inn",
            "choice",
        ),
    ),
    # Airlines
    Brand("united", "United", Taxonomy.TRAVEL, ("united airlines",)),
    Brand("delta", "Delta", Taxonomy.TRAVEL, ("delta air lines", "delta airlines", "delta")),
    Brand("american", "American", Taxonomy.TRAVEL, ("american airlines",)),
    Brand("southwest", "Southwest", Taxonomy.TRAVEL, ("southwest airlines", "southwest")),
    Brand("jetblue", "JetBlue", Taxonomy.TRAVEL, ("jetblue", "jet blue")),
    Brand("alaska", "Alaska", Taxonomy.TRAVEL, ("alaska airlines",)),
    # Merchant chains
    Brand("starbucks", "Starbucks", Taxonomy.COFFEE, ("starbucks",)),
    Brand("dunkin", "Dunkin'", Taxonomy.COFFEE, ("dunkin",)),
    Brand("peets", "Peet's", Taxonomy.COFFEE, ("peets coffee", "peets")),
    Brand("mcdonalds", "McDonald's", Taxonomy.DINING, ("mcdonalds",)),
    Brand("panera", "Panera", Taxonomy.DINING, ("panera",)),
    Brand("burger_king", "Burger King", Taxonomy.DINING, ("burger king",)),
    Brand("wendys", "Wendy's", Taxonomy.DINING, ("wendys",)),
    Brand("taco_bell", "Taco Bell", Taxonomy.DINING, ("taco bell",)),
    Brand("chipotle", "Chipotle", Taxonomy.DINING, ("chipotle",)),
    Brand("chick_fil_a", "Chick-fil-A", Taxonomy.DINING, ("chick fil a", "chik fil a")),
    Brand("dominos", "Domino's", Taxonomy.DINING, ("dominos",)),
    Brand("pizza_hut", "Pizza Hut", Taxonomy.DINING, ("pizza hut",)),
    Brand("olive_garden", "Olive Garden", Taxonomy.DINING, ("olive garden",)),
    Brand("cheesecake_factory", "Cheesecake Factory", Taxonomy.DINING, ("cheesecake factory",)),
    Brand("costco", "Costco", Taxonomy.SHOPPING, ("costco",)),
    Brand("shell", "Shell", Taxonomy.GAS, ("shell",)),
    Brand("chevron", "Chevron", Taxonomy.GAS, ("chevron",)),
    Brand("walgreens", "Walgreens", Taxonomy.PHARMACY, ("walgreens",)),
    Brand("cvs", "CVS", Taxonomy.PHARMACY, ("cvs",)),
    Brand("whole_foods", "Whole Foods", Taxonomy.GROCERIES, ("whole foods",)),
    Brand("trader_joes", "Trader Joe's", Taxonomy.GROCERIES, ("trader joes",)),
    Brand("best_buy", "Best Buy", Taxonomy.ELECTRONICS, ("best buy",)),
    Brand("home_depot", "Home Depot", Taxonomy.HOME_IMPROVEMENT, ("home depot",)),
    Brand("lowes", "Lowe's", Taxonomy.HOME_IMPROVEMENT, ("lowes home improvement", "lowes")),
    Brand("amc", "AMC", Taxonomy.ENTERTAINMENT, ("amc theatres", "amc theaters")),
)

BRANDS_BY_ID: dict[str, Brand] = {brand.id: brand for brand in BRANDS}


def normalize_name(value: str) -> str:
    text = value.lower().replace("'", "").replace("’", "")
    text = re.sub(r"[^a-z0-9]+", " ", text)
    return text.strip()


def _keyword_pattern(keyword: str) -> re.Pattern[str]:
    # Anchored on the left word edge only, so "marriotts" still matches "marriott".
    return re.compile(r"(?<![a-z0-9])" + re.escape(normalize_name(keyword)))


_PATTERNS: tuple[tuple[Brand, tuple[re.Pattern[str], ...]], ...] = tuple(
    (brand, tuple(_keyword_pattern(keyword) for keyword in brand.keywords)) for brand in BRANDS
)


def find_brand(name: str) -> Brand | None:
    """Return the first brand in declaration order whose keyword appears in the name."""
    normalized = normalize_name(name)
    if not normalized:
        return None

    for brand, patterns in _PATTERNS:
        if any(pattern.search(normalized) for pattern in patterns):
            return brand
    return None
