from cardmatch.domain.models import Taxonomy

TAXONOMY_TO_MCC: dict[Taxonomy, list[int]] = {
    Taxonomy.DINING: [5812, 5814],
    Taxonomy.COFFEE: [5814],
    Taxonomy.GROCERIES: [5411],
    Taxonomy.GAS: [5541, 5542],
    Taxonomy.SHOPPING: [5311, 5300],
    Taxonomy.PHARMACY: [5912],
    Taxonomy.ENTERTAINMENT: [7832, 7922, 7996, 7999],
    Taxonomy.TRAVEL: [4722, 4112, 4111, 4511],
    Taxonomy.ELECTRONICS: [5732],
    Taxonomy.HOTELS: [7011],
    Taxonomy.HOME_IMPROVEMENT: [5200, 5251, 5211],
    Taxonomy.OTHER: [],
}


def mccs_for_taxonomy(taxonomy: Taxonomy) -> list[int]:
    return list(TAXONOMY_TO_MCC.get(taxonomy, []))
