from cardmatch.domain.models import CardEval, CardRule, Classification

BASE_REASON = "Base earn rate"


def best_rate(card: CardRule, classification: Classification) -> tuple[float, list[str], str | None]:
    """Highest bonus rate a card earns for the classification.

    Rules are walked in catalog order and each matching check only upgrades
    the running rate when it is strictly greater, so a later equal or lower
    rule never adds a reason.
    """
    rate = card.base_rate
    reasons: list[str] = []
    matched_on: str | None = None
    taxonomy = classification.taxonomy.value

    for rule in card.bonus_rules:
        if rule.taxonomy is not None and rule.taxonomy == classification.taxonomy:
            if rule.rate > rate:
                rate = rule.rate
                reasons.append(f"Bonus for {taxonomy}")
                matched_on = "taxonomy"

        if rule.brand_ids and classification.brand_id and classification.brand_id in rule.brand_ids:
            if rule.rate > rate:
                rate = rule.rate
                reasons.append("Brand bonus")
                matched_on = "brand"

        if rule.mcc and any(code in rule.mcc for code in classification.mcc_candidates):
            if rule.rate > rate:
                rate = rule.rate
                reasons.append("MCC match")
                matched_on = "mcc"

    if not reasons:
        reasons.append(BASE_REASON)
    return rate, reasons, matched_on


def evaluate_card(card: CardRule, classification: Classification) -> CardEval:
    rate, reasons, matched_on = best_rate(card, classification)
    return CardEval(
        card_id=card.id,
        card_name=card.name,
        rate=rate,
        est_value_per_dollar=rate * card.point_value_cents,
        reasons=reasons,
        matched_on=matched_on,
    )
