from collections.abc import Iterable

from cardmatch.domain.models import CardEval, CardRule, Classification
from cardmatch.engine.evaluator import evaluate_card


def evaluate_cards(classification: Classification, catalog: Iterable[CardRule]) -> list[CardEval]:
    evaluations = [evaluate_card(card, classification) for card in catalog]
    # sorted() is stable, so equal values keep catalog order.
    return sorted(evaluations, key=lambda item: item.est_value_per_dollar, reverse=True)
