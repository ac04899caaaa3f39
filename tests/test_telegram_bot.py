import asyncio

from cardmatch.agents.orchestrator import RecommendationOrchestrator
from cardmatch.integrations.telegram_bot import format_reply
from cardmatch.repository.business_store import InMemoryBusinessStore


def test_format_reply_lists_top_three(catalog_provider, settings) -> None:
    orchestrator = RecommendationOrchestrator(catalog_provider, InMemoryBusinessStore(), settings)
    result = asyncio.run(orchestrator.recommend({"businessName": "Starbucks Reserve"}))

    reply = format_reply(result)

    assert reply.startswith("Best cards for Starbucks Reserve (coffee):")
    assert "1. American Express Gold Card - 4x" in reply
    assert sum(1 for line in reply.splitlines() if line[:2] in ("1.", "2.", "3.", "4.")) == 3
