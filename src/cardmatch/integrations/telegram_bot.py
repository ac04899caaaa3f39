import logging

from telegram import Update
from telegram.ext import Application, CommandHandler, ContextTypes, MessageHandler, filters

from cardmatch.agents.orchestrator import RecommendationOrchestrator
from cardmatch.config import settings
from cardmatch.domain.errors import CardMatchError
from cardmatch.logging_setup import configure_logging
from cardmatch.repository.business_store import JsonBusinessStore
from cardmatch.repository.catalog_store import CardCatalogStore, CatalogProvider
from cardmatch.schemas.requests import RecommendRequest
from cardmatch.schemas.responses import RecommendResponse

logger = logging.getLogger(__name__)

TOP_CARDS = 3


def build_orchestrator() -> RecommendationOrchestrator:
    catalog = CatalogProvider(CardCatalogStore(settings.card_catalog_file), settings.catalog_ttl_seconds)
    catalog.refresh()
    return RecommendationOrchestrator(catalog, JsonBusinessStore(settings.business_store_file), settings)


def format_reply(payload: RecommendResponse) -> str:
    subject = payload.business.name if payload.business else payload.category
    lines = [f"Best cards for {subject} ({payload.category}):"]
    for rank, item in enumerate(payload.recommendations[:TOP_CARDS], start=1):
        lines.append(f"{rank}. {item.card.card_name} - {item.reward_multiplier:g}x, ~${item.annual_value:.2f}/yr")
        lines.extend(f"   - {reason}" for reason in item.reasons[:3])
    return "\n".join(lines)


async def start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await update.message.reply_text(
        "Send a store name, e.g. 'Marriott Downtown', or /category dining to compare cards."
    )


async def category(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    orchestrator: RecommendationOrchestrator = context.application.bot_data["orchestrator"]
    name = " ".join(context.args or [])
    try:
        result = await orchestrator.recommend(RecommendRequest(category=name or None))
        await update.message.reply_text(format_reply(result))
    except CardMatchError as exc:
        await update.message.reply_text(f"Could not recommend: {exc}")


async def handle_message(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    orchestrator: RecommendationOrchestrator = context.application.bot_data["orchestrator"]
    text = (update.message.text or "").strip()
    try:
        result = await orchestrator.recommend(RecommendRequest(business_name=text or None))
        await update.message.reply_text(format_reply(result))
    except CardMatchError as exc:
        await update.message.reply_text(f"Could not recommend: {exc}")


async def start_catalog_reload(application: Application) -> None:
    orchestrator: RecommendationOrchestrator = application.bot_data["orchestrator"]
    application.create_task(orchestrator.catalog.run_reload_loop())


def main() -> None:
    configure_logging(settings.log_level)
    if not settings.telegram_bot_token:
        raise ValueError("TELEGRAM_BOT_TOKEN is required.")

    app = Application.builder().token(settings.telegram_bot_token).post_init(start_catalog_reload).build()
    app.bot_data["orchestrator"] = build_orchestrator()
    app.add_handler(CommandHandler("start", start))
    app.add_handler(CommandHandler("category", category))
    app.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, handle_message))

    logger.info("Starting Telegram bot")
    app.run_polling()


if __name__ == "__main__":
    main()
