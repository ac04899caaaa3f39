import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from cardmatch.agents.orchestrator import RecommendationOrchestrator
from cardmatch.api.routes.health import router as health_router
from cardmatch.api.routes.nearby import router as nearby_router
from cardmatch.api.routes.recommend import router as recommend_router
from cardmatch.config import Settings, settings
from cardmatch.domain.errors import CatalogConfigError, ValidationError
from cardmatch.logging_setup import configure_logging
from cardmatch.nlp.llm_classifier import LLMRefiner
from cardmatch.places.google import GooglePlacesClient
from cardmatch.repository.business_store import BusinessStore, JsonBusinessStore
from cardmatch.repository.catalog_store import CardCatalogStore, CatalogProvider

logger = logging.getLogger(__name__)


def create_app(
    app_settings: Settings | None = None,
    business_store: BusinessStore | None = None,
    places_client: GooglePlacesClient | None = None,
) -> FastAPI:
    app_settings = app_settings or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        catalog = CatalogProvider(CardCatalogStore(app_settings.card_catalog_file), app_settings.catalog_ttl_seconds)
        # Fail fast: a broken catalog stops startup.
        catalog.refresh()

        refiner = None
        if app_settings.llm_classifier_enabled and app_settings.openai_api_key:
            refiner = LLMRefiner(
                app_settings.openai_api_key,
                model=app_settings.openai_model,
                threshold=app_settings.llm_refine_threshold,
            )

        app.state.catalog = catalog
        app.state.orchestrator = RecommendationOrchestrator(
            catalog,
            business_store or JsonBusinessStore(app_settings.business_store_file),
            app_settings,
            refiner=refiner,
        )
        app.state.places = places_client or GooglePlacesClient(
            app_settings.google_places_api_key, timeout=app_settings.places_timeout_seconds
        )

        reload_task = asyncio.create_task(catalog.run_reload_loop())
        try:
            yield
        finally:
            reload_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await reload_task

    app = FastAPI(title="CardMatch API", version="0.1.0", lifespan=lifespan)
    app.include_router(health_router)
    app.include_router(recommend_router)
    app.include_router(nearby_router)

    @app.exception_handler(ValidationError)
    async def _validation_error(request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"success": False, "error": str(exc)})

    @app.exception_handler(CatalogConfigError)
    async def _catalog_error(request: Request, exc: CatalogConfigError) -> JSONResponse:
        logger.error("Card catalog unavailable: %s", exc)
        return JSONResponse(status_code=503, content={"success": False, "error": "Card catalog unavailable"})

    return app


app = create_app()


def run() -> None:
    configure_logging(settings.log_level)
    uvicorn.run("cardmatch.api.app:app", host=settings.app_host, port=settings.app_port, reload=False)
