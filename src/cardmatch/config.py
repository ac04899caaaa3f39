from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    log_level: str = "INFO"

    card_catalog_file: str = "data/cards/catalog.json"
    catalog_ttl_seconds: float = 300
    business_store_file: str = "data/businesses/businesses.json"
    store_lookup_timeout_seconds: float = 2.0
    max_recommendations: int = 10

    google_places_api_key: str = ""
    places_timeout_seconds: float = 5.0

    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    llm_classifier_enabled: bool = False
    llm_refine_threshold: float = 0.7

    telegram_bot_token: str = ""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
