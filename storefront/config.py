from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration sourced from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="STOREFRONT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore extra fields from .env file
    )

    api_base_url: str = "http://localhost:3001/api"
    request_timeout: float = 10.0
    offline: bool = False
    store_path: str = "storefront.db"

    # Checkout pricing
    tax_rate: float = 0.08
    shipping_fee: float = 10.0
    free_shipping_threshold: float = 200.0
    low_stock_threshold: int = 10

    log_level: str = "WARNING"


def load_settings(**overrides) -> Settings:
    """Build a fresh settings object, applying keyword overrides on top of the environment."""

    return Settings(**overrides)


settings = load_settings()
