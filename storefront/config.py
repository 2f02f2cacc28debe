"""Runtime configuration loaded from ``STOREFRONT_*`` environment variables."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Storefront engine settings."""

    # Logging
    log_level: str = "INFO"
    log_format: Literal["json", "console"] = "json"

    # Durable local storage
    storage_dir: Path = Path(".storefront")
    cart_storage_key: str = "sbtc-cart"
    points_storage_key: str = "loyaltyPoints"
    ledger_storage_key: str = "loyaltyTransactions"

    # Checkout
    currency: str = "SAR"
    # Seconds checkout waits for the cart and loyalty restore to finish.
    ready_timeout: float = 5.0

    # When true, update_quantity is rejected above the line's ceiling like add_item.
    enforce_ceiling_on_update: bool = False

    model_config = SettingsConfigDict(
        env_prefix="STOREFRONT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
