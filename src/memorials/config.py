"""Application settings read from the environment.

Framework wiring (providers, brokers, event store) lives in ``domain.toml``;
this module only carries what the checkout and the gateway adapters need.
"""

from decimal import Decimal
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="MEMORIALS_", env_file=".env", extra="ignore")

    gateway: Literal["fake", "stripe"] = "fake"
    stripe_secret_key: str | None = None
    stripe_webhook_secret: str | None = None

    tax_rate: Decimal = Field(default=Decimal("0.08"), ge=0)
    currency: str = Field(default="usd", min_length=3, max_length=3)

    # Outbound mail is delivered by a separate service; kept so deployments share one env file
    smtp_url: str | None = None


@lru_cache
def get_settings() -> Settings:
    return Settings()
