"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets (API keys) come from environment variables, never hardcoded
    - get_settings() is cached (lru_cache) — single instance per process
    - Exchange rates are parsed at startup; a malformed table fails fast

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Complex settings (API_KEYS, EXCHANGE_RATES) are JSON in the environment
"""

from datetime import timedelta
from decimal import Decimal
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache

from transfer_service.core.domain_types import Currency
from transfer_service.core.transfer_policy import TransferPolicy


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://transfers:transfers@db:5432/transfers"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting platforms provide postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Authorization: API key → allowed actions ("*" = all)
    api_keys: dict[str, list[str]] = {}

    # Currency conversion: "SRC:DST" → decimal rate as string
    exchange_rates: dict[str, str] = {}

    # Limits, fees, and approval wait (amounts in base_currency)
    base_currency: Currency = Currency.TRY
    daily_limit: Decimal = Decimal("10000")
    high_amount_threshold: Decimal = Decimal("1000")
    approval_wait_minutes: int = 5
    fee_base: Decimal = Decimal("5.00")
    fee_percentage: Decimal = Decimal("0.01")

    # Events
    event_sink: Literal["logging", "outbox"] = "logging"

    # Transaction codes
    transaction_code_length: int = 8
    transaction_code_max_attempts: int = 5

    # Customer service (unset → customer checks disabled)
    customer_service_url: str | None = None
    customer_service_timeout_seconds: float = 5.0

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    def transfer_policy(self) -> TransferPolicy:
        return TransferPolicy(
            base_currency=self.base_currency,
            daily_limit=self.daily_limit,
            high_amount_threshold=self.high_amount_threshold,
            approval_wait=timedelta(minutes=self.approval_wait_minutes),
            base_fee=self.fee_base,
            fee_percentage=self.fee_percentage,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
