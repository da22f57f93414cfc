from functools import lru_cache
import logging
import os

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from paysim.core.logger import setup_logger, init_sentry


class Settings(BaseSettings):
    # Application settings
    ENVIRONMENT: str = "development"  # Options: development, test, production
    APP_NAME: str = "paysim"
    APP_VERSION: str = "1.0.0"
    APP_DESCRIPTION: str = """
paysim is an in-memory simulator of a Stripe-shaped payment API.

Point a Stripe client library at it to exercise charges, customers, subscriptions
and webhooks against deterministic responses, without touching a live payment network.

## Magic tokens

| Token | Behaviour |
|-------|-----------|
| `tok_visa`, `tok_mastercard`, `tok_amex`, ... | Successful charge with the matching card |
| `tok_chargeDeclined` and friends | Charge stored as failed, request fails with 402 |
| `tok_riskLevelElevated` | Charge succeeds and lands in manual review |
| `tok_createDispute*` | Charge succeeds, a dispute shows up shortly afterwards |
| `tok_429`, `tok_500` | Request fails before anything is created |
| `tok_a\\|tok_b` | Token chain, reduced to one effective token |

## Connected accounts

Send a `Stripe-Account` header to operate inside a connected account created through `/v1/accounts`.
"""
    DEBUG: bool = False

    # Simulated API settings
    API_VERSION: str = "2020-08-27"
    DEFAULT_ACCOUNT_ID: str = "acct_default"
    LIST_DEFAULT_LIMIT: int = 10
    LIST_MAX_LIMIT: int = 100
    MAX_CHARGE_AMOUNT: int = 99999999

    # Delayed effects (seconds)
    INVOICE_PAID_DELAY_SECONDS: float = 3.0
    DISPUTE_CREATION_DELAY_SECONDS: float = 0.0

    # Webhook delivery settings
    WEBHOOK_SIGNATURE_HEADER: str = "Stripe-Signature"
    WEBHOOK_DELIVERY_TIMEOUT_SECONDS: float = 10.0

    # Infrastructure flags
    ENABLE_SCHEDULER: bool = True

    # CORS settings
    CORS_ALLOW_ORIGINS: list[str] = ["*"]
    CORS_ALLOW_CREDENTIALS: bool = False

    # Logging settings
    LOG_DIR: str = "logs"
    LOG_TO_CONSOLE: bool = True

    # Sentry settings
    SENTRY_DSN: str = ""
    SENTRY_ENVIRONMENT: str = "development"
    SENTRY_TRACES_SAMPLE_RATE: float = 0.1

    model_config: SettingsConfigDict = SettingsConfigDict(  # type: ignore
        env_file=".env",
        extra="ignore",
    )

    @model_validator(mode="after")
    def _validate_list_limits(self) -> "Settings":
        """Ensure the default page size fits inside the maximum page size."""
        if not 1 <= self.LIST_DEFAULT_LIMIT <= self.LIST_MAX_LIMIT:
            raise ValueError(
                f"LIST_DEFAULT_LIMIT ({self.LIST_DEFAULT_LIMIT}) must be between 1 "
                f"and LIST_MAX_LIMIT ({self.LIST_MAX_LIMIT})."
            )
        return self


@lru_cache()
def get_settings() -> Settings:
    return Settings()  # type: ignore


settings = get_settings()

if not settings.DEBUG:
    init_sentry(
        dsn=settings.SENTRY_DSN,
        environment=settings.SENTRY_ENVIRONMENT,
        traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
        release=f"{settings.APP_NAME}@{settings.APP_VERSION}",
    )


def _component_logger(name: str, file_name: str, sentry_tag: str) -> logging.Logger:
    """Logger for one simulator component, writing to ``LOG_DIR/<file_name>.log``."""
    return setup_logger(
        name=name,
        log_file=os.path.join(settings.LOG_DIR, f"{file_name}.log"),
        level=logging.DEBUG if settings.DEBUG else logging.INFO,
        sentry_tag=sentry_tag,
        console=settings.LOG_TO_CONSOLE,
    )


app_logger = _component_logger("app_logger", "app", "app")
request_logger = _component_logger("request_logger", "requests", "request")
store_logger = _component_logger("store_logger", "store", "store")
token_logger = _component_logger("token_logger", "tokens", "tokens")
charge_logger = _component_logger("charge_logger", "charges", "charges")
customer_logger = _component_logger("customer_logger", "customers", "customers")
subscription_logger = _component_logger(
    "subscription_logger", "subscriptions", "subscriptions"
)
webhook_logger = _component_logger("webhook_logger", "webhooks", "webhook")
scheduler_logger = _component_logger("scheduler_logger", "scheduler", "scheduler")

__all__ = [
    "settings",
    "get_settings",
    "Settings",
    "app_logger",
    "request_logger",
    "store_logger",
    "token_logger",
    "charge_logger",
    "customer_logger",
    "subscription_logger",
    "webhook_logger",
    "scheduler_logger",
]
