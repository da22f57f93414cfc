"""
Param schemas for connected accounts and webhook endpoints.
"""

from typing import Annotated, Any, Literal

from pydantic import ConfigDict, Field

from paysim.core.schemas.base import FormList, Metadata, ParamsModel


class BusinessProfile(ParamsModel):
    mcc: str | None = None
    name: str | None = None
    product_description: str | None = None
    support_email: str | None = None
    support_phone: str | None = None
    support_url: str | None = None
    url: str | None = None


class AccountCreate(ParamsModel):
    model_config = ConfigDict(
        json_schema_extra={
            "example": {"type": "custom", "country": "US", "email": "owner@example.com"}
        }
    )

    id: str | None = None
    type: Literal["custom", "express", "standard"] = "custom"
    business_profile: BusinessProfile | None = None
    business_type: str | None = None
    capabilities: dict[str, Any] | None = None
    country: str = "US"
    default_currency: str = "usd"
    email: str | None = None
    metadata: Metadata | None = None
    payouts_enabled: bool = True
    settings: dict[str, Any] | None = None
    tos_acceptance: dict[str, Any] | None = None


class WebhookEndpointCreate(ParamsModel):
    """
    Params of ``POST /v1/webhook_endpoints``.

    ``id`` and ``secret`` may be seeded so a receiver can verify signatures
    with a secret it already knows.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "url": "https://example.com/my/webhook/endpoint",
                "enabled_events": ["charge.succeeded", "charge.failed"],
            }
        }
    )

    id: str | None = None
    url: str
    enabled_events: Annotated[FormList, Field(min_length=1)]
    api_version: str | None = None
    description: str | None = None
    metadata: Metadata | None = None
    secret: str | None = None


__all__ = ["BusinessProfile", "AccountCreate", "WebhookEndpointCreate"]
