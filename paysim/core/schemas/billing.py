"""
Param schemas for the catalog (products, prices, plans, tax rates),
subscriptions and invoices.
"""

from typing import Annotated, Any, ClassVar, Literal

from pydantic import BeforeValidator, ConfigDict, Field, model_validator

from paysim.core.schemas.base import (
    Currency,
    FormInt,
    FormList,
    Metadata,
    NonNegativeInt,
    ParamsModel,
    PositiveInt,
    coerce_list,
    missing_param,
)

Interval = Literal["day", "week", "month", "year"]
UsageType = Literal["licensed", "metered"]
CollectionMethod = Literal["charge_automatically", "send_invoice"]


# ============================================================================
# Products
# ============================================================================


class ProductCreate(ParamsModel):
    model_config = ConfigDict(
        json_schema_extra={"example": {"name": "Gold plan", "type": "service"}}
    )

    id: str | None = None
    name: str
    type: Literal["service", "good"] = "service"
    active: bool = True
    attributes: FormList = []
    description: str | None = None
    images: FormList = []
    metadata: Metadata | None = None
    package_dimensions: dict[str, Any] | None = None
    shippable: bool = True
    statement_descriptor: str | None = None
    tax_code: str | None = None
    unit_label: str | None = None
    url: str | None = None


class ProductListFilters(ParamsModel):
    active: bool | None = None
    ids: FormList | None = None
    shippable: bool | None = None
    type: str | None = None
    url: str | None = None


# ============================================================================
# Prices and plans
# ============================================================================


class Recurring(ParamsModel):
    interval: Interval
    interval_count: PositiveInt = 1
    aggregate_usage: str | None = None
    trial_period_days: FormInt | None = None
    usage_type: UsageType = "licensed"


class PriceCreate(ParamsModel):
    """
    Params of ``POST /v1/prices``.

    The product is an existing id (``product``) or created on the fly from
    ``product_data``; the amount is ``unit_amount`` or ``unit_amount_decimal``.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "currency": "usd",
                "unit_amount": 1000,
                "recurring": {"interval": "month"},
                "product_data": {"name": "Basic"},
            }
        }
    )

    id: str | None = None
    currency: Currency
    product: str | None = None
    product_data: ProductCreate | None = None
    recurring: Recurring | None = None
    unit_amount: NonNegativeInt | None = None
    unit_amount_decimal: str | None = None
    active: bool = True
    billing_scheme: Literal["per_unit", "tiered"] = "per_unit"
    lookup_key: str | None = None
    metadata: Metadata | None = None
    nickname: str | None = None
    tax_behavior: Literal["exclusive", "inclusive", "unspecified"] = "unspecified"
    tiers_mode: str | None = None
    transform_quantity: dict[str, Any] | None = None

    @model_validator(mode="after")
    def amount_and_product_required(self) -> "PriceCreate":
        if self.unit_amount is None and self.unit_amount_decimal is None:
            raise missing_param("unit_amount")
        if self.product is None and self.product_data is None:
            raise missing_param("product")
        return self


class PriceUpdate(ParamsModel):
    blank_unsets: ClassVar[bool] = True

    active: bool | None = None
    lookup_key: str | None = None
    metadata: Metadata | None = None
    nickname: str | None = None
    tax_behavior: Literal["exclusive", "inclusive", "unspecified"] | None = None


class PriceListFilters(ParamsModel):
    active: bool | None = None
    currency: str | None = None
    product: str | None = None
    type: Literal["one_time", "recurring"] | None = None


class PlanCreate(ParamsModel):
    """Params of ``POST /v1/plans``; ``product`` is an id or inline product data."""

    id: str | None = None
    currency: Currency
    interval: Interval
    product: str | None = None
    product_data: ProductCreate | None = None
    amount: NonNegativeInt | None = None
    interval_count: PositiveInt = 1
    active: bool = True
    aggregate_usage: str | None = None
    billing_scheme: Literal["per_unit", "tiered"] = "per_unit"
    metadata: Metadata | None = None
    nickname: str | None = None
    tiers_mode: str | None = None
    transform_usage: dict[str, Any] | None = None
    trial_period_days: FormInt | None = None
    usage_type: UsageType = "licensed"

    @model_validator(mode="before")
    @classmethod
    def inline_product(cls, values: Any) -> Any:
        if isinstance(values, dict) and isinstance(values.get("product"), dict):
            values = dict(values)
            values["product_data"] = values.pop("product")
        return values

    @model_validator(mode="after")
    def product_required(self) -> "PlanCreate":
        if self.product is None and self.product_data is None:
            raise missing_param("product")
        return self


class PlanListFilters(ParamsModel):
    active: bool | None = None
    product: str | None = None


# ============================================================================
# Tax rates
# ============================================================================


class TaxRateCreate(ParamsModel):
    model_config = ConfigDict(
        json_schema_extra={
            "example": {"display_name": "VAT", "inclusive": False, "percentage": 19.0}
        }
    )

    id: str | None = None
    display_name: str
    inclusive: bool
    percentage: Annotated[float, Field(ge=0, le=100)]
    active: bool = True
    country: str | None = None
    description: str | None = None
    jurisdiction: str | None = None
    metadata: Metadata | None = None
    state: str | None = None
    tax_type: str | None = None


class TaxRateUpdate(ParamsModel):
    blank_unsets: ClassVar[bool] = True

    active: bool | None = None
    country: str | None = None
    description: str | None = None
    display_name: str | None = None
    jurisdiction: str | None = None
    metadata: Metadata | None = None
    state: str | None = None
    tax_type: str | None = None


class TaxRateListFilters(ParamsModel):
    active: bool | None = None
    inclusive: bool | None = None


# ============================================================================
# Subscriptions
# ============================================================================


class SubscriptionItemParams(ParamsModel):
    """
    One entry of ``items``, or the params of ``POST /v1/subscription_items/{id}``.

    On a subscription update an entry whose ``id`` names an existing item
    changes (or, with ``deleted``, removes) that item; any other entry adds one.
    """

    id: str | None = None
    price: str | None = None
    plan: str | None = None
    quantity: NonNegativeInt | None = None
    tax_rates: FormList | None = None
    metadata: Metadata | None = None
    billing_thresholds: dict[str, Any] | None = None
    deleted: bool = False

    @property
    def has_price(self) -> bool:
        return bool(self.price or self.plan)


class SubscriptionItemCreate(SubscriptionItemParams):
    @model_validator(mode="after")
    def price_required(self) -> "SubscriptionItemCreate":
        if not self.has_price:
            raise missing_param("price")
        return self


class AutomaticTax(ParamsModel):
    enabled: bool = False


class SubscriptionCreate(ParamsModel):
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "customer": "cus_4QFJOjw2pOmAGJ",
                "items": [{"price": "price_1MowQULkdIwHu7ixraBm864M", "quantity": 1}],
            }
        }
    )

    id: str | None = None
    customer: str
    items: Annotated[list[SubscriptionItemCreate], BeforeValidator(coerce_list)] = []
    application_fee_percent: float | None = None
    automatic_tax: AutomaticTax | None = None
    billing_cycle_anchor: FormInt | None = None
    billing_thresholds: dict[str, Any] | None = None
    cancel_at_period_end: bool = False
    collection_method: CollectionMethod = "charge_automatically"
    days_until_due: NonNegativeInt | None = None
    default_payment_method: str | None = None
    default_source: str | None = None
    default_tax_rates: FormList = []
    metadata: Metadata | None = None


class SubscriptionUpdate(ParamsModel):
    """Only params present in the request are applied."""

    blank_unsets: ClassVar[bool] = True

    items: Annotated[list[SubscriptionItemParams], BeforeValidator(coerce_list)] = []
    automatic_tax: AutomaticTax | None = None
    cancel_at_period_end: bool | None = None
    collection_method: CollectionMethod | None = None
    days_until_due: NonNegativeInt | None = None
    default_source: str | None = None
    default_tax_rates: FormList | None = None
    metadata: Metadata | None = None


class SubscriptionListFilters(ParamsModel):
    customer: str | None = None
    price: str | None = None
    status: str | None = None


class SubscriptionItemListFilters(ParamsModel):
    subscription: str


# ============================================================================
# Invoices
# ============================================================================


class UpcomingInvoiceParams(ParamsModel):
    customer: str | None = None
    subscription: str | None = None

    @model_validator(mode="after")
    def customer_or_subscription_required(self) -> "UpcomingInvoiceParams":
        if not self.customer and not self.subscription:
            raise missing_param("customer")
        return self


__all__ = [
    "Interval",
    "UsageType",
    "CollectionMethod",
    "ProductCreate",
    "ProductListFilters",
    "Recurring",
    "PriceCreate",
    "PriceUpdate",
    "PriceListFilters",
    "PlanCreate",
    "PlanListFilters",
    "TaxRateCreate",
    "TaxRateUpdate",
    "TaxRateListFilters",
    "SubscriptionItemParams",
    "SubscriptionItemCreate",
    "AutomaticTax",
    "SubscriptionCreate",
    "SubscriptionUpdate",
    "SubscriptionListFilters",
    "SubscriptionItemListFilters",
    "UpcomingInvoiceParams",
]
