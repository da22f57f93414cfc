"""
Param schemas for charges, refunds, customers, cards and payment methods.
"""

from typing import Any, ClassVar, Literal

from pydantic import ConfigDict, model_validator
from pydantic_core import PydanticCustomError

from paysim.core.schemas.base import (
    Currency,
    FormInt,
    Metadata,
    ParamsModel,
    PositiveInt,
)

RefundReason = Literal["duplicate", "fraudulent", "requested_by_customer"]
PaymentMethodType = Literal["card", "sepa_debit", "us_bank_account"]


# ============================================================================
# Charges
# ============================================================================


class ChargeCreate(ParamsModel):
    """Params of ``POST /v1/charges``."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "amount": 2000,
                "currency": "usd",
                "source": "tok_visa",
                "description": "Order #6735",
            }
        }
    )

    amount: PositiveInt
    currency: Currency
    source: str | None = None
    customer: str | None = None
    capture: bool = True
    description: str | None = None
    metadata: Metadata | None = None
    on_behalf_of: str | None = None
    receipt_email: str | None = None
    shipping: dict[str, Any] | None = None
    statement_descriptor: str | None = None
    statement_descriptor_suffix: str | None = None
    transfer_group: str | None = None

    @model_validator(mode="after")
    def source_or_customer_required(self) -> "ChargeCreate":
        """A charge needs something to charge."""
        if not self.source and not self.customer:
            raise PydanticCustomError(
                "parameter_missing", "Must provide source or customer."
            )
        return self


class ChargeUpdate(ParamsModel):
    blank_unsets: ClassVar[bool] = True

    description: str | None = None
    fraud_details: dict[str, Any] | None = None
    metadata: Metadata | None = None
    receipt_email: str | None = None
    shipping: dict[str, Any] | None = None


class ChargeCapture(ParamsModel):
    amount: PositiveInt | None = None


class ChargeListFilters(ParamsModel):
    customer: str | None = None


# ============================================================================
# Refunds
# ============================================================================


class RefundCreate(ParamsModel):
    """Params of ``POST /v1/refunds``; ``amount`` defaults to what is left."""

    charge: str
    amount: PositiveInt | None = None
    reason: RefundReason | None = None
    metadata: Metadata | None = None


class RefundListFilters(ParamsModel):
    charge: str | None = None


# ============================================================================
# Customers and cards
# ============================================================================


class CustomerCreate(ParamsModel):
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "email": "jenny.rosen@example.com",
                "name": "Jenny Rosen",
                "source": "tok_visa",
            }
        }
    )

    id: str | None = None
    address: dict[str, Any] | None = None
    description: str | None = None
    email: str | None = None
    metadata: Metadata | None = None
    name: str | None = None
    phone: str | None = None
    shipping: dict[str, Any] | None = None
    source: str | None = None


class InvoiceSettings(ParamsModel):
    blank_unsets: ClassVar[bool] = True

    default_payment_method: str | None = None


class CustomerUpdate(ParamsModel):
    """Only params present in the request are applied; ``""`` clears a field."""

    blank_unsets: ClassVar[bool] = True

    address: dict[str, Any] | None = None
    default_source: str | None = None
    description: str | None = None
    email: str | None = None
    invoice_settings: InvoiceSettings | None = None
    metadata: Metadata | None = None
    name: str | None = None
    phone: str | None = None
    shipping: dict[str, Any] | None = None
    source: str | None = None


class CustomerListFilters(ParamsModel):
    email: str | None = None


class CardCreate(ParamsModel):
    source: str


# ============================================================================
# Payment methods
# ============================================================================


class CardDetails(ParamsModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    number: str | None = None
    exp_month: FormInt | None = None
    exp_year: FormInt | None = None
    cvc: str | None = None


class BillingDetails(ParamsModel):
    address: dict[str, Any] | None = None
    email: str | None = None
    name: str | None = None
    phone: str | None = None


class PaymentMethodCreate(ParamsModel):
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "type": "card",
                "card": {"number": "4242424242424242", "exp_month": 8, "exp_year": 2030},
            }
        }
    )

    id: str | None = None
    type: PaymentMethodType
    customer: str | None = None
    billing_details: BillingDetails | None = None
    card: CardDetails | None = None
    metadata: Metadata | None = None


class PaymentMethodAttach(ParamsModel):
    customer: str


class PaymentMethodListFilters(ParamsModel):
    customer: str | None = None
    type: str | None = None


__all__ = [
    "RefundReason",
    "PaymentMethodType",
    "ChargeCreate",
    "ChargeUpdate",
    "ChargeCapture",
    "ChargeListFilters",
    "RefundCreate",
    "RefundListFilters",
    "CustomerCreate",
    "InvoiceSettings",
    "CustomerUpdate",
    "CustomerListFilters",
    "CardCreate",
    "CardDetails",
    "BillingDetails",
    "PaymentMethodCreate",
    "PaymentMethodAttach",
    "PaymentMethodListFilters",
]
