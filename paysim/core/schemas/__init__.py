"""
Request param schemas.
"""

from paysim.core.schemas.base import (
    ListParams,
    ParamsModel,
    coerce_list,
    param_name,
    parse_params,
)
from paysim.core.schemas.billing import (
    PlanCreate,
    PlanListFilters,
    PriceCreate,
    PriceListFilters,
    PriceUpdate,
    ProductCreate,
    ProductListFilters,
    SubscriptionCreate,
    SubscriptionItemListFilters,
    SubscriptionItemParams,
    SubscriptionListFilters,
    SubscriptionUpdate,
    TaxRateCreate,
    TaxRateListFilters,
    TaxRateUpdate,
    UpcomingInvoiceParams,
)
from paysim.core.schemas.connect import AccountCreate, WebhookEndpointCreate
from paysim.core.schemas.payments import (
    CardCreate,
    ChargeCapture,
    ChargeCreate,
    ChargeListFilters,
    ChargeUpdate,
    CustomerCreate,
    CustomerListFilters,
    CustomerUpdate,
    PaymentMethodAttach,
    PaymentMethodCreate,
    PaymentMethodListFilters,
    RefundCreate,
    RefundListFilters,
)

__all__ = [
    "ListParams",
    "ParamsModel",
    "coerce_list",
    "param_name",
    "parse_params",
    # Payments
    "CardCreate",
    "ChargeCapture",
    "ChargeCreate",
    "ChargeListFilters",
    "ChargeUpdate",
    "CustomerCreate",
    "CustomerListFilters",
    "CustomerUpdate",
    "PaymentMethodAttach",
    "PaymentMethodCreate",
    "PaymentMethodListFilters",
    "RefundCreate",
    "RefundListFilters",
    # Billing
    "PlanCreate",
    "PlanListFilters",
    "PriceCreate",
    "PriceListFilters",
    "PriceUpdate",
    "ProductCreate",
    "ProductListFilters",
    "SubscriptionCreate",
    "SubscriptionItemListFilters",
    "SubscriptionItemParams",
    "SubscriptionListFilters",
    "SubscriptionUpdate",
    "TaxRateCreate",
    "TaxRateListFilters",
    "TaxRateUpdate",
    "UpcomingInvoiceParams",
    # Connect
    "AccountCreate",
    "WebhookEndpointCreate",
]
