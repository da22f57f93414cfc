from fastapi import APIRouter

from paysim.core.routers.accounts import router as accounts_router
from paysim.core.routers.charges import router as charges_router
from paysim.core.routers.customers import router as customers_router
from paysim.core.routers.disputes import router as disputes_router
from paysim.core.routers.invoices import router as invoices_router
from paysim.core.routers.payment_methods import router as payment_methods_router
from paysim.core.routers.plans import router as plans_router
from paysim.core.routers.prices import router as prices_router
from paysim.core.routers.products import router as products_router
from paysim.core.routers.refunds import router as refunds_router
from paysim.core.routers.subscription_items import router as subscription_items_router
from paysim.core.routers.subscriptions import router as subscriptions_router
from paysim.core.routers.tax_rates import router as tax_rates_router
from paysim.core.routers.webhook_endpoints import router as webhook_endpoints_router

# (router, OpenAPI tag) pairs mounted under /v1
api_routers: list[tuple[APIRouter, str]] = [
    (accounts_router, "Accounts"),
    (charges_router, "Charges"),
    (customers_router, "Customers"),
    (disputes_router, "Disputes"),
    (invoices_router, "Invoices"),
    (payment_methods_router, "Payment Methods"),
    (plans_router, "Plans"),
    (prices_router, "Prices"),
    (products_router, "Products"),
    (refunds_router, "Refunds"),
    (subscriptions_router, "Subscriptions"),
    (subscription_items_router, "Subscription Items"),
    (tax_rates_router, "Tax Rates"),
    (webhook_endpoints_router, "Webhook Endpoints"),
]

__all__ = [
    "api_routers",
    "accounts_router",
    "charges_router",
    "customers_router",
    "disputes_router",
    "invoices_router",
    "payment_methods_router",
    "plans_router",
    "prices_router",
    "products_router",
    "refunds_router",
    "subscription_items_router",
    "subscriptions_router",
    "tax_rates_router",
    "webhook_endpoints_router",
]
