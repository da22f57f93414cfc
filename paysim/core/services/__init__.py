from paysim.core.services.accounts import AccountService
from paysim.core.services.base import ResourceService
from paysim.core.services.cards import CardService
from paysim.core.services.charges import ChargeService
from paysim.core.services.customers import CustomerService
from paysim.core.services.disputes import DisputeService
from paysim.core.services.invoices import InvoiceService
from paysim.core.services.payment_methods import PaymentMethodService
from paysim.core.services.plans import PlanService
from paysim.core.services.prices import PriceService
from paysim.core.services.products import ProductService
from paysim.core.services.refunds import RefundService
from paysim.core.services.subscriptions import SubscriptionService
from paysim.core.services.tax_rates import TaxRateService
from paysim.core.services.webhooks import WebhookService

__all__ = [
    "ResourceService",
    # Connect
    "AccountService",
    # Payments
    "CardService",
    "ChargeService",
    "CustomerService",
    "DisputeService",
    "PaymentMethodService",
    "RefundService",
    # Billing
    "InvoiceService",
    "PlanService",
    "PriceService",
    "ProductService",
    "SubscriptionService",
    "TaxRateService",
    # Events
    "WebhookService",
]
