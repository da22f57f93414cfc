"""
The simulator context.

A ``Simulator`` owns every store and service of one simulated backend. The
application keeps one on ``app.state``; tests build their own with a
``ManualTaskScheduler`` and an httpx mock transport so nothing leaks between
tests and delayed effects run on demand.
"""

import httpx

from paysim.core.config import Settings, app_logger, get_settings
from paysim.core.pagination import ExpansionResolver
from paysim.core.services import (
    AccountService,
    CardService,
    ChargeService,
    CustomerService,
    DisputeService,
    InvoiceService,
    PaymentMethodService,
    PlanService,
    PriceService,
    ProductService,
    RefundService,
    ResourceService,
    SubscriptionService,
    TaxRateService,
    WebhookService,
)
from paysim.infrastructure.scheduler import APSchedulerTaskScheduler, DelayedTaskScheduler


class Simulator:
    def __init__(
        self,
        scheduler: DelayedTaskScheduler | None = None,
        http_client: httpx.AsyncClient | None = None,
        settings: Settings | None = None,
    ):
        self.settings = settings or get_settings()
        self.scheduler = scheduler or APSchedulerTaskScheduler()

        self.webhooks = WebhookService(self, http_client)
        self.accounts = AccountService(self)
        self.cards = CardService(self)
        self.customers = CustomerService(self)
        self.charges = ChargeService(self)
        self.disputes = DisputeService(self)
        self.refunds = RefundService(self)
        self.products = ProductService(self)
        self.prices = PriceService(self)
        self.plans = PlanService(self)
        self.tax_rates = TaxRateService(self)
        self.payment_methods = PaymentMethodService(self)
        self.subscriptions = SubscriptionService(self)
        self.invoices = InvoiceService(self)

        # expandable field name -> service owning the referenced records
        self._expansion_targets: dict[str, ResourceService] = {
            "charge": self.charges,
            "customer": self.customers,
            "default_payment_method": self.payment_methods,
            "default_source": self.cards,
            "dispute": self.disputes,
            "payment_method": self.payment_methods,
            "plan": self.plans,
            "price": self.prices,
            "product": self.products,
            "subscription": self.subscriptions,
        }

    def resolver(self, account_id: str) -> ExpansionResolver:
        """Expansion resolver bound to one account."""

        def resolve(field: str, record_id: str) -> dict | None:
            service = self._expansion_targets.get(field)
            if service is None:
                return None
            return service.store.get(account_id, record_id)

        return resolve

    def start(self) -> None:
        self.scheduler.start()

    async def aclose(self) -> None:
        self.scheduler.shutdown()
        await self.webhooks.aclose()
        app_logger.info("Simulator closed.")


__all__ = ["Simulator"]
