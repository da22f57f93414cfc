from typing import Any

from paysim.core.config import customer_logger
from paysim.core.schemas import (
    PaymentMethodAttach,
    PaymentMethodCreate,
    PaymentMethodListFilters,
    parse_params,
)
from paysim.core.schemas.payments import BillingDetails, CardDetails
from paysim.core.services.base import ResourceService
from paysim.core.services.charges import get_address_from_params
from paysim.core.services.tokens import card_brand_from_number
from paysim.core.utils import generate_id, now_timestamp, stringify_metadata

DEFAULT_CARD_NUMBER = "4242424242424242"


class PaymentMethodService(ResourceService):
    kind = "payment_method"
    id_prefix = "pm_"
    id_length = 24
    label = "payment method"
    expandable_fields = ("customer",)
    list_url = "/v1/payment_methods"

    def _card_details(self, card: CardDetails | None) -> dict:
        card = card or CardDetails()
        number = card.number or DEFAULT_CARD_NUMBER
        brand = card_brand_from_number(number)
        return {
            "brand": brand,
            "checks": {
                "address_line1_check": None,
                "address_postal_code_check": None,
                "cvc_check": "pass" if card.cvc else None,
            },
            "country": "US",
            "exp_month": card.exp_month or 12,
            "exp_year": card.exp_year or 2034,
            "fingerprint": generate_id(16),
            "funding": "credit",
            "generated_from": None,
            "last4": number[-4:],
            "networks": {"available": [brand], "preferred": None},
            "three_d_secure_usage": {"supported": True},
            "wallet": None,
        }

    def create(self, account_id: str, params: dict[str, Any]) -> dict:
        body = parse_params(PaymentMethodCreate, params)
        payment_method_id = self._new_id(account_id, body.id)

        if body.customer:
            self.simulator.customers.retrieve(account_id, body.customer, "customer")

        billing_details = body.billing_details or BillingDetails()
        payment_method = {
            "id": payment_method_id,
            "object": "payment_method",
            "billing_details": {
                "address": get_address_from_params(billing_details.address),
                "email": billing_details.email,
                "name": billing_details.name,
                "phone": billing_details.phone,
            },
            "card": self._card_details(body.card) if body.type == "card" else None,
            "created": now_timestamp(),
            "customer": body.customer,
            "livemode": False,
            "metadata": stringify_metadata(body.metadata),
            "type": body.type,
        }
        self.store.put(account_id, payment_method)
        return payment_method

    def list(self, account_id: str, params: dict[str, Any]) -> dict:
        filters = parse_params(PaymentMethodListFilters, params)
        data = self.store.get_all(account_id)
        if filters.type:
            data = [pm for pm in data if pm["type"] == filters.type]
        if filters.customer:
            data = [pm for pm in data if pm["customer"] == filters.customer]
        return self._paginate(account_id, data, params)

    def attach(self, account_id: str, payment_method_id: str, params: dict[str, Any]) -> dict:
        payment_method = self.retrieve(account_id, payment_method_id)
        body = parse_params(PaymentMethodAttach, params)
        customer = self.simulator.customers.retrieve(account_id, body.customer, "customer")
        payment_method["customer"] = customer["id"]
        customer_logger.info(
            f"Payment method {payment_method_id} attached to {customer['id']}"
        )
        return payment_method

    def detach(self, account_id: str, payment_method_id: str) -> dict:
        payment_method = self.retrieve(account_id, payment_method_id)
        payment_method["customer"] = None
        customer_logger.info(f"Payment method {payment_method_id} detached")
        return payment_method


__all__ = ["PaymentMethodService"]
