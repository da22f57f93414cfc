"""
Charges.

Create flow:
1. Reduce a token chain to its effective token and raise any transport fault
   (``tok_429``/``tok_500``) before touching anything.
2. Validate amount and currency.
3. Build a successful charge from the card (a saved customer card, or a card
   synthesized from the token) and store it.
4. Apply the token's outcome to the stored charge: a decline marks it failed and
   raises a card error, manual review rewrites ``outcome``, a dispute token
   schedules dispute creation.
"""

from typing import Any

from paysim.core.config import charge_logger
from paysim.core.exceptions.types import (
    NotFoundException,
    ValidationException,
)
from paysim.core.schemas import (
    ChargeCapture,
    ChargeCreate,
    ChargeListFilters,
    ChargeUpdate,
    parse_params,
)
from paysim.core.services import tokens
from paysim.core.services.base import ResourceService
from paysim.core.utils import generate_id, now_timestamp, stringify_metadata

# Smallest chargeable amount per currency, in minor units
MIN_CHARGE_AMOUNTS: dict[str, int] = {
    "usd": 50,
    "aud": 50,
    "brl": 50,
    "cad": 50,
    "chf": 50,
    "dkk": 250,
    "eur": 50,
    "hkd": 400,
    "jpy": 50,
    "mxn": 10,
    "nok": 300,
    "nzd": 50,
    "sek": 300,
    "sgd": 50,
}

DEFAULT_OUTCOME: dict[str, Any] = {
    "network_status": "approved_by_network",
    "reason": None,
    "risk_level": "normal",
    "risk_score": 5,
    "seller_message": "Payment complete.",
    "type": "authorized",
}


def get_address_from_params(params: Any) -> dict | None:
    if not params or not isinstance(params, dict):
        return None
    return {
        "city": params.get("city"),
        "country": params.get("country"),
        "line1": params.get("line1"),
        "line2": params.get("line2"),
        "postal_code": params.get("postal_code"),
        "state": params.get("state"),
    }


def get_shipping_from_params(params: Any) -> dict | None:
    """Shipping details, or ``None`` unless an address with ``line1`` is given."""
    if not params or not isinstance(params, dict):
        return None
    address = params.get("address")
    if not isinstance(address, dict) or not address.get("line1"):
        return None
    return {
        "address": get_address_from_params(address),
        "carrier": params.get("carrier"),
        "name": params.get("name"),
        "phone": params.get("phone"),
        "tracking_number": params.get("tracking_number"),
    }


class ChargeService(ResourceService):
    kind = "charge"
    id_prefix = "ch_"
    id_length = 24
    label = "charge"
    expandable_fields = ("customer", "dispute")
    list_url = "/v1/charges"

    def _check_amount(self, amount: int, currency: str) -> None:
        if amount > self.settings.MAX_CHARGE_AMOUNT:
            raise ValidationException(
                "Amount must be no more than $999,999.99",
                code="amount_too_large",
                param="amount",
            )
        minimum = MIN_CHARGE_AMOUNTS.get(currency)
        if minimum is not None and amount < minimum:
            raise ValidationException(
                f"Amount must be at least {minimum} {currency}",
                code="amount_too_small",
                param="amount",
            )

    def create(self, account_id: str, params: dict[str, Any]) -> dict:
        source = params.get("source")
        if isinstance(source, str) and tokens.is_token_chain(source):
            source = tokens.get_effective_token(source)
        tokens.check_precharge(source)

        body = parse_params(ChargeCreate, params)
        amount, currency = body.amount, body.currency
        self._check_amount(amount, currency)

        if body.customer:
            card = self._customer_card(account_id, body.customer, source)
            source_token = self.simulator.cards.source_token(card["id"])
            charge = self._charge_from_card(body, card, body.customer)
            self.store.put(account_id, charge)
        else:
            card = self.simulator.cards.create_from_source(source)
            source_token = source
            charge = self._charge_from_card(body, card, None)
            if tokens.lookup(source).persist:
                self.store.put(account_id, charge)

        charge_logger.info(
            f"Charge {charge['id']} created for {account_id}: {amount} {currency} "
            f"(source token {source_token})"
        )
        self._apply_outcome(account_id, charge, source_token)
        return charge

    def _customer_card(self, account_id: str, customer_id: str, source: Any) -> dict:
        customers = self.simulator.customers
        customer = customers.retrieve(account_id, customer_id, "customer")

        if source:
            for card in customer["sources"]["data"]:
                if card["id"] == source:
                    return card
            raise NotFoundException(
                f"Customer {customer_id} does not have a linked source with ID {source}.",
                code="missing",
                param="source",
            )
        if customer["default_source"]:
            return customers.retrieve_card(
                account_id, customer_id, customer["default_source"], "card"
            )
        raise NotFoundException(
            "Cannot charge a customer that has no active card",
            code="missing",
            param="card",
            error_type="card_error",
        )

    def _charge_from_card(
        self, body: ChargeCreate, card: dict, customer_id: str | None
    ) -> dict:
        charge_id = f"{self.id_prefix}{generate_id(self.id_length)}"
        amount = body.amount
        captured = body.capture
        brand = tokens.BRAND_CODES.get(card["brand"], "unknown")

        return {
            "id": charge_id,
            "object": "charge",
            "amount": amount,
            "amount_captured": amount if captured else 0,
            "amount_refunded": 0,
            "application": None,
            "application_fee": None,
            "application_fee_amount": None,
            "balance_transaction": f"txn_{generate_id(24)}" if captured else None,
            "billing_details": {
                "address": get_address_from_params({}),
                "email": None,
                "name": None,
                "phone": None,
            },
            "calculated_statement_descriptor": None,
            "captured": captured,
            "created": now_timestamp(),
            "currency": body.currency,
            "customer": customer_id,
            "description": body.description,
            "destination": None,
            "dispute": None,
            "disputed": False,
            "failure_balance_transaction": None,
            "failure_code": None,
            "failure_message": None,
            "fraud_details": {},
            "invoice": None,
            "livemode": False,
            "metadata": stringify_metadata(body.metadata),
            "on_behalf_of": body.on_behalf_of,
            "order": None,
            "outcome": dict(DEFAULT_OUTCOME),
            "paid": True,
            "payment_intent": None,
            "payment_method": card["id"],
            "payment_method_details": {
                "card": {
                    "brand": brand,
                    "checks": {
                        "address_line1_check": None,
                        "address_postal_code_check": None,
                        "cvc_check": None,
                    },
                    "country": card["country"],
                    "exp_month": card["exp_month"],
                    "exp_year": card["exp_year"],
                    "fingerprint": card["fingerprint"],
                    "funding": card["funding"],
                    "installments": None,
                    "last4": card["last4"],
                    "mandate": None,
                    "network": brand,
                    "three_d_secure": None,
                    "wallet": None,
                },
                "type": "card",
            },
            "receipt_email": body.receipt_email,
            "receipt_number": None,
            "receipt_url": (
                f"https://pay.stripe.com/receipts/acct_{generate_id(16)}/"
                f"{charge_id}/rcpt_{generate_id(32)}"
            ),
            "refunded": False,
            "refunds": {
                "object": "list",
                "data": [],
                "has_more": False,
                "total_count": 0,
                "url": f"/v1/charges/{charge_id}/refunds",
            },
            "review": None,
            "shipping": get_shipping_from_params(body.shipping),
            "source": card,
            "source_transfer": None,
            "statement_descriptor": body.statement_descriptor,
            "statement_descriptor_suffix": (
                body.statement_descriptor_suffix or body.statement_descriptor
            ),
            "status": "succeeded",
            "transfer_data": None,
            "transfer_group": body.transfer_group,
        }

    def _apply_outcome(
        self, account_id: str, charge: dict, source_token: str | None
    ) -> None:
        outcome = tokens.charge_outcome(source_token)
        webhooks = self.simulator.webhooks

        if isinstance(outcome, tokens.Decline):
            charge["failure_code"] = outcome.failure_code
            charge["failure_message"] = outcome.failure_message
            charge["outcome"] = outcome.outcome()
            charge["paid"] = False
            charge["status"] = "failed"
            charge_logger.info(
                f"Charge {charge['id']} declined: {outcome.failure_code} "
                f"({outcome.decline_code})"
            )
            webhooks.post(account_id, charge, "charge.failed")
            raise outcome.to_exception(charge["id"])

        if isinstance(outcome, tokens.ManualReview):
            charge["outcome"] = outcome.outcome()
            charge_logger.info(f"Charge {charge['id']} placed in manual review")

        webhooks.post(account_id, charge, "charge.succeeded")

        if isinstance(outcome, tokens.DelayedDispute):
            self.simulator.scheduler.schedule(
                self.settings.DISPUTE_CREATION_DELAY_SECONDS,
                self.simulator.disputes.create_from_charge,
                account_id,
                charge,
                outcome,
                name=f"dispute:{charge['id']}",
            )

    def list(self, account_id: str, params: dict[str, Any]) -> dict:
        filters = parse_params(ChargeListFilters, params)
        data = self.store.get_all(account_id)
        if filters.customer:
            data = [charge for charge in data if charge["customer"] == filters.customer]
        return self._paginate(account_id, data, params)

    def update(self, account_id: str, charge_id: str, params: dict[str, Any]) -> dict:
        body = parse_params(ChargeUpdate, params)
        charge = self.retrieve(account_id, charge_id)
        given = body.model_fields_set

        if "description" in given:
            charge["description"] = body.description
        if "fraud_details" in given:
            charge["fraud_details"] = body.fraud_details or {}
        if "metadata" in given:
            metadata = dict(charge["metadata"])
            metadata.update(body.metadata or {})
            charge["metadata"] = stringify_metadata(metadata)
        if "receipt_email" in given:
            charge["receipt_email"] = body.receipt_email
        if "shipping" in given:
            charge["shipping"] = get_shipping_from_params(body.shipping)

        charge_logger.info(f"Charge {charge_id} updated")
        return charge

    def capture(self, account_id: str, charge_id: str, params: dict[str, Any]) -> dict:
        """
        Capture an uncaptured charge.

        Capturing less than the authorized amount refunds the difference, so
        ``amount_captured + amount_refunded == amount`` afterwards.

        Raises:
            NotFoundException: Unknown charge.
            ValidationException: Already captured (``charge_already_captured``),
                declined, or an invalid capture amount.
        """
        body = parse_params(ChargeCapture, params)
        charge = self.retrieve(account_id, charge_id, "charge")
        if charge["status"] == "failed":
            raise ValidationException(
                f"Charge {charge_id} has failed and cannot be captured.",
                param="charge",
            )
        if charge["captured"]:
            raise ValidationException(
                f"Charge {charge_id} has already been captured.",
                code="charge_already_captured",
                param=None,
            )

        capture_amount = body.amount if body.amount is not None else charge["amount"]
        self._check_amount(capture_amount, charge["currency"])
        if capture_amount > charge["amount"]:
            raise ValidationException(
                f"Amount to capture ({capture_amount}) exceeds the authorized "
                f"amount ({charge['amount']}).",
                code="amount_too_large",
                param="amount",
            )

        charge["captured"] = True
        charge["amount_captured"] = capture_amount
        charge["balance_transaction"] = f"txn_{generate_id(24)}"
        if capture_amount < charge["amount"]:
            self.simulator.refunds.create(
                account_id,
                {"charge": charge_id, "amount": charge["amount"] - capture_amount},
            )

        charge_logger.info(f"Charge {charge_id} captured: {capture_amount}")
        self.simulator.webhooks.post(account_id, charge, "charge.captured")
        return charge


__all__ = [
    "MIN_CHARGE_AMOUNTS",
    "DEFAULT_OUTCOME",
    "get_address_from_params",
    "get_shipping_from_params",
    "ChargeService",
]
