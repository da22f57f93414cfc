"""Disputes opened against charges made with the dispute tokens."""

from datetime import timedelta
from typing import Any

from paysim.core.config import charge_logger
from paysim.core.services.base import ResourceService
from paysim.core.services.tokens import DelayedDispute
from paysim.core.utils import generate_id, now_timestamp

DISPUTE_FEE = 1500
EVIDENCE_DUE_DAYS = 7


def _empty_evidence() -> dict[str, Any]:
    fields = (
        "access_activity_log",
        "billing_address",
        "cancellation_policy",
        "cancellation_policy_disclosure",
        "cancellation_rebuttal",
        "customer_communication",
        "customer_email_address",
        "customer_name",
        "customer_purchase_ip",
        "customer_signature",
        "duplicate_charge_documentation",
        "duplicate_charge_explanation",
        "duplicate_charge_id",
        "product_description",
        "receipt",
        "refund_policy",
        "refund_policy_disclosure",
        "refund_refusal_explanation",
        "service_date",
        "service_documentation",
        "shipping_address",
        "shipping_carrier",
        "shipping_date",
        "shipping_documentation",
        "shipping_tracking_number",
        "uncategorized_file",
        "uncategorized_text",
    )
    return {field: None for field in fields}


class DisputeService(ResourceService):
    kind = "dispute"
    id_prefix = "dp_"
    id_length = 24
    label = "dispute"
    expandable_fields = ("charge",)

    def _balance_transaction(self, charge: dict, created: int) -> dict:
        amount = -charge["amount"]
        return {
            "id": f"txn_{generate_id(24)}",
            "object": "balance_transaction",
            "amount": amount,
            "available_on": created,
            "created": created,
            "currency": charge["currency"],
            "description": f"Chargeback withdrawal for {charge['id']}",
            "exchange_rate": None,
            "fee": DISPUTE_FEE,
            "fee_details": [
                {
                    "amount": DISPUTE_FEE,
                    "application": None,
                    "currency": charge["currency"],
                    "description": "Dispute fee",
                    "type": "stripe_fee",
                }
            ],
            "net": amount - DISPUTE_FEE,
            "reporting_category": "dispute",
            "source": None,
            "status": "available",
            "type": "adjustment",
        }

    def create_from_charge(
        self, account_id: str, charge: dict, outcome: DelayedDispute
    ) -> dict:
        """
        Open a dispute on ``charge`` and back-link it.

        Chargebacks withdraw the amount plus the dispute fee and wait for a
        response; inquiries move no money.
        """
        created = now_timestamp()
        due_by = created + int(timedelta(days=EVIDENCE_DUE_DAYS).total_seconds())
        balance_transactions = (
            [self._balance_transaction(charge, created)] if outcome.chargeback else []
        )

        dispute = {
            "id": f"{self.id_prefix}{generate_id(self.id_length)}",
            "object": "dispute",
            "amount": charge["amount"],
            "balance_transaction": (
                balance_transactions[0]["id"] if balance_transactions else None
            ),
            "balance_transactions": balance_transactions,
            "charge": charge["id"],
            "created": created,
            "currency": charge["currency"],
            "evidence": _empty_evidence(),
            "evidence_details": {
                "due_by": due_by,
                "has_evidence": False,
                "past_due": False,
                "submission_count": 0,
            },
            "is_charge_refundable": not outcome.chargeback,
            "livemode": False,
            "metadata": {},
            "payment_intent": charge.get("payment_intent"),
            "reason": outcome.reason,
            "status": (
                "needs_response" if outcome.chargeback else "warning_needs_response"
            ),
        }
        self.store.put(account_id, dispute)

        charge["dispute"] = dispute["id"]
        charge["disputed"] = True
        charge_logger.info(
            f"Dispute {dispute['id']} ({outcome.reason}) opened on {charge['id']}"
        )
        self.simulator.webhooks.post(account_id, dispute, "charge.dispute.created")
        return dispute


__all__ = ["DISPUTE_FEE", "DisputeService"]
