"""Refunds of charges, full or partial."""

from typing import Any

from paysim.core.config import charge_logger
from paysim.core.exceptions.types import ValidationException
from paysim.core.schemas import RefundCreate, RefundListFilters, parse_params
from paysim.core.services.base import ResourceService
from paysim.core.utils import generate_id, now_timestamp, stringify_metadata


class RefundService(ResourceService):
    kind = "refund"
    id_prefix = "re_"
    id_length = 24
    label = "refund"
    expandable_fields = ("charge",)
    list_url = "/v1/refunds"

    def create(self, account_id: str, params: dict[str, Any]) -> dict:
        """
        Refund (part of) a charge.

        ``amount`` defaults to everything not yet refunded. The charge's
        ``amount_refunded``, ``refunded`` and ``refunds`` are updated in place.

        Raises:
            NotFoundException: Unknown charge.
            ValidationException: The charge was declined, nothing is left to
                refund, or ``amount`` exceeds what is left.
        """
        body = parse_params(RefundCreate, params)
        charge = self.simulator.charges.retrieve(account_id, body.charge, "charge")
        if charge["status"] == "failed":
            raise ValidationException(
                f"Charge {charge['id']} has failed and cannot be refunded.",
                param="charge",
            )

        remaining = charge["amount"] - charge["amount_refunded"]
        if remaining <= 0:
            raise ValidationException(
                f"Charge {charge['id']} has already been refunded.",
                code="charge_already_refunded",
                param="charge",
            )

        amount = body.amount if body.amount is not None else remaining
        if amount > remaining:
            raise ValidationException(
                f"Refund amount ({amount}) is greater than unrefunded amount on "
                f"charge ({remaining})",
                code="amount_too_large",
                param="amount",
            )

        refund = {
            "id": f"{self.id_prefix}{generate_id(self.id_length)}",
            "object": "refund",
            "amount": amount,
            "balance_transaction": f"txn_{generate_id(24)}",
            "charge": charge["id"],
            "created": now_timestamp(),
            "currency": charge["currency"],
            "metadata": stringify_metadata(body.metadata),
            "payment_intent": charge.get("payment_intent"),
            "reason": body.reason,
            "receipt_number": None,
            "source_transfer_reversal": None,
            "status": "succeeded",
            "transfer_reversal": None,
        }
        self.store.put(account_id, refund)

        charge["amount_refunded"] += amount
        charge["refunded"] = charge["amount_refunded"] >= charge["amount"]
        charge["refunds"]["data"].append(refund)
        charge["refunds"]["total_count"] = len(charge["refunds"]["data"])

        charge_logger.info(f"Refund {refund['id']} of {amount} on {charge['id']}")
        self.simulator.webhooks.post(account_id, charge, "charge.refunded")
        return refund

    def list(self, account_id: str, params: dict[str, Any]) -> dict:
        filters = parse_params(RefundListFilters, params)
        data = self.store.get_all(account_id)
        url = self.list_url
        if filters.charge:
            data = [refund for refund in data if refund["charge"] == filters.charge]
            url = f"/v1/charges/{filters.charge}/refunds"
        return self._paginate(account_id, data, params, url)


__all__ = ["RefundService"]
