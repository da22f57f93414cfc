"""
Invoices.

Nothing is stored: ``upcoming`` previews the next invoice of a subscription (or
of all a customer's subscriptions) and ``build_paid_invoice`` builds the
payload of the ``invoice.paid`` event subscriptions emit.
"""

from typing import Any

from paysim.core.exceptions.types import NotFoundException
from paysim.core.schemas import UpcomingInvoiceParams, parse_params
from paysim.core.utils import add_interval, generate_id, now_timestamp


def _unit_amount(item: dict) -> int:
    price = item.get("price")
    if price:
        return price.get("unit_amount") or 0
    plan = item.get("plan")
    if plan:
        return plan.get("amount") or 0
    return 0


def _currency(items: list[dict]) -> str:
    for item in items:
        source = item.get("price") or item.get("plan")
        if source:
            return source["currency"]
    return "usd"


class InvoiceService:
    """Builds invoice objects from subscriptions."""

    def __init__(self, simulator):
        self.simulator = simulator

    def line_item(self, invoice_id: str, item: dict, period: dict[str, int]) -> dict:
        unit_amount = _unit_amount(item)
        quantity = item.get("quantity") or 1
        source = item.get("price") or item.get("plan") or {}
        return {
            "id": f"il_{generate_id()}",
            "object": "line_item",
            "amount": unit_amount * quantity,
            "currency": source.get("currency", "usd"),
            "description": f"{quantity} x {source.get('nickname') or source.get('id')}",
            "discount_amounts": [],
            "discountable": True,
            "discounts": [],
            "invoice_item": invoice_id,
            "livemode": False,
            "metadata": {},
            "period": dict(period),
            "plan": item.get("plan"),
            "price": item.get("price"),
            "proration": False,
            "quantity": quantity,
            "subscription": item["subscription"],
            "subscription_item": item["id"],
            "tax_amounts": [],
            "tax_rates": item.get("tax_rates") or [],
            "type": "subscription",
        }

    def _invoice(
        self,
        invoice_id: str,
        customer: dict | None,
        customer_id: str,
        subscription: dict | None,
        items: list[dict],
        period: dict[str, int],
    ) -> dict:
        lines = [self.line_item(invoice_id, item, period) for item in items]
        amount_due = sum(line["amount"] for line in lines)
        return {
            "id": invoice_id,
            "object": "invoice",
            "account_country": "US",
            "account_name": None,
            "amount_due": amount_due,
            "amount_paid": 0,
            "amount_remaining": amount_due,
            "application_fee_amount": None,
            "attempt_count": 0,
            "attempted": False,
            "auto_advance": False,
            "billing_reason": "upcoming",
            "charge": None,
            "collection_method": (
                subscription["collection_method"] if subscription else "charge_automatically"
            ),
            "created": now_timestamp(),
            "currency": _currency(items),
            "customer": customer_id,
            "customer_address": customer.get("address") if customer else None,
            "customer_email": customer.get("email") if customer else None,
            "customer_name": customer.get("name") if customer else None,
            "customer_phone": customer.get("phone") if customer else None,
            "customer_shipping": customer.get("shipping") if customer else None,
            "customer_tax_exempt": "none",
            "default_payment_method": None,
            "default_source": None,
            "default_tax_rates": subscription["default_tax_rates"] if subscription else [],
            "description": None,
            "discount": None,
            "due_date": None,
            "ending_balance": None,
            "lines": {
                "object": "list",
                "data": lines,
                "has_more": False,
                "total_count": len(lines),
                "url": f"/v1/invoices/upcoming/lines?customer={customer_id}",
            },
            "livemode": False,
            "metadata": {},
            "next_payment_attempt": None,
            "number": None,
            "paid": False,
            "payment_intent": None,
            "period_end": period["end"],
            "period_start": period["start"],
            "receipt_number": None,
            "starting_balance": 0,
            "status": "draft",
            "status_transitions": {
                "finalized_at": None,
                "marked_uncollectible_at": None,
                "paid_at": None,
                "voided_at": None,
            },
            "subscription": subscription,
            "subtotal": amount_due,
            "tax": None,
            "total": amount_due,
            "total_tax_amounts": [],
        }

    def upcoming(self, account_id: str, params: dict[str, Any]) -> dict:
        """
        Preview the next invoice.

        ``subscription`` selects one subscription; ``customer`` alone covers every
        subscription of that customer. Lines are the subscription items and
        ``amount_due`` is the sum of ``unit_amount * quantity``.

        Raises:
            ValidationException: Neither ``subscription`` nor ``customer`` given.
            NotFoundException: Unknown ids, or a customer without subscriptions.
        """
        body = parse_params(UpcomingInvoiceParams, params)
        subscriptions = self.simulator.subscriptions
        customers = self.simulator.customers

        if body.subscription:
            subscription = subscriptions.retrieve(
                account_id, body.subscription, "subscription"
            )
            selected = [subscription]
            customer_id = subscription["customer"]
        else:
            customer_id = body.customer
            customers.retrieve(account_id, customer_id, "customer")
            selected = [
                sub
                for sub in subscriptions.store.get_all(account_id)
                if sub["customer"] == customer_id
            ]
            if not selected:
                raise NotFoundException(
                    f"No upcoming invoices for customer: {customer_id}",
                    code="invoice_upcoming_none",
                )
            subscription = selected[0] if len(selected) == 1 else None

        customer = customers.store.get(account_id, customer_id)
        items = [item for sub in selected for item in sub["items"]["data"]]
        start = min(sub["current_period_end"] for sub in selected)
        period = {"start": start, "end": add_interval(start, "month")}

        invoice = self._invoice(
            f"upcoming_in_{generate_id()}", customer, customer_id, subscription, items, period
        )
        invoice["created"] = start
        invoice["next_payment_attempt"] = start
        return invoice

    def build_paid_invoice(self, account_id: str, subscription: dict) -> dict:
        """Invoice for the current period of ``subscription``, marked paid."""
        customer = self.simulator.customers.store.get(account_id, subscription["customer"])
        period = {
            "start": subscription["current_period_start"],
            "end": subscription["current_period_end"],
        }
        invoice = self._invoice(
            f"in_{generate_id()}",
            customer,
            subscription["customer"],
            subscription,
            subscription["items"]["data"],
            period,
        )
        now = now_timestamp()
        invoice.update(
            {
                "amount_paid": invoice["amount_due"],
                "amount_remaining": 0,
                "attempt_count": 1,
                "attempted": True,
                "billing_reason": "subscription_cycle",
                "charge": f"ch_{generate_id(24)}",
                "ending_balance": 0,
                "number": generate_id(14).upper(),
                "paid": True,
                "payment_intent": f"pi_{subscription['id']}",
                "status": "paid",
                "status_transitions": {
                    "finalized_at": now,
                    "marked_uncollectible_at": None,
                    "paid_at": now,
                    "voided_at": None,
                },
            }
        )
        invoice["lines"]["url"] = f"/v1/invoices/{invoice['id']}/lines"
        return invoice


__all__ = ["InvoiceService"]
