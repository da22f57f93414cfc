"""
Customers and their saved cards.

A customer embeds two list objects, ``sources`` (its cards) and
``subscriptions``. Members are the shared card/subscription records, so a
retrieved customer always reflects their current state.
"""

from typing import Any

from paysim.core.config import customer_logger
from paysim.core.exceptions.types import NotFoundException
from paysim.core.schemas import (
    CardCreate,
    CustomerCreate,
    CustomerListFilters,
    CustomerUpdate,
    parse_params,
)
from paysim.core.services.base import ResourceService
from paysim.core.utils import now_timestamp, stringify_metadata


def _embedded_list(url: str) -> dict[str, Any]:
    return {"object": "list", "data": [], "has_more": False, "total_count": 0, "url": url}


def _append(embedded: dict, record: dict) -> None:
    embedded["data"].append(record)
    embedded["total_count"] = len(embedded["data"])


def _discard(embedded: dict, record_id: str) -> None:
    embedded["data"] = [item for item in embedded["data"] if item["id"] != record_id]
    embedded["total_count"] = len(embedded["data"])


class CustomerService(ResourceService):
    kind = "customer"
    id_prefix = "cus_"
    label = "customer"
    expandable_fields = ("default_source",)
    list_url = "/v1/customers"

    def create(self, account_id: str, params: dict[str, Any]) -> dict:
        body = parse_params(CustomerCreate, params)
        customer_id = self._new_id(account_id, body.id)

        customer = {
            "id": customer_id,
            "object": "customer",
            "address": body.address,
            "balance": 0,
            "created": now_timestamp(),
            "currency": None,
            "default_source": None,
            "delinquent": False,
            "description": body.description,
            "discount": None,
            "email": body.email,
            "invoice_prefix": customer_id[-8:].upper(),
            "invoice_settings": {
                "custom_fields": None,
                "default_payment_method": None,
                "footer": None,
            },
            "livemode": False,
            "metadata": stringify_metadata(body.metadata),
            "name": body.name,
            "phone": body.phone,
            "preferred_locales": [],
            "shipping": body.shipping,
            "sources": _embedded_list(f"/v1/customers/{customer_id}/sources"),
            "subscriptions": _embedded_list(f"/v1/customers/{customer_id}/subscriptions"),
            "tax_exempt": "none",
        }

        if body.source:
            card = self._attach_source(account_id, customer, body.source)
            customer["default_source"] = card["id"]

        self.store.put(account_id, customer)
        customer_logger.info(f"Customer {customer_id} created for {account_id}")
        return customer

    def list(self, account_id: str, params: dict[str, Any]) -> dict:
        filters = parse_params(CustomerListFilters, params)
        data = self.store.get_all(account_id)
        if filters.email:
            data = [customer for customer in data if customer["email"] == filters.email]
        return self._paginate(account_id, data, params)

    def update(self, account_id: str, customer_id: str, params: dict[str, Any]) -> dict:
        """
        Apply the params present in ``params``.

        Referenced cards and payment methods are looked up, and a new
        ``source`` is tokenized, before any field changes.
        """
        body = parse_params(CustomerUpdate, params)
        customer = self.retrieve(account_id, customer_id)
        given = body.model_fields_set

        default_card = None
        if body.default_source and not body.source:
            # Must be one of the customer's own cards
            default_card = self.retrieve_card(
                account_id, customer_id, body.default_source, "default_source"
            )

        invoice_settings = body.invoice_settings
        payment_method_given = (
            invoice_settings is not None
            and "default_payment_method" in invoice_settings.model_fields_set
        )
        payment_method_id = (
            invoice_settings.default_payment_method if payment_method_given else None
        )
        if payment_method_id:
            self.simulator.payment_methods.retrieve(
                account_id, payment_method_id, "invoice_settings[default_payment_method]"
            )

        if body.source:
            default_card = self._attach_source(account_id, customer, body.source)

        for field in ("description", "email", "name", "phone", "address", "shipping"):
            if field in given:
                customer[field] = getattr(body, field) or None
        if "metadata" in given:
            metadata = dict(customer["metadata"])
            metadata.update(body.metadata or {})
            customer["metadata"] = stringify_metadata(metadata)
        if default_card is not None:
            customer["default_source"] = default_card["id"]
        if payment_method_given:
            customer["invoice_settings"]["default_payment_method"] = payment_method_id

        customer_logger.info(f"Customer {customer_id} updated")
        return customer

    def delete(self, account_id: str, customer_id: str) -> dict:
        customer = self.retrieve(account_id, customer_id)
        for card in customer["sources"]["data"]:
            self.simulator.cards.store.remove(account_id, card["id"])
        self.store.remove(account_id, customer_id)
        customer_logger.info(f"Customer {customer_id} deleted")
        return {"id": customer_id, "object": "customer", "deleted": True}

    # ------------------------------------------------------------------
    # Cards
    # ------------------------------------------------------------------

    def _attach_source(self, account_id: str, customer: dict, source: str) -> dict:
        card = self.simulator.cards.create_from_source(source, customer["id"])
        self.simulator.cards.store.put(account_id, card)
        _append(customer["sources"], card)
        return card

    def create_card(self, account_id: str, customer_id: str, params: dict[str, Any]) -> dict:
        """
        Save a card from ``params["source"]`` on the customer.

        The first card becomes the customer's ``default_source``.
        """
        body = parse_params(CardCreate, params)
        customer = self.retrieve(account_id, customer_id, "customer")
        card = self._attach_source(account_id, customer, body.source)
        if customer["default_source"] is None:
            customer["default_source"] = card["id"]
        customer_logger.info(f"Card {card['id']} added to customer {customer_id}")
        return card

    def retrieve_card(
        self,
        account_id: str,
        customer_id: str,
        card_id: str,
        param_name: str | None = "card",
    ) -> dict:
        customer = self.retrieve(account_id, customer_id, "customer")
        for card in customer["sources"]["data"]:
            if card["id"] == card_id:
                return card
        raise NotFoundException(
            f"Customer {customer_id} does not have card with ID {card_id}",
            param=param_name,
        )

    def delete_card(self, account_id: str, customer_id: str, card_id: str) -> dict:
        customer = self.retrieve(account_id, customer_id, "customer")
        self.retrieve_card(account_id, customer_id, card_id, "id")

        _discard(customer["sources"], card_id)
        self.simulator.cards.store.remove(account_id, card_id)
        if customer["default_source"] == card_id:
            customer["default_source"] = None

        customer_logger.info(f"Card {card_id} removed from customer {customer_id}")
        return {"id": card_id, "object": "card", "customer": customer_id, "deleted": True}

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def add_subscription(self, account_id: str, customer_id: str, subscription: dict) -> None:
        customer = self.retrieve(account_id, customer_id, "customer")
        _append(customer["subscriptions"], subscription)

    def remove_subscription(
        self, account_id: str, customer_id: str, subscription_id: str
    ) -> None:
        customer = self.store.get(account_id, customer_id)
        if customer is not None:
            _discard(customer["subscriptions"], subscription_id)


__all__ = ["CustomerService"]
