"""
Prices.

A price belongs to a product, given either as an existing product id or as
``product_data`` from which a product is created on the fly. Recurring prices
carry the ``interval`` subscriptions use to derive their billing period.
"""

from typing import Any

from paysim.core.schemas import PriceCreate, PriceListFilters, PriceUpdate, parse_params
from paysim.core.schemas.billing import Recurring
from paysim.core.services.base import ResourceService
from paysim.core.utils import now_timestamp, stringify_metadata


def recurring_details(recurring: Recurring | None) -> dict | None:
    """The ``recurring`` hash of a price record."""
    if recurring is None:
        return None
    return {
        "aggregate_usage": recurring.aggregate_usage,
        "interval": recurring.interval,
        "interval_count": recurring.interval_count,
        "trial_period_days": recurring.trial_period_days,
        "usage_type": recurring.usage_type,
    }


class PriceService(ResourceService):
    kind = "price"
    id_prefix = "price_"
    id_length = 24
    label = "price"
    expandable_fields = ("product",)
    list_url = "/v1/prices"

    def _product_id(self, account_id: str, body: PriceCreate) -> str:
        products = self.simulator.products
        if body.product_data is not None:
            product_data = body.product_data.model_dump(exclude_unset=True)
            return products.create(account_id, product_data)["id"]
        return products.retrieve(account_id, body.product, "product")["id"]

    def create(self, account_id: str, params: dict[str, Any]) -> dict:
        body = parse_params(PriceCreate, params)
        price_id = self._new_id(account_id, body.id)
        recurring = recurring_details(body.recurring)
        unit_amount = body.unit_amount

        price = {
            "id": price_id,
            "object": "price",
            "active": body.active,
            "billing_scheme": body.billing_scheme,
            "created": now_timestamp(),
            "currency": body.currency,
            "livemode": False,
            "lookup_key": body.lookup_key,
            "metadata": stringify_metadata(body.metadata),
            "nickname": body.nickname,
            "product": self._product_id(account_id, body),
            "recurring": recurring,
            "tax_behavior": body.tax_behavior,
            "tiers_mode": body.tiers_mode,
            "transform_quantity": body.transform_quantity,
            "type": "recurring" if recurring else "one_time",
            "unit_amount": unit_amount,
            "unit_amount_decimal": (
                str(unit_amount) if unit_amount is not None else body.unit_amount_decimal
            ),
        }
        self.store.put(account_id, price)
        return price

    def list(self, account_id: str, params: dict[str, Any]) -> dict:
        filters = parse_params(PriceListFilters, params)
        data = self.store.get_all(account_id)
        if filters.active is not None:
            data = [price for price in data if price["active"] == filters.active]
        if filters.currency:
            currency = filters.currency.lower()
            data = [price for price in data if price["currency"] == currency]
        if filters.product:
            data = [price for price in data if price["product"] == filters.product]
        if filters.type:
            data = [price for price in data if price["type"] == filters.type]
        return self._paginate(account_id, data, params)

    def update(self, account_id: str, price_id: str, params: dict[str, Any]) -> dict:
        body = parse_params(PriceUpdate, params)
        price = self.retrieve(account_id, price_id)
        given = body.model_fields_set

        if "active" in given and body.active is not None:
            price["active"] = body.active
        if "lookup_key" in given:
            price["lookup_key"] = body.lookup_key
        if "nickname" in given:
            price["nickname"] = body.nickname
        if "tax_behavior" in given and body.tax_behavior is not None:
            price["tax_behavior"] = body.tax_behavior
        if "metadata" in given:
            metadata = dict(price["metadata"])
            metadata.update(body.metadata or {})
            price["metadata"] = stringify_metadata(metadata)
        return price


__all__ = ["recurring_details", "PriceService"]
