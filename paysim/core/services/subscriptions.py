"""
Subscriptions and subscription items.

Billing period: ``current_period_end`` is one recurring interval after
``current_period_start``, using the longest interval among the items (a yearly
price beats a monthly one); without recurring items it defaults to a month.

Lifecycle events:
- create: ``customer.subscription.created``, then ``invoice.paid`` after
  ``INVOICE_PAID_DELAY_SECONDS``
- update: ``customer.subscription.updated``, then the delayed ``invoice.paid``
- delete: ``customer.subscription.deleted``

Creates and updates look up every referenced price, plan, tax rate and item
before the first record changes, so a rejected request leaves no trace.
"""

from typing import Any, Literal, NamedTuple, Sequence

from paysim.core.config import subscription_logger
from paysim.core.exceptions.types import (
    ConflictException,
    NotFoundException,
    ValidationException,
)
from paysim.core.pagination import apply_list_options, expand_list, expand_object
from paysim.core.schemas import (
    SubscriptionCreate,
    SubscriptionItemListFilters,
    SubscriptionItemParams,
    SubscriptionListFilters,
    SubscriptionUpdate,
    parse_params,
)
from paysim.core.services.base import ResourceService
from paysim.core.store import ResourceStore
from paysim.core.utils import add_interval, generate_id, now_timestamp, stringify_metadata

DEFAULT_INTERVAL = ("month", 1)
INTERVAL_RANK = {"day": 0, "week": 1, "month": 2, "year": 3}


def item_interval(item: dict) -> tuple[str, int] | None:
    """Recurring ``(interval, interval_count)`` of an item's price or plan."""
    price = item.get("price")
    if price and price.get("recurring"):
        recurring = price["recurring"]
        return recurring["interval"], recurring.get("interval_count") or 1
    plan = item.get("plan")
    if plan:
        return plan["interval"], plan.get("interval_count") or 1
    return None


def derive_period_end(start: int, items: list[dict]) -> int:
    """End of the billing period starting at ``start`` for the given items."""
    intervals = [interval for interval in map(item_interval, items) if interval]
    longest = (
        max(intervals, key=lambda interval: (INTERVAL_RANK[interval[0]], interval[1]))
        if intervals
        else DEFAULT_INTERVAL
    )
    return add_interval(start, longest[0], longest[1])


class ResolvedItem(NamedTuple):
    """Records referenced by one item entry; ``None`` where not given."""

    params: SubscriptionItemParams
    price: dict | None = None
    plan: dict | None = None
    tax_rates: list[dict] | None = None


class ItemChange(NamedTuple):
    """One pending change to a subscription's items."""

    action: Literal["create", "update", "delete"]
    resolved: ResolvedItem
    item: dict | None = None


class SubscriptionService(ResourceService):
    kind = "subscription"
    id_prefix = "sub_"
    label = "subscription"
    expandable_fields = ("customer", "default_source", "items")
    list_url = "/v1/subscriptions"

    item_expandable_fields = ("subscription", "price", "plan")

    def __init__(self, simulator):
        super().__init__(simulator)
        self.items: ResourceStore[dict] = ResourceStore("subscription_item")

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    def _tax_rates(
        self, account_id: str, tax_rate_ids: Sequence[str], param_name: str
    ) -> Sequence[dict]:
        return [
            self.simulator.tax_rates.retrieve(account_id, tax_rate_id, param_name)
            for tax_rate_id in tax_rate_ids
        ]

    def _resolve_item(self, account_id: str, params: SubscriptionItemParams) -> ResolvedItem:
        """Look up the price/plan/tax rates an item entry refers to."""
        price = plan = tax_rates = None
        if params.price:
            price = self.simulator.prices.retrieve(account_id, params.price, "price")
        elif params.plan:
            plan = self.simulator.plans.retrieve(account_id, params.plan, "plan")
        if params.tax_rates is not None:
            tax_rates = self._tax_rates(account_id, params.tax_rates, "tax_rates")
        return ResolvedItem(params, price, plan, tax_rates)

    def _create_item(
        self, account_id: str, subscription_id: str, resolved: ResolvedItem
    ) -> dict:
        params = resolved.params
        item_id = params.id or f"si_{generate_id(14)}"
        if self.items.contains(account_id, item_id):
            raise ConflictException("Subscription item already exists.", param="id")
        item = {
            "id": item_id,
            "object": "subscription_item",
            "billing_thresholds": params.billing_thresholds,
            "created": now_timestamp(),
            "metadata": stringify_metadata(params.metadata),
            "plan": resolved.plan,
            "price": resolved.price,
            "quantity": params.quantity if params.quantity is not None else 1,
            "subscription": subscription_id,
            "tax_rates": resolved.tax_rates or [],
        }
        self.items.put(account_id, item)
        return item

    def retrieve_item(
        self, account_id: str, item_id: str, param_name: str | None = "id"
    ) -> dict:
        item = self.items.get(account_id, item_id)
        if item is None:
            raise NotFoundException(
                f"No such subscription_item: '{item_id}'", param=param_name
            )
        return item

    def _rederive_period(self, subscription: dict) -> None:
        subscription["current_period_end"] = derive_period_end(
            subscription["current_period_start"], subscription["items"]["data"]
        )

    @staticmethod
    def _apply_item_update(item: dict, resolved: ResolvedItem) -> bool:
        """Apply an already resolved item change; True if the price changed."""
        params = resolved.params
        if params.quantity is not None:
            item["quantity"] = params.quantity
        if "metadata" in params.model_fields_set:
            metadata = dict(item["metadata"])
            metadata.update(params.metadata or {})
            item["metadata"] = stringify_metadata(metadata)
        if resolved.tax_rates is not None:
            item["tax_rates"] = resolved.tax_rates
        if resolved.price is not None:
            item["price"] = resolved.price
            item["plan"] = None
            return True
        if resolved.plan is not None:
            item["plan"] = resolved.plan
            item["price"] = None
            return True
        return False

    def update_item(self, account_id: str, item_id: str, params: dict[str, Any]) -> dict:
        """
        Update quantity, price, tax rates or metadata of an item.

        A new price re-derives the subscription's ``current_period_end`` from its
        ``current_period_start``.
        """
        body = parse_params(SubscriptionItemParams, params)
        item = self.retrieve_item(account_id, item_id)
        resolved = self._resolve_item(account_id, body)
        if self._apply_item_update(item, resolved):
            subscription = self.retrieve(account_id, item["subscription"], "subscription")
            self._rederive_period(subscription)
        subscription_logger.info(f"Subscription item {item_id} updated")
        return item

    def list_items(self, account_id: str, params: dict[str, Any]) -> dict:
        filters = parse_params(SubscriptionItemListFilters, params)
        data = [
            item
            for item in self.items.get_all(account_id)
            if item["subscription"] == filters.subscription
        ]
        envelope = apply_list_options(
            data,
            params,
            lambda item_id, param_name: self.retrieve_item(account_id, item_id, param_name),
            url=f"/v1/subscription_items?subscription={filters.subscription}",
            default_limit=self.settings.LIST_DEFAULT_LIMIT,
            max_limit=self.settings.LIST_MAX_LIMIT,
        )
        return expand_list(
            envelope,
            self.item_expandable_fields,
            params.get("expand"),
            self.simulator.resolver(account_id),
        )

    def expand_item(self, account_id: str, item: dict, expand: Any) -> dict:
        return expand_object(
            item, self.item_expandable_fields, expand, self.simulator.resolver(account_id)
        )

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def _default_source(
        self, account_id: str, customer_id: str, source: str | None
    ) -> str | None:
        """Card id for ``default_source``: a saved card id, or a token saved now."""
        if not source:
            return None
        customers = self.simulator.customers
        if not source.startswith("tok_"):
            return customers.retrieve_card(
                account_id, customer_id, source, "default_source"
            )["id"]
        return customers.create_card(account_id, customer_id, {"source": source})["id"]

    def create(self, account_id: str, params: dict[str, Any]) -> dict:
        body = parse_params(SubscriptionCreate, params)
        customer = self.simulator.customers.retrieve(account_id, body.customer, "customer")
        subscription_id = self._new_id(account_id, body.id)

        resolved_items = [self._resolve_item(account_id, item) for item in body.items]
        default_tax_rates = self._tax_rates(
            account_id, body.default_tax_rates, "default_tax_rates"
        )
        default_source = self._default_source(
            account_id, customer["id"], body.default_source
        )

        now = now_timestamp()
        subscription = {
            "id": subscription_id,
            "object": "subscription",
            "application_fee_percent": body.application_fee_percent,
            "automatic_tax": {
                "enabled": body.automatic_tax.enabled if body.automatic_tax else False
            },
            "billing_cycle_anchor": body.billing_cycle_anchor or now,
            "billing_thresholds": body.billing_thresholds,
            "cancel_at": None,
            "cancel_at_period_end": body.cancel_at_period_end,
            "canceled_at": None,
            "collection_method": body.collection_method,
            "created": now,
            "current_period_end": add_interval(now, *DEFAULT_INTERVAL),
            "current_period_start": now,
            "customer": customer["id"],
            "days_until_due": body.days_until_due,
            "default_payment_method": body.default_payment_method,
            "default_source": default_source,
            "default_tax_rates": default_tax_rates,
            "discount": None,
            "ended_at": None,
            "items": {
                "object": "list",
                "data": [],
                "has_more": False,
                "total_count": 0,
                "url": f"/v1/subscription_items?subscription={subscription_id}",
            },
            "latest_invoice": f"in_{generate_id(14)}",
            "livemode": False,
            "metadata": stringify_metadata(body.metadata),
            "pause_collection": None,
            "pending_setup_intent": None,
            "pending_update": None,
            "schedule": None,
            "start_date": now,
            "status": "active",
            "transfer_data": None,
            "trial_end": None,
            "trial_start": None,
        }

        for resolved in resolved_items:
            subscription["items"]["data"].append(
                self._create_item(account_id, subscription_id, resolved)
            )
        subscription["items"]["total_count"] = len(subscription["items"]["data"])
        self._rederive_period(subscription)

        self.store.put(account_id, subscription)
        self.simulator.customers.add_subscription(account_id, customer["id"], subscription)
        subscription_logger.info(
            f"Subscription {subscription_id} created for {customer['id']} "
            f"({len(resolved_items)} items)"
        )

        self.simulator.webhooks.post(
            account_id, subscription, "customer.subscription.created"
        )
        self._post_invoice_paid(account_id, subscription)
        return subscription

    def _post_invoice_paid(self, account_id: str, subscription: dict) -> None:
        invoice = self.simulator.invoices.build_paid_invoice(account_id, subscription)
        self.simulator.webhooks.post(
            account_id,
            invoice,
            "invoice.paid",
            delay=self.settings.INVOICE_PAID_DELAY_SECONDS,
        )

    def list(self, account_id: str, params: dict[str, Any]) -> dict:
        filters = parse_params(SubscriptionListFilters, params)
        data = self.store.get_all(account_id)
        if filters.customer:
            data = [sub for sub in data if sub["customer"] == filters.customer]
        if filters.status and filters.status != "all":
            data = [sub for sub in data if sub["status"] == filters.status]
        if filters.price:
            data = [
                sub
                for sub in data
                if any(
                    (item.get("price") or {}).get("id") == filters.price
                    for item in sub["items"]["data"]
                )
            ]
        return self._paginate(account_id, data, params)

    def _plan_item_changes(
        self,
        account_id: str,
        subscription: dict,
        entries: Sequence[SubscriptionItemParams],
    ) -> Sequence[ItemChange]:
        """
        Resolve the ``items`` of an update without touching any record.

        Raises:
            NotFoundException: An entry names another subscription's item, or an
                unknown price, plan or tax rate.
            ValidationException: A new entry without a price or plan.
            ConflictException: A new entry seeds an id used twice.
        """
        changes = []
        new_ids = set()
        for entry in entries:
            if entry.id and self.items.contains(account_id, entry.id):
                item = self.retrieve_item(account_id, entry.id, "items[id]")
                if item["subscription"] != subscription["id"]:
                    raise NotFoundException(
                        f"No such subscription_item: '{entry.id}'", param="items[id]"
                    )
                if entry.deleted:
                    changes.append(ItemChange("delete", ResolvedItem(entry), item))
                else:
                    resolved = self._resolve_item(account_id, entry)
                    changes.append(ItemChange("update", resolved, item))
                continue

            if not entry.has_price:
                raise ValidationException(
                    "Missing required param: items[price].",
                    code="parameter_missing",
                    param="items[price]",
                )
            if entry.id:
                if entry.id in new_ids:
                    raise ConflictException(
                        "Subscription item already exists.", param="id"
                    )
                new_ids.add(entry.id)
            changes.append(ItemChange("create", self._resolve_item(account_id, entry)))
        return changes

    def _apply_item_changes(
        self, account_id: str, subscription: dict, changes: Sequence[ItemChange]
    ) -> None:
        embedded = subscription["items"]
        for change in changes:
            if change.action == "delete":
                self.items.remove(account_id, change.item["id"])
                embedded["data"] = [
                    member
                    for member in embedded["data"]
                    if member["id"] != change.item["id"]
                ]
            elif change.action == "update":
                self._apply_item_update(change.item, change.resolved)
            else:
                embedded["data"].append(
                    self._create_item(account_id, subscription["id"], change.resolved)
                )
        embedded["total_count"] = len(embedded["data"])
        self._rederive_period(subscription)

    def update(self, account_id: str, subscription_id: str, params: dict[str, Any]) -> dict:
        """
        Apply the params present in ``params``.

        Every referenced record is resolved first; ``default_source`` goes last
        among those steps because a token is saved as a card on the customer.
        """
        body = parse_params(SubscriptionUpdate, params)
        subscription = self.retrieve(account_id, subscription_id)
        given = body.model_fields_set

        default_tax_rates = None
        if "default_tax_rates" in given:
            default_tax_rates = self._tax_rates(
                account_id, body.default_tax_rates or [], "default_tax_rates"
            )
        item_changes = None
        if "items" in given:
            item_changes = self._plan_item_changes(account_id, subscription, body.items)
        default_source = self._default_source(
            account_id, subscription["customer"], body.default_source
        )

        if "days_until_due" in given:
            subscription["days_until_due"] = body.days_until_due
        if body.collection_method:
            subscription["collection_method"] = body.collection_method
        if "automatic_tax" in given:
            subscription["automatic_tax"] = {
                "enabled": body.automatic_tax.enabled if body.automatic_tax else False
            }
        if "cancel_at_period_end" in given:
            subscription["cancel_at_period_end"] = bool(body.cancel_at_period_end)
        if "metadata" in given:
            metadata = dict(subscription["metadata"])
            metadata.update(body.metadata or {})
            subscription["metadata"] = stringify_metadata(metadata)
        if default_tax_rates is not None:
            subscription["default_tax_rates"] = default_tax_rates
        if default_source:
            subscription["default_source"] = default_source
        if item_changes is not None:
            self._apply_item_changes(account_id, subscription, item_changes)

        subscription_logger.info(f"Subscription {subscription_id} updated")
        self.simulator.webhooks.post(
            account_id, subscription, "customer.subscription.updated"
        )
        self._post_invoice_paid(account_id, subscription)
        return subscription

    def delete(self, account_id: str, subscription_id: str) -> dict:
        """Cancel and remove a subscription together with its items."""
        subscription = self.retrieve(account_id, subscription_id)
        now = now_timestamp()

        self.store.remove(account_id, subscription_id)
        for item in subscription["items"]["data"]:
            self.items.remove(account_id, item["id"])
        self.simulator.customers.remove_subscription(
            account_id, subscription["customer"], subscription_id
        )

        subscription["status"] = "canceled"
        subscription["canceled_at"] = now
        subscription["ended_at"] = now

        subscription_logger.info(f"Subscription {subscription_id} deleted")
        self.simulator.webhooks.post(
            account_id, subscription, "customer.subscription.deleted"
        )
        return subscription


__all__ = [
    "item_interval",
    "derive_period_end",
    "ResolvedItem",
    "ItemChange",
    "SubscriptionService",
]
