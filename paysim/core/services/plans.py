from typing import Any

from paysim.core.schemas import PlanCreate, PlanListFilters, parse_params
from paysim.core.services.base import ResourceService
from paysim.core.utils import now_timestamp, stringify_metadata


class PlanService(ResourceService):
    kind = "plan"
    id_prefix = "plan_"
    label = "plan"
    expandable_fields = ("product",)
    list_url = "/v1/plans"

    def create(self, account_id: str, params: dict[str, Any]) -> dict:
        body = parse_params(PlanCreate, params)
        plan_id = self._new_id(account_id, body.id)

        products = self.simulator.products
        if body.product_data is not None:
            product_data = body.product_data.model_dump(exclude_unset=True)
            product_id = products.create(account_id, product_data)["id"]
        else:
            product_id = products.retrieve(account_id, body.product, "product")["id"]

        plan = {
            "id": plan_id,
            "object": "plan",
            "active": body.active,
            "aggregate_usage": body.aggregate_usage,
            "amount": body.amount,
            "amount_decimal": str(body.amount) if body.amount is not None else None,
            "billing_scheme": body.billing_scheme,
            "created": now_timestamp(),
            "currency": body.currency,
            "interval": body.interval,
            "interval_count": body.interval_count,
            "livemode": False,
            "metadata": stringify_metadata(body.metadata),
            "nickname": body.nickname,
            "product": product_id,
            "tiers_mode": body.tiers_mode,
            "transform_usage": body.transform_usage,
            "trial_period_days": body.trial_period_days,
            "usage_type": body.usage_type,
        }
        self.store.put(account_id, plan)
        return plan

    def list(self, account_id: str, params: dict[str, Any]) -> dict:
        filters = parse_params(PlanListFilters, params)
        data = self.store.get_all(account_id)
        if filters.active is not None:
            data = [plan for plan in data if plan["active"] == filters.active]
        if filters.product:
            data = [plan for plan in data if plan["product"] == filters.product]
        return self._paginate(account_id, data, params)


__all__ = ["PlanService"]
