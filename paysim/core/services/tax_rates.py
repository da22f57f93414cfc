from typing import Any

from paysim.core.schemas import (
    TaxRateCreate,
    TaxRateListFilters,
    TaxRateUpdate,
    parse_params,
)
from paysim.core.services.base import ResourceService
from paysim.core.utils import now_timestamp, stringify_metadata

UPDATABLE_FIELDS = (
    "country",
    "description",
    "display_name",
    "jurisdiction",
    "state",
    "tax_type",
)


class TaxRateService(ResourceService):
    kind = "tax_rate"
    id_prefix = "txr_"
    id_length = 24
    label = "tax rate"
    list_url = "/v1/tax_rates"

    def create(self, account_id: str, params: dict[str, Any]) -> dict:
        body = parse_params(TaxRateCreate, params)
        tax_rate_id = self._new_id(account_id, body.id)

        tax_rate = {
            "id": tax_rate_id,
            "object": "tax_rate",
            "active": body.active,
            "country": body.country,
            "created": now_timestamp(),
            "description": body.description,
            "display_name": body.display_name,
            "inclusive": body.inclusive,
            "jurisdiction": body.jurisdiction,
            "livemode": False,
            "metadata": stringify_metadata(body.metadata),
            "percentage": body.percentage,
            "state": body.state,
            "tax_type": body.tax_type,
        }
        self.store.put(account_id, tax_rate)
        return tax_rate

    def list(self, account_id: str, params: dict[str, Any]) -> dict:
        filters = parse_params(TaxRateListFilters, params)
        data = self.store.get_all(account_id)
        if filters.active is not None:
            data = [rate for rate in data if rate["active"] == filters.active]
        if filters.inclusive is not None:
            data = [rate for rate in data if rate["inclusive"] == filters.inclusive]
        return self._paginate(account_id, data, params)

    def update(self, account_id: str, tax_rate_id: str, params: dict[str, Any]) -> dict:
        body = parse_params(TaxRateUpdate, params)
        tax_rate = self.retrieve(account_id, tax_rate_id)
        given = body.model_fields_set

        if "active" in given and body.active is not None:
            tax_rate["active"] = body.active
        for field in UPDATABLE_FIELDS:
            if field in given:
                tax_rate[field] = getattr(body, field)
        if "metadata" in given:
            metadata = dict(tax_rate["metadata"])
            metadata.update(body.metadata or {})
            tax_rate["metadata"] = stringify_metadata(metadata)
        return tax_rate


__all__ = ["TaxRateService"]
