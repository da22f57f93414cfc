from typing import Any

from paysim.core.schemas import ProductCreate, ProductListFilters, parse_params
from paysim.core.services.base import ResourceService
from paysim.core.utils import now_timestamp, stringify_metadata


class ProductService(ResourceService):
    kind = "product"
    id_prefix = "prod_"
    label = "product"
    list_url = "/v1/products"

    def create(self, account_id: str, params: dict[str, Any]) -> dict:
        body = parse_params(ProductCreate, params)
        product_id = self._new_id(account_id, body.id)
        now = now_timestamp()

        product = {
            "id": product_id,
            "object": "product",
            "active": body.active,
            "attributes": body.attributes,
            "created": now,
            "description": body.description,
            "images": body.images,
            "livemode": False,
            "metadata": stringify_metadata(body.metadata),
            "name": body.name,
            "package_dimensions": body.package_dimensions,
            "shippable": body.shippable if body.type == "good" else None,
            "statement_descriptor": body.statement_descriptor,
            "tax_code": body.tax_code,
            "type": body.type,
            "unit_label": body.unit_label,
            "updated": now,
            "url": body.url,
        }
        self.store.put(account_id, product)
        return product

    def list(self, account_id: str, params: dict[str, Any]) -> dict:
        filters = parse_params(ProductListFilters, params)
        data = self.store.get_all(account_id)
        if filters.active is not None:
            data = [product for product in data if product["active"] == filters.active]
        if filters.ids:
            data = [product for product in data if product["id"] in filters.ids]
        if filters.shippable is not None:
            data = [
                product for product in data if product["shippable"] == filters.shippable
            ]
        if filters.url:
            data = [product for product in data if product["url"] == filters.url]
        if filters.type:
            data = [product for product in data if product["type"] == filters.type]
        return self._paginate(account_id, data, params)


__all__ = ["ProductService"]
