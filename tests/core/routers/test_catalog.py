"""
Test suite for the product, price, plan and tax rate endpoints.

Run tests:
    pytest tests/core/routers/test_catalog.py -v
"""

import pytest


class TestProductEndpoints:

    @pytest.mark.asyncio
    async def test_create_list_retrieve(self, client):
        created = await client.post("/v1/products", data={"name": "Gold"})
        assert created.status_code == 200
        product = created.json()
        assert product["object"] == "product"

        fetched = await client.get(f"/v1/products/{product['id']}")
        assert fetched.json()["name"] == "Gold"

        listed = await client.get("/v1/products")
        assert [item["id"] for item in listed.json()["data"]] == [product["id"]]

    @pytest.mark.asyncio
    async def test_name_required(self, client):
        response = await client.post("/v1/products")

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "parameter_missing"


class TestPriceEndpoints:

    @pytest.mark.asyncio
    async def test_create_with_product_and_expand(self, client):
        product = (await client.post("/v1/products", data={"name": "Gold"})).json()

        response = await client.post(
            "/v1/prices",
            data={
                "currency": "usd",
                "unit_amount": "1500",
                "product": product["id"],
                "recurring[interval]": "month",
                "expand[]": "product",
            },
        )

        assert response.status_code == 200
        price = response.json()
        assert price["type"] == "recurring"
        assert price["product"]["id"] == product["id"]

    @pytest.mark.asyncio
    async def test_unknown_product(self, client):
        response = await client.post(
            "/v1/prices",
            data={"currency": "usd", "unit_amount": "1500", "product": "prod_nope"},
        )

        assert response.status_code == 404
        assert response.json()["error"]["param"] == "product"

    @pytest.mark.asyncio
    async def test_update(self, client, monthly_price):
        response = await client.post(
            f"/v1/prices/{monthly_price['id']}", data={"nickname": "Monthly"}
        )

        assert response.status_code == 200
        assert response.json()["nickname"] == "Monthly"


class TestPlanEndpoints:

    @pytest.mark.asyncio
    async def test_create_and_retrieve(self, client):
        product = (await client.post("/v1/products", data={"name": "Gold"})).json()

        created = await client.post(
            "/v1/plans",
            data={
                "amount": "2000",
                "currency": "usd",
                "interval": "month",
                "product": product["id"],
            },
        )
        assert created.status_code == 200
        plan = created.json()
        assert plan["object"] == "plan"

        fetched = await client.get(f"/v1/plans/{plan['id']}", params={"expand[]": "product"})
        assert fetched.json()["product"]["name"] == "Gold"


class TestTaxRateEndpoints:

    @pytest.mark.asyncio
    async def test_create_update_and_filter(self, client):
        created = await client.post(
            "/v1/tax_rates",
            data={"display_name": "VAT", "inclusive": "false", "percentage": "20"},
        )
        assert created.status_code == 200
        tax_rate = created.json()
        assert tax_rate["percentage"] == 20.0
        assert tax_rate["inclusive"] is False

        updated = await client.post(
            f"/v1/tax_rates/{tax_rate['id']}", data={"active": "false"}
        )
        assert updated.json()["active"] is False

        active = await client.get("/v1/tax_rates", params={"active": "true"})
        assert active.json()["data"] == []

    @pytest.mark.asyncio
    async def test_invalid_percentage(self, client):
        response = await client.post(
            "/v1/tax_rates",
            data={"display_name": "VAT", "inclusive": "false", "percentage": "150"},
        )

        assert response.status_code == 400
        assert response.json()["error"]["param"] == "percentage"
