"""
Test suite for the subscription, subscription item and invoice endpoints.

Run tests:
    pytest tests/core/routers/test_subscriptions.py -v
"""

import pytest


async def create_price(client, unit_amount: int, interval: str) -> dict:
    response = await client.post(
        "/v1/prices",
        data={
            "currency": "usd",
            "unit_amount": str(unit_amount),
            "recurring[interval]": interval,
            "product_data[name]": f"Plan {interval}",
        },
    )
    assert response.status_code == 200
    return response.json()


class TestSubscriptionEndpoints:

    @pytest.mark.asyncio
    async def test_create_with_nested_items(self, client, customer):
        price = await create_price(client, 1000, "month")

        response = await client.post(
            "/v1/subscriptions",
            data={
                "customer": customer["id"],
                "items[0][price]": price["id"],
                "items[0][quantity]": "2",
                "expand[]": "customer",
            },
        )

        assert response.status_code == 200
        subscription = response.json()
        assert subscription["status"] == "active"
        assert subscription["customer"]["id"] == customer["id"]
        (item,) = subscription["items"]["data"]
        assert item["price"]["id"] == price["id"]
        assert item["quantity"] == 2

    @pytest.mark.asyncio
    async def test_create_requires_item_price(self, client, customer):
        response = await client.post(
            "/v1/subscriptions",
            data={"customer": customer["id"], "items[0][quantity]": "1"},
        )

        assert response.status_code == 400
        assert response.json()["error"]["param"] == "items[price]"

    @pytest.mark.asyncio
    async def test_scalar_automatic_tax(self, client, customer):
        response = await client.post(
            "/v1/subscriptions",
            data={"customer": customer["id"], "automatic_tax": "true"},
        )

        assert response.status_code == 400
        assert response.json()["error"]["param"] == "automatic_tax"

    @pytest.mark.asyncio
    async def test_events_over_http(
        self, client, customer, scheduler, webhook_endpoint, webhook_recorder
    ):
        price = await create_price(client, 1000, "month")
        created = await client.post(
            "/v1/subscriptions",
            json={"customer": customer["id"], "items": [{"price": price["id"]}]},
        )
        subscription_id = created.json()["id"]

        await scheduler.run_pending()
        assert "customer.subscription.created" in webhook_recorder.event_types()
        assert webhook_recorder.events("invoice.paid") == []

        await scheduler.advance(3)
        (invoice_event,) = webhook_recorder.events("invoice.paid")
        assert invoice_event["data"]["object"]["amount_paid"] == 1000

        deleted = await client.delete(f"/v1/subscriptions/{subscription_id}")
        assert deleted.json()["status"] == "canceled"
        await scheduler.run_pending()
        assert "customer.subscription.deleted" in webhook_recorder.event_types()

        missing = await client.get(f"/v1/subscriptions/{subscription_id}")
        assert missing.status_code == 404

    @pytest.mark.asyncio
    async def test_update_and_list(self, client, customer):
        price = await create_price(client, 1000, "month")
        created = (
            await client.post(
                "/v1/subscriptions",
                data={"customer": customer["id"], "items[0][price]": price["id"]},
            )
        ).json()

        updated = await client.post(
            f"/v1/subscriptions/{created['id']}",
            data={"metadata[plan]": "gold", "cancel_at_period_end": "true"},
        )
        assert updated.json()["metadata"] == {"plan": "gold"}
        assert updated.json()["cancel_at_period_end"] is True

        listed = await client.get("/v1/subscriptions", params={"customer": customer["id"]})
        assert [sub["id"] for sub in listed.json()["data"]] == [created["id"]]


class TestSubscriptionItemEndpoints:

    @pytest.mark.asyncio
    async def test_list_retrieve_update(self, client, customer):
        monthly = await create_price(client, 1000, "month")
        yearly = await create_price(client, 10000, "year")
        subscription = (
            await client.post(
                "/v1/subscriptions",
                data={"customer": customer["id"], "items[0][price]": monthly["id"]},
            )
        ).json()

        listed = await client.get(
            "/v1/subscription_items", params={"subscription": subscription["id"]}
        )
        (item,) = listed.json()["data"]

        fetched = await client.get(
            f"/v1/subscription_items/{item['id']}", params={"expand[]": "subscription"}
        )
        assert fetched.json()["subscription"]["id"] == subscription["id"]

        updated = await client.post(
            f"/v1/subscription_items/{item['id']}", data={"price": yearly["id"]}
        )
        assert updated.json()["price"]["id"] == yearly["id"]

        refreshed = (await client.get(f"/v1/subscriptions/{subscription['id']}")).json()
        assert refreshed["current_period_end"] > subscription["current_period_end"]

    @pytest.mark.asyncio
    async def test_list_requires_subscription(self, client):
        response = await client.get("/v1/subscription_items")

        assert response.status_code == 400
        assert response.json()["error"]["param"] == "subscription"


class TestUpcomingInvoiceEndpoint:

    @pytest.mark.asyncio
    async def test_upcoming_for_customer(self, client, customer):
        price = await create_price(client, 1500, "month")
        await client.post(
            "/v1/subscriptions",
            data={
                "customer": customer["id"],
                "items[0][price]": price["id"],
                "items[0][quantity]": "3",
            },
        )

        response = await client.get(
            "/v1/invoices/upcoming", params={"customer": customer["id"]}
        )

        assert response.status_code == 200
        invoice = response.json()
        assert invoice["object"] == "invoice"
        assert invoice["amount_due"] == 4500
        assert invoice["lines"]["total_count"] == 1

    @pytest.mark.asyncio
    async def test_upcoming_without_subscriptions(self, client, customer):
        response = await client.get(
            "/v1/invoices/upcoming", params={"customer": customer["id"]}
        )

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "invoice_upcoming_none"
