"""
Test suite for the dispute and refund endpoints.

Run tests:
    pytest tests/core/routers/test_disputes.py -v
"""

import pytest


class TestDisputeEndpoints:

    @pytest.mark.asyncio
    async def test_dispute_token_opens_dispute(
        self, client, scheduler, webhook_endpoint, webhook_recorder
    ):
        created = await client.post(
            "/v1/charges",
            data={"amount": "5000", "currency": "usd", "source": "tok_createDispute"},
        )
        assert created.status_code == 200
        charge_id = created.json()["id"]

        await scheduler.run_pending()

        charge = (await client.get(f"/v1/charges/{charge_id}")).json()
        assert charge["disputed"] is True

        response = await client.get(
            f"/v1/disputes/{charge['dispute']}", params={"expand[]": "charge"}
        )
        assert response.status_code == 200
        dispute = response.json()
        assert dispute["status"] == "needs_response"
        assert dispute["charge"]["id"] == charge_id
        assert "charge.dispute.created" in webhook_recorder.event_types()

    @pytest.mark.asyncio
    async def test_unknown_dispute(self, client):
        response = await client.get("/v1/disputes/dp_nope")

        assert response.status_code == 404


class TestRefundEndpoints:

    @pytest.mark.asyncio
    async def test_refund_flow(self, client):
        charge = (
            await client.post(
                "/v1/charges", data={"amount": "2000", "currency": "usd", "source": "tok_visa"}
            )
        ).json()

        created = await client.post(
            "/v1/refunds", data={"charge": charge["id"], "amount": "500"}
        )
        assert created.status_code == 200
        refund = created.json()
        assert refund["amount"] == 500

        fetched = await client.get(f"/v1/refunds/{refund['id']}", params={"expand[]": "charge"})
        assert fetched.json()["charge"]["amount_refunded"] == 500

        listed = await client.get("/v1/refunds")
        assert [item["id"] for item in listed.json()["data"]] == [refund["id"]]

    @pytest.mark.asyncio
    async def test_refund_more_than_charged(self, client):
        charge = (
            await client.post(
                "/v1/charges", data={"amount": "2000", "currency": "usd", "source": "tok_visa"}
            )
        ).json()

        response = await client.post(
            "/v1/refunds", data={"charge": charge["id"], "amount": "5000"}
        )
        assert response.status_code == 400
