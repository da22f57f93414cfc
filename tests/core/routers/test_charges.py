"""
Test suite for the charge endpoints.

Run tests:
    pytest tests/core/routers/test_charges.py -v
"""

import pytest


class TestChargeEndpoints:

    @pytest.mark.asyncio
    async def test_create_charge_form_encoded(self, client):
        response = await client.post(
            "/v1/charges",
            data={
                "amount": "2000",
                "currency": "usd",
                "source": "tok_visa",
                "metadata[order_id]": "6735",
            },
        )

        assert response.status_code == 200
        charge = response.json()
        assert charge["object"] == "charge"
        assert charge["amount"] == 2000
        assert charge["status"] == "succeeded"
        assert charge["source"]["last4"] == "4242"
        assert charge["metadata"] == {"order_id": "6735"}

    @pytest.mark.asyncio
    async def test_create_charge_json(self, client):
        response = await client.post(
            "/v1/charges",
            json={"amount": 2000, "currency": "usd", "source": "tok_mastercard"},
        )

        assert response.status_code == 200
        assert response.json()["source"]["brand"] == "MasterCard"

    @pytest.mark.asyncio
    async def test_declined_charge_returns_402_then_is_retrievable(self, client):
        response = await client.post(
            "/v1/charges",
            data={"amount": "2000", "currency": "usd", "source": "tok_chargeDeclined"},
        )

        assert response.status_code == 402
        error = response.json()["error"]
        assert error["type"] == "card_error"
        assert error["code"] == "card_declined"
        assert error["decline_code"] == "generic_decline"

        stored = await client.get(f"/v1/charges/{error['charge']}")
        assert stored.status_code == 200
        assert stored.json()["status"] == "failed"

    @pytest.mark.asyncio
    async def test_missing_amount(self, client):
        response = await client.post(
            "/v1/charges", data={"currency": "usd", "source": "tok_visa"}
        )

        assert response.status_code == 400
        assert response.json()["error"] == {
            "type": "invalid_request_error",
            "code": "parameter_missing",
            "message": "Missing required param: amount.",
            "param": "amount",
            "doc_url": "https://stripe.com/docs/error-codes/parameter-missing",
        }

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "token, status_code, error_type",
        [("tok_429", 429, "rate_limit_error"), ("tok_500", 500, "api_error")],
    )
    async def test_transport_faults(self, client, token, status_code, error_type):
        response = await client.post(
            "/v1/charges", data={"amount": "2000", "currency": "usd", "source": token}
        )

        assert response.status_code == status_code
        assert response.json()["error"]["type"] == error_type

    @pytest.mark.asyncio
    async def test_retrieve_unknown_charge(self, client):
        response = await client.get("/v1/charges/ch_nope")

        assert response.status_code == 404
        error = response.json()["error"]
        assert error["code"] == "resource_missing"
        assert error["message"] == "No such charge: 'ch_nope'"

    @pytest.mark.asyncio
    async def test_capture_and_list_refunds(self, client):
        created = await client.post(
            "/v1/charges",
            data={"amount": "2000", "currency": "usd", "source": "tok_visa", "capture": "false"},
        )
        charge_id = created.json()["id"]

        captured = await client.post(
            f"/v1/charges/{charge_id}/capture", data={"amount": "1200"}
        )
        assert captured.status_code == 200
        assert captured.json()["amount_captured"] == 1200
        assert captured.json()["amount_refunded"] == 800

        again = await client.post(f"/v1/charges/{charge_id}/capture")
        assert again.status_code == 400
        assert again.json()["error"]["code"] == "charge_already_captured"

        refunds = await client.get(f"/v1/charges/{charge_id}/refunds")
        assert refunds.status_code == 200
        body = refunds.json()
        assert body["object"] == "list"
        assert [refund["amount"] for refund in body["data"]] == [800]

    @pytest.mark.asyncio
    async def test_list_pagination(self, client):
        ids = []
        for _ in range(3):
            response = await client.post(
                "/v1/charges", data={"amount": "2000", "currency": "usd", "source": "tok_visa"}
            )
            ids.append(response.json()["id"])

        first = await client.get("/v1/charges", params={"limit": 2})
        assert [charge["id"] for charge in first.json()["data"]] == ids[:2]
        assert first.json()["has_more"] is True

        second = await client.get(
            "/v1/charges", params={"limit": 2, "starting_after": ids[1]}
        )
        assert [charge["id"] for charge in second.json()["data"]] == ids[2:]
        assert second.json()["has_more"] is False

    @pytest.mark.asyncio
    async def test_expand_customer(self, client):
        customer = (await client.post("/v1/customers", data={"source": "tok_visa"})).json()
        response = await client.post(
            "/v1/charges",
            data={
                "amount": "2000",
                "currency": "usd",
                "customer": customer["id"],
                "expand[]": "customer",
            },
        )

        assert response.status_code == 200
        assert response.json()["customer"]["id"] == customer["id"]

    @pytest.mark.asyncio
    async def test_update_charge(self, client):
        created = await client.post(
            "/v1/charges", data={"amount": "2000", "currency": "usd", "source": "tok_visa"}
        )

        response = await client.post(
            f"/v1/charges/{created.json()['id']}", data={"description": "Order 42"}
        )
        assert response.json()["description"] == "Order 42"
