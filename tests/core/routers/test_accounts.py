"""
Test suite for connected accounts and ``Stripe-Account`` scoping.

Run tests:
    pytest tests/core/routers/test_accounts.py -v
"""

import pytest


class TestAccountEndpoints:

    @pytest.mark.asyncio
    async def test_create_list_delete(self, client):
        created = await client.post(
            "/v1/accounts", data={"type": "custom", "email": "shop@example.com"}
        )
        assert created.status_code == 200
        account = created.json()
        assert account["object"] == "account"

        listed = await client.get("/v1/accounts")
        assert [item["id"] for item in listed.json()["data"]] == [account["id"]]

        deleted = await client.delete(f"/v1/accounts/{account['id']}")
        assert deleted.json() == {"id": account["id"], "object": "account", "deleted": True}

        missing = await client.get(f"/v1/accounts/{account['id']}")
        assert missing.status_code == 404

    @pytest.mark.asyncio
    async def test_resources_are_scoped_by_header(self, client):
        account = (await client.post("/v1/accounts", data={"type": "custom"})).json()
        headers = {"Stripe-Account": account["id"]}

        scoped = await client.post("/v1/customers", data={"email": "a@example.com"}, headers=headers)
        assert scoped.status_code == 200
        customer_id = scoped.json()["id"]

        inside = await client.get(f"/v1/customers/{customer_id}", headers=headers)
        assert inside.status_code == 200

        from_platform = await client.get(f"/v1/customers/{customer_id}")
        assert from_platform.status_code == 404

        platform_list = await client.get("/v1/customers")
        assert platform_list.json()["data"] == []

    @pytest.mark.asyncio
    async def test_connected_account_sees_itself(self, client):
        account = (await client.post("/v1/accounts")).json()

        response = await client.get(
            f"/v1/accounts/{account['id']}", headers={"Stripe-Account": account["id"]}
        )
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_unknown_account_header(self, client):
        response = await client.get(
            "/v1/customers", headers={"Stripe-Account": "acct_nope"}
        )

        assert response.status_code == 404
        assert response.json()["error"]["type"] == "invalid_request_error"

    @pytest.mark.asyncio
    async def test_invalid_type(self, client):
        response = await client.post("/v1/accounts", data={"type": "premium"})

        assert response.status_code == 400
        assert response.json()["error"]["param"] == "type"
