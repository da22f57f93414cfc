"""
Test suite for request decoding and routing edge cases shared by every endpoint.

Run tests:
    pytest tests/core/routers/test_requests.py -v
"""

import pytest


class TestRequestDecoding:

    @pytest.mark.asyncio
    async def test_malformed_json_body(self, client):
        response = await client.post(
            "/v1/customers",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["error"]["type"] == "invalid_request_error"

    @pytest.mark.asyncio
    async def test_json_body_must_be_object(self, client):
        response = await client.post("/v1/customers", json=["a", "b"])

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_query_params_on_post(self, client):
        response = await client.post(
            "/v1/customers", params={"email": "query@example.com"}
        )

        assert response.json()["email"] == "query@example.com"

    @pytest.mark.asyncio
    async def test_body_overrides_query(self, client):
        response = await client.post(
            "/v1/customers",
            params={"email": "query@example.com"},
            data={"email": "body@example.com"},
        )

        assert response.json()["email"] == "body@example.com"

    @pytest.mark.asyncio
    async def test_invalid_limit(self, client):
        response = await client.get("/v1/customers", params={"limit": "500"})

        assert response.status_code == 400
        assert response.json()["error"]["param"] == "limit"


class TestUnmatchedPaths:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method", ["GET", "POST", "DELETE"])
    async def test_unknown_path(self, client, method):
        response = await client.request(method, "/v1/unicorns")

        assert response.status_code == 404
        error = response.json()["error"]
        assert error["type"] == "invalid_request_error"
        assert error["message"] == "No matching path: /v1/unicorns"
