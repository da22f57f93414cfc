"""
Test suite for webhook endpoints, event matching and signed delivery.

Run tests:
    pytest tests/core/services/test_webhooks.py -v
"""

import json
from unittest.mock import patch

import httpx
import pytest
import stripe

from paysim.core.exceptions.types import ValidationException
from paysim.core.services.webhooks import (
    build_event,
    compute_signature,
    matches_event,
    signature_header,
)


class TestMatching:

    def test_wildcard_matches_everything(self):
        assert matches_event(["*"], "charge.succeeded")
        assert matches_event(["*"], "invoice.paid")

    def test_exact_match(self):
        assert matches_event(["charge.succeeded", "charge.failed"], "charge.failed")

    def test_disjoint_sets_do_not_match(self):
        assert not matches_event(["invoice.paid"], "charge.succeeded")
        assert not matches_event([], "charge.succeeded")


class TestSignature:

    def test_header_format(self):
        payload = '{"a": 1}'
        header = signature_header(payload, "whsec_x", timestamp=1700000000)
        expected = compute_signature(payload, "whsec_x", 1700000000)
        assert header == f"t=1700000000,v1={expected}"

    def test_signature_verifies_with_client_library(self):
        payload = json.dumps(build_event({"id": "ch_1"}, "charge.succeeded", "2020-08-27"))
        header = signature_header(payload, "whsec_test_secret")

        event = stripe.Webhook.construct_event(payload, header, "whsec_test_secret")

        assert event["type"] == "charge.succeeded"

    def test_wrong_secret_fails_verification(self):
        payload = json.dumps(build_event({"id": "ch_1"}, "charge.succeeded", "2020-08-27"))
        header = signature_header(payload, "whsec_test_secret")

        with pytest.raises(stripe.SignatureVerificationError):
            stripe.Webhook.construct_event(payload, header, "whsec_other")


class TestBuildEvent:

    def test_envelope(self):
        event = build_event({"id": "ch_1"}, "charge.succeeded", "2020-08-27")

        assert event["id"].startswith("evt_")
        assert event["object"] == "event"
        assert event["type"] == "charge.succeeded"
        assert event["api_version"] == "2020-08-27"
        assert event["data"] == {"object": {"id": "ch_1"}}


class TestWebhookEndpoints:

    def test_create_generates_secret(self, simulator, account_id):
        endpoint = simulator.webhooks.create(
            account_id, {"url": "https://example.com/hook", "enabled_events": "*"}
        )

        assert endpoint["id"].startswith("we_")
        assert endpoint["secret"].startswith("whsec_")
        assert endpoint["enabled_events"] == ["*"]
        assert endpoint["status"] == "enabled"

    def test_seeded_id_and_secret(self, webhook_endpoint):
        assert webhook_endpoint["id"] == "we_test"
        assert webhook_endpoint["secret"] == "whsec_test_secret"

    @pytest.mark.parametrize("missing", ["url", "enabled_events"])
    def test_required_params(self, simulator, account_id, missing):
        params = {"url": "https://example.com/hook", "enabled_events": ["*"]}
        del params[missing]

        with pytest.raises(ValidationException) as exc_info:
            simulator.webhooks.create(account_id, params)
        assert exc_info.value.param == missing


class TestDelivery:

    @pytest.mark.asyncio
    async def test_delivery_is_signed(
        self, simulator, account_id, webhook_endpoint, scheduler, webhook_recorder
    ):
        simulator.webhooks.post(account_id, {"id": "ch_1", "object": "charge"}, "charge.succeeded")
        await scheduler.run_pending()

        [request] = webhook_recorder.requests
        assert str(request.url) == "https://hooks.example.com/stripe"
        assert request.headers["Content-Type"] == "application/json"

        event = stripe.Webhook.construct_event(
            request.content, request.headers["Stripe-Signature"], "whsec_test_secret"
        )
        assert event["data"]["object"]["id"] == "ch_1"

    @pytest.mark.asyncio
    async def test_nothing_is_sent_before_the_scheduler_runs(
        self, simulator, account_id, webhook_endpoint, webhook_recorder
    ):
        simulator.webhooks.post(account_id, {"id": "ch_1"}, "charge.succeeded")
        assert webhook_recorder.requests == []

    @pytest.mark.asyncio
    async def test_only_matching_endpoints_receive_events(
        self, simulator, account_id, scheduler, webhook_recorder
    ):
        simulator.webhooks.create(
            account_id,
            {"url": "https://a.example.com/", "enabled_events": ["charge.succeeded"]},
        )
        simulator.webhooks.create(
            account_id,
            {"url": "https://b.example.com/", "enabled_events": ["invoice.paid"]},
        )

        simulator.webhooks.post(account_id, {"id": "ch_1"}, "charge.succeeded")
        await scheduler.run_pending()

        assert [str(request.url) for request in webhook_recorder.requests] == [
            "https://a.example.com/"
        ]

    @pytest.mark.asyncio
    async def test_endpoints_of_other_accounts_are_skipped(
        self, simulator, account_id, webhook_endpoint, scheduler, webhook_recorder
    ):
        connected = simulator.accounts.create(account_id, {})
        simulator.webhooks.post(connected["id"], {"id": "ch_1"}, "charge.succeeded")
        await scheduler.run_pending()

        assert webhook_recorder.requests == []

    @pytest.mark.asyncio
    async def test_payload_is_snapshotted_when_posted(
        self, simulator, account_id, webhook_endpoint, scheduler, webhook_recorder
    ):
        record = {"id": "ch_1", "status": "succeeded"}
        simulator.webhooks.post(account_id, record, "charge.succeeded")
        record["status"] = "failed"
        await scheduler.run_pending()

        event = webhook_recorder.events()[0]
        assert event["data"]["object"]["status"] == "succeeded"

    @pytest.mark.asyncio
    async def test_failed_delivery_is_logged_not_raised(
        self, simulator, account_id, webhook_endpoint, webhook_recorder
    ):
        webhook_recorder.status_code = 500

        with patch("paysim.core.services.webhooks.webhook_logger") as mock_logger:
            delivered = await simulator.webhooks.deliver(
                account_id, json.dumps({"id": "ch_1"}), "charge.succeeded"
            )

            mock_logger.error.assert_called_once()

        assert delivered == 0

    @pytest.mark.asyncio
    async def test_transport_error_is_logged(self, simulator, account_id, webhook_endpoint):
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        await simulator.webhooks.http_client.aclose()
        simulator.webhooks.http_client = httpx.AsyncClient(
            transport=httpx.MockTransport(refuse)
        )

        with patch("paysim.core.services.webhooks.webhook_logger") as mock_logger:
            delivered = await simulator.webhooks.deliver(
                account_id, json.dumps({"id": "ch_1"}), "charge.succeeded"
            )

            mock_logger.error.assert_called_once()

        assert delivered == 0
