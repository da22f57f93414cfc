"""
Pytest configuration and core fixtures.

Every test gets its own ``Simulator`` wired to a ``ManualTaskScheduler`` (delayed
effects run only when the test advances the clock) and an httpx mock transport
that records webhook deliveries instead of sending them.
"""

import json
import os
from typing import AsyncGenerator

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_DIR", "logs/test")

from paysim.core.simulator import Simulator  # noqa: E402
from paysim.infrastructure.scheduler import ManualTaskScheduler  # noqa: E402
from paysim.main import create_app  # noqa: E402


class WebhookRecorder:
    """httpx mock transport handler that records every delivery."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.status_code = 200

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code)

    def events(self, event_type: str | None = None) -> list[dict]:
        """Decoded event envelopes, optionally filtered by type."""
        events = [json.loads(request.content) for request in self.requests]
        if event_type is None:
            return events
        return [event for event in events if event["type"] == event_type]

    def event_types(self) -> list[str]:
        return [event["type"] for event in self.events()]


@pytest.fixture
def scheduler() -> ManualTaskScheduler:
    return ManualTaskScheduler()


@pytest.fixture
def webhook_recorder() -> WebhookRecorder:
    return WebhookRecorder()


@pytest.fixture
async def simulator(
    scheduler: ManualTaskScheduler, webhook_recorder: WebhookRecorder
) -> AsyncGenerator[Simulator, None]:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(webhook_recorder))
    sim = Simulator(scheduler=scheduler, http_client=http_client)
    yield sim
    await sim.aclose()


@pytest.fixture
def account_id(simulator: Simulator) -> str:
    """The platform account."""
    return simulator.accounts.platform_account_id


@pytest.fixture
def app(simulator: Simulator):
    return create_app(simulator)


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac


@pytest.fixture
def webhook_endpoint(simulator: Simulator, account_id: str) -> dict:
    """A wildcard endpoint with a known secret."""
    return simulator.webhooks.create(
        account_id,
        {
            "id": "we_test",
            "url": "https://hooks.example.com/stripe",
            "enabled_events": ["*"],
            "secret": "whsec_test_secret",
        },
    )


@pytest.fixture
def customer(simulator: Simulator, account_id: str) -> dict:
    """A customer saved with a Visa card."""
    return simulator.customers.create(
        account_id, {"email": "jane@example.com", "source": "tok_visa"}
    )


@pytest.fixture
def monthly_price(simulator: Simulator, account_id: str) -> dict:
    return simulator.prices.create(
        account_id,
        {
            "currency": "usd",
            "unit_amount": 1000,
            "recurring": {"interval": "month"},
            "product_data": {"name": "Basic"},
        },
    )


@pytest.fixture
def yearly_price(simulator: Simulator, account_id: str) -> dict:
    return simulator.prices.create(
        account_id,
        {
            "currency": "usd",
            "unit_amount": 10000,
            "recurring": {"interval": "year"},
            "product_data": {"name": "Annual"},
        },
    )
