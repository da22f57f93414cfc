"""
Webhook endpoint registration.

Events are POSTed to every endpoint of the account whose `enabled_events`
contains the event type or `*`, signed in the `Stripe-Signature` header.
"""

from typing import Any

from fastapi import APIRouter

from paysim.core.dependencies import AccountId, Params, SimulatorDep

router = APIRouter(prefix="/webhook_endpoints")


@router.post(
    "",
    summary="Register a webhook endpoint",
    description="""
Registers `url` for `enabled_events` (`*` for every event).

Test back door: `id` and `secret` may be supplied so the receiver can verify
signatures with a known secret.
    """,
)
async def create_webhook_endpoint(
    simulator: SimulatorDep, account_id: AccountId, params: Params
) -> dict[str, Any]:
    return simulator.webhooks.create(account_id, params)


@router.get("", summary="List webhook endpoints")
async def list_webhook_endpoints(
    simulator: SimulatorDep, account_id: AccountId, params: Params
) -> dict[str, Any]:
    return simulator.webhooks.list(account_id, params)


@router.get("/{endpoint_id}", summary="Retrieve a webhook endpoint")
async def retrieve_webhook_endpoint(
    endpoint_id: str, simulator: SimulatorDep, account_id: AccountId
) -> dict[str, Any]:
    return simulator.webhooks.retrieve(account_id, endpoint_id)
