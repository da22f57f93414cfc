"""
Subscription endpoints.

Creating or updating a subscription emits `customer.subscription.created` /
`customer.subscription.updated` right away and `invoice.paid` a few seconds
later; deleting emits `customer.subscription.deleted`.
"""

from typing import Any

from fastapi import APIRouter

from paysim.core.dependencies import AccountId, Params, SimulatorDep

router = APIRouter(prefix="/subscriptions")


@router.post("", summary="Create a subscription")
async def create_subscription(
    simulator: SimulatorDep, account_id: AccountId, params: Params
) -> dict[str, Any]:
    subscription = simulator.subscriptions.create(account_id, params)
    return simulator.subscriptions.expand(account_id, subscription, params.get("expand"))


@router.get("", summary="List subscriptions")
async def list_subscriptions(
    simulator: SimulatorDep, account_id: AccountId, params: Params
) -> dict[str, Any]:
    return simulator.subscriptions.list(account_id, params)


@router.get("/{subscription_id}", summary="Retrieve a subscription")
async def retrieve_subscription(
    subscription_id: str, simulator: SimulatorDep, account_id: AccountId, params: Params
) -> dict[str, Any]:
    subscription = simulator.subscriptions.retrieve(account_id, subscription_id)
    return simulator.subscriptions.expand(account_id, subscription, params.get("expand"))


@router.post("/{subscription_id}", summary="Update a subscription")
async def update_subscription(
    subscription_id: str, simulator: SimulatorDep, account_id: AccountId, params: Params
) -> dict[str, Any]:
    subscription = simulator.subscriptions.update(account_id, subscription_id, params)
    return simulator.subscriptions.expand(account_id, subscription, params.get("expand"))


@router.delete("/{subscription_id}", summary="Cancel a subscription")
async def delete_subscription(
    subscription_id: str, simulator: SimulatorDep, account_id: AccountId
) -> dict[str, Any]:
    return simulator.subscriptions.delete(account_id, subscription_id)
