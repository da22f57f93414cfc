from typing import Any

from fastapi import APIRouter

from paysim.core.dependencies import AccountId, Params, SimulatorDep

router = APIRouter(prefix="/subscription_items")


@router.get("", summary="List the items of a subscription")
async def list_subscription_items(
    simulator: SimulatorDep, account_id: AccountId, params: Params
) -> dict[str, Any]:
    return simulator.subscriptions.list_items(account_id, params)


@router.get("/{item_id}", summary="Retrieve a subscription item")
async def retrieve_subscription_item(
    item_id: str, simulator: SimulatorDep, account_id: AccountId, params: Params
) -> dict[str, Any]:
    item = simulator.subscriptions.retrieve_item(account_id, item_id)
    return simulator.subscriptions.expand_item(account_id, item, params.get("expand"))


@router.post(
    "/{item_id}",
    summary="Update a subscription item",
    description="Changing the `price` re-derives the subscription's current period end.",
)
async def update_subscription_item(
    item_id: str, simulator: SimulatorDep, account_id: AccountId, params: Params
) -> dict[str, Any]:
    item = simulator.subscriptions.update_item(account_id, item_id, params)
    return simulator.subscriptions.expand_item(account_id, item, params.get("expand"))
