from typing import Any

from fastapi import APIRouter

from paysim.core.dependencies import AccountId, Params, SimulatorDep

router = APIRouter(prefix="/prices")


@router.post("", summary="Create a price")
async def create_price(
    simulator: SimulatorDep, account_id: AccountId, params: Params
) -> dict[str, Any]:
    price = simulator.prices.create(account_id, params)
    return simulator.prices.expand(account_id, price, params.get("expand"))


@router.get("", summary="List prices")
async def list_prices(
    simulator: SimulatorDep, account_id: AccountId, params: Params
) -> dict[str, Any]:
    return simulator.prices.list(account_id, params)


@router.get("/{price_id}", summary="Retrieve a price")
async def retrieve_price(
    price_id: str, simulator: SimulatorDep, account_id: AccountId, params: Params
) -> dict[str, Any]:
    price = simulator.prices.retrieve(account_id, price_id)
    return simulator.prices.expand(account_id, price, params.get("expand"))


@router.post("/{price_id}", summary="Update a price")
async def update_price(
    price_id: str, simulator: SimulatorDep, account_id: AccountId, params: Params
) -> dict[str, Any]:
    price = simulator.prices.update(account_id, price_id, params)
    return simulator.prices.expand(account_id, price, params.get("expand"))
