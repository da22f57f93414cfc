from typing import Any

from fastapi import APIRouter

from paysim.core.dependencies import AccountId, Params, SimulatorDep

router = APIRouter(prefix="/products")


@router.post("", summary="Create a product")
async def create_product(
    simulator: SimulatorDep, account_id: AccountId, params: Params
) -> dict[str, Any]:
    return simulator.products.create(account_id, params)


@router.get("", summary="List products")
async def list_products(
    simulator: SimulatorDep, account_id: AccountId, params: Params
) -> dict[str, Any]:
    return simulator.products.list(account_id, params)


@router.get("/{product_id}", summary="Retrieve a product")
async def retrieve_product(
    product_id: str, simulator: SimulatorDep, account_id: AccountId
) -> dict[str, Any]:
    return simulator.products.retrieve(account_id, product_id)
