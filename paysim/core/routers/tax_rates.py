from typing import Any

from fastapi import APIRouter

from paysim.core.dependencies import AccountId, Params, SimulatorDep

router = APIRouter(prefix="/tax_rates")


@router.post("", summary="Create a tax rate")
async def create_tax_rate(
    simulator: SimulatorDep, account_id: AccountId, params: Params
) -> dict[str, Any]:
    return simulator.tax_rates.create(account_id, params)


@router.get("", summary="List tax rates")
async def list_tax_rates(
    simulator: SimulatorDep, account_id: AccountId, params: Params
) -> dict[str, Any]:
    return simulator.tax_rates.list(account_id, params)


@router.get("/{tax_rate_id}", summary="Retrieve a tax rate")
async def retrieve_tax_rate(
    tax_rate_id: str, simulator: SimulatorDep, account_id: AccountId
) -> dict[str, Any]:
    return simulator.tax_rates.retrieve(account_id, tax_rate_id)


@router.post("/{tax_rate_id}", summary="Update a tax rate")
async def update_tax_rate(
    tax_rate_id: str, simulator: SimulatorDep, account_id: AccountId, params: Params
) -> dict[str, Any]:
    return simulator.tax_rates.update(account_id, tax_rate_id, params)
