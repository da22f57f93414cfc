from typing import Any

from fastapi import APIRouter

from paysim.core.dependencies import AccountId, Params, SimulatorDep

router = APIRouter(prefix="/invoices")


@router.get(
    "/upcoming",
    summary="Preview the upcoming invoice",
    description="Preview the next invoice of a `subscription`, or of every subscription of a `customer`.",
)
async def upcoming_invoice(
    simulator: SimulatorDep, account_id: AccountId, params: Params
) -> dict[str, Any]:
    return simulator.invoices.upcoming(account_id, params)
