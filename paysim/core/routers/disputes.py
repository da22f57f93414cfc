from typing import Any

from fastapi import APIRouter

from paysim.core.dependencies import AccountId, Params, SimulatorDep

router = APIRouter(prefix="/disputes")


@router.get("/{dispute_id}", summary="Retrieve a dispute")
async def retrieve_dispute(
    dispute_id: str, simulator: SimulatorDep, account_id: AccountId, params: Params
) -> dict[str, Any]:
    dispute = simulator.disputes.retrieve(account_id, dispute_id)
    return simulator.disputes.expand(account_id, dispute, params.get("expand"))
