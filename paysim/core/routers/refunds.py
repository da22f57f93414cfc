from typing import Any

from fastapi import APIRouter

from paysim.core.dependencies import AccountId, Params, SimulatorDep

router = APIRouter(prefix="/refunds")


@router.post(
    "",
    summary="Refund a charge",
    description="Refunds `amount` of a `charge`, by default everything not yet refunded.",
)
async def create_refund(
    simulator: SimulatorDep, account_id: AccountId, params: Params
) -> dict[str, Any]:
    refund = simulator.refunds.create(account_id, params)
    return simulator.refunds.expand(account_id, refund, params.get("expand"))


@router.get("", summary="List refunds")
async def list_refunds(
    simulator: SimulatorDep, account_id: AccountId, params: Params
) -> dict[str, Any]:
    return simulator.refunds.list(account_id, params)


@router.get("/{refund_id}", summary="Retrieve a refund")
async def retrieve_refund(
    refund_id: str, simulator: SimulatorDep, account_id: AccountId, params: Params
) -> dict[str, Any]:
    refund = simulator.refunds.retrieve(account_id, refund_id)
    return simulator.refunds.expand(account_id, refund, params.get("expand"))
