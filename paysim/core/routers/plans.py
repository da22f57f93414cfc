from typing import Any

from fastapi import APIRouter

from paysim.core.dependencies import AccountId, Params, SimulatorDep

router = APIRouter(prefix="/plans")


@router.post("", summary="Create a plan")
async def create_plan(
    simulator: SimulatorDep, account_id: AccountId, params: Params
) -> dict[str, Any]:
    return simulator.plans.create(account_id, params)


@router.get("", summary="List plans")
async def list_plans(
    simulator: SimulatorDep, account_id: AccountId, params: Params
) -> dict[str, Any]:
    return simulator.plans.list(account_id, params)


@router.get("/{plan_id}", summary="Retrieve a plan")
async def retrieve_plan(
    plan_id: str, simulator: SimulatorDep, account_id: AccountId, params: Params
) -> dict[str, Any]:
    plan = simulator.plans.retrieve(account_id, plan_id)
    return simulator.plans.expand(account_id, plan, params.get("expand"))
