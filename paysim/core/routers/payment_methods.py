from typing import Any

from fastapi import APIRouter

from paysim.core.dependencies import AccountId, Params, SimulatorDep

router = APIRouter(prefix="/payment_methods")


@router.post("", summary="Create a payment method")
async def create_payment_method(
    simulator: SimulatorDep, account_id: AccountId, params: Params
) -> dict[str, Any]:
    return simulator.payment_methods.create(account_id, params)


@router.get("", summary="List payment methods")
async def list_payment_methods(
    simulator: SimulatorDep, account_id: AccountId, params: Params
) -> dict[str, Any]:
    return simulator.payment_methods.list(account_id, params)


@router.get("/{payment_method_id}", summary="Retrieve a payment method")
async def retrieve_payment_method(
    payment_method_id: str, simulator: SimulatorDep, account_id: AccountId, params: Params
) -> dict[str, Any]:
    payment_method = simulator.payment_methods.retrieve(account_id, payment_method_id)
    return simulator.payment_methods.expand(
        account_id, payment_method, params.get("expand")
    )


@router.post("/{payment_method_id}/attach", summary="Attach a payment method to a customer")
async def attach_payment_method(
    payment_method_id: str, simulator: SimulatorDep, account_id: AccountId, params: Params
) -> dict[str, Any]:
    return simulator.payment_methods.attach(account_id, payment_method_id, params)


@router.post("/{payment_method_id}/detach", summary="Detach a payment method")
async def detach_payment_method(
    payment_method_id: str, simulator: SimulatorDep, account_id: AccountId
) -> dict[str, Any]:
    return simulator.payment_methods.detach(account_id, payment_method_id)
