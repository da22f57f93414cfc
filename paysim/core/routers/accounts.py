from typing import Any

from fastapi import APIRouter

from paysim.core.dependencies import AccountId, Params, SimulatorDep

router = APIRouter(prefix="/accounts")


@router.post(
    "",
    summary="Create a connected account",
    description="""
Creates a connected account under the platform account. Send its id in the
`Stripe-Account` header to operate inside it.
    """,
)
async def create_account(
    simulator: SimulatorDep, account_id: AccountId, params: Params
) -> dict[str, Any]:
    return simulator.accounts.create(account_id, params)


@router.get("", summary="List connected accounts")
async def list_accounts(
    simulator: SimulatorDep, account_id: AccountId, params: Params
) -> dict[str, Any]:
    return simulator.accounts.list(account_id, params)


@router.get("/{connected_account_id}", summary="Retrieve an account")
async def retrieve_account(
    connected_account_id: str, simulator: SimulatorDep, account_id: AccountId
) -> dict[str, Any]:
    return simulator.accounts.retrieve(account_id, connected_account_id)


@router.delete("/{connected_account_id}", summary="Delete a connected account")
async def delete_account(
    connected_account_id: str, simulator: SimulatorDep, account_id: AccountId
) -> dict[str, Any]:
    return simulator.accounts.delete(account_id, connected_account_id)
