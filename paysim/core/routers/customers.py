from typing import Any

from fastapi import APIRouter

from paysim.core.dependencies import AccountId, Params, SimulatorDep

router = APIRouter(prefix="/customers")


@router.post("", summary="Create a customer")
async def create_customer(
    simulator: SimulatorDep, account_id: AccountId, params: Params
) -> dict[str, Any]:
    customer = simulator.customers.create(account_id, params)
    return simulator.customers.expand(account_id, customer, params.get("expand"))


@router.get("", summary="List customers")
async def list_customers(
    simulator: SimulatorDep, account_id: AccountId, params: Params
) -> dict[str, Any]:
    return simulator.customers.list(account_id, params)


@router.get("/{customer_id}", summary="Retrieve a customer")
async def retrieve_customer(
    customer_id: str, simulator: SimulatorDep, account_id: AccountId, params: Params
) -> dict[str, Any]:
    customer = simulator.customers.retrieve(account_id, customer_id)
    return simulator.customers.expand(account_id, customer, params.get("expand"))


@router.post("/{customer_id}", summary="Update a customer")
async def update_customer(
    customer_id: str, simulator: SimulatorDep, account_id: AccountId, params: Params
) -> dict[str, Any]:
    customer = simulator.customers.update(account_id, customer_id, params)
    return simulator.customers.expand(account_id, customer, params.get("expand"))


@router.delete("/{customer_id}", summary="Delete a customer")
async def delete_customer(
    customer_id: str, simulator: SimulatorDep, account_id: AccountId
) -> dict[str, Any]:
    return simulator.customers.delete(account_id, customer_id)


@router.post("/{customer_id}/sources", summary="Save a card on a customer")
@router.post("/{customer_id}/cards", include_in_schema=False)
async def create_customer_card(
    customer_id: str, simulator: SimulatorDep, account_id: AccountId, params: Params
) -> dict[str, Any]:
    return simulator.customers.create_card(account_id, customer_id, params)


@router.get("/{customer_id}/sources/{card_id}", summary="Retrieve a customer's card")
@router.get("/{customer_id}/cards/{card_id}", include_in_schema=False)
async def retrieve_customer_card(
    customer_id: str, card_id: str, simulator: SimulatorDep, account_id: AccountId
) -> dict[str, Any]:
    return simulator.customers.retrieve_card(account_id, customer_id, card_id, "id")


@router.delete("/{customer_id}/sources/{card_id}", summary="Remove a customer's card")
@router.delete("/{customer_id}/cards/{card_id}", include_in_schema=False)
async def delete_customer_card(
    customer_id: str, card_id: str, simulator: SimulatorDep, account_id: AccountId
) -> dict[str, Any]:
    return simulator.customers.delete_card(account_id, customer_id, card_id)
