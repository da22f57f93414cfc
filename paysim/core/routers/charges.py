"""
Charge endpoints.

Magic source tokens select the outcome; see the token table in the API
description.
"""

from typing import Any

from fastapi import APIRouter

from paysim.core.dependencies import AccountId, Params, SimulatorDep

router = APIRouter(prefix="/charges")


@router.post(
    "",
    summary="Create a charge",
    description="""
Charges a card given as a `source` token (or token chain such as
`tok_visa|tok_chargeDeclined`) or a customer's saved card.

Declining tokens store a failed charge and answer `402` with a `card_error`
whose `charge` field holds the failed charge id.
    """,
)
async def create_charge(
    simulator: SimulatorDep, account_id: AccountId, params: Params
) -> dict[str, Any]:
    charge = simulator.charges.create(account_id, params)
    return simulator.charges.expand(account_id, charge, params.get("expand"))


@router.get("", summary="List charges")
async def list_charges(
    simulator: SimulatorDep, account_id: AccountId, params: Params
) -> dict[str, Any]:
    return simulator.charges.list(account_id, params)


@router.get("/{charge_id}", summary="Retrieve a charge")
async def retrieve_charge(
    charge_id: str, simulator: SimulatorDep, account_id: AccountId, params: Params
) -> dict[str, Any]:
    charge = simulator.charges.retrieve(account_id, charge_id)
    return simulator.charges.expand(account_id, charge, params.get("expand"))


@router.post("/{charge_id}", summary="Update a charge")
async def update_charge(
    charge_id: str, simulator: SimulatorDep, account_id: AccountId, params: Params
) -> dict[str, Any]:
    charge = simulator.charges.update(account_id, charge_id, params)
    return simulator.charges.expand(account_id, charge, params.get("expand"))


@router.post(
    "/{charge_id}/capture",
    summary="Capture a charge",
    description="""
Captures a charge created with `capture=false`. Capturing less than the
authorized `amount` refunds the difference.
    """,
)
async def capture_charge(
    charge_id: str, simulator: SimulatorDep, account_id: AccountId, params: Params
) -> dict[str, Any]:
    charge = simulator.charges.capture(account_id, charge_id, params)
    return simulator.charges.expand(account_id, charge, params.get("expand"))


@router.get("/{charge_id}/refunds", summary="List the refunds of a charge")
async def list_charge_refunds(
    charge_id: str, simulator: SimulatorDep, account_id: AccountId, params: Params
) -> dict[str, Any]:
    simulator.charges.retrieve(account_id, charge_id, "charge")
    return simulator.refunds.list(account_id, {**params, "charge": charge_id})
