"""
FastAPI dependencies shared by the resource routers.

- ``SimulatorDep``: the application's ``Simulator``
- ``AccountId``: the account a request operates in (``Stripe-Account`` header)
- ``Params``: request params decoded from the query string and the body
"""

from typing import Annotated, Any
from urllib.parse import parse_qsl

from fastapi import Depends, Header, Request

from paysim.core.config import request_logger
from paysim.core.exceptions.types import ValidationException
from paysim.core.simulator import Simulator
from paysim.core.utils import unflatten_form


def get_simulator(request: Request) -> Simulator:
    return request.app.state.simulator


SimulatorDep = Annotated[Simulator, Depends(get_simulator)]


def get_account_id(
    simulator: SimulatorDep,
    stripe_account: Annotated[str | None, Header(alias="Stripe-Account")] = None,
) -> str:
    """
    Resolve the account a request runs as.

    Without a ``Stripe-Account`` header that is the platform account; with one,
    the connected account must exist under the platform.

    Raises:
        NotFoundException: If the connected account is unknown.
    """
    if not stripe_account:
        return simulator.accounts.platform_account_id
    return simulator.accounts.ensure_accessible(stripe_account)


AccountId = Annotated[str, Depends(get_account_id)]


async def get_params(request: Request) -> dict[str, Any]:
    """
    Decode request params.

    Query strings and form bodies use bracket notation
    (``items[0][price]=price_1``, ``expand[]=customer``); JSON bodies are taken
    as-is. Body params override query params of the same name.

    Raises:
        ValidationException: If a JSON body is malformed or not an object.
    """
    params = unflatten_form(request.query_params.multi_items())

    body = await request.body()
    if not body:
        return params

    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            payload = await request.json()
        except ValueError:
            request_logger.warning(f"Malformed JSON body on {request.url.path}")
            raise ValidationException("Invalid JSON body.", code="parameter_invalid")
        if not isinstance(payload, dict):
            raise ValidationException("Request body must be a JSON object.")
        params.update(payload)
    else:
        form = parse_qsl(body.decode("utf-8"), keep_blank_values=True)
        params.update(unflatten_form(form))
    return params


Params = Annotated[dict[str, Any], Depends(get_params)]

__all__ = [
    "get_simulator",
    "get_account_id",
    "get_params",
    "SimulatorDep",
    "AccountId",
    "Params",
]
