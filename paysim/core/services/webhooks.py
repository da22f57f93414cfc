"""
Webhook endpoints and event delivery.

Endpoints are registered per account. ``WebhookService.post`` hands an event to
the delayed task scheduler and returns immediately; at fire time every endpoint
of the account whose ``enabled_events`` match receives a signed envelope.

Delivery is best effort: transport errors and non-2xx responses are logged and
dropped, nothing is retried.
"""

import hashlib
import hmac
import json
from typing import TYPE_CHECKING, Any

import httpx

from paysim.core.config import webhook_logger
from paysim.core.schemas import WebhookEndpointCreate, parse_params
from paysim.core.services.base import ResourceService
from paysim.core.utils import generate_id, now_timestamp, stringify_metadata

if TYPE_CHECKING:
    from paysim.core.simulator import Simulator

WILDCARD_EVENT = "*"


def matches_event(enabled_events: list[str], event_type: str) -> bool:
    """True if an endpoint subscribed to ``enabled_events`` receives ``event_type``."""
    return WILDCARD_EVENT in enabled_events or event_type in enabled_events


def compute_signature(payload: str, secret: str, timestamp: int) -> str:
    """Hex HMAC-SHA256 of ``"<timestamp>.<payload>"`` keyed with the endpoint secret."""
    signed_payload = f"{timestamp}.{payload}"
    return hmac.new(
        secret.encode("utf-8"), signed_payload.encode("utf-8"), hashlib.sha256
    ).hexdigest()


def signature_header(payload: str, secret: str, timestamp: int | None = None) -> str:
    """
    Build the signature header value verified by the official client libraries.

    Returns:
        str: ``"t=<timestamp>,v1=<signature>"``.
    """
    timestamp = now_timestamp() if timestamp is None else timestamp
    return f"t={timestamp},v1={compute_signature(payload, secret, timestamp)}"


def build_event(data_object: dict, event_type: str, api_version: str) -> dict[str, Any]:
    """Wrap a resource snapshot in an event envelope."""
    return {
        "id": f"evt_{generate_id(24)}",
        "object": "event",
        "api_version": api_version,
        "created": now_timestamp(),
        "data": {"object": data_object},
        "livemode": False,
        "pending_webhooks": 0,
        "request": {
            "id": f"req_{generate_id(14)}",
            "idempotency_key": f"paysim-{generate_id(32)}",
        },
        "type": event_type,
    }


class WebhookService(ResourceService):
    kind = "webhook_endpoint"
    id_prefix = "we_"
    label = "webhook endpoint"
    list_url = "/v1/webhook_endpoints"

    def __init__(
        self, simulator: "Simulator", http_client: httpx.AsyncClient | None = None
    ):
        super().__init__(simulator)
        self.http_client = http_client or httpx.AsyncClient(
            timeout=simulator.settings.WEBHOOK_DELIVERY_TIMEOUT_SECONDS
        )

    # ------------------------------------------------------------------
    # Endpoint registry
    # ------------------------------------------------------------------

    def create(self, account_id: str, params: dict[str, Any]) -> dict:
        """
        Register a webhook endpoint.

        ``id`` and ``secret`` may be seeded so a test can sign/verify with a known
        secret.
        """
        body = parse_params(WebhookEndpointCreate, params)
        endpoint_id = self._new_id(account_id, body.id)

        endpoint = {
            "id": endpoint_id,
            "object": "webhook_endpoint",
            "api_version": body.api_version,
            "application": None,
            "created": now_timestamp(),
            "description": body.description,
            "enabled_events": body.enabled_events,
            "livemode": False,
            "metadata": stringify_metadata(body.metadata),
            "secret": body.secret or f"whsec_{generate_id(32)}",
            "status": "enabled",
            "url": body.url,
        }
        self.store.put(account_id, endpoint)
        webhook_logger.info(
            f"Webhook endpoint {endpoint_id} registered for {account_id}: "
            f"{endpoint['url']} {endpoint['enabled_events']}"
        )
        return endpoint

    def list(self, account_id: str, params: dict[str, Any]) -> dict:
        return self._paginate(account_id, self.store.get_all(account_id), params)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def post(
        self,
        account_id: str,
        payload: dict,
        event_type: str,
        delay: float = 0.0,
    ) -> None:
        """
        Schedule delivery of ``event_type`` carrying ``payload``.

        The payload is serialized now, so later mutations of the record don't
        leak into the event. Endpoints are looked up when the delivery fires.
        """
        data = json.dumps(payload)
        self.simulator.scheduler.schedule(
            delay, self.deliver, account_id, data, event_type, name=f"webhook:{event_type}"
        )
        webhook_logger.debug(f"Queued {event_type} for {account_id} in {delay}s")

    async def deliver(self, account_id: str, data: str, event_type: str) -> int:
        """
        Send ``event_type`` to every matching endpoint of the account.

        Returns:
            int: Number of endpoints that accepted the delivery.
        """
        delivered = 0
        for endpoint in self.store.get_all(account_id):
            if endpoint["status"] != "enabled":
                continue
            if not matches_event(endpoint["enabled_events"], event_type):
                continue
            if await self._send(endpoint, data, event_type):
                delivered += 1
        return delivered

    async def _send(self, endpoint: dict, data: str, event_type: str) -> bool:
        event = build_event(json.loads(data), event_type, self.settings.API_VERSION)
        body = json.dumps(event)
        timestamp = now_timestamp()
        header = signature_header(body, endpoint["secret"], timestamp)

        try:
            response = await self.http_client.post(
                endpoint["url"],
                content=body,
                headers={
                    "Content-Type": "application/json",
                    self.settings.WEBHOOK_SIGNATURE_HEADER: header,
                },
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            webhook_logger.error(
                f"Delivery of {event['id']} ({event_type}) to {endpoint['url']} "
                f"failed: {e}"
            )
            return False

        webhook_logger.info(
            f"Delivered {event['id']} ({event_type}) to {endpoint['url']} "
            f"[{response.status_code}]"
        )
        return True

    async def aclose(self) -> None:
        await self.http_client.aclose()


__all__ = [
    "WILDCARD_EVENT",
    "matches_event",
    "compute_signature",
    "signature_header",
    "build_event",
    "WebhookService",
]
