"""
Cards synthesized from source tokens.

Every card created from a persistent token remembers the token it came from, so a later charge against the saved card replays the token's
outcome (a customer saved with ``tok_chargeDeclined`` keeps getting declined).
"""

from datetime import datetime, timezone

from paysim.core.config import token_logger
from paysim.core.services import tokens
from paysim.core.services.base import ResourceService
from paysim.core.utils import generate_id


class CardService(ResourceService):
    """
    Card synthesis plus the card store used by customers.

    ``create_from_source`` only builds the card; customers put it in ``store``
    when attaching it, charges embed it directly.
    """

    kind = "card"
    id_prefix = "card_"
    id_length = 24
    label = "card"

    def __init__(self, simulator):
        super().__init__(simulator)
        self._source_tokens: dict[str, str] = {}

    def create_from_source(self, token: str, customer_id: str | None = None) -> dict:
        """
        Build a card object from a (possibly chained) source token.

        Raises:
            ValidationException: If the token is unknown.
        """
        token = tokens.get_effective_token(token)
        behavior = tokens.lookup(token)
        profile = tokens.card_profile(token)
        now = datetime.now(timezone.utc)

        card = {
            "id": f"{self.id_prefix}{generate_id(self.id_length)}",
            "object": "card",
            "address_city": None,
            "address_country": None,
            "address_line1": None,
            "address_line1_check": None,
            "address_line2": None,
            "address_state": None,
            "address_zip": None,
            "address_zip_check": None,
            "brand": profile.brand,
            "country": profile.country,
            "customer": customer_id,
            "cvc_check": None,
            "dynamic_last4": None,
            "exp_month": now.month,
            "exp_year": now.year + 1,
            "fingerprint": generate_id(16),
            "funding": profile.funding,
            "last4": profile.last4,
            "metadata": {},
            "name": None,
            "tokenization_method": None,
        }

        if behavior.persist:
            self._source_tokens[card["id"]] = token
        token_logger.debug(f"Card {card['id']} created from {token}")
        return card

    def source_token(self, card_id: str) -> str | None:
        """Token a card was created from, or ``None`` for ephemeral cards."""
        return self._source_tokens.get(card_id)


__all__ = ["CardService"]
