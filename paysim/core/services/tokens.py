"""
Magic test tokens and the behaviour they select.

Every known token maps to a ``TokenBehavior``: the card it produces, an optional
transport-level fault raised before anything is created, and an optional
outcome applied to the charge after it has been stored. New tokens are new
table rows; the charge flow in ``charges.py`` only interprets the variants.

Token chains (``tok_visa|tok_chargeDeclined``) describe several presentments in
one string. A chain is reduced to a single effective token before either gate
runs: the member with the highest behaviour class wins (transport fault, then
decline, then follow-up effects, then plain cards) and ties go to the last
member.
"""

from dataclasses import dataclass
from typing import Any

from paysim.core.config import token_logger
from paysim.core.exceptions.types import (
    APIException,
    CardException,
    RateLimitException,
    StripeErrorException,
    ValidationException,
)

TOKEN_CHAIN_DELIMITER = "|"

# Card brand as shown on card objects -> brand code used in payment_method_details
BRAND_CODES: dict[str, str] = {
    "Visa": "visa",
    "American Express": "amex",
    "MasterCard": "mastercard",
    "Discover": "discover",
    "JCB": "jcb",
    "Diners Club": "diners",
    "Unknown": "unknown",
}


@dataclass(frozen=True)
class CardProfile:
    brand: str
    last4: str
    country: str = "US"
    funding: str = "credit"


@dataclass(frozen=True)
class TransportFault:
    """Fails the request before any record is created."""

    kind: str  # "rate_limit" | "server_error"

    def to_exception(self) -> StripeErrorException:
        if self.kind == "rate_limit":
            return RateLimitException()
        return APIException()


@dataclass(frozen=True)
class Decline:
    """Marks the stored charge failed, then fails the request with a card error."""

    failure_code: str
    failure_message: str
    network_status: str
    reason: str
    risk_level: str
    risk_score: int
    seller_message: str
    outcome_type: str = "issuer_declined"
    decline_code: str | None = None
    param: str | None = None

    def outcome(self) -> dict[str, Any]:
        return {
            "network_status": self.network_status,
            "reason": self.reason,
            "risk_level": self.risk_level,
            "risk_score": self.risk_score,
            "seller_message": self.seller_message,
            "type": self.outcome_type,
        }

    def to_exception(self, charge_id: str) -> CardException:
        return CardException(
            self.failure_message,
            code=self.failure_code,
            decline_code=self.decline_code,
            param=self.param,
            charge=charge_id,
        )


@dataclass(frozen=True)
class ManualReview:
    """Charge succeeds but is flagged for review."""

    reason: str
    risk_level: str
    risk_score: int
    rule: str
    seller_message: str

    def outcome(self) -> dict[str, Any]:
        return {
            "network_status": "approved_by_network",
            "reason": self.reason,
            "risk_level": self.risk_level,
            "risk_score": self.risk_score,
            "rule": self.rule,
            "seller_message": self.seller_message,
            "type": "manual_review",
        }


@dataclass(frozen=True)
class DelayedDispute:
    """Charge succeeds; a dispute is opened against it shortly afterwards."""

    reason: str
    chargeback: bool = True


ChargeOutcome = Decline | ManualReview | DelayedDispute


@dataclass(frozen=True)
class TokenBehavior:
    card: CardProfile | None = None
    precharge: TransportFault | None = None
    outcome: ChargeOutcome | None = None
    persist: bool = True

    @property
    def priority(self) -> int:
        """Behaviour class used to reduce token chains."""
        if self.precharge is not None:
            return 3
        if isinstance(self.outcome, Decline):
            return 2
        if self.outcome is not None:
            return 1
        return 0


_GENERIC_DECLINE_MESSAGE = (
    "The bank did not return any further details with this decline."
)


TOKEN_BEHAVIORS: dict[str, TokenBehavior] = {
    "tok_429": TokenBehavior(precharge=TransportFault("rate_limit")),
    "tok_500": TokenBehavior(precharge=TransportFault("server_error")),
    "tok_visa": TokenBehavior(card=CardProfile("Visa", "4242")),
    "tok_visa_debit": TokenBehavior(card=CardProfile("Visa", "5556", funding="debit")),
    "tok_mastercard": TokenBehavior(card=CardProfile("MasterCard", "4444")),
    "tok_mastercard_debit": TokenBehavior(
        card=CardProfile("MasterCard", "3222", funding="debit")
    ),
    "tok_mastercard_prepaid": TokenBehavior(
        card=CardProfile("MasterCard", "5100", funding="prepaid")
    ),
    "tok_amex": TokenBehavior(card=CardProfile("American Express", "8431")),
    # CRTC approved.
    "tok_ca": TokenBehavior(card=CardProfile("Visa", "0000", country="CA")),
    "tok_chargeCustomerFail": TokenBehavior(
        card=CardProfile("Visa", "0341"),
        outcome=Decline(
            failure_code="card_declined",
            failure_message="Your card was declined.",
            network_status="declined_by_network",
            reason="generic_decline",
            risk_level="normal",
            risk_score=4,
            seller_message=_GENERIC_DECLINE_MESSAGE,
            decline_code="generic_decline",
        ),
    ),
    "tok_riskLevelElevated": TokenBehavior(
        card=CardProfile("Visa", "9235"),
        outcome=ManualReview(
            reason="elevated_risk_level",
            risk_level="elevated",
            risk_score=74,
            rule="manual_review_if_elevated_risk",
            seller_message=(
                "Stripe evaluated this payment as having elevated risk, "
                "and placed it in your manual review queue."
            ),
        ),
    ),
    "tok_chargeDeclined": TokenBehavior(
        card=CardProfile("Visa", "0002"),
        outcome=Decline(
            failure_code="card_declined",
            failure_message="Your card was declined.",
            network_status="declined_by_network",
            reason="generic_decline",
            risk_level="normal",
            risk_score=63,
            seller_message=_GENERIC_DECLINE_MESSAGE,
            decline_code="generic_decline",
        ),
    ),
    "tok_chargeDeclinedInsufficientFunds": TokenBehavior(
        card=CardProfile("Visa", "9995"),
        outcome=Decline(
            failure_code="card_declined",
            failure_message="Your card has insufficient funds.",
            network_status="declined_by_network",
            reason="generic_decline",
            risk_level="normal",
            risk_score=63,
            seller_message=_GENERIC_DECLINE_MESSAGE,
            decline_code="insufficient_funds",
        ),
    ),
    "tok_chargeDeclinedFraudulent": TokenBehavior(
        card=CardProfile("Visa", "0019"),
        outcome=Decline(
            failure_code="card_declined",
            failure_message="Your card was declined.",
            network_status="not_sent_to_network",
            reason="merchant_blacklist",
            risk_level="highest",
            risk_score=79,
            seller_message="Stripe blocked this payment.",
            outcome_type="blocked",
            decline_code="fraudulent",
        ),
    ),
    "tok_chargeDeclinedIncorrectCvc": TokenBehavior(
        card=CardProfile("Visa", "0127"),
        outcome=Decline(
            failure_code="incorrect_cvc",
            failure_message="Your card's security code is incorrect.",
            network_status="declined_by_network",
            reason="incorrect_cvc",
            risk_level="normal",
            risk_score=63,
            seller_message="The bank returned the decline code `incorrect_cvc`.",
            param="cvc",
        ),
    ),
    "tok_chargeDeclinedExpiredCard": TokenBehavior(
        card=CardProfile("Visa", "0069"),
        outcome=Decline(
            failure_code="expired_card",
            failure_message="Your card has expired.",
            network_status="declined_by_network",
            reason="expired_card",
            risk_level="normal",
            risk_score=63,
            seller_message="The bank returned the decline code `expired_card`.",
            param="exp_month",
        ),
    ),
    "tok_chargeDeclinedProcessingError": TokenBehavior(
        card=CardProfile("Visa", "0119"),
        outcome=Decline(
            failure_code="processing_error",
            failure_message=(
                "An error occurred while processing your card. "
                "Try again in a little bit."
            ),
            network_status="declined_by_network",
            reason="processing_error",
            risk_level="normal",
            risk_score=47,
            seller_message="The bank returned the decline code `processing_error`.",
        ),
    ),
    "tok_createDispute": TokenBehavior(
        card=CardProfile("Visa", "0259"),
        outcome=DelayedDispute(reason="fraudulent"),
    ),
    "tok_createDisputeProductNotReceived": TokenBehavior(
        card=CardProfile("Visa", "2685"),
        outcome=DelayedDispute(reason="product_not_received"),
    ),
    "tok_createDisputeInquiry": TokenBehavior(
        card=CardProfile("Visa", "1976"),
        outcome=DelayedDispute(reason="general", chargeback=False),
    ),
    # Unofficial: the card and any charge made directly from it are not kept.
    "tok_forget": TokenBehavior(card=CardProfile("Visa", "1982"), persist=False),
}

# last4 -> brand code, for payment methods created from raw card numbers
_BRANDS_BY_LAST4: dict[str, str] = {
    behavior.card.last4: BRAND_CODES[behavior.card.brand]
    for behavior in TOKEN_BEHAVIORS.values()
    if behavior.card is not None
}


def _unknown_token(token: str) -> ValidationException:
    return ValidationException(
        f"No such token: '{token}'", code="resource_missing", param="source"
    )


def lookup(token: str) -> TokenBehavior:
    """
    Return the behaviour of a single (non-chain) token.

    Raises:
        ValidationException: If the token is unknown.
    """
    behavior = TOKEN_BEHAVIORS.get(token)
    if behavior is None:
        token_logger.warning(f"Unknown source token '{token}'")
        raise _unknown_token(token)
    return behavior


def is_token_chain(token: str) -> bool:
    return TOKEN_CHAIN_DELIMITER in token


def get_effective_token(token: str) -> str:
    """
    Reduce a token chain to the single token whose behaviour applies.

    Non-chain tokens are returned unchanged, so the reduction is idempotent.

    Raises:
        ValidationException: If the chain is empty or contains an unknown token.
    """
    if not is_token_chain(token):
        return token

    members = [part.strip() for part in token.split(TOKEN_CHAIN_DELIMITER)]
    members = [part for part in members if part]
    if not members:
        raise _unknown_token(token)

    effective = members[0]
    effective_priority = lookup(effective).priority
    for member in members[1:]:
        priority = lookup(member).priority
        if priority >= effective_priority:
            effective, effective_priority = member, priority

    token_logger.debug(f"Token chain '{token}' reduced to '{effective}'")
    return effective


def check_precharge(token: Any) -> None:
    """
    Raise the transport fault selected by ``token``, if any.

    Non-string values (card ids, missing sources) and unknown tokens pass
    through; they are dealt with later in the charge flow.
    """
    if not isinstance(token, str):
        return
    behavior = TOKEN_BEHAVIORS.get(token)
    if behavior is not None and behavior.precharge is not None:
        token_logger.info(f"Precharge fault '{behavior.precharge.kind}' for {token}")
        raise behavior.precharge.to_exception()


def card_profile(token: str) -> CardProfile:
    """
    Card attributes for a token.

    Raises:
        ValidationException: If the token is unknown or produces no card.
    """
    behavior = lookup(token)
    if behavior.card is None:
        raise _unknown_token(token)
    return behavior.card


def charge_outcome(token: str | None) -> ChargeOutcome | None:
    """Post-charge outcome for a token; ``None`` for plain or unknown tokens."""
    if not token:
        return None
    behavior = TOKEN_BEHAVIORS.get(token)
    return behavior.outcome if behavior is not None else None


def card_brand_from_number(card_number: str) -> str:
    """
    Brand code of a test card number, keyed on its last four digits.

    Raises:
        ValidationException: If the number is not one of the simulated cards.
    """
    brand = _BRANDS_BY_LAST4.get(str(card_number)[-4:])
    if brand is None:
        raise ValidationException(
            f"Unknown card brand for card number: '{card_number}'",
            code="invalid_number",
            param="card[number]",
        )
    return brand


__all__ = [
    "TOKEN_CHAIN_DELIMITER",
    "BRAND_CODES",
    "CardProfile",
    "TransportFault",
    "Decline",
    "ManualReview",
    "DelayedDispute",
    "ChargeOutcome",
    "TokenBehavior",
    "TOKEN_BEHAVIORS",
    "lookup",
    "is_token_chain",
    "get_effective_token",
    "check_precharge",
    "card_profile",
    "charge_outcome",
    "card_brand_from_number",
]
