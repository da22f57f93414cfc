from paysim.core.exceptions.types import (
    AppException,
    StripeErrorException,
    ValidationException,
    NotFoundException,
    ConflictException,
    CardException,
    RateLimitException,
    APIException,
)

__all__ = [
    "AppException",
    "StripeErrorException",
    "ValidationException",
    "NotFoundException",
    "ConflictException",
    "CardException",
    "RateLimitException",
    "APIException",
]
