from typing import Any

from fastapi import status


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict | None = None,
    ):
        self.message = message
        self.status_code = status_code or status.HTTP_500_INTERNAL_SERVER_ERROR
        self.details = details
        super().__init__(message)


class StripeErrorException(AppException):
    """
    Base for errors rendered with the payment API error envelope.

    Carries the fields the real API puts in its ``error`` object so clients
    written against it can branch on ``type``/``code``/``decline_code``.
    """

    error_type: str = "api_error"

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        code: str | None = None,
        param: str | None = None,
        doc_url: str | None = None,
        decline_code: str | None = None,
        charge: str | None = None,
        error_type: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, status_code, details)
        self.code = code
        self.param = param
        self.doc_url = doc_url if doc_url is not None else _doc_url(code)
        self.decline_code = decline_code
        self.charge = charge
        if error_type is not None:
            self.error_type = error_type

    def to_error(self) -> dict[str, Any]:
        """Build the ``error`` object of the response envelope, omitting unset fields."""
        error: dict[str, Any] = {"type": self.error_type, "message": self.message}
        for key in ("code", "param", "doc_url", "decline_code", "charge"):
            value = getattr(self, key)
            if value is not None:
                error[key] = value
        return error


def _doc_url(code: str | None) -> str | None:
    if not code:
        return None
    return f"https://stripe.com/docs/error-codes/{code.replace('_', '-')}"


class ValidationException(StripeErrorException):
    """Exception raised for missing or invalid request parameters."""

    error_type = "invalid_request_error"

    def __init__(
        self,
        message: str = "Invalid request.",
        code: str | None = "parameter_invalid",
        param: str | None = None,
        **kwargs: Any,
    ):
        super().__init__(
            message, status.HTTP_400_BAD_REQUEST, code=code, param=param, **kwargs
        )


class NotFoundException(StripeErrorException):
    """Exception raised when a resource id is unknown in the current account."""

    error_type = "invalid_request_error"

    def __init__(
        self,
        message: str = "Resource not found.",
        param: str | None = None,
        code: str | None = "resource_missing",
        **kwargs: Any,
    ):
        super().__init__(
            message, status.HTTP_404_NOT_FOUND, code=code, param=param, **kwargs
        )


class ConflictException(StripeErrorException):
    """Exception raised when creating a resource whose id already exists."""

    error_type = "invalid_request_error"

    def __init__(self, message: str = "Resource already exists.", **kwargs: Any):
        super().__init__(
            message,
            status.HTTP_400_BAD_REQUEST,
            code="resource_already_exists",
            **kwargs,
        )


class CardException(StripeErrorException):
    """Exception raised for card errors (declined, incorrect CVC, expired, ...)."""

    error_type = "card_error"

    def __init__(
        self,
        message: str = "Your card was declined.",
        code: str | None = "card_declined",
        **kwargs: Any,
    ):
        super().__init__(message, status.HTTP_402_PAYMENT_REQUIRED, code=code, **kwargs)


class RateLimitException(StripeErrorException):
    """Exception raised when the simulated API rate limits a request."""

    error_type = "rate_limit_error"

    def __init__(
        self,
        message: str = "Too many requests in a period of time.",
        code: str | None = "rate_limit",
        **kwargs: Any,
    ):
        super().__init__(
            message, status.HTTP_429_TOO_MANY_REQUESTS, code=code, **kwargs
        )


class APIException(StripeErrorException):
    """Exception raised for a simulated backend fault."""

    error_type = "api_error"

    def __init__(
        self,
        message: str = "An unknown error occurred",
        code: str | None = None,
        **kwargs: Any,
    ):
        super().__init__(
            message, status.HTTP_500_INTERNAL_SERVER_ERROR, code=code, **kwargs
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
