from fastapi import Request, status
from fastapi.responses import JSONResponse

from paysim.core.config import request_logger
from paysim.core.exceptions.types import (
    AppException,
    CardException,
    NotFoundException,
    StripeErrorException,
)
from paysim.core.logger import simulated


def _error_response(exc: StripeErrorException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.to_error()},
    )


async def card_exception_handler(request: Request, exc: CardException):
    """
    Handles card errors (declines) by returning the payment API error envelope.

    The failed charge has already been stored by the time this runs; the
    envelope carries its id in ``error.charge``.

    Args:
        request: The request object.
        exc (CardException): The card exception instance.

    Returns:
        JSONResponse: The error envelope with status code 402.
    """
    request_logger.info(
        f"CardException: {request.method} {request.url.path} "
        f"code={exc.code} decline_code={exc.decline_code} charge={exc.charge}"
    )
    return _error_response(exc)


async def not_found_exception_handler(request: Request, exc: NotFoundException):
    """
    Handles not found exceptions by returning the payment API error envelope.

    Args:
        request: The request object.
        exc (NotFoundException): The not found exception instance.

    Returns:
        JSONResponse: The error envelope with status code 404.
    """
    request_logger.info(f"NotFoundException: {request.url.path} - {exc}")
    return _error_response(exc)


async def stripe_error_exception_handler(
    request: Request, exc: StripeErrorException
):
    """
    Handles the remaining payment API errors (validation, conflict, rate limit,
    simulated server faults).

    Args:
        request: The request object.
        exc (StripeErrorException): The exception instance.

    Returns:
        JSONResponse: The error envelope with the exception's status code.
    """
    if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        request_logger.error(
            f"{type(exc).__name__}: {request.url.path} - {exc}",
            **simulated(status_code=exc.status_code),
        )
    else:
        request_logger.warning(f"{type(exc).__name__}: {request.url.path} - {exc}")
    return _error_response(exc)


async def general_exception_handler(request: Request, exc: AppException):
    """
    Handles any other application exception.

    Args:
        request: The request object.
        exc (AppException): The exception instance.

    Returns:
        JSONResponse: An ``api_error`` envelope with the exception's status code.
    """
    request_logger.error(f"GeneralException: {exc}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": {"type": "api_error", "message": str(exc)}},
    )


exception_schema = {
    status.HTTP_400_BAD_REQUEST: {
        "description": "Invalid request",
        "content": {
            "application/json": {
                "example": {
                    "error": {
                        "type": "invalid_request_error",
                        "code": "parameter_missing",
                        "message": "Missing required param: amount.",
                        "param": "amount",
                    }
                },
            }
        },
    },
    status.HTTP_402_PAYMENT_REQUIRED: {
        "description": "Card declined",
        "content": {
            "application/json": {
                "example": {
                    "error": {
                        "type": "card_error",
                        "code": "card_declined",
                        "decline_code": "generic_decline",
                        "message": "Your card was declined.",
                        "charge": "ch_1EAzmvHLkzTFyw8axHPxVk3a",
                    }
                },
            }
        },
    },
    status.HTTP_404_NOT_FOUND: {
        "description": "Resource missing",
        "content": {
            "application/json": {
                "example": {
                    "error": {
                        "type": "invalid_request_error",
                        "code": "resource_missing",
                        "message": "No such charge: ch_123",
                        "param": "id",
                    }
                },
            }
        },
    },
    status.HTTP_429_TOO_MANY_REQUESTS: {
        "description": "Rate Limit Exceeded",
        "content": {
            "application/json": {
                "example": {
                    "error": {
                        "type": "rate_limit_error",
                        "code": "rate_limit",
                        "message": "Too many requests in a period of time.",
                    }
                },
            }
        },
    },
    status.HTTP_500_INTERNAL_SERVER_ERROR: {
        "description": "Simulated server error",
        "content": {
            "application/json": {
                "example": {
                    "error": {
                        "type": "api_error",
                        "message": "An unknown error occurred",
                    }
                },
            }
        },
    },
}


__all__ = [
    "card_exception_handler",
    "not_found_exception_handler",
    "stripe_error_exception_handler",
    "general_exception_handler",
    "exception_schema",
]
