"""
Test suite for exception handlers.

Run tests:
    pytest tests/core/exceptions/test_handlers.py -v
"""

import json
from unittest.mock import MagicMock, patch

import pytest
from fastapi import status

from paysim.core.exceptions.handlers import (
    card_exception_handler,
    exception_schema,
    general_exception_handler,
    not_found_exception_handler,
    stripe_error_exception_handler,
)
from paysim.core.exceptions.types import (
    APIException,
    AppException,
    CardException,
    NotFoundException,
    ValidationException,
)


def _body(response) -> dict:
    return json.loads(response.body)


class TestCardExceptionHandler:

    @pytest.mark.asyncio
    async def test_returns_402_envelope(self):
        mock_request = MagicMock()
        exc = CardException(
            "Your card was declined.", decline_code="generic_decline", charge="ch_1"
        )

        with patch("paysim.core.exceptions.handlers.request_logger") as mock_logger:
            response = await card_exception_handler(mock_request, exc)

            mock_logger.info.assert_called_once()

        assert response.status_code == status.HTTP_402_PAYMENT_REQUIRED
        body = _body(response)
        assert body["error"]["type"] == "card_error"
        assert body["error"]["charge"] == "ch_1"


class TestNotFoundExceptionHandler:

    @pytest.mark.asyncio
    async def test_returns_404_envelope(self):
        mock_request = MagicMock()
        exc = NotFoundException("No such customer: 'cus_1'", param="id")

        with patch("paysim.core.exceptions.handlers.request_logger"):
            response = await not_found_exception_handler(mock_request, exc)

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert _body(response) == {
            "error": {
                "type": "invalid_request_error",
                "message": "No such customer: 'cus_1'",
                "code": "resource_missing",
                "param": "id",
                "doc_url": "https://stripe.com/docs/error-codes/resource-missing",
            }
        }


class TestStripeErrorExceptionHandler:

    @pytest.mark.asyncio
    async def test_client_errors_log_warning(self):
        mock_request = MagicMock()
        exc = ValidationException("Missing required param: amount.", param="amount")

        with patch("paysim.core.exceptions.handlers.request_logger") as mock_logger:
            response = await stripe_error_exception_handler(mock_request, exc)

            mock_logger.warning.assert_called_once()
            mock_logger.error.assert_not_called()

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    @pytest.mark.asyncio
    async def test_server_errors_log_error(self):
        mock_request = MagicMock()

        with patch("paysim.core.exceptions.handlers.request_logger") as mock_logger:
            response = await stripe_error_exception_handler(mock_request, APIException())

            mock_logger.error.assert_called_once()
            extra = mock_logger.error.call_args.kwargs["extra"]
            assert extra["simulated"] is True

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert _body(response)["error"]["type"] == "api_error"


class TestGeneralExceptionHandler:

    @pytest.mark.asyncio
    async def test_renders_api_error(self):
        mock_request = MagicMock()
        exc = AppException("Internal error")

        with patch("paysim.core.exceptions.handlers.request_logger") as mock_logger:
            response = await general_exception_handler(mock_request, exc)

            mock_logger.error.assert_called_once()
            assert "GeneralException" in str(mock_logger.error.call_args[0][0])

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert _body(response) == {
            "error": {"type": "api_error", "message": "Internal error"}
        }


class TestExceptionSchema:

    def test_documents_error_statuses(self):
        for status_code in (400, 402, 404, 429, 500):
            assert status_code in exception_schema
            example = exception_schema[status_code]["content"]["application/json"]["example"]
            assert "error" in example
