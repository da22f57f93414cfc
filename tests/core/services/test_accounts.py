"""
Test suite for connected accounts.

Run tests:
    pytest tests/core/services/test_accounts.py -v
"""

import pytest

from paysim.core.exceptions.types import NotFoundException, ValidationException


class TestAccounts:

    def test_create(self, simulator, account_id):
        account = simulator.accounts.create(
            account_id,
            {"email": "shop@example.com", "business_profile": {"name": "Shop"}},
        )

        assert account["id"].startswith("acct_")
        assert account["type"] == "custom"
        assert account["country"] == "US"
        assert account["business_profile"]["name"] == "Shop"
        assert account["charges_enabled"] is True

    def test_invalid_type(self, simulator, account_id):
        with pytest.raises(ValidationException):
            simulator.accounts.create(account_id, {"type": "premium"})

    def test_visible_to_platform_and_itself(self, simulator, account_id):
        account = simulator.accounts.create(account_id, {})
        other = simulator.accounts.create(account_id, {})

        assert simulator.accounts.retrieve(account_id, account["id"]) is account
        assert simulator.accounts.retrieve(account["id"], account["id"]) is account
        with pytest.raises(NotFoundException):
            simulator.accounts.retrieve(other["id"], account["id"])

    def test_ensure_accessible(self, simulator, account_id):
        account = simulator.accounts.create(account_id, {"id": "acct_connected"})

        assert simulator.accounts.ensure_accessible(account_id) == account_id
        assert simulator.accounts.ensure_accessible(account["id"]) == "acct_connected"
        with pytest.raises(NotFoundException) as exc_info:
            simulator.accounts.ensure_accessible("acct_unknown")
        assert exc_info.value.param == "Stripe-Account"

    def test_list_and_delete(self, simulator, account_id):
        account = simulator.accounts.create(account_id, {})

        page = simulator.accounts.list(account_id, {})
        assert [item["id"] for item in page["data"]] == [account["id"]]

        result = simulator.accounts.delete(account_id, account["id"])
        assert result == {"id": account["id"], "object": "account", "deleted": True}
        assert simulator.accounts.list(account_id, {})["data"] == []

    def test_resources_are_scoped_per_account(self, simulator, account_id):
        connected = simulator.accounts.create(account_id, {})
        customer = simulator.customers.create(connected["id"], {})

        assert simulator.customers.retrieve(connected["id"], customer["id"]) is customer
        with pytest.raises(NotFoundException):
            simulator.customers.retrieve(account_id, customer["id"])
