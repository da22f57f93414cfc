"""
Connected accounts.

Accounts are created by, and stored under, the platform account. A request
operates inside a connected account by sending its id in the ``Stripe-Account``
header; ``ensure_accessible`` rejects ids the platform doesn't know.
"""

from typing import Any

from paysim.core.config import app_logger
from paysim.core.schemas import AccountCreate, parse_params
from paysim.core.schemas.connect import BusinessProfile
from paysim.core.services.base import ResourceService
from paysim.core.utils import now_timestamp, stringify_metadata


class AccountService(ResourceService):
    kind = "account"
    id_prefix = "acct_"
    id_length = 16
    label = "account"
    list_url = "/v1/accounts"

    @property
    def platform_account_id(self) -> str:
        return self.settings.DEFAULT_ACCOUNT_ID

    def ensure_accessible(self, account_id: str) -> str:
        """
        Validate the account a request runs as.

        Raises:
            NotFoundException: If ``account_id`` is neither the platform account
                nor one of its connected accounts.
        """
        if account_id != self.platform_account_id:
            self.retrieve(self.platform_account_id, account_id, "Stripe-Account")
        return account_id

    def create(self, account_id: str, params: dict[str, Any]) -> dict:
        body = parse_params(AccountCreate, params)
        connected_id = self._new_id(account_id, body.id)
        business_profile = body.business_profile or BusinessProfile()

        account = {
            "id": connected_id,
            "object": "account",
            "business_profile": business_profile.model_dump(
                include=set(BusinessProfile.model_fields)
            ),
            "business_type": body.business_type,
            "capabilities": body.capabilities or {},
            "charges_enabled": True,
            "country": body.country,
            "created": now_timestamp(),
            "default_currency": body.default_currency.lower(),
            "details_submitted": True,
            "email": body.email,
            "external_accounts": {
                "object": "list",
                "data": [],
                "has_more": False,
                "total_count": 0,
                "url": f"/v1/accounts/{connected_id}/external_accounts",
            },
            "metadata": stringify_metadata(body.metadata),
            "payouts_enabled": body.payouts_enabled,
            "settings": body.settings or {},
            "tos_acceptance": body.tos_acceptance or {},
            "type": body.type,
        }
        self.store.put(account_id, account)
        app_logger.info(f"Connected account {connected_id} created under {account_id}")
        return account

    def retrieve(
        self, account_id: str, record_id: str, param_name: str | None = "id"
    ) -> dict:
        """An account is visible to the platform account and to itself."""
        if account_id not in (self.platform_account_id, record_id):
            raise self._not_found(record_id, param_name)
        return super().retrieve(self.platform_account_id, record_id, param_name)

    def list(self, account_id: str, params: dict[str, Any]) -> dict:
        return self._paginate(account_id, self.store.get_all(account_id), params)

    def delete(self, account_id: str, record_id: str) -> dict:
        self.retrieve(account_id, record_id)
        self.store.remove(self.platform_account_id, record_id)
        app_logger.info(f"Connected account {record_id} deleted")
        return {"id": record_id, "object": "account", "deleted": True}


__all__ = ["AccountService"]
