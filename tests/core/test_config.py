"""
Test suite for application settings.

Run tests:
    pytest tests/core/test_config.py -v
"""

import pytest
from pydantic import ValidationError

from paysim.core.config import Settings, get_settings


class TestSettings:

    def test_defaults(self):
        settings = Settings()

        assert settings.APP_NAME == "paysim"
        assert settings.DEFAULT_ACCOUNT_ID == "acct_default"
        assert settings.LIST_DEFAULT_LIMIT == 10
        assert settings.LIST_MAX_LIMIT == 100
        assert settings.INVOICE_PAID_DELAY_SECONDS == 3.0
        assert settings.WEBHOOK_SIGNATURE_HEADER == "Stripe-Signature"

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("INVOICE_PAID_DELAY_SECONDS", "0.5")
        monkeypatch.setenv("DEFAULT_ACCOUNT_ID", "acct_platform")

        settings = Settings()

        assert settings.INVOICE_PAID_DELAY_SECONDS == 0.5
        assert settings.DEFAULT_ACCOUNT_ID == "acct_platform"

    def test_default_limit_must_fit_max_limit(self):
        with pytest.raises(ValidationError):
            Settings(LIST_DEFAULT_LIMIT=50, LIST_MAX_LIMIT=20)

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()
