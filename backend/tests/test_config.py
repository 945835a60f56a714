"""
Tests for settings resolution and the Salesforce client factory.
"""

import logging

import pytest

from contact_sync.core.config import (
    SALESFORCE_PRODUCTION_SITE,
    SALESFORCE_SANDBOX_SITE,
    Settings,
    clear_settings_cache,
)
from contact_sync.core.logging import configure_logging
from contact_sync.integrations.salesforce import SalesforceClient
from contact_sync.integrations.salesforce.capability_cache import get_capability_cache
from contact_sync.services.crm_factory import (
    CRMProviderError,
    build_salesforce_api,
    clear_salesforce_api_cache,
    is_salesforce_available,
)

SALESFORCE_ENV = [
    "SALESFORCE_CLIENT_ID",
    "SALESFORCE_CLIENT_SECRET",
    "SALESFORCE_SITE",
    "SALESFORCE_SANDBOX",
    "SALESFORCE_API_VERSION",
    "SALESFORCE_DEFAULT_COUNTRY",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in SALESFORCE_ENV:
        monkeypatch.delenv(name, raising=False)
    clear_settings_cache()
    clear_salesforce_api_cache()
    yield
    clear_settings_cache()
    clear_salesforce_api_cache()


class TestSettings:

    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.salesforce_api_version == "v59.0"
        assert settings.salesforce_capability_ttl_seconds == 3600.0
        assert settings.salesforce_token_site == SALESFORCE_PRODUCTION_SITE
        assert settings.address_config().default_country is None

    def test_only_consumed_settings_are_declared(self):
        assert set(Settings.model_fields) == {
            "app_debug",
            "log_level",
            "database_url",
            "salesforce_client_id",
            "salesforce_client_secret",
            "salesforce_site",
            "salesforce_sandbox",
            "salesforce_api_version",
            "salesforce_default_country",
            "salesforce_capability_ttl_seconds",
        }

    def test_sandbox(self, monkeypatch):
        monkeypatch.setenv("SALESFORCE_SANDBOX", "true")

        assert Settings(_env_file=None).salesforce_token_site == SALESFORCE_SANDBOX_SITE

    def test_explicit_site_wins(self, monkeypatch):
        monkeypatch.setenv("SALESFORCE_SANDBOX", "true")
        monkeypatch.setenv("SALESFORCE_SITE", "https://acme.my.salesforce.com/")

        assert Settings(_env_file=None).salesforce_token_site == "https://acme.my.salesforce.com"

    def test_default_country(self, monkeypatch):
        monkeypatch.setenv("SALESFORCE_DEFAULT_COUNTRY", "  United States ")

        assert Settings(_env_file=None).address_config().default_country == "United States"

    def test_blank_default_country_disables_injection(self, monkeypatch):
        monkeypatch.setenv("SALESFORCE_DEFAULT_COUNTRY", "   ")

        assert Settings(_env_file=None).address_config().default_country is None


class TestCRMFactory:

    def test_missing_client_id(self, credential_store):
        with pytest.raises(CRMProviderError, match="SALESFORCE_CLIENT_ID"):
            build_salesforce_api(credential_store)

    def test_missing_client_secret(self, monkeypatch, credential_store):
        monkeypatch.setenv("SALESFORCE_CLIENT_ID", "id")

        with pytest.raises(CRMProviderError, match="SALESFORCE_CLIENT_SECRET"):
            build_salesforce_api(credential_store)

    def test_builds_configured_client(self, monkeypatch, credential_store):
        monkeypatch.setenv("SALESFORCE_CLIENT_ID", "id")
        monkeypatch.setenv("SALESFORCE_CLIENT_SECRET", "secret")
        monkeypatch.setenv("SALESFORCE_SANDBOX", "true")
        monkeypatch.setenv("SALESFORCE_API_VERSION", "v60.0")

        api = build_salesforce_api(credential_store)

        assert isinstance(api, SalesforceClient)
        assert api.api_version == "v60.0"
        assert api.capability_cache is get_capability_cache()
        assert api.token_refresher.token_url == f"{SALESFORCE_SANDBOX_SITE}/services/oauth2/token"
        assert api.token_refresher.credential_store is credential_store
        api.close()

    def test_close_releases_both_http_clients(self, monkeypatch, credential_store):
        monkeypatch.setenv("SALESFORCE_CLIENT_ID", "id")
        monkeypatch.setenv("SALESFORCE_CLIENT_SECRET", "secret")

        api = build_salesforce_api(credential_store)
        api.close()

        assert api._client.is_closed
        assert api.token_refresher._client.is_closed

    def test_unavailable_without_credentials(self):
        assert is_salesforce_available() is False


class TestConfigureLogging:

    def test_repeated_calls_keep_one_handler(self):
        root = logging.getLogger()
        original_level = root.level
        try:
            configure_logging("debug")
            configure_logging("warning")

            ours = [h for h in root.handlers if getattr(h, "_contact_sync", False)]
            assert len(ours) == 1
            assert root.level == logging.WARNING
            assert logging.getLogger("httpx").level == logging.WARNING
        finally:
            for handler in [h for h in root.handlers if getattr(h, "_contact_sync", False)]:
                root.removeHandler(handler)
            root.setLevel(original_level)

    def test_level_defaults_to_settings(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "ERROR")
        clear_settings_cache()
        root = logging.getLogger()
        original_level = root.level
        try:
            configure_logging()

            assert root.level == logging.ERROR
        finally:
            for handler in [h for h in root.handlers if getattr(h, "_contact_sync", False)]:
                root.removeHandler(handler)
            root.setLevel(original_level)
