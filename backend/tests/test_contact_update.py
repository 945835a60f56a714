"""
Tests for the contact update workflow.

The Salesforce API is a MagicMock shaped like SalesforceAPI, so these
tests exercise normalization and error handling only.
"""

from unittest.mock import MagicMock

import pytest

from conftest import RecordingTransport
from contact_sync.core.config import AddressConfig, clear_settings_cache
from contact_sync.core.interfaces.crm import SalesforceAPI
from contact_sync.integrations.salesforce.client import (
    SalesforceAPIError,
    SalesforceClient,
    SalesforceHTTPError,
    SalesforceNotFoundError,
    SessionExpiredError,
)
from contact_sync.integrations.salesforce.token_refresher import TokenRefresher
from contact_sync.models.salesforce import SalesforceCredential
from contact_sync.services.contact_update import (
    ADDRESS_REJECTED_MESSAGE,
    RECONNECT_MESSAGE,
    ContactUpdateResult,
    ContactUpdateService,
)

CONTACT_ID = "003000000000001"


@pytest.fixture(autouse=True)
def no_default_country(monkeypatch):
    monkeypatch.delenv("SALESFORCE_DEFAULT_COUNTRY", raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def api():
    api = MagicMock(spec=SalesforceAPI)
    api.uses_address_code_fields.return_value = True
    api.update_contact.return_value = CONTACT_ID
    return api


class TestHappyPath:

    def test_coded_org_gets_coded_payload(self, api, credential):
        service = ContactUpdateService(api)

        result = service.apply_updates(
            credential, CONTACT_ID, {"MailingCountry": "USA", "MailingState": "Utah", "Phone": "555-0001"}
        )

        expected = {"MailingCountryCode": "US", "MailingStateCode": "UT", "Phone": "555-0001"}
        api.update_contact.assert_called_once_with(credential, CONTACT_ID, expected)
        assert result.success
        assert result.updated_fields == expected
        assert result.message == "Successfully updated 3 field(s) in Salesforce"

    def test_legacy_org_uses_default_country(self, api, credential):
        api.uses_address_code_fields.return_value = False
        service = ContactUpdateService(api, AddressConfig(default_country="United States"))

        service.apply_updates(credential, CONTACT_ID, {"MailingState": "Texas"})

        api.update_contact.assert_called_once_with(
            credential, CONTACT_ID, {"MailingState": "Texas", "MailingCountry": "United States"}
        )

    def test_empty_payload_skips_api_call(self, api, credential):
        api.uses_address_code_fields.return_value = False
        service = ContactUpdateService(api)

        result = service.apply_updates(credential, CONTACT_ID, {"MailingState": "Texas"})

        api.update_contact.assert_not_called()
        assert result.success
        assert result.updated_fields == {}

    def test_default_country_comes_from_settings(self, monkeypatch, api, credential):
        monkeypatch.setenv("SALESFORCE_DEFAULT_COUNTRY", "United States")
        clear_settings_cache()
        api.uses_address_code_fields.return_value = False
        service = ContactUpdateService(api)

        service.apply_updates(credential, CONTACT_ID, {"MailingState": "Texas"})

        api.update_contact.assert_called_once_with(
            credential, CONTACT_ID, {"MailingState": "Texas", "MailingCountry": "United States"}
        )


class TestAddressFailures:
    """Non-address fields are still written when the address part fails."""

    def test_unmappable_country_submits_other_fields(self, api, credential):
        service = ContactUpdateService(api)

        result = service.apply_updates(
            credential, CONTACT_ID, {"MailingCountry": "Atlantis", "Phone": "555-0001"}
        )

        api.update_contact.assert_called_once_with(credential, CONTACT_ID, {"Phone": "555-0001"})
        assert not result.success
        assert result.address_skipped
        assert result.updated_fields == {"Phone": "555-0001"}
        assert '"Atlantis"' in result.error

    def test_unmappable_address_only_makes_no_call(self, api, credential):
        service = ContactUpdateService(api)

        result = service.apply_updates(credential, CONTACT_ID, {"MailingState": "Gondor"})

        api.update_contact.assert_not_called()
        assert result.address_skipped
        assert '"Gondor"' in result.message

    def test_integrity_rejection_retries_without_address(self, api, credential):
        rejection = SalesforceAPIError(
            400,
            [{"errorCode": "FIELD_INTEGRITY_EXCEPTION", "fields": ["MailingStateCode"]}],
        )
        api.update_contact.side_effect = [rejection, CONTACT_ID]
        service = ContactUpdateService(api)

        result = service.apply_updates(
            credential, CONTACT_ID, {"MailingState": "Utah", "Title": "CTO"}
        )

        assert api.update_contact.call_count == 2
        assert api.update_contact.call_args.args == (credential, CONTACT_ID, {"Title": "CTO"})
        assert result.error == ADDRESS_REJECTED_MESSAGE
        assert result.updated_fields == {"Title": "CTO"}
        assert result.address_skipped

    def test_other_400_is_reported(self, api, credential):
        api.update_contact.side_effect = SalesforceAPIError(400, [{"errorCode": "INVALID_EMAIL_ADDRESS"}])
        service = ContactUpdateService(api)

        result = service.apply_updates(credential, CONTACT_ID, {"Email": "nope"})

        assert api.update_contact.call_count == 1
        assert not result.success
        assert result.error.startswith("Failed to update contact: 400")


class TestClientErrors:

    def test_session_expired_requires_reconnect(self, api, credential):
        api.update_contact.side_effect = SessionExpiredError()
        service = ContactUpdateService(api)

        result = service.apply_updates(credential, CONTACT_ID, {"Phone": "1"})

        assert result == ContactUpdateResult(
            success=False, error=RECONNECT_MESSAGE, reconnect_required=True
        )

    def test_session_expired_during_capability_check(self, api, credential):
        api.uses_address_code_fields.side_effect = SessionExpiredError()
        service = ContactUpdateService(api)

        result = service.apply_updates(credential, CONTACT_ID, {"Phone": "1"})

        assert result.reconnect_required
        api.update_contact.assert_not_called()

    @pytest.mark.parametrize(
        "error",
        [SalesforceNotFoundError("Contact 003 not found"), SalesforceHTTPError("connection reset")],
    )
    def test_other_errors_are_reported(self, api, credential, error):
        api.update_contact.side_effect = error
        service = ContactUpdateService(api)

        result = service.apply_updates(credential, CONTACT_ID, {"Phone": "1"})

        assert not result.success
        assert not result.reconnect_required
        assert result.error.startswith("Failed to update contact:")

    def test_missing_instance_url_requires_reconnect(self, capability_cache):
        """
        SCENARIO: The stored credential lost its instance_url.

        EXPECTED: The capability check cannot build a URL; the user is asked
        to reconnect and nothing is sent.
        """
        transport = RecordingTransport([])
        client = SalesforceClient(
            token_refresher=MagicMock(spec=TokenRefresher),
            capability_cache=capability_cache,
            http_client=transport.client(),
        )
        service = ContactUpdateService(client)

        result = service.apply_updates(
            SalesforceCredential(id=1, token="t", metadata={}), CONTACT_ID, {"Phone": "1"}
        )

        assert result == ContactUpdateResult(
            success=False, error=RECONNECT_MESSAGE, reconnect_required=True
        )
        assert transport.requests == []
