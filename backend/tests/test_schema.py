"""
Tests for the Salesforce Contact field mapping tables.
"""

import pytest

from contact_sync.integrations.salesforce.schema import (
    CONTACT_FIELDS,
    FIELD_LABELS,
    FIELD_TO_CONTACT_KEY,
    get_api_field,
    get_contact_key,
    get_field_label,
    is_address_field,
)
from contact_sync.models.salesforce import ContactRecord


class TestFieldMapper:

    def test_every_queried_field_is_mapped_and_labelled(self):
        assert set(CONTACT_FIELDS) == set(FIELD_TO_CONTACT_KEY) == set(FIELD_LABELS)

    def test_contact_keys_exist_on_contact_record(self):
        for key in FIELD_TO_CONTACT_KEY.values():
            assert key in ContactRecord.model_fields

    def test_round_trip(self):
        for field in CONTACT_FIELDS:
            assert get_api_field(get_contact_key(field)) == field

    def test_labels(self):
        assert get_field_label("MailingPostalCode") == "Mailing Postal Code"
        assert get_field_label("FirstName") == "First Name"

    def test_unknown_field(self):
        assert get_field_label("Department") == "Department"
        assert get_contact_key("Department") is None
        assert get_api_field("department") is None

    @pytest.mark.parametrize(
        "field,expected",
        [
            ("MailingState", True),
            ("MailingCountry", True),
            ("MailingStateCode", True),
            ("MailingCountryCode", True),
            ("MailingCity", False),
            ("Phone", False),
        ],
    )
    def test_is_address_field(self, field, expected):
        assert is_address_field(field) is expected
