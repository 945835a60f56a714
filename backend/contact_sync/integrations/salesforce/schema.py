"""
Salesforce Contact Field Mapping.

Static tables linking Salesforce API field names, the keys used on
ContactRecord, and the human-readable labels shown for review.
"""

from typing import Dict, List, Optional

# Salesforce object the integration reads and patches
CONTACT_OBJECT = "Contact"

# API field names queried for every contact
CONTACT_FIELDS: List[str] = [
    "FirstName",
    "LastName",
    "Email",
    "Phone",
    "Title",
    "MailingStreet",
    "MailingCity",
    "MailingState",
    "MailingPostalCode",
    "MailingCountry",
]

# API field name -> label for the review UI
FIELD_LABELS: Dict[str, str] = {
    "FirstName": "First Name",
    "LastName": "Last Name",
    "Email": "Email",
    "Phone": "Phone",
    "Title": "Title",
    "MailingStreet": "Mailing Street",
    "MailingCity": "Mailing City",
    "MailingState": "Mailing State",
    "MailingPostalCode": "Mailing Postal Code",
    "MailingCountry": "Mailing Country",
}

# API field name -> ContactRecord attribute
FIELD_TO_CONTACT_KEY: Dict[str, str] = {
    "FirstName": "firstname",
    "LastName": "lastname",
    "Email": "email",
    "Phone": "phone",
    "Title": "title",
    "MailingStreet": "mailing_street",
    "MailingCity": "mailing_city",
    "MailingState": "mailing_state",
    "MailingPostalCode": "mailing_postal_code",
    "MailingCountry": "mailing_country",
}

CONTACT_KEY_TO_FIELD: Dict[str, str] = {v: k for k, v in FIELD_TO_CONTACT_KEY.items()}

# Free-text address fields (read-only once State/Country picklists are enabled)
MAILING_STATE = "MailingState"
MAILING_COUNTRY = "MailingCountry"
ADDRESS_PICKLIST_FIELDS = frozenset({MAILING_STATE, MAILING_COUNTRY})

# Coded address fields (ISO codes, only present when picklists are enabled)
MAILING_STATE_CODE = "MailingStateCode"
MAILING_COUNTRY_CODE = "MailingCountryCode"
ADDRESS_CODE_FIELDS = frozenset({MAILING_STATE_CODE, MAILING_COUNTRY_CODE})

# Any of these can trigger FIELD_INTEGRITY_EXCEPTION on update
ALL_ADDRESS_FIELDS = ADDRESS_PICKLIST_FIELDS | ADDRESS_CODE_FIELDS


def get_field_label(field: str) -> str:
    """Returns the UI label for an API field, or the field name itself."""
    return FIELD_LABELS.get(field, field)


def get_contact_key(field: str) -> Optional[str]:
    """Returns the ContactRecord key for an API field, or None if unmapped."""
    return FIELD_TO_CONTACT_KEY.get(field)


def get_api_field(contact_key: str) -> Optional[str]:
    """Returns the API field name for a ContactRecord key, or None if unmapped."""
    return CONTACT_KEY_TO_FIELD.get(contact_key)


def is_address_field(field: str) -> bool:
    """True for both free-text and coded mailing state/country fields."""
    return field in ALL_ADDRESS_FIELDS
