"""
Data Processing Logic for Salesforce Contact Records.

Converts raw REST API records into ContactRecord instances.
"""

import logging
from typing import Any, Dict, List, Optional

from contact_sync.integrations.salesforce.schema import FIELD_TO_CONTACT_KEY
from contact_sync.models.salesforce import ContactRecord

logger = logging.getLogger(__name__)


def format_display_name(record: Dict[str, Any]) -> str:
    """
    Builds a display name: "First Last", or the email when both are blank.
    """
    first = record.get("FirstName") or ""
    last = record.get("LastName") or ""
    name = f"{first} {last}".strip()
    return name or (record.get("Email") or "")


def format_contact(record: Any) -> Optional[ContactRecord]:
    """
    Converts a Salesforce Contact record into a ContactRecord.

    Args:
        record: Raw record from a query or sobject fetch

    Returns:
        ContactRecord, or None if the record has no Id
    """
    if not isinstance(record, dict) or not record.get("Id"):
        return None

    values = {key: record.get(field) for field, key in FIELD_TO_CONTACT_KEY.items()}

    return ContactRecord(
        id=record["Id"],
        display_name=format_display_name(record),
        **values,
    )


def format_contacts(records: List[Any]) -> List[ContactRecord]:
    """Formats query records, skipping entries without an Id."""
    contacts = []
    for record in records or []:
        contact = format_contact(record)
        if contact is None:
            logger.debug(f"Skipping Salesforce record without Id: {record!r}")
            continue
        contacts.append(contact)
    return contacts
