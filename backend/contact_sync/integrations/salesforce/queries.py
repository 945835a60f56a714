"""
SOQL builders for the Salesforce Contact integration.
"""

from typing import List

from contact_sync.integrations.salesforce.schema import CONTACT_FIELDS, CONTACT_OBJECT

SEARCH_LIMIT = 10

# Zero-row probe: succeeds only when the org exposes coded address fields
ADDRESS_CODE_PROBE_SOQL = "SELECT MailingStateCode, MailingCountryCode FROM Contact LIMIT 0"


def escape_soql_literal(value: str) -> str:
    """Escapes a value for use inside a single-quoted SOQL string literal."""
    return value.replace("\\", "\\\\").replace("'", "\\'")


def build_contact_search_soql(query: str, fields: List[str] = CONTACT_FIELDS) -> str:
    """
    Builds a name search over contacts.

    Example:
        >>> build_contact_search_soql("Jane", ["Email"])
        "SELECT Id, Email FROM Contact WHERE Name LIKE '%Jane%' LIMIT 10"
    """
    escaped = escape_soql_literal(query.strip())
    return (
        f"SELECT Id, {', '.join(fields)} FROM {CONTACT_OBJECT} "
        f"WHERE Name LIKE '%{escaped}%' LIMIT {SEARCH_LIMIT}"
    )
