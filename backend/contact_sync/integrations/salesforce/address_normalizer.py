"""
Salesforce Contact Address Normalization.

Orgs with "State and Country/Territory Picklists" enabled make MailingState
and MailingCountry read-only and require MailingStateCode (ISO 3166-2
subdivision) and MailingCountryCode (ISO 3166-1 alpha-2) instead. Sending
free-text names to such an org fails with FIELD_INTEGRITY_EXCEPTION.

Two mutually exclusive payload shapes are produced:

- coded mode: names/aliases are mapped to ISO codes and emitted as
  MailingCountryCode / MailingStateCode; a state code is never sent
  without a country code.
- legacy mode: values pass through unchanged; a state without a country
  gets the configured default country, or is dropped with a warning.
"""

import logging
from typing import Dict, Optional, Tuple

from contact_sync.core.config import AddressConfig
from contact_sync.integrations.salesforce.schema import (
    ADDRESS_PICKLIST_FIELDS,
    MAILING_COUNTRY,
    MAILING_COUNTRY_CODE,
    MAILING_STATE,
    MAILING_STATE_CODE,
)

logger = logging.getLogger(__name__)

# Country used for state lookups when only a state is supplied in coded mode
IMPLICIT_STATE_COUNTRY = "US"


class AddressNormalizationError(Exception):
    """Raised when an address value cannot be mapped to a Salesforce code."""

    def __init__(self, message: str, value: Optional[str]):
        super().__init__(message)
        self.value = value


class UnmappableCountryError(AddressNormalizationError):
    """Country name/alias has no known ISO 3166-1 code."""

    def __init__(self, value: str):
        super().__init__(f"Unmappable country: {value!r}", value)


class UnmappableStateError(AddressNormalizationError):
    """State name/abbreviation has no known US state code."""

    def __init__(self, value: str):
        super().__init__(f"Unmappable state: {value!r}", value)


class UnsupportedCountryForStateError(AddressNormalizationError):
    """State codes are only mapped for US addresses."""

    def __init__(self, country_code: Optional[str]):
        super().__init__(f"State codes not supported for country: {country_code!r}", country_code)
        self.country_code = country_code


class ContactPayloadError(Exception):
    """
    Raised by build_contact_update_payload when the address part fails.

    Attributes:
        reason: The underlying AddressNormalizationError
        non_address_payload: Remaining fields that can still be submitted
    """

    def __init__(self, reason: AddressNormalizationError, non_address_payload: Dict[str, str]):
        super().__init__(str(reason))
        self.reason = reason
        self.non_address_payload = non_address_payload


# -----------------------------------------------------------------------------
# Country -> ISO 3166-1 alpha-2. Keys are UPPERCASE.
# -----------------------------------------------------------------------------
COUNTRY_TO_CODE: Dict[str, str] = {
    # United States
    "UNITED STATES": "US",
    "UNITED STATES OF AMERICA": "US",
    "USA": "US",
    "US": "US",
    "U.S.": "US",
    "U.S.A.": "US",
    "AMERICA": "US",
    # United Kingdom
    "UNITED KINGDOM": "GB",
    "UK": "GB",
    "U.K.": "GB",
    "GREAT BRITAIN": "GB",
    "BRITAIN": "GB",
    "ENGLAND": "GB",
    # ISO codes as self-mappings
    "GB": "GB",
    "CA": "CA",
    "AU": "AU",
    "DE": "DE",
    "FR": "FR",
    "IN": "IN",
    "JP": "JP",
    "CN": "CN",
    "BR": "BR",
    "MX": "MX",
    "NL": "NL",
    "SE": "SE",
    "NO": "NO",
    "DK": "DK",
    "FI": "FI",
    "NZ": "NZ",
    "ZA": "ZA",
    "SG": "SG",
    "IE": "IE",
    "CH": "CH",
    "AT": "AT",
    "BE": "BE",
    "PT": "PT",
    "PL": "PL",
    "ES": "ES",
    "IT": "IT",
    "RU": "RU",
    # Full names
    "CANADA": "CA",
    "AUSTRALIA": "AU",
    "GERMANY": "DE",
    "FRANCE": "FR",
    "INDIA": "IN",
    "JAPAN": "JP",
    "CHINA": "CN",
    "BRAZIL": "BR",
    "MEXICO": "MX",
    "NETHERLANDS": "NL",
    "SWEDEN": "SE",
    "NORWAY": "NO",
    "DENMARK": "DK",
    "FINLAND": "FI",
    "NEW ZEALAND": "NZ",
    "SOUTH AFRICA": "ZA",
    "SINGAPORE": "SG",
    "IRELAND": "IE",
    "SWITZERLAND": "CH",
    "AUSTRIA": "AT",
    "BELGIUM": "BE",
    "PORTUGAL": "PT",
    "POLAND": "PL",
    "SPAIN": "ES",
    "ITALY": "IT",
    "RUSSIA": "RU",
}

# -----------------------------------------------------------------------------
# US state / territory -> 2-letter code. Keys are lowercase.
# -----------------------------------------------------------------------------
_US_STATE_NAMES: Dict[str, str] = {
    "alabama": "AL",
    "alaska": "AK",
    "arizona": "AZ",
    "arkansas": "AR",
    "california": "CA",
    "colorado": "CO",
    "connecticut": "CT",
    "delaware": "DE",
    "florida": "FL",
    "georgia": "GA",
    "hawaii": "HI",
    "idaho": "ID",
    "illinois": "IL",
    "indiana": "IN",
    "iowa": "IA",
    "kansas": "KS",
    "kentucky": "KY",
    "louisiana": "LA",
    "maine": "ME",
    "maryland": "MD",
    "massachusetts": "MA",
    "michigan": "MI",
    "minnesota": "MN",
    "mississippi": "MS",
    "missouri": "MO",
    "montana": "MT",
    "nebraska": "NE",
    "nevada": "NV",
    "new hampshire": "NH",
    "new jersey": "NJ",
    "new mexico": "NM",
    "new york": "NY",
    "north carolina": "NC",
    "north dakota": "ND",
    "ohio": "OH",
    "oklahoma": "OK",
    "oregon": "OR",
    "pennsylvania": "PA",
    "rhode island": "RI",
    "south carolina": "SC",
    "south dakota": "SD",
    "tennessee": "TN",
    "texas": "TX",
    "utah": "UT",
    "vermont": "VT",
    "virginia": "VA",
    "washington": "WA",
    "west virginia": "WV",
    "wisconsin": "WI",
    "wyoming": "WY",
    # DC and territories
    "district of columbia": "DC",
    "washington dc": "DC",
    "washington d.c.": "DC",
    "puerto rico": "PR",
    "guam": "GU",
    "us virgin islands": "VI",
    "u.s. virgin islands": "VI",
    "american samoa": "AS",
    "northern mariana islands": "MP",
}

# Abbreviations map to themselves
US_STATE_TO_CODE: Dict[str, str] = {
    **_US_STATE_NAMES,
    **{code.lower(): code for code in set(_US_STATE_NAMES.values())},
}


# -----------------------------------------------------------------------------
# Public API
# -----------------------------------------------------------------------------

def normalize_country_code(value: Optional[str]) -> Optional[str]:
    """
    Normalizes a country name or alias to an ISO 3166-1 alpha-2 code.

    Args:
        value: Country as entered ("United States", "usa", " U.S.A. ", "CA")

    Returns:
        Two-letter code, or None when value is None

    Raises:
        UnmappableCountryError: If the alias is unknown

    Example:
        >>> normalize_country_code("United States of America")
        'US'
    """
    if value is None:
        return None

    code = COUNTRY_TO_CODE.get(value.strip().upper())
    if code is None:
        raise UnmappableCountryError(value)
    return code


def normalize_state_code(value: Optional[str], country_code: Optional[str]) -> Optional[str]:
    """
    Normalizes a US state name or abbreviation to its 2-letter code.

    Only US states are supported; any other country raises
    UnsupportedCountryForStateError.

    Args:
        value: State as entered ("Utah", "ut", "Washington D.C.")
        country_code: Already-normalized country code

    Returns:
        Two-letter state code, or None when value is None

    Raises:
        UnsupportedCountryForStateError: If country_code is not "US"
        UnmappableStateError: If the state is unknown
    """
    if value is None:
        return None

    if country_code != "US":
        raise UnsupportedCountryForStateError(country_code)

    code = US_STATE_TO_CODE.get(value.strip().lower())
    if code is None:
        raise UnmappableStateError(value)
    return code


def build_contact_update_payload(
    updates: Dict[str, str],
    uses_coded_fields: bool,
    config: Optional[AddressConfig] = None,
) -> Dict[str, str]:
    """
    Builds a sanitized Salesforce PATCH payload from `updates`.

    Args:
        updates: API field name -> new value
        uses_coded_fields: Whether the org has State/Country picklists enabled
        config: Address options (default country for legacy mode)

    Returns:
        Payload ready to submit

    Raises:
        ContactPayloadError: If an address value cannot be mapped. The
            exception carries the non-address fields so Phone/Email/Title
            updates can still be submitted.

    Example:
        >>> build_contact_update_payload(
        ...     {"MailingCountry": "USA", "MailingState": "Utah", "Phone": "555-0001"}, True
        ... )
        {'Phone': '555-0001', 'MailingCountryCode': 'US', 'MailingStateCode': 'UT'}
    """
    address, rest = _split_address_fields(updates)

    if not address:
        return rest

    try:
        if uses_coded_fields:
            address_payload = _normalize_coded(address)
        else:
            address_payload = _normalize_legacy(address, config or AddressConfig())
    except AddressNormalizationError as e:
        raise ContactPayloadError(e, rest) from e

    return {**rest, **address_payload}


def describe_address_error(reason: AddressNormalizationError) -> str:
    """Returns a user-facing message for an address normalization failure."""
    if isinstance(reason, UnmappableCountryError):
        return (
            f'Could not map country "{reason.value}" to a Salesforce country code. '
            'Please use a recognized country name (e.g. "United States", "Canada").'
        )
    if isinstance(reason, UnmappableStateError):
        return (
            f'Could not map state "{reason.value}" to a US state code. '
            'Use a full name (e.g. "Utah") or standard abbreviation (e.g. "UT").'
        )
    if isinstance(reason, UnsupportedCountryForStateError):
        return (
            f'State/province codes for country "{reason.country_code}" are not currently supported. '
            "Only US states are mapped."
        )
    return "Could not process the address fields. Please verify the country and state values."


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------

def _split_address_fields(updates: Dict[str, str]) -> Tuple[Dict[str, str], Dict[str, str]]:
    address: Dict[str, str] = {}
    rest: Dict[str, str] = {}
    for field, value in updates.items():
        if field in ADDRESS_PICKLIST_FIELDS:
            address[field] = value
        else:
            rest[field] = value
    return address, rest


def _normalize_coded(address: Dict[str, str]) -> Dict[str, str]:
    country_code = normalize_country_code(address.get(MAILING_COUNTRY))

    # Only-state updates are looked up as US and still carry a country code
    effective_country = country_code or IMPLICIT_STATE_COUNTRY
    state_code = normalize_state_code(address.get(MAILING_STATE), effective_country)

    payload: Dict[str, str] = {}
    if country_code:
        payload[MAILING_COUNTRY_CODE] = country_code
    if state_code:
        payload[MAILING_STATE_CODE] = state_code
        payload.setdefault(MAILING_COUNTRY_CODE, effective_country)

    return payload


def _normalize_legacy(address: Dict[str, str], config: AddressConfig) -> Dict[str, str]:
    payload = dict(address)

    if MAILING_STATE in payload and MAILING_COUNTRY not in payload:
        if config.default_country:
            payload[MAILING_COUNTRY] = config.default_country
        else:
            logger.warning(
                "⚠️ Skipping MailingState update: Salesforce requires MailingCountry "
                "(set SALESFORCE_DEFAULT_COUNTRY to enable automatic injection)"
            )
            del payload[MAILING_STATE]

    return payload
