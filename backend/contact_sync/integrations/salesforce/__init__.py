"""
Salesforce Contact integration.
"""

from contact_sync.models.salesforce import ContactRecord, SalesforceCredential

from .address_normalizer import (
    AddressNormalizationError,
    ContactPayloadError,
    UnmappableCountryError,
    UnmappableStateError,
    UnsupportedCountryForStateError,
    build_contact_update_payload,
    describe_address_error,
    normalize_country_code,
    normalize_state_code,
)
from .capability_cache import MISS, CapabilityCache, get_capability_cache
from .client import (
    MissingInstanceURLError,
    SalesforceAPIError,
    SalesforceClient,
    SalesforceError,
    SalesforceHTTPError,
    SalesforceNotFoundError,
    SessionExpiredError,
)
from .token_refresher import (
    NoRefreshTokenError,
    PersistFailedError,
    RefreshFailedError,
    RefreshHTTPError,
    TokenRefresher,
    TokenRefreshError,
)

__all__ = [
    "AddressNormalizationError",
    "ContactPayloadError",
    "UnmappableCountryError",
    "UnmappableStateError",
    "UnsupportedCountryForStateError",
    "build_contact_update_payload",
    "describe_address_error",
    "normalize_country_code",
    "normalize_state_code",
    "MISS",
    "CapabilityCache",
    "get_capability_cache",
    "MissingInstanceURLError",
    "SalesforceAPIError",
    "SalesforceClient",
    "SalesforceError",
    "SalesforceHTTPError",
    "SalesforceNotFoundError",
    "SessionExpiredError",
    "ContactRecord",
    "SalesforceCredential",
    "NoRefreshTokenError",
    "PersistFailedError",
    "RefreshFailedError",
    "RefreshHTTPError",
    "TokenRefresher",
    "TokenRefreshError",
]
