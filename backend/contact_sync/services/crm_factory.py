"""
Salesforce API Factory.
Wires the live Salesforce client from settings.
"""

import logging
from functools import lru_cache
from typing import Optional

from contact_sync.core.config import get_settings
from contact_sync.core.interfaces.credentials import CredentialStore
from contact_sync.core.interfaces.crm import SalesforceAPI
from contact_sync.integrations.salesforce.capability_cache import get_capability_cache

logger = logging.getLogger(__name__)


class CRMProviderError(Exception):
    """Raised when the Salesforce client cannot be configured."""
    pass


def build_salesforce_api(credential_store: Optional[CredentialStore] = None) -> SalesforceAPI:
    """
    Builds a SalesforceClient from settings.

    Args:
        credential_store: Where refreshed tokens are persisted. Defaults to
            the SQL store on the configured database.

    Returns:
        Configured SalesforceClient instance

    Raises:
        CRMProviderError: If Salesforce credentials are missing

    Example:
        >>> api = build_salesforce_api()
        >>> api.search_contacts(credential, "Jane")
    """
    settings = get_settings()

    # Validate required credentials
    if not settings.salesforce_client_id:
        raise CRMProviderError("SALESFORCE_CLIENT_ID not configured")

    if not settings.salesforce_client_secret:
        raise CRMProviderError("SALESFORCE_CLIENT_SECRET not configured")

    # Import here to avoid loading integration code if not needed
    from contact_sync.integrations.salesforce import SalesforceClient, TokenRefresher

    if credential_store is None:
        from contact_sync.db import session_maker
        from contact_sync.services.credential_store import SQLCredentialStore

        credential_store = SQLCredentialStore(session_maker)

    refresher = TokenRefresher(
        client_id=settings.salesforce_client_id,
        client_secret=settings.salesforce_client_secret,
        credential_store=credential_store,
        site=settings.salesforce_token_site,
    )

    logger.info(f"✅ Initializing Salesforce client (token site: {settings.salesforce_token_site})")

    return SalesforceClient(
        token_refresher=refresher,
        capability_cache=get_capability_cache(),
        api_version=settings.salesforce_api_version,
        owns_token_refresher=True,
    )


@lru_cache
def get_salesforce_api() -> SalesforceAPI:
    """
    Get the cached, settings-configured Salesforce API client.

    Raises:
        CRMProviderError: If the client cannot be configured
    """
    try:
        return build_salesforce_api()
    except CRMProviderError:
        raise
    except Exception as e:
        logger.error(f"❌ Failed to load Salesforce client: {e}")
        raise CRMProviderError(f"Failed to load Salesforce client: {e}") from e


def clear_salesforce_api_cache() -> None:
    """
    Clears the cached Salesforce client.

    Useful for testing or when credentials are updated at runtime.
    """
    logger.info("🔄 Clearing Salesforce client cache")
    get_salesforce_api.cache_clear()


def is_salesforce_available() -> bool:
    """
    Quick check whether a Salesforce client can be configured.

    Returns:
        True if the client is configured, False otherwise
    """
    try:
        return get_salesforce_api() is not None
    except CRMProviderError as e:
        logger.error(f"❌ Salesforce availability check failed: {e}")
        return False
