"""
Salesforce REST API Client for Contact operations.

Builds the base URL from the credential's instance_url (unique per org) and
wraps search/get/update in a refresh-and-retry policy: a 401
INVALID_SESSION_ID triggers one token refresh and one retry, after which the
session is considered expired.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, TypeVar

import httpx

from contact_sync.core.interfaces.crm import SalesforceAPI
from contact_sync.integrations.salesforce.capability_cache import MISS, CapabilityCache
from contact_sync.integrations.salesforce.processors import format_contact, format_contacts
from contact_sync.integrations.salesforce.queries import (
    ADDRESS_CODE_PROBE_SOQL,
    build_contact_search_soql,
)
from contact_sync.integrations.salesforce.schema import (
    ALL_ADDRESS_FIELDS,
    CONTACT_FIELDS,
    CONTACT_OBJECT,
)
from contact_sync.integrations.salesforce.token_refresher import TokenRefresher, TokenRefreshError
from contact_sync.models.salesforce import ContactRecord, SalesforceCredential

logger = logging.getLogger(__name__)

DEFAULT_API_VERSION = "v59.0"

# Capability cache key prefix for the address-code probe
ADDRESS_CODE_CAPABILITY = "sf_address_code_fields"

T = TypeVar("T")


class SalesforceError(Exception):
    """Base class for Salesforce API failures."""
    pass


class SalesforceNotFoundError(SalesforceError):
    """The requested record does not exist."""
    pass


class SalesforceAPIError(SalesforceError):
    """
    Salesforce returned an error status.

    Salesforce error bodies are JSON lists of
    {"errorCode": ..., "message": ..., "fields": [...]} objects.
    """

    def __init__(self, status: int, body: Any):
        super().__init__(f"Salesforce API error: {status} - {body}")
        self.status = status
        self.body = body

    @property
    def errors(self) -> List[Dict[str, Any]]:
        if not isinstance(self.body, list):
            return []
        return [e for e in self.body if isinstance(e, dict)]

    def has_error_code(self, code: str) -> bool:
        return any(e.get("errorCode") == code for e in self.errors)

    @property
    def is_invalid_session(self) -> bool:
        return self.status == 401 and self.has_error_code("INVALID_SESSION_ID")

    @property
    def is_invalid_field(self) -> bool:
        return self.status == 400 and self.has_error_code("INVALID_FIELD")

    def address_integrity_fields(self) -> List[str]:
        """
        Address fields named by FIELD_INTEGRITY_EXCEPTION errors.

        A non-empty result means the caller may retry without address fields.
        """
        fields: List[str] = []
        for error in self.errors:
            if error.get("errorCode") != "FIELD_INTEGRITY_EXCEPTION":
                continue
            error_fields = error.get("fields")
            if not isinstance(error_fields, list):
                continue
            fields.extend(f for f in error_fields if f in ALL_ADDRESS_FIELDS and f not in fields)
        return fields


class SalesforceHTTPError(SalesforceError):
    """Transport failure talking to Salesforce."""

    def __init__(self, reason: Any):
        super().__init__(f"Network error: {reason}")
        self.reason = reason


class SessionExpiredError(SalesforceError):
    """Session invalid and could not be refreshed; the user must reconnect."""

    def __init__(self):
        super().__init__("Salesforce session expired. Please reconnect your Salesforce account.")


class MissingInstanceURLError(ValueError):
    """Credential lacks metadata["instance_url"]."""

    def __init__(self):
        super().__init__(
            "Salesforce credential is missing instance_url in metadata. "
            "Re-connect the Salesforce account."
        )


class SalesforceClient(SalesforceAPI):
    """
    Salesforce Contact API client with automatic token refresh.

    Dependencies are injected so tests can supply a MockTransport-backed
    httpx client, a fake refresher and an isolated capability cache.
    """

    def __init__(
        self,
        token_refresher: TokenRefresher,
        capability_cache: CapabilityCache,
        api_version: str = DEFAULT_API_VERSION,
        http_client: Optional[httpx.Client] = None,
        owns_token_refresher: bool = False,
    ):
        """
        Initialize Salesforce client.

        Args:
            token_refresher: Used when a call reports INVALID_SESSION_ID
            capability_cache: Shared per-org capability cache
            api_version: REST API version segment (e.g. "v59.0")
            http_client: Optional preconfigured httpx client
            owns_token_refresher: Close the refresher in close()
        """
        self.token_refresher = token_refresher
        self.owns_token_refresher = owns_token_refresher
        self.capability_cache = capability_cache
        self.api_version = api_version
        self._client = http_client or httpx.Client()

        logger.info(f"SalesforceClient initialized (api: {api_version})")

    # -------------------------------------------------------------------------
    # HTTP plumbing
    # -------------------------------------------------------------------------

    def _base_url(self, credential: SalesforceCredential) -> str:
        instance_url = credential.instance_url
        if not instance_url:
            raise MissingInstanceURLError()
        return f"{instance_url.rstrip('/')}/services/data/{self.api_version}"

    def _send(
        self,
        credential: SalesforceCredential,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        url = f"{self._base_url(credential)}{path}"
        try:
            return self._client.request(
                method,
                url,
                params=params,
                json=json,
                headers={
                    "Authorization": f"Bearer {credential.token}",
                    "Content-Type": "application/json",
                },
            )
        except httpx.RequestError as e:
            logger.error(f"❌ Salesforce {method} {path} HTTP error: {e}")
            raise SalesforceHTTPError(e) from e

    @staticmethod
    def _error(response: httpx.Response, operation: str) -> SalesforceAPIError:
        body = _decode_body(response)
        logger.error(f"❌ Salesforce {operation} error {response.status_code}: {body}")
        return SalesforceAPIError(response.status_code, body)

    @staticmethod
    def _unexpected_body(response: httpx.Response, body: Any, operation: str) -> SalesforceAPIError:
        logger.error(f"❌ Salesforce {operation} returned an unexpected {response.status_code} body: {body!r}")
        return SalesforceAPIError(response.status_code, body)

    # -------------------------------------------------------------------------
    # Token-refresh wrapper
    # -------------------------------------------------------------------------

    def _with_token_refresh(
        self,
        credential: SalesforceCredential,
        api_call: Callable[[SalesforceCredential], T],
    ) -> T:
        """
        Runs `api_call` with at most one refresh-and-retry.

        The first attempt may fail with INVALID_SESSION_ID; the retry runs
        with the refreshed credential and any 401 there is terminal.
        """
        try:
            return api_call(credential)
        except SalesforceAPIError as e:
            if not e.is_invalid_session:
                raise

        logger.info("🔄 Salesforce session invalid, attempting token refresh...")

        try:
            refreshed = self.token_refresher.refresh_credential(credential)
        except TokenRefreshError as e:
            logger.warning(f"⚠️ Salesforce token refresh failed: {e}")
            raise SessionExpiredError() from e

        try:
            return api_call(refreshed)
        except SalesforceAPIError as e:
            if e.status != 401:
                raise
            logger.warning("⚠️ Salesforce session still invalid after token refresh")
            raise SessionExpiredError() from e

    # -------------------------------------------------------------------------
    # Contact operations
    # -------------------------------------------------------------------------

    def search_contacts(self, credential: SalesforceCredential, query: str) -> List[ContactRecord]:
        """
        Searches contacts whose Name contains `query` (SOQL LIKE, max 10).

        Raises:
            SalesforceAPIError, SalesforceHTTPError, SessionExpiredError
        """
        soql = build_contact_search_soql(query)

        def call(cred: SalesforceCredential) -> List[ContactRecord]:
            response = self._send(cred, "GET", "/query", params={"q": soql})
            if response.status_code != 200:
                raise self._error(response, "search_contacts")
            body = _decode_body(response)
            if not isinstance(body, dict):
                raise self._unexpected_body(response, body, "search_contacts")
            return format_contacts(body.get("records", []))

        return self._with_token_refresh(credential, call)

    def get_contact(self, credential: SalesforceCredential, contact_id: str) -> ContactRecord:
        """
        Fetches a contact by ID.

        Raises:
            SalesforceNotFoundError: On 404 or a record without an Id
        """
        path = f"/sobjects/{CONTACT_OBJECT}/{contact_id}"

        def call(cred: SalesforceCredential) -> ContactRecord:
            response = self._send(cred, "GET", path, params={"fields": ",".join(CONTACT_FIELDS)})
            if response.status_code == 404:
                raise SalesforceNotFoundError(f"Contact {contact_id} not found")
            if response.status_code != 200:
                raise self._error(response, "get_contact")

            body = _decode_body(response)
            if not isinstance(body, dict):
                raise self._unexpected_body(response, body, "get_contact")

            contact = format_contact(body)
            if contact is None:
                raise SalesforceNotFoundError(f"Contact {contact_id} not found")
            return contact

        return self._with_token_refresh(credential, call)

    def update_contact(
        self,
        credential: SalesforceCredential,
        contact_id: str,
        updates: Dict[str, str],
    ) -> str:
        """
        Patches a contact. Salesforce answers 204 No Content on success.

        A 400 with FIELD_INTEGRITY_EXCEPTION on address fields is raised as
        SalesforceAPIError; stripping and resubmitting is left to the caller.

        Returns:
            contact_id
        """
        path = f"/sobjects/{CONTACT_OBJECT}/{contact_id}"

        def call(cred: SalesforceCredential) -> str:
            response = self._send(cred, "PATCH", path, json=updates)
            if response.status_code in (200, 204):
                return contact_id
            if response.status_code == 404:
                raise SalesforceNotFoundError(f"Contact {contact_id} not found")
            raise self._error(response, "update_contact")

        return self._with_token_refresh(credential, call)

    # -------------------------------------------------------------------------
    # Capability detection
    # -------------------------------------------------------------------------

    def uses_address_code_fields(self, credential: SalesforceCredential) -> bool:
        """
        Returns True if MailingStateCode / MailingCountryCode exist in this org.

        Cached per instance_url for the capability cache TTL. Concurrent
        callers on a cold cache may each probe; the probe is read-only.
        """
        cache_key = (ADDRESS_CODE_CAPABILITY, credential.instance_url or "")

        cached = self.capability_cache.get(cache_key)
        if cached is not MISS:
            return cached

        value = self._probe_address_code_support(credential)
        self.capability_cache.put(cache_key, value)
        return value

    def _probe_address_code_support(self, credential: SalesforceCredential) -> bool:
        logger.info(f"🔍 Probing address code field support for {credential.instance_url}")

        try:
            response = self._send(credential, "GET", "/query", params={"q": ADDRESS_CODE_PROBE_SOQL})
        except SalesforceHTTPError as e:
            logger.warning(f"⚠️ Salesforce address capability check HTTP error: {e.reason}")
            return False

        if response.status_code == 200:
            return True

        body = _decode_body(response)
        error = SalesforceAPIError(response.status_code, body)
        if error.is_invalid_field:
            logger.info("Address picklists not enabled for this org (INVALID_FIELD)")
        else:
            logger.warning(
                f"⚠️ Salesforce address capability check: unexpected {response.status_code} - {body}"
            )
        return False

    def close(self) -> None:
        """Closes the HTTP client, and the refresher when this client owns it."""
        self._client.close()
        if self.owns_token_refresher:
            self.token_refresher.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def _decode_body(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text
