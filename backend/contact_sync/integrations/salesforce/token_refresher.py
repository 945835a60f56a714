"""
Salesforce OAuth2 Refresh Token Flow.

Access tokens expire according to the org's Connected App session policy
(2 hours by default) while refresh tokens are long-lived. When an API call
reports INVALID_SESSION_ID the client exchanges the stored refresh token for
a new access token here and persists it.

Token endpoint: {site}/services/oauth2/token, where site is
https://login.salesforce.com (production) or https://test.salesforce.com
(sandbox).
"""

import logging
from typing import Any, Optional

import httpx

from contact_sync.core.config import SALESFORCE_PRODUCTION_SITE
from contact_sync.core.interfaces.credentials import CredentialStore, CredentialStoreError
from contact_sync.models.salesforce import SalesforceCredential

logger = logging.getLogger(__name__)

TOKEN_PATH = "/services/oauth2/token"


class TokenRefreshError(Exception):
    """Raised when a Salesforce access token cannot be refreshed."""
    pass


class NoRefreshTokenError(TokenRefreshError):
    """The credential has no refresh token to exchange."""

    def __init__(self):
        super().__init__("Credential has no refresh_token")


class RefreshFailedError(TokenRefreshError):
    """The token endpoint rejected the refresh request."""

    def __init__(self, status: int, body: Any):
        super().__init__(f"Token refresh failed: {status} - {body}")
        self.status = status
        self.body = body


class RefreshHTTPError(TokenRefreshError):
    """The token endpoint could not be reached."""

    def __init__(self, reason: Any):
        super().__init__(f"Network error during token refresh: {reason}")
        self.reason = reason


class PersistFailedError(TokenRefreshError):
    """The new token was issued but could not be stored."""

    def __init__(self, reason: Any):
        super().__init__(f"Failed to persist refreshed token: {reason}")
        self.reason = reason


class TokenRefresher:
    """
    Exchanges refresh tokens for new access tokens.

    Never retries on its own; the API client decides whether to retry the
    original request after a refresh.
    """

    def __init__(
        self,
        client_id: Optional[str],
        client_secret: Optional[str],
        credential_store: CredentialStore,
        site: str = SALESFORCE_PRODUCTION_SITE,
        http_client: Optional[httpx.Client] = None,
    ):
        """
        Initialize token refresher.

        Args:
            client_id: Connected App consumer key
            client_secret: Connected App consumer secret
            credential_store: Where refreshed tokens are persisted
            site: OAuth host (production or sandbox login URL)
            http_client: Optional preconfigured httpx client (tests inject a MockTransport)
        """
        self.client_id = client_id
        self.client_secret = client_secret
        self.credential_store = credential_store
        self.token_url = f"{site.rstrip('/')}{TOKEN_PATH}"
        self._client = http_client or httpx.Client()

    def refresh_credential(self, credential: SalesforceCredential) -> SalesforceCredential:
        """
        Refreshes the access token for `credential`.

        Args:
            credential: Stored credential carrying a refresh token

        Returns:
            Updated credential as persisted by the credential store

        Raises:
            NoRefreshTokenError: If the credential has no refresh token
            RefreshFailedError: If the token endpoint returns non-200
            RefreshHTTPError: On transport failure
            PersistFailedError: If the new token cannot be stored
        """
        if not credential.refresh_token:
            raise NoRefreshTokenError()

        logger.info(f"🔄 Refreshing Salesforce access token for credential {credential.id}...")

        try:
            response = self._client.post(
                self.token_url,
                data={
                    "grant_type": "refresh_token",
                    "client_id": self.client_id or "",
                    "client_secret": self.client_secret or "",
                    "refresh_token": credential.refresh_token,
                },
            )
        except httpx.RequestError as e:
            logger.warning(f"⚠️ Salesforce token refresh HTTP error: {e}")
            raise RefreshHTTPError(e) from e

        if response.status_code != 200:
            body = _decode_body(response)
            logger.warning(f"⚠️ Salesforce token refresh failed {response.status_code}: {body}")
            raise RefreshFailedError(response.status_code, body)

        data = _decode_body(response)
        if not isinstance(data, dict):
            raise RefreshFailedError(response.status_code, data)

        return self._persist_new_token(credential, data)

    def _persist_new_token(
        self,
        credential: SalesforceCredential,
        data: dict,
    ) -> SalesforceCredential:
        new_token = data.get("access_token")
        if not new_token:
            raise RefreshFailedError(200, data)

        changes = {"token": new_token}

        # Refresh responses may move the org to a new instance
        new_instance_url = data.get("instance_url")
        if new_instance_url:
            changes["metadata"] = {**(credential.metadata or {}), "instance_url": new_instance_url}

        try:
            updated = self.credential_store.update_credential(credential, **changes)
        except CredentialStoreError as e:
            logger.error(f"❌ Failed to persist refreshed Salesforce token: {e}")
            raise PersistFailedError(e) from e

        logger.info(f"✅ Salesforce access token refreshed for credential {credential.id}")
        return updated

    def close(self) -> None:
        """Closes the HTTP client."""
        self._client.close()


def _decode_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text
