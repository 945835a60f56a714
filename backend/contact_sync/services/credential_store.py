"""
Credential Store implementations.

The SQL store backs production; the in-memory store backs tests and local
tooling.
"""

import logging
from typing import Any, Callable, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from contact_sync.core.interfaces.credentials import CredentialStore, CredentialStoreError
from contact_sync.models.credential import UserCredential
from contact_sync.models.salesforce import SalesforceCredential

logger = logging.getLogger(__name__)

# Credential fields a store is allowed to change
UPDATABLE_FIELDS = frozenset({"token", "refresh_token", "metadata"})


def _validate_changes(changes: Dict[str, Any]) -> None:
    unknown = set(changes) - UPDATABLE_FIELDS
    if unknown:
        raise CredentialStoreError(f"Cannot update credential fields: {sorted(unknown)}")


class InMemoryCredentialStore(CredentialStore):
    """Dictionary-backed store keyed by credential ID."""

    def __init__(self):
        self._credentials: Dict[int, SalesforceCredential] = {}
        self._next_id = 1

    def add(self, credential: SalesforceCredential) -> SalesforceCredential:
        """Stores a credential, assigning an ID if it has none."""
        if credential.id is None:
            credential = credential.model_copy(update={"id": self._next_id})
        self._next_id = max(self._next_id, credential.id) + 1
        self._credentials[credential.id] = credential
        return credential

    def get_credential(self, credential_id: int) -> Optional[SalesforceCredential]:
        return self._credentials.get(credential_id)

    def update_credential(
        self,
        credential: SalesforceCredential,
        **changes: Any,
    ) -> SalesforceCredential:
        _validate_changes(changes)

        if credential.id is None or credential.id not in self._credentials:
            raise CredentialStoreError(f"Credential {credential.id} not found")

        updated = self._credentials[credential.id].model_copy(update=changes)
        self._credentials[credential.id] = updated
        return updated


class SQLCredentialStore(CredentialStore):
    """
    SQLAlchemy-backed store over the user_credentials table.

    Args:
        session_factory: Callable returning a new Session (e.g. a sessionmaker)
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    @staticmethod
    def _to_credential(row: UserCredential) -> SalesforceCredential:
        return SalesforceCredential(
            id=row.id,
            user_id=row.user_id,
            token=row.token,
            refresh_token=row.refresh_token,
            metadata=dict(row.org_metadata or {}),
        )

    def add(self, credential: SalesforceCredential) -> SalesforceCredential:
        """Inserts a new credential row and returns it with its ID."""
        with self._session_factory() as session:
            try:
                row = UserCredential(
                    user_id=credential.user_id,
                    provider="salesforce",
                    token=credential.token,
                    refresh_token=credential.refresh_token,
                    org_metadata=dict(credential.metadata or {}),
                )
                session.add(row)
                session.commit()
                session.refresh(row)
                return self._to_credential(row)
            except SQLAlchemyError as e:
                session.rollback()
                logger.error(f"❌ Failed to store credential: {e}")
                raise CredentialStoreError(f"Failed to store credential: {e}") from e

    def get_credential(self, credential_id: int) -> Optional[SalesforceCredential]:
        with self._session_factory() as session:
            try:
                row = session.get(UserCredential, credential_id)
            except SQLAlchemyError as e:
                raise CredentialStoreError(f"Failed to load credential {credential_id}: {e}") from e
            return self._to_credential(row) if row else None

    def update_credential(
        self,
        credential: SalesforceCredential,
        **changes: Any,
    ) -> SalesforceCredential:
        _validate_changes(changes)

        with self._session_factory() as session:
            try:
                row = session.get(UserCredential, credential.id) if credential.id is not None else None
                if row is None:
                    raise CredentialStoreError(f"Credential {credential.id} not found")

                if "token" in changes:
                    row.token = changes["token"]
                if "refresh_token" in changes:
                    row.refresh_token = changes["refresh_token"]
                if "metadata" in changes:
                    row.org_metadata = dict(changes["metadata"] or {})

                session.commit()
                session.refresh(row)
                return self._to_credential(row)

            except SQLAlchemyError as e:
                session.rollback()
                logger.error(f"❌ Failed to persist credential {credential.id}: {e}")
                raise CredentialStoreError(f"Failed to persist credential: {e}") from e
