"""
Abstract Credential Store Interface.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from contact_sync.models.salesforce import SalesforceCredential


class CredentialStoreError(Exception):
    """Raised when a credential cannot be loaded or persisted."""
    pass


class CredentialStore(ABC):
    """
    Abstract credential persistence.

    The token refresher depends only on this contract; SQL and in-memory
    implementations live in contact_sync.services.credential_store.
    """

    @abstractmethod
    def get_credential(self, credential_id: int) -> Optional[SalesforceCredential]:
        """
        Loads a credential by ID.

        Returns:
            The credential, or None if it does not exist
        """
        pass

    @abstractmethod
    def update_credential(
        self,
        credential: SalesforceCredential,
        **changes: Any,
    ) -> SalesforceCredential:
        """
        Persists the given field changes and returns the updated credential.

        Only the fields named in `changes` are touched.

        Raises:
            CredentialStoreError: If the credential cannot be persisted
        """
        pass
