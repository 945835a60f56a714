"""
Abstract Salesforce API Interface.
Defines the contract the contact sync workflow depends on, so the live
client can be swapped for a fake at construction time.
"""

from abc import ABC, abstractmethod
from typing import Dict, List

from contact_sync.models.salesforce import ContactRecord, SalesforceCredential


class SalesforceAPI(ABC):
    """
    Abstract base class for Salesforce contact operations.

    Every call takes the caller's credential; implementations may refresh
    it transparently but never mutate it.
    """

    @abstractmethod
    def search_contacts(self, credential: SalesforceCredential, query: str) -> List[ContactRecord]:
        """
        Searches contacts whose name contains `query`.

        Returns:
            Up to 10 matching contacts

        Example:
            >>> api.search_contacts(credential, "Jane")
            [ContactRecord(id='003...', firstname='Jane', ...)]
        """
        pass

    @abstractmethod
    def get_contact(self, credential: SalesforceCredential, contact_id: str) -> ContactRecord:
        """
        Fetches a single contact by record ID.

        Raises:
            SalesforceNotFoundError: If no contact has that ID
        """
        pass

    @abstractmethod
    def update_contact(
        self,
        credential: SalesforceCredential,
        contact_id: str,
        updates: Dict[str, str],
    ) -> str:
        """
        Patches a contact with API field name -> value updates.

        Returns:
            The acknowledged contact ID
        """
        pass

    @abstractmethod
    def uses_address_code_fields(self, credential: SalesforceCredential) -> bool:
        """
        Returns True if the org has State/Country picklists enabled,
        i.e. MailingStateCode / MailingCountryCode are valid Contact fields.
        """
        pass
