"""
Contact Update Workflow.

Applies reviewed suggestions to a Salesforce contact:

- detects the org's address schema (coded vs. free-text)
- normalizes the address part of the payload
- submits non-address fields even when the address part cannot be mapped
  or is rejected by Salesforce
- turns client errors into a ContactUpdateResult for display
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

from contact_sync.core.config import AddressConfig, get_settings
from contact_sync.core.interfaces.crm import SalesforceAPI
from contact_sync.integrations.salesforce.address_normalizer import (
    ContactPayloadError,
    build_contact_update_payload,
    describe_address_error,
)
from contact_sync.integrations.salesforce.client import (
    MissingInstanceURLError,
    SalesforceAPIError,
    SalesforceError,
    SessionExpiredError,
)
from contact_sync.integrations.salesforce.schema import is_address_field
from contact_sync.models.salesforce import SalesforceCredential

logger = logging.getLogger(__name__)

ADDRESS_REJECTED_MESSAGE = (
    "Address update failed: Salesforce rejected the country or state value. "
    "Ensure the values match your org's picklist options."
)

RECONNECT_MESSAGE = "Your Salesforce session has expired. Please reconnect your Salesforce account."


@dataclass
class ContactUpdateResult:
    """Outcome of applying updates to a contact."""
    success: bool
    updated_fields: Dict[str, str] = field(default_factory=dict)
    error: Optional[str] = None
    reconnect_required: bool = False
    address_skipped: bool = False

    @property
    def message(self) -> str:
        if self.error:
            return self.error
        return f"Successfully updated {len(self.updated_fields)} field(s) in Salesforce"


class ContactUpdateService:
    """
    Orchestrates normalization and submission of contact updates.
    """

    def __init__(self, api: SalesforceAPI, address_config: Optional[AddressConfig] = None):
        """
        Args:
            api: Salesforce API implementation (live client or fake)
            address_config: Legacy-mode address options. Defaults to the
                SALESFORCE_DEFAULT_COUNTRY setting.
        """
        self.api = api
        self.address_config = address_config or get_settings().address_config()

    def apply_updates(
        self,
        credential: SalesforceCredential,
        contact_id: str,
        updates: Dict[str, str],
    ) -> ContactUpdateResult:
        """
        Applies `updates` (API field name -> value) to a contact.

        Never raises for Salesforce or normalization failures; they are
        reported on the returned result. A credential without an
        instance_url is reported as reconnect_required.
        """
        try:
            uses_code_fields = self.api.uses_address_code_fields(credential)

            try:
                payload = build_contact_update_payload(updates, uses_code_fields, self.address_config)
            except ContactPayloadError as e:
                logger.warning(f"⚠️ Address normalization failed for contact {contact_id}: {e.reason}")
                return self._submit_without_address(
                    credential, contact_id, e.non_address_payload, describe_address_error(e.reason)
                )

            if not payload:
                return ContactUpdateResult(success=True)

            try:
                self.api.update_contact(credential, contact_id, payload)
            except SalesforceAPIError as e:
                if e.status == 400 and e.address_integrity_fields():
                    non_address = {k: v for k, v in payload.items() if not is_address_field(k)}
                    logger.warning(
                        f"⚠️ Salesforce rejected address fields {e.address_integrity_fields()} "
                        f"for contact {contact_id}, retrying without them"
                    )
                    return self._submit_without_address(
                        credential, contact_id, non_address, ADDRESS_REJECTED_MESSAGE
                    )
                raise

            logger.info(f"✅ Updated {len(payload)} field(s) on Salesforce contact {contact_id}")
            return ContactUpdateResult(success=True, updated_fields=payload)

        except SessionExpiredError:
            return ContactUpdateResult(success=False, error=RECONNECT_MESSAGE, reconnect_required=True)

        except MissingInstanceURLError:
            logger.warning(f"⚠️ Credential {credential.id} has no Salesforce instance_url")
            return ContactUpdateResult(success=False, error=RECONNECT_MESSAGE, reconnect_required=True)

        except SalesforceError as e:
            return ContactUpdateResult(success=False, error=f"Failed to update contact: {_describe(e)}")

    def _submit_without_address(
        self,
        credential: SalesforceCredential,
        contact_id: str,
        non_address: Dict[str, str],
        address_error: str,
    ) -> ContactUpdateResult:
        if non_address:
            self.api.update_contact(credential, contact_id, non_address)

        return ContactUpdateResult(
            success=False,
            updated_fields=non_address,
            error=address_error,
            address_skipped=True,
        )


def _describe(error: SalesforceError) -> str:
    if isinstance(error, SalesforceAPIError):
        return f"{error.status} {error.body}"
    return str(error)
