"""
Salesforce data models.

Credential and ContactRecord are immutable; updated credentials are produced
as copies by the token refresher and credential store.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class SalesforceCredential(BaseModel):
    """
    OAuth credential for one connected Salesforce org.

    `metadata["instance_url"]` is the org-specific API base captured at
    authorization time (e.g. https://acme.my.salesforce.com).
    """

    model_config = ConfigDict(frozen=True)

    id: Optional[int] = None
    user_id: Optional[int] = None
    token: str
    refresh_token: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @property
    def instance_url(self) -> Optional[str]:
        url = (self.metadata or {}).get("instance_url")
        return url or None


class ContactRecord(BaseModel):
    """Flat Salesforce contact keyed by internal field names."""

    model_config = ConfigDict(frozen=True)

    id: str
    firstname: Optional[str] = None
    lastname: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    title: Optional[str] = None
    mailing_street: Optional[str] = None
    mailing_city: Optional[str] = None
    mailing_state: Optional[str] = None
    mailing_postal_code: Optional[str] = None
    mailing_country: Optional[str] = None
    display_name: str = ""

    def get(self, key: Optional[str]) -> Optional[str]:
        """Returns the value for an internal key, None for unknown keys."""
        if not key or key not in type(self).model_fields:
            return None
        return getattr(self, key)
