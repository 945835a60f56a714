"""
Salesforce Contact Suggestions.

Turns AI-extracted field values from a meeting into reviewable suggestions
and reconciles them against the live Salesforce contact:

1. generate_suggestions_from_meeting() - raw suggestions, no contact data yet
2. merge_with_contact() - fill current_value from the contact and drop
   suggestions that would not change anything
"""

import logging
from typing import Any, List, Optional

from pydantic import BaseModel

from contact_sync.core.interfaces.suggestions import SuggestionGenerator
from contact_sync.integrations.salesforce.schema import get_contact_key, get_field_label
from contact_sync.models.salesforce import ContactRecord

logger = logging.getLogger(__name__)


class SuggestionGenerationError(Exception):
    """Raised when the AI generator fails to produce suggestions."""
    pass


class Suggestion(BaseModel):
    """A proposed contact field change awaiting user review."""

    field: str
    label: str
    current_value: Optional[str] = None
    new_value: str
    context: Optional[str] = None
    timestamp: Optional[str] = None
    apply: bool = True
    has_change: bool = True


def get_contact_field(contact: Optional[ContactRecord], field: str) -> Optional[str]:
    """Current contact value for an API field; None if unmapped or no contact."""
    if contact is None:
        return None
    return contact.get(get_contact_key(field))


def merge(suggestions: List[Suggestion], contact: Optional[ContactRecord]) -> List[Suggestion]:
    """
    Merges suggestions with a Salesforce contact.

    Sets current_value from the contact, recomputes has_change, forces
    apply=True and removes suggestions whose value already matches.
    Surviving suggestions keep their input order.

    Example:
        >>> merge([Suggestion(field="Email", label="Email", new_value="jane@example.com")],
        ...       ContactRecord(id="003", email="jane@example.com"))
        []
    """
    merged: List[Suggestion] = []
    for suggestion in suggestions:
        current_value = get_contact_field(contact, suggestion.field)
        updated = suggestion.model_copy(
            update={
                "current_value": current_value,
                "has_change": current_value != suggestion.new_value,
                "apply": True,
            }
        )
        if updated.has_change:
            merged.append(updated)
    return merged


class SalesforceSuggestions:
    """
    Suggestion service backed by an injected AI generator.
    """

    def __init__(self, generator: SuggestionGenerator):
        self.generator = generator

    def generate_suggestions_from_meeting(self, meeting: Any) -> List[Suggestion]:
        """
        Generates suggestions without contact data.

        Every suggestion has current_value=None and has_change=True; call
        merge_with_contact() once the contact is known.

        Raises:
            SuggestionGenerationError: If the generator fails
        """
        try:
            generated = self.generator.generate_salesforce_suggestions(meeting)
        except Exception as e:
            logger.error(f"❌ Salesforce suggestion generation failed: {e}")
            raise SuggestionGenerationError(str(e)) from e

        suggestions = [
            Suggestion(
                field=item.field,
                label=get_field_label(item.field),
                current_value=None,
                new_value=item.value,
                context=item.context,
                timestamp=item.timestamp,
                apply=True,
                has_change=True,
            )
            for item in generated
        ]

        logger.info(f"✅ Generated {len(suggestions)} Salesforce suggestion(s)")
        return suggestions

    def merge_with_contact(
        self,
        suggestions: List[Suggestion],
        contact: Optional[ContactRecord],
    ) -> List[Suggestion]:
        """See merge()."""
        return merge(suggestions, contact)
