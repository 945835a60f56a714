"""
Abstract AI Suggestion Generator Interface.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Optional

from pydantic import BaseModel


class GeneratedSuggestion(BaseModel):
    """Raw field suggestion extracted from a meeting transcript."""

    field: str
    value: str
    context: Optional[str] = None
    timestamp: Optional[str] = None


class SuggestionGenerator(ABC):
    """
    Produces contact field suggestions for a meeting.

    Generation itself (prompting, transcript handling) lives outside this
    package; implementations are injected into SalesforceSuggestions.
    """

    @abstractmethod
    def generate_salesforce_suggestions(self, meeting: Any) -> List[GeneratedSuggestion]:
        """
        Returns field suggestions keyed by Salesforce API field names.

        Example:
            >>> generator.generate_salesforce_suggestions(meeting)
            [GeneratedSuggestion(field="Phone", value="555-0000", context="call me at...", timestamp="04:10")]
        """
        pass
