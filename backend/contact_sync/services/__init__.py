# Business logic services
from .contact_update import ContactUpdateResult, ContactUpdateService
from .salesforce_suggestions import SalesforceSuggestions, Suggestion, merge

__all__ = [
    "ContactUpdateResult",
    "ContactUpdateService",
    "SalesforceSuggestions",
    "Suggestion",
    "merge",
]
