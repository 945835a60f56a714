"""
Application configuration using Pydantic Settings.
Loads environment variables from .env file.
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

SALESFORCE_PRODUCTION_SITE = "https://login.salesforce.com"
SALESFORCE_SANDBOX_SITE = "https://test.salesforce.com"


@dataclass(frozen=True)
class AddressConfig:
    """
    Address handling options passed explicitly into the normalizer.

    Attributes:
        default_country: Country injected in legacy (non-coded) mode when a
            state is supplied without a country. None disables injection.
    """
    default_country: Optional[str] = None


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Application
    # -------------------------------------------------------------------------
    app_debug: bool = Field(default=False, alias="APP_DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # -------------------------------------------------------------------------
    # Credential store database
    # -------------------------------------------------------------------------
    database_url: str = Field(
        default="sqlite:///./contact_sync.db",
        alias="DATABASE_URL",
    )

    # -------------------------------------------------------------------------
    # Salesforce Connected App
    # -------------------------------------------------------------------------
    salesforce_client_id: str | None = Field(
        default=None,
        alias="SALESFORCE_CLIENT_ID",
        description="Salesforce Connected App consumer key",
    )
    salesforce_client_secret: str | None = Field(
        default=None,
        alias="SALESFORCE_CLIENT_SECRET",
        description="Salesforce Connected App consumer secret",
    )
    salesforce_site: str | None = Field(
        default=None,
        alias="SALESFORCE_SITE",
        description="OAuth host, e.g. https://login.salesforce.com (overrides SALESFORCE_SANDBOX)",
    )
    salesforce_sandbox: bool = Field(
        default=False,
        alias="SALESFORCE_SANDBOX",
        description="Use https://test.salesforce.com for token refresh",
    )
    salesforce_api_version: str = Field(
        default="v59.0",
        alias="SALESFORCE_API_VERSION",
    )
    salesforce_default_country: str | None = Field(
        default=None,
        alias="SALESFORCE_DEFAULT_COUNTRY",
        description="Country injected with MailingState in orgs without address picklists",
    )
    salesforce_capability_ttl_seconds: float = Field(
        default=3600.0,
        alias="SALESFORCE_CAPABILITY_TTL_SECONDS",
    )

    @property
    def salesforce_token_site(self) -> str:
        """Resolve the OAuth host used for refresh-token exchanges."""
        if self.salesforce_site:
            return self.salesforce_site.rstrip("/")
        if self.salesforce_sandbox:
            return SALESFORCE_SANDBOX_SITE
        return SALESFORCE_PRODUCTION_SITE

    def address_config(self) -> AddressConfig:
        """Build the explicit address config consumed by the normalizer."""
        default_country = (self.salesforce_default_country or "").strip() or None
        return AddressConfig(default_country=default_country)


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Note: Settings are cached! If you change .env, restart the process.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache. Call this if you need to reload settings."""
    get_settings.cache_clear()
