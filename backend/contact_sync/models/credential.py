"""
UserCredential model - stored OAuth credentials for connected CRM orgs.
"""

from datetime import datetime
from typing import Any, Dict

from sqlalchemy import JSON, DateTime, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from contact_sync.db.base import Base


class UserCredential(Base):
    """
    SQLAlchemy model for a user's CRM OAuth credential.

    The access token is replaced on every refresh; the refresh token is
    long-lived and only changes on re-authorization. Org details such as
    instance_url live in the JSON metadata column.
    """

    __tablename__ = "user_credentials"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    user_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)

    provider: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default="salesforce",
        comment="CRM provider the credential belongs to",
    )

    token: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Current OAuth access token",
    )

    refresh_token: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        comment="Long-lived OAuth refresh token",
    )

    # "metadata" is reserved on declarative classes
    org_metadata: Mapped[Dict[str, Any]] = mapped_column(
        "metadata",
        JSON,
        nullable=False,
        default=dict,
        comment="Org details, e.g. instance_url",
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    def __repr__(self) -> str:
        return f"<UserCredential(id={self.id}, user_id={self.user_id}, provider='{self.provider}')>"
