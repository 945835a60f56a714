"""
Database session management using SQLAlchemy 2.0.
"""

from collections.abc import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from contact_sync.core.config import get_settings
from contact_sync.db.base import Base

settings = get_settings()

engine = create_engine(
    settings.database_url,
    echo=settings.app_debug,
    pool_pre_ping=True,
)

session_maker = sessionmaker(
    bind=engine,
    class_=Session,
    expire_on_commit=False,
    autoflush=False,
)


def get_session() -> Generator[Session, None, None]:
    """
    Provides a session that commits on success and rolls back on error.

    Usage:
        with contextlib.contextmanager(get_session)() as session:
            ...
    """
    with session_maker() as session:
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise


def init_database() -> None:
    """Create all tables registered on Base."""
    # Import all models to ensure they're registered with Base
    from contact_sync.models import credential  # noqa: F401

    Base.metadata.create_all(bind=engine)
