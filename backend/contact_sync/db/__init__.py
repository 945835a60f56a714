# Database configuration and session management
from .base import Base
from .session import engine, get_session, init_database, session_maker

__all__ = ["Base", "engine", "get_session", "init_database", "session_maker"]
