"""Database models and connection management."""

from .connection import get_async_session, init_database, reset_database
from .models import Base, Posts

__all__ = ["Base", "Posts", "get_async_session", "init_database", "reset_database"]
