"""
Database subsystem: async SQLAlchemy engine, sessions, and ORM base classes.
"""

from petengine.core.database.base import Base, IdMixin, TimestampMixin, utc_now
from petengine.core.database.service import ConnectionMetrics, DatabaseService

__all__ = [
    "Base",
    "IdMixin",
    "TimestampMixin",
    "utc_now",
    "DatabaseService",
    "ConnectionMetrics",
]
