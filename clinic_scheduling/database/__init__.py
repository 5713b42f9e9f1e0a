"""Database engine, sessions and declarative base."""

from clinic_scheduling.database.async_db import (
    dispose_async_engine,
    get_async_db,
    get_async_engine,
)
from clinic_scheduling.database.base import Base, TimestampMixin

__all__ = [
    "Base",
    "TimestampMixin",
    "dispose_async_engine",
    "get_async_db",
    "get_async_engine",
]
