# totp_api/app/db/base.py
"""
SQLAlchemy declarative base, plus re-exports of the session components.
"""
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for the user and credential tables."""
    pass


from totp_api.app.db.session import (
    engine,
    AsyncSessionLocal,
    get_db,
)

__all__ = [
    "Base",
    "engine",
    "AsyncSessionLocal",
    "get_db",
]
