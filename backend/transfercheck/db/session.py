from __future__ import annotations

"""
Database session and Base ORM declarations.

This module depends on:
- transfercheck.config.settings.get_settings for the DATABASE_URL
It is imported by:
- transfercheck.models (for Base)
- transfercheck.main (for engine/Base)
- the event sink and waitlist router (via SessionLocal or get_db)
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from transfercheck.config import get_settings

# Load settings once; get_settings() is cached in transfercheck.config.settings
settings = get_settings()

# SQLite connections are shared between the request threadpool and
# background tasks.
_connect_args = (
    {"check_same_thread": False}
    if settings.database_url.startswith("sqlite")
    else {}
)

engine = create_engine(
    settings.database_url,
    connect_args=_connect_args,
    future=True,
)

# Session factory used throughout the app
SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
    future=True,
)

# Base class for all ORM models
Base = declarative_base()


def get_db():
    """
    FastAPI dependency that yields a DB session and ensures it is closed.

    Example usage in a route:
        from transfercheck.db.session import get_db
        def endpoint(db: Session = Depends(get_db)): ...
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
