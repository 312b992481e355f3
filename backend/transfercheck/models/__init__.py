# backend/transfercheck/models/__init__.py
from __future__ import annotations

"""
ORM models for the append-only tables written next to the health check.

This module depends on:
- transfercheck.db.session.Base for the declarative base

Models:
- HealthCheckEvent: one row per health check request (no credentials)
- WaitlistEntry: one row per captured email address

Nothing here stores diagnostic reports; rows are written and never updated.
"""

import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, String

from transfercheck.db.session import Base


class HealthCheckEvent(Base):
    __tablename__ = "health_check_events"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    timestamp = Column(String, nullable=False)  # ISO-8601, as sent by the caller
    protocol = Column(String, nullable=False)
    host = Column(String, nullable=False)  # sanitized, never user@host:port/path
    ok = Column(String, nullable=False)  # "true" / "false"
    event = Column(String, nullable=False)
    caller = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class WaitlistEntry(Base):
    __tablename__ = "waitlist_entries"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String, nullable=False, index=True)
    source = Column(String, nullable=False, default="homepage")
    protocol = Column(String, nullable=True)
    host = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
