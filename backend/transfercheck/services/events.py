from __future__ import annotations

"""backend/transfercheck/services/events.py

Fire-and-forget persistence of health check events.

An event row is an ordered list of strings:

    [timestamp, protocol, host, ok, event, caller]

Rows are appended to the ``health_check_events`` table. Writing a row must
never block or fail a health check, so every sink swallows its own errors.
"""

import logging
import re
from datetime import datetime, timezone
from typing import Protocol, Sequence

from transfercheck import models
from transfercheck.db.session import SessionLocal

logger = logging.getLogger(__name__)

EVENT_NAME = "health_check"

_SCHEME = re.compile(r"^[a-z]+://", re.IGNORECASE)


def sanitize_host(raw: str) -> str:
    """Reduce user input to a bare lowercase host.

    "sftp://user@host.com:22/incoming" -> "host.com"
    "user@10.0.0.5"                    -> "10.0.0.5"
    """
    value = _SCHEME.sub("", (raw or "").strip())
    value = re.split(r"[/?#]", value, maxsplit=1)[0]
    if "@" in value:
        value = value.rsplit("@", 1)[-1]
    value = value.split(":", 1)[0]
    return value.strip().lower()


def build_event_row(*, protocol: str, host: str, ok: bool, caller: str) -> list[str]:
    return [
        datetime.now(timezone.utc).isoformat(),
        protocol,
        sanitize_host(host),
        "true" if ok else "false",
        EVENT_NAME,
        caller,
    ]


def append_event_row(fields: Sequence[str]) -> None:
    """Insert one event row. Raises on storage errors; callers decide."""
    timestamp, protocol, host, ok, event, caller = (list(fields) + [""] * 6)[:6]
    db = SessionLocal()
    try:
        db.add(
            models.HealthCheckEvent(
                timestamp=timestamp,
                protocol=protocol,
                host=host,
                ok=ok,
                event=event or EVENT_NAME,
                caller=caller or None,
            )
        )
        db.commit()
    finally:
        db.close()


class EventSink(Protocol):
    def append_row(self, fields: Sequence[str]) -> None:
        ...


class NullEventSink:
    def append_row(self, fields: Sequence[str]) -> None:
        return None


class CeleryEventSink:
    """Dispatch rows to the Celery worker, writing inline if dispatch fails."""

    def append_row(self, fields: Sequence[str]) -> None:
        row = [str(f) for f in fields]
        try:
            from transfercheck.services.tasks import record_event_task

            record_event_task.delay(row)
            return
        except Exception as exc:  # noqa: BLE001
            logger.debug("Event dispatch failed, writing inline: %s", exc)

        try:
            append_event_row(row)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Health check event was not recorded: %s", exc)
