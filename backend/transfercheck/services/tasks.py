# backend/transfercheck/services/tasks.py
from __future__ import annotations

"""
Celery tasks for the transfercheck backend.

Currently provides:
- record_event_task: append one health check event row.
"""

from celery import Task

from transfercheck.services.celery_app import celery_app
from transfercheck.services.events import append_event_row


@celery_app.task(bind=True, name="transfercheck.services.tasks.record_event_task")
def record_event_task(self: Task, fields: list[str]) -> None:
    """
    Celery task: persist a health check event row.

    Rows never contain credentials; see events.build_event_row.
    """
    append_event_row(fields)
