# backend/transfercheck/services/celery_app.py
from __future__ import annotations

"""
Celery application configuration for background event persistence.

This module defines a single Celery instance:

    celery_app = Celery(...)

It is used by:
- transfercheck.services.tasks (for task definitions)
- the worker entrypoint via
  `celery -A transfercheck.services.celery_app.celery_app worker -Q events`

Health checks themselves always run inline in the request; only the
fire-and-forget event rows go through the queue.
"""

from celery import Celery

from transfercheck.config import get_settings

settings = get_settings()

celery_app = Celery(
    "transfercheck_tasks",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=["transfercheck.services.tasks"],
)

# Event rows are best effort; give up quickly when the broker is down.
celery_app.conf.broker_connection_timeout = 2
celery_app.conf.task_publish_retry = False
celery_app.conf.task_ignore_result = True

# Route event tasks to a dedicated queue
celery_app.conf.task_routes = {
    "transfercheck.services.tasks.*": {"queue": "events"},
}
