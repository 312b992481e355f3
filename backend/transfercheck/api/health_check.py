# backend/transfercheck/api/health_check.py
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, BackgroundTasks, Depends

from transfercheck import schemas
from transfercheck.api.deps import enforce_rate_limit, get_event_sink
from transfercheck.services.events import EventSink, build_event_row
from transfercheck.services.health import run_health_check
from transfercheck.services.statsig_client import log_health_check_metric

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health-check", tags=["health-check"])


def log_metric(protocol: str, host: str, ok: bool, **extra) -> None:
    """Emit the HC_METRIC breadcrumb. Never pass credentials here."""
    record = {
        "protocol": protocol,
        "host": host,
        "ok": ok,
        "ts": datetime.now(timezone.utc).isoformat(),
        **extra,
    }
    logger.info("HC_METRIC %s", json.dumps(record))


@router.post("", response_model=schemas.DiagnosticReport)
def health_check(
    payload: schemas.HealthCheckRequest,
    background_tasks: BackgroundTasks,
    caller_id: str = Depends(enforce_rate_limit),
    sink: EventSink = Depends(get_event_sink),
) -> schemas.DiagnosticReport:
    """
    Run the staged diagnostic and return its report.

    The response is 200 whenever the pipeline ran, whether or not the
    remote endpoint passed. Requests rejected before the pipeline (bad body,
    throttled) are turned into fallback bodies by the app's exception
    handlers.
    """
    report = run_health_check(payload)

    protocol = payload.protocol.value
    log_metric(protocol, payload.host, report.ok)
    background_tasks.add_task(
        log_health_check_metric,
        protocol=protocol,
        host=payload.host,
        ok=report.ok,
        caller=caller_id,
    )
    background_tasks.add_task(
        sink.append_row,
        build_event_row(
            protocol=protocol, host=payload.host, ok=report.ok, caller=caller_id
        ),
    )
    return report
