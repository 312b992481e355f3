from __future__ import annotations

"""backend/transfercheck/services/health/pipeline.py

Staged health check orchestration.

Stages run strictly in order and the pipeline stops at the first failure:

    dns  ->  tcp  ->  auth  ->  list

Every probe or session failure is caught at its own stage boundary and
recorded as a failing StageResult, so nothing raised by the network layer
escapes ``HealthCheckPipeline.run``. The stage sequence of any report is a
prefix of the order above, ending in at most one failing entry.

The pipeline is protocol-agnostic. Protocol specifics (how to authenticate,
how to list, which tips to show) come from a driver implementing
SessionDriverProtocol, selected once at construction time.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional

from transfercheck.config import get_settings
from transfercheck.schemas import (
    DiagnosticReport,
    HealthCheckRequest,
    StageKey,
    StageResult,
    STAGE_ORDER,
)
from transfercheck.services.health.base import (
    SessionDriverProtocol,
    elapsed_ms,
    error_text,
    looks_like_auth_failure,
)
from transfercheck.services.health import probes

logger = logging.getLogger(__name__)

NAME_RESOLUTION_TIPS = [
    "Double-check the hostname.",
    "Try resolving the host from your network (nslookup/dig).",
]


@dataclass
class StageLog:
    """Append-only record of executed stages for one invocation."""

    stages: List[StageResult] = field(default_factory=list)

    def append(self, result: StageResult) -> StageResult:
        expected = STAGE_ORDER[len(self.stages)]
        if result.key is not expected:
            raise ValueError(f"stage {result.key.value} recorded out of order; expected {expected.value}")
        if self.stages and not self.stages[-1].ok:
            raise ValueError("no stage may follow a failed stage")
        self.stages.append(result)
        return result

    @property
    def next_key(self) -> StageKey:
        return STAGE_ORDER[len(self.stages)]


class HealthCheckPipeline:
    """Runs the four-stage diagnostic for one protocol family."""

    def __init__(
        self,
        driver: SessionDriverProtocol,
        *,
        connect_timeout: float | None = None,
    ):
        self.driver = driver
        self.connect_timeout = (
            connect_timeout
            if connect_timeout is not None
            else get_settings().connect_timeout_seconds
        )

    def _report(
        self,
        request: HealthCheckRequest,
        log: StageLog,
        tips: List[str],
        tested_path: Optional[str],
    ) -> DiagnosticReport:
        ok = len(log.stages) == len(STAGE_ORDER) and all(s.ok for s in log.stages)
        return DiagnosticReport(
            ok=ok,
            protocol=request.protocol,
            host=request.host,
            port=request.port,
            tested_path=tested_path,
            stages=list(log.stages),
            tips=[] if ok else tips,
        )

    def run(self, request: HealthCheckRequest) -> DiagnosticReport:
        log = StageLog()
        tested_path = self.driver.listing_path(request)

        # 1) DNS
        resolved = log.append(probes.resolve_host(request.host))
        if not resolved.ok:
            return self._report(request, log, list(NAME_RESOLUTION_TIPS), tested_path)

        # 2) TCP
        connected = log.append(
            probes.probe_transport(request.host, request.port, timeout=self.connect_timeout)
        )
        if not connected.ok:
            return self._report(
                request, log, self.driver.transport_tips(connected.message), tested_path
            )

        # 3) Auth + 4) List
        started = time.perf_counter()
        try:
            with self.driver.open_session(request) as session:
                log.append(
                    StageResult(
                        key=StageKey.CREDENTIAL,
                        ok=True,
                        elapsed_ms=elapsed_ms(started),
                        message="Authenticated successfully",
                    )
                )
                started = time.perf_counter()
                count = session.count_entries(tested_path)
                log.append(
                    StageResult(
                        key=StageKey.ENUMERATION,
                        ok=True,
                        elapsed_ms=elapsed_ms(started),
                        message=f"Directory listing succeeded ({count} items)",
                        details={"count": count},
                    )
                )
        except Exception as exc:  # noqa: BLE001
            # Any library failure is a stage outcome, never a request error.
            message = error_text(exc, "Session operation failed")
            if len(log.stages) == len(STAGE_ORDER):
                # Raised while releasing a session that already listed.
                logger.debug(
                    "Session release failed for %s:%s after listing: %s",
                    request.host,
                    request.port,
                    message,
                )
                return self._report(request, log, [], tested_path)
            auth_shaped = looks_like_auth_failure(message, self.driver.auth_pattern)
            stage = log.next_key
            logger.info(
                "%s stage failed for %s:%s (%s): %s",
                stage.value,
                request.host,
                request.port,
                "authentication" if auth_shaped else "other",
                message,
            )
            log.append(
                StageResult(
                    key=stage,
                    ok=False,
                    elapsed_ms=elapsed_ms(started),
                    message=message,
                    details={"category": "authentication" if auth_shaped else "other"},
                )
            )
            return self._report(
                request, log, self.driver.session_tips(auth_shaped), tested_path
            )

        return self._report(request, log, [], tested_path)
