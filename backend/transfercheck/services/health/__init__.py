from __future__ import annotations

"""
Health check engine package.

This package provides:
- Name resolution and transport probes (probes.py)
- Protocol session drivers for FTP/FTPS (ftp.py) and SFTP (sftp.py)
- The staged pipeline (pipeline.py)
- A high-level run_health_check(request) convenience helper

The API layer only calls run_health_check; it never touches drivers.
"""

import logging
import time

from transfercheck.schemas import DiagnosticReport, HealthCheckRequest, TransferProtocol
from transfercheck.services.docs import resolve_help_link
from transfercheck.services.health.base import SessionDriverProtocol, elapsed_ms
from transfercheck.services.health.pipeline import HealthCheckPipeline  # noqa: F401

logger = logging.getLogger(__name__)


def get_session_driver(protocol: TransferProtocol) -> SessionDriverProtocol:
    """Return the driver for a protocol. FTP and FTPS share one driver."""
    # Import inside the function so paramiko is only loaded when needed.
    if protocol is TransferProtocol.SFTP:
        from transfercheck.services.health.sftp import SftpSessionDriver

        return SftpSessionDriver()

    from transfercheck.services.health.ftp import FtpSessionDriver

    return FtpSessionDriver()


def run_health_check(
    request: HealthCheckRequest,
    pipeline: HealthCheckPipeline | None = None,
) -> DiagnosticReport:
    """
    Run the full diagnostic for one request and finalize the report.

    Wall-clock time for the whole invocation is measured here on every
    outcome, including a failure in the very first stage.
    """
    started = time.perf_counter()
    pipeline = pipeline or HealthCheckPipeline(get_session_driver(request.protocol))
    report = pipeline.run(request)

    failed = report.failed_stage
    help_link = (
        resolve_help_link(request.protocol, failed.key, failed.message)
        if failed is not None
        else None
    )
    logger.debug(
        "Health check finished for %s:%s ok=%s stages=%d",
        request.host,
        request.port,
        report.ok,
        len(report.stages),
    )
    return report.model_copy(
        update={"total_elapsed_ms": elapsed_ms(started), "help_link": help_link}
    )
