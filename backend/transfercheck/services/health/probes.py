"""Network probes for the first two health check stages."""

from __future__ import annotations

import logging
import socket
import time

from transfercheck.schemas import StageKey, StageResult
from transfercheck.services.health.base import elapsed_ms, error_text

logger = logging.getLogger(__name__)

_FAMILIES = {socket.AF_INET: 4, socket.AF_INET6: 6}


def resolve_host(host: str) -> StageResult:
    """Resolve ``host`` to its first address. Bounded by the OS resolver timeout."""
    started = time.perf_counter()
    try:
        infos = socket.getaddrinfo(host, None, proto=socket.IPPROTO_TCP)
        if not infos:
            raise socket.gaierror(f"no addresses returned for {host}")
        family, _type, _proto, _canon, sockaddr = infos[0]
    except (OSError, UnicodeError) as exc:
        logger.info("DNS resolution failed for %s: %s", host, exc)
        return StageResult(
            key=StageKey.NAME_RESOLUTION,
            ok=False,
            elapsed_ms=elapsed_ms(started),
            message=f"DNS resolution failed: {error_text(exc, 'unknown error')}",
        )

    address = sockaddr[0]
    return StageResult(
        key=StageKey.NAME_RESOLUTION,
        ok=True,
        elapsed_ms=elapsed_ms(started),
        message=f"DNS resolved to {address}",
        details={"address": address, "family": _FAMILIES.get(family, family)},
    )


def probe_transport(host: str, port: int, timeout: float = 10.0) -> StageResult:
    """Open a TCP connection to host:port and close it straight away."""
    started = time.perf_counter()
    try:
        sock = socket.create_connection((host, port), timeout=timeout)
    except TimeoutError:
        message = "TCP connect timeout"
    except OSError as exc:
        message = error_text(exc, "TCP connection failed")
    else:
        sock.close()
        return StageResult(
            key=StageKey.TRANSPORT,
            ok=True,
            elapsed_ms=elapsed_ms(started),
            message=f"TCP connection succeeded on {host}:{port}",
        )

    logger.info("TCP probe failed for %s:%s: %s", host, port, message)
    return StageResult(
        key=StageKey.TRANSPORT,
        ok=False,
        elapsed_ms=elapsed_ms(started),
        message=message,
    )
