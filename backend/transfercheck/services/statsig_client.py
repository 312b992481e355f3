"""Lightweight Statsig integration for health check metrics."""
from __future__ import annotations

import logging
from typing import Any

from statsig import StatsigEvent, StatsigOptions, StatsigServer, StatsigUser

from transfercheck.config import get_settings
from transfercheck.services.events import sanitize_host

logger = logging.getLogger(__name__)

HEALTH_CHECK_EVENT = "health_check"


class _StatsigAdapter:
    def __init__(self, secret_key: str | None, environment: str):
        self._client: StatsigServer | None = None
        if not secret_key:
            return

        try:
            self._client = StatsigServer()
            self._client.initialize(
                secret_key,
                options=StatsigOptions(tier=environment),
            )
        except Exception as exc:  # noqa: BLE001
            logger.warning("Statsig initialization failed: %s", exc)
            self._client = None

    @property
    def enabled(self) -> bool:
        return self._client is not None

    def log_event(
        self,
        *,
        user_id: str,
        event_name: str,
        value: float | int | str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        if not self._client:
            return

        try:
            event = StatsigEvent(
                StatsigUser(user_id), event_name, value=value, metadata=metadata
            )
            self._client.log_event(event)
        except Exception as exc:  # noqa: BLE001
            logger.debug("Statsig event failed: %s", exc)

    def shutdown(self) -> None:
        if not self._client:
            return

        try:
            self._client.shutdown()
        except Exception as exc:  # noqa: BLE001
            logger.debug("Statsig shutdown failed: %s", exc)


_statsig_client: _StatsigAdapter | None = None


def get_statsig_client() -> _StatsigAdapter:
    global _statsig_client
    if _statsig_client is None:
        settings = get_settings()
        _statsig_client = _StatsigAdapter(
            settings.statsig_server_secret, settings.environment
        )
    return _statsig_client


def log_health_check_metric(
    *,
    protocol: str,
    host: str,
    ok: bool,
    caller: str = "backend",
) -> None:
    """Record one health check outcome. Never carries credentials."""
    client = get_statsig_client()
    client.log_event(
        user_id=caller,
        event_name=HEALTH_CHECK_EVENT,
        value=protocol,
        metadata={
            "protocol": protocol,
            "host": sanitize_host(host),
            "ok": "true" if ok else "false",
        },
    )


def shutdown_statsig() -> None:
    global _statsig_client
    if _statsig_client is None:
        return
    _statsig_client.shutdown()
    _statsig_client = None
