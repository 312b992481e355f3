from __future__ import annotations

"""backend/transfercheck/config/settings.py

Application configuration using environment-driven settings.

This module centralizes:
- database connection URL (event + waitlist tables)
- Celery / Redis configuration
- CORS configuration
- Statsig credentials
- Probe and session timeouts for the health check
- Auth-vocabulary patterns used to label session failures
- Rate limiting quota and window
"""
from functools import lru_cache
from typing import List

from pydantic import AnyHttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
  app_name: str = "transfercheck-backend"
  environment: str = "development"

  # Database
  database_url: str = "sqlite:///./transfercheck.db"

  # Celery / Redis
  celery_broker_url: str = "redis://redis:6379/1"
  celery_result_backend: str = "redis://redis:6379/2"

  # CORS
  allowed_origins: List[AnyHttpUrl] = [
      "http://localhost:3000",
      "http://127.0.0.1:3000",
  ]

  # Statsig (disabled when empty)
  statsig_server_secret: str | None = None

  # Health check timeouts (seconds)
  connect_timeout_seconds: float = 10.0
  session_timeout_seconds: float = 10.0

  # Session failure vocabulary (case-insensitive regular expressions).
  # Best-effort: these match library error text, not structured codes.
  ftp_auth_pattern: str = r"auth|login|530|password|user"
  sftp_auth_pattern: str = r"auth|handshake|permission|denied"

  # Rate limiting
  rate_limit_per_minute: int = 20
  rate_limit_window_seconds: int = 60
  rate_limit_redis_url: str | None = None

  # Persistence sink for health check events
  events_enabled: bool = True

  model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
  """Return a cached Settings instance."""
  return Settings()
