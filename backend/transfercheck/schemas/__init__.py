from __future__ import annotations

"""
Pydantic schemas for request/response models.

This module is the API contract layer. It is used by:
- API routes (request validation, response serialization)
- the health check pipeline (StageResult / DiagnosticReport)

JSON field names are camelCase (``elapsedMs``, ``privateKey``); Python
attributes stay snake_case. Both spellings are accepted on input.
"""

import enum
from typing import Any, List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    SecretStr,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------- Enumerations ----------


class TransferProtocol(str, enum.Enum):
    FTP = "ftp"
    FTPS = "ftps"
    SFTP = "sftp"


# Long spellings accepted on input.
PROTOCOL_ALIASES: dict[str, TransferProtocol] = {
    "plain": TransferProtocol.FTP,
    "secure-plain": TransferProtocol.FTPS,
    "secure-shell": TransferProtocol.SFTP,
}


def _normalize_protocol(value: Any) -> Any:
    if isinstance(value, str) and value in PROTOCOL_ALIASES:
        return PROTOCOL_ALIASES[value]
    return value


DEFAULT_PORTS: dict[TransferProtocol, int] = {
    TransferProtocol.FTP: 21,
    TransferProtocol.FTPS: 21,
    TransferProtocol.SFTP: 22,
}


class StageKey(str, enum.Enum):
    NAME_RESOLUTION = "dns"
    TRANSPORT = "tcp"
    CREDENTIAL = "auth"
    ENUMERATION = "list"


STAGE_ORDER: tuple[StageKey, ...] = (
    StageKey.NAME_RESOLUTION,
    StageKey.TRANSPORT,
    StageKey.CREDENTIAL,
    StageKey.ENUMERATION,
)


# ---------- Health check ----------


class StageResult(_CamelModel):
    """Outcome of one executed stage. Immutable once recorded."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    key: StageKey
    ok: bool
    elapsed_ms: Optional[int] = Field(default=None, ge=0)
    message: str
    details: Optional[dict[str, Any]] = None


class HealthCheckRequest(_CamelModel):
    """
    Inbound health check parameters.

    ``port`` defaults per protocol (21 for FTP/FTPS, 22 for SFTP).
    ``secure`` only matters for FTP: it upgrades the session to explicit FTPS.
    ``private_key``/``passphrase`` only matter for SFTP, where a key wins over
    ``password``.
    """

    protocol: TransferProtocol
    host: str = Field(min_length=1)
    port: Optional[int] = Field(default=None, ge=1, le=65535)
    username: Optional[str] = None
    password: Optional[SecretStr] = None
    path: Optional[str] = None
    secure: Optional[bool] = None
    private_key: Optional[SecretStr] = None
    passphrase: Optional[SecretStr] = None

    @field_validator("protocol", mode="before")
    @classmethod
    def normalize_protocol(cls, value: Any) -> Any:
        return _normalize_protocol(value)

    @model_validator(mode="after")
    def apply_default_port(self) -> "HealthCheckRequest":
        if self.port is None:
            self.port = DEFAULT_PORTS[self.protocol]
        return self

    @property
    def use_tls(self) -> bool:
        return self.protocol is TransferProtocol.FTPS or (
            self.protocol is TransferProtocol.FTP and bool(self.secure)
        )

    @property
    def trimmed_path(self) -> str | None:
        path = (self.path or "").strip()
        return path or None


class DiagnosticReport(_CamelModel):
    """Structured outcome of one health check invocation."""

    ok: bool
    protocol: TransferProtocol
    host: str
    port: int
    tested_path: Optional[str] = None
    total_elapsed_ms: int = Field(default=0, ge=0)
    stages: List[StageResult] = Field(default_factory=list)
    tips: List[str] = Field(default_factory=list)
    help_link: Optional[str] = None

    @property
    def failed_stage(self) -> StageResult | None:
        for stage in self.stages:
            if not stage.ok:
                return stage
        return None


# ---------- Waitlist ----------


class WaitlistRequest(BaseModel):
    email: EmailStr
    source: Optional[str] = None
    protocol: Optional[TransferProtocol] = None
    host: Optional[str] = None

    @field_validator("protocol", mode="before")
    @classmethod
    def normalize_protocol(cls, value: Any) -> Any:
        return _normalize_protocol(value)


class WaitlistResponse(_CamelModel):
    ok: bool
    added: bool
