from __future__ import annotations

"""backend/transfercheck/services/health/sftp.py

Session driver for **SFTP** via paramiko.

Key points:
- Credentials: a private key (with optional passphrase) takes precedence;
  the password is only sent when no key is supplied.
- The key arrives as PEM/OpenSSH text. paramiko has no generic loader for
  text, so each supported key class is tried in turn.
- Host keys are accepted on first sight (AutoAddPolicy): this is a one-shot
  reachability check, not a trusted session.
- Agent and ~/.ssh key discovery are disabled so only the supplied
  credentials are exercised.
"""

import contextlib
import io
import logging
from typing import Iterator, List, Optional

import paramiko

from transfercheck.config import get_settings
from transfercheck.schemas import HealthCheckRequest

logger = logging.getLogger(__name__)

DEFAULT_LISTING_PATH = "."

_KEY_CLASSES = (paramiko.Ed25519Key, paramiko.ECDSAKey, paramiko.RSAKey)


def load_private_key(key_text: str, passphrase: Optional[str] = None) -> paramiko.PKey:
    """Parse a private key from text, trying each supported key type."""
    last_error: Exception | None = None
    for key_class in _KEY_CLASSES:
        try:
            return key_class.from_private_key(io.StringIO(key_text), password=passphrase)
        except paramiko.PasswordRequiredException:
            raise
        except (paramiko.SSHException, ValueError) as exc:
            last_error = exc
    raise paramiko.SSHException(f"Unable to parse private key: {last_error}")


class SftpSession:
    """Authenticated SSH transport with an open SFTP channel."""

    def __init__(self, sftp: paramiko.SFTPClient):
        self._sftp = sftp

    def count_entries(self, path: Optional[str]) -> int:
        return len(self._sftp.listdir_attr(path or DEFAULT_LISTING_PATH))


def _close_quietly(resource, label: str) -> None:
    if resource is None:
        return
    try:
        resource.close()
    except Exception as exc:  # noqa: BLE001
        logger.debug("SFTP %s close failed during cleanup: %s", label, exc)


class SftpSessionDriver:
    """Drives the credential and enumeration stages over SFTP."""

    def __init__(
        self,
        *,
        timeout: float | None = None,
        auth_pattern: str | None = None,
        client_factory=paramiko.SSHClient,
    ):
        settings = get_settings()
        self.timeout = timeout if timeout is not None else settings.session_timeout_seconds
        self.auth_pattern = auth_pattern or settings.sftp_auth_pattern
        self._client_factory = client_factory

    def _credentials(self, request: HealthCheckRequest) -> dict:
        if request.private_key and request.private_key.get_secret_value().strip():
            passphrase = (
                request.passphrase.get_secret_value() if request.passphrase else None
            )
            return {
                "pkey": load_private_key(
                    request.private_key.get_secret_value(), passphrase or None
                )
            }
        password = request.password.get_secret_value() if request.password else ""
        return {"password": password}

    @contextlib.contextmanager
    def open_session(self, request: HealthCheckRequest) -> Iterator[SftpSession]:
        client = self._client_factory()
        sftp = None
        try:
            client.set_missing_host_key_policy(paramiko.AutoAddPolicy())
            client.connect(
                hostname=request.host,
                port=request.port,
                username=request.username or "",
                timeout=self.timeout,
                banner_timeout=self.timeout,
                auth_timeout=self.timeout,
                look_for_keys=False,
                allow_agent=False,
                **self._credentials(request),
            )
            sftp = client.open_sftp()
            sftp.get_channel().settimeout(self.timeout)
            yield SftpSession(sftp)
        finally:
            _close_quietly(sftp, "channel")
            _close_quietly(client, "client")

    def listing_path(self, request: HealthCheckRequest) -> Optional[str]:
        return request.trimmed_path or DEFAULT_LISTING_PATH

    def transport_tips(self, message: str) -> List[str]:
        return [
            "Confirm the port (SFTP is usually 22).",
            "Check firewall / allowlist rules.",
            "If the server is internal-only, run monitoring from inside the network/VPN.",
        ]

    def session_tips(self, auth_shaped: bool) -> List[str]:
        credential = [
            "Confirm username/password or private key + passphrase.",
            "If using key auth, ensure the server has your public key installed.",
        ]
        listing = [
            "If listing fails, the path may not exist or permissions may be restricted.",
        ]
        return credential + listing if auth_shaped else listing + credential
