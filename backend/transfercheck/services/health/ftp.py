from __future__ import annotations

"""backend/transfercheck/services/health/ftp.py

Session driver for **FTP** and explicit **FTPS** (AUTH TLS on the same port).

Key points:
- ``open_session`` is the credential stage: connect, (TLS), USER/PASS.
  For FTPS, ``PROT P`` is issued right after login so the LIST data
  channel is encrypted too.
- ``count_entries`` is the enumeration stage: optional CWD, then LIST.
  Unix-style servers prefix LIST output with ``total N``; that line is not
  an entry.
- Replies and LIST lines are decoded as latin-1, which maps every byte, so
  a filename in a legacy encoding still counts as an entry.
- Without a path the login directory is listed and ``testedPath`` stays
  empty; the server decides where a session starts.
- The control connection is always released (QUIT, then close). Release
  errors are logged and dropped so they never hide the primary failure.
"""

import contextlib
import ftplib
import logging
import re
from typing import Iterator, List, Optional

from transfercheck.config import get_settings
from transfercheck.schemas import HealthCheckRequest

logger = logging.getLogger(__name__)

LISTING_ENCODING = "latin-1"

_TOTAL_LINE = re.compile(r"^total\s+\d+\s*$", re.IGNORECASE)


class FtpSession:
    """Authenticated FTP/FTPS control connection."""

    def __init__(self, client: ftplib.FTP):
        self._client = client

    def count_entries(self, path: Optional[str]) -> int:
        if path:
            self._client.cwd(path)
        lines: list[str] = []
        self._client.retrlines("LIST", lines.append)
        return sum(1 for line in lines if line.strip() and not _TOTAL_LINE.match(line))


def _release(client: ftplib.FTP) -> None:
    try:
        client.quit()
    except Exception as exc:  # noqa: BLE001
        logger.debug("FTP QUIT failed during cleanup: %s", exc)
    finally:
        try:
            client.close()
        except Exception as exc:  # noqa: BLE001
            logger.debug("FTP close failed during cleanup: %s", exc)


class FtpSessionDriver:
    """Drives the credential and enumeration stages over FTP/FTPS."""

    def __init__(
        self,
        *,
        timeout: float | None = None,
        auth_pattern: str | None = None,
        ftp_factory=ftplib.FTP,
        ftps_factory=ftplib.FTP_TLS,
    ):
        settings = get_settings()
        self.timeout = timeout if timeout is not None else settings.session_timeout_seconds
        self.auth_pattern = auth_pattern or settings.ftp_auth_pattern
        self._ftp_factory = ftp_factory
        self._ftps_factory = ftps_factory

    @contextlib.contextmanager
    def open_session(self, request: HealthCheckRequest) -> Iterator[FtpSession]:
        secure = request.use_tls
        factory = self._ftps_factory if secure else self._ftp_factory
        client = factory(timeout=self.timeout, encoding=LISTING_ENCODING)
        password = request.password.get_secret_value() if request.password else ""
        try:
            client.connect(request.host, request.port, timeout=self.timeout)
            # FTP_TLS.login sends AUTH TLS before USER when the socket is plain.
            client.login(request.username or "", password)
            if secure:
                client.prot_p()
            yield FtpSession(client)
        finally:
            _release(client)

    def listing_path(self, request: HealthCheckRequest) -> Optional[str]:
        """No path means the login directory, reported as no tested path."""
        return request.trimmed_path

    def transport_tips(self, message: str) -> List[str]:
        tips: list[str] = []
        if re.search(r"timeout|timed out", message, re.IGNORECASE):
            tips.append(
                "Check firewall rules and whether the port is reachable from the internet."
            )
        tips.append("Verify host and port (FTP usually 21; SFTP is 22).")
        tips.append(
            "If behind a VPN or allowlist, ensure this server can reach the FTP host."
        )
        tips.append(
            "For FTP data connections, passive mode may require additional ports opened on the server."
        )
        return tips

    def session_tips(self, auth_shaped: bool) -> List[str]:
        credential = [
            "Confirm username/password and account permissions.",
            "If using FTPS, confirm the server supports explicit FTPS on this port.",
        ]
        listing = [
            "If listing fails, the path may not exist or the user may not have LIST permissions.",
        ]
        return credential + listing if auth_shaped else listing + credential
