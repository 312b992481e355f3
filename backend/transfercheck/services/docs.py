"""Map a failing stage to the matching troubleshooting page."""

from __future__ import annotations

from transfercheck.schemas import StageKey, TransferProtocol


def resolve_help_link(
    protocol: TransferProtocol,
    stage: StageKey,
    message: str,
) -> str | None:
    """Return the documentation path for a failure, or None.

    Pure lookup: no network access and no state.
    """
    msg = (message or "").lower()

    if stage is StageKey.NAME_RESOLUTION:
        return "/guides/dns-resolution-failed"

    if stage is StageKey.TRANSPORT:
        if "econnrefused" in msg or "connection refused" in msg:
            if protocol is TransferProtocol.SFTP:
                return "/errors/econnrefused-port-22"
            return "/errors/econnrefused-port-21"
        if "timeout" in msg or "timed out" in msg:
            return "/guides/tcp-connection-timeout-firewall"
        return "/guides/tcp-connection-failed"

    if stage is StageKey.CREDENTIAL:
        if "530" in msg:
            return "/errors/530-login-incorrect"
        return "/guides/authentication-failed"

    if stage is StageKey.ENUMERATION:
        if protocol is TransferProtocol.SFTP:
            return "/guides/sftp-directory-listing-failed"
        return "/guides/ftp-passive-mode-firewall-issues"

    return None
