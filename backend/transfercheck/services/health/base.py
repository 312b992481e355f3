from __future__ import annotations

"""backend/transfercheck/services/health/base.py

Shared pieces for the health check engine.

This module provides:

- SessionHandle: an authenticated session able to enumerate a directory
- SessionDriverProtocol: what the pipeline needs from a protocol driver
- elapsed_ms: wall-clock helper used for every stage timing
- looks_like_auth_failure: the auth-vocabulary heuristic

Concrete drivers (FTP/FTPS in ftp.py, SFTP in sftp.py) satisfy
SessionDriverProtocol; the pipeline never imports them directly.
"""

import re
import time
from typing import ContextManager, List, Optional, Protocol

from transfercheck.schemas import HealthCheckRequest


class SessionHandle(Protocol):
    """An open, authenticated session."""

    def count_entries(self, path: Optional[str]) -> int:
        """Enumerate ``path`` (or the default directory) and return the entry count."""
        ...


class SessionDriverProtocol(Protocol):
    """Minimal interface that protocol drivers must implement."""

    auth_pattern: str

    def open_session(self, request: HealthCheckRequest) -> ContextManager[SessionHandle]:
        """Connect and authenticate; release the session when the block exits.

        Entering the context manager is the credential stage. Release must
        happen on every exit path and must never raise.
        """
        ...

    def listing_path(self, request: HealthCheckRequest) -> Optional[str]:
        """Path reported as ``testedPath`` and passed to ``count_entries``."""
        ...

    def transport_tips(self, message: str) -> List[str]:
        ...

    def session_tips(self, auth_shaped: bool) -> List[str]:
        ...


def elapsed_ms(started: float) -> int:
    """Milliseconds since ``started`` (a ``time.perf_counter()`` value)."""
    return max(0, int(round((time.perf_counter() - started) * 1000)))


def looks_like_auth_failure(message: str, pattern: str) -> bool:
    """Best-effort check of an error message against the auth vocabulary.

    Library error text is not a stable contract; a miss only changes the
    category and tip ordering, never the stage sequence.
    """
    return re.search(pattern, message or "", re.IGNORECASE) is not None


def error_text(exc: BaseException, fallback: str) -> str:
    text = str(exc).strip()
    return text or f"{fallback} ({exc.__class__.__name__})"
