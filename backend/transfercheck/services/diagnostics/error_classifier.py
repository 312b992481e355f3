from __future__ import annotations

"""backend/transfercheck/services/diagnostics/error_classifier.py

Centralized classification for request-boundary failures.

This is a deliberately coarse fallback, not an exception hierarchy for the
health check itself. It covers:

- throttled callers            -> 429, "Too many requests"
- malformed request bodies     -> 400, "Invalid request body"
- other HealthCheckError       -> the error's own status and message
- anything else                -> 500, "Request failed"

The classification is deterministic: the same error always yields the same
stage label, message and tips.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from fastapi.exceptions import RequestValidationError

from transfercheck.schemas import (
    DiagnosticReport,
    StageKey,
    StageResult,
    TransferProtocol,
)

DEFAULT_TIPS = ["Double-check your inputs and try again."]
THROTTLED_TIPS = ["Try again in a moment."]


class HealthCheckError(Exception):
    """Base error raised at the request boundary."""

    status: int = 400

    def __init__(
        self,
        message: str = "Request failed",
        *,
        status: int | None = None,
        details: Dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        if status is not None:
            self.status = status
        self.details = details


class RateLimitExceeded(HealthCheckError):
    status = 429

    def __init__(self, retry_after: int):
        super().__init__("Rate limit exceeded", details={"retryAfter": retry_after})
        self.retry_after = retry_after


@dataclass
class ClassifiedError:
    """Structured fallback produced for a boundary failure."""

    status: int
    stage: StageKey
    message: str
    details: Optional[Dict[str, Any]] = None
    tips: List[str] = field(default_factory=list)


def _validation_details(exc: RequestValidationError) -> Dict[str, Any]:
    # Only location, message and type: the raw input may hold credentials.
    return {
        "errors": [
            {
                "loc": [str(part) for part in err.get("loc", ())],
                "msg": str(err.get("msg", "")),
                "type": str(err.get("type", "")),
            }
            for err in exc.errors()
        ]
    }


def map_error_to_stage(exc: BaseException) -> ClassifiedError:
    """Classify a failure raised before or outside the staged pipeline."""
    if isinstance(exc, RateLimitExceeded):
        return ClassifiedError(
            status=exc.status,
            stage=StageKey.TRANSPORT,
            message="Too many requests. Please slow down.",
            details=exc.details,
            tips=list(THROTTLED_TIPS),
        )

    if isinstance(exc, RequestValidationError):
        return ClassifiedError(
            status=400,
            stage=StageKey.TRANSPORT,
            message="Invalid request body",
            details=_validation_details(exc),
            tips=list(DEFAULT_TIPS),
        )

    if isinstance(exc, HealthCheckError):
        return ClassifiedError(
            status=exc.status,
            stage=StageKey.TRANSPORT,
            message=exc.message,
            details=exc.details,
            tips=list(DEFAULT_TIPS),
        )

    return ClassifiedError(
        status=500,
        stage=StageKey.TRANSPORT,
        message="Request failed",
        tips=list(DEFAULT_TIPS),
    )


def build_fallback_report(classified: ClassifiedError) -> DiagnosticReport:
    """Wrap a classified boundary failure in the regular report shape."""
    return DiagnosticReport(
        ok=False,
        protocol=TransferProtocol.FTP,
        host="",
        port=0,
        total_elapsed_ms=0,
        stages=[
            StageResult(
                key=classified.stage,
                ok=False,
                message=classified.message,
                details=classified.details,
            )
        ],
        tips=classified.tips,
    )
