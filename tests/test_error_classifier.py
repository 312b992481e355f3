"""Tests for the request-boundary error classifier."""

import pytest
from fastapi.exceptions import RequestValidationError

from transfercheck.schemas import StageKey
from transfercheck.services.diagnostics.error_classifier import (
    HealthCheckError,
    RateLimitExceeded,
    build_fallback_report,
    map_error_to_stage,
)


def test_throttled_requests_get_fixed_message():
    classified = map_error_to_stage(RateLimitExceeded(retry_after=12))

    assert classified.status == 429
    assert classified.stage is StageKey.TRANSPORT
    assert classified.message == "Too many requests. Please slow down."
    assert classified.details == {"retryAfter": 12}
    assert classified.tips == ["Try again in a moment."]


def test_validation_errors_drop_raw_input():
    exc = RequestValidationError(
        [
            {
                "loc": ("body", "port"),
                "msg": "Input should be less than or equal to 65535",
                "type": "less_than_equal",
                "input": {"password": "top-secret"},
            }
        ]
    )

    classified = map_error_to_stage(exc)

    assert classified.status == 400
    assert classified.message == "Invalid request body"
    assert classified.details == {
        "errors": [
            {
                "loc": ["body", "port"],
                "msg": "Input should be less than or equal to 65535",
                "type": "less_than_equal",
            }
        ]
    }
    assert "top-secret" not in str(classified.details)


def test_custom_boundary_error_keeps_status_and_message():
    classified = map_error_to_stage(HealthCheckError("Unsupported content type", status=415))

    assert classified.status == 415
    assert classified.message == "Unsupported content type"
    assert classified.tips == ["Double-check your inputs and try again."]


def test_unexpected_errors_get_generic_message():
    classified = map_error_to_stage(RuntimeError("db password is hunter2"))

    assert classified.status == 500
    assert classified.message == "Request failed"
    assert "hunter2" not in classified.message


@pytest.mark.parametrize(
    "exc",
    [RateLimitExceeded(retry_after=3), HealthCheckError("bad"), KeyError("x")],
)
def test_classification_is_deterministic(exc):
    assert map_error_to_stage(exc) == map_error_to_stage(exc)


def test_fallback_report_shape():
    report = build_fallback_report(map_error_to_stage(RateLimitExceeded(retry_after=5)))
    body = report.model_dump(mode="json", by_alias=True)

    assert body["ok"] is False
    assert body["host"] == ""
    assert body["port"] == 0
    assert body["totalElapsedMs"] == 0
    assert body["stages"] == [
        {
            "key": "tcp",
            "ok": False,
            "elapsedMs": None,
            "message": "Too many requests. Please slow down.",
            "details": {"retryAfter": 5},
        }
    ]
    assert body["tips"] == ["Try again in a moment."]
