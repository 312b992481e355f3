from __future__ import annotations

"""
Diagnostics and error classification utilities.

This package currently provides:
- error_classifier: map failures that happen *outside* the staged pipeline
  (malformed request, throttled caller, unexpected errors) to a stable,
  structured fallback body.

In-pipeline failures never reach this package; they carry their own stage
attribution.
"""
