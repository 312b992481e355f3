# backend/transfercheck/__init__.py
from __future__ import annotations

"""
Marks `transfercheck` as a Python package.

Routers live in transfercheck/api, the health check engine in
transfercheck/services/health, collaborators in transfercheck/services.
"""
