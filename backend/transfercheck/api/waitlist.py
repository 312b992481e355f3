# backend/transfercheck/api/waitlist.py
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from transfercheck import models, schemas
from transfercheck.api.deps import enforce_rate_limit
from transfercheck.db.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/waitlist", tags=["waitlist"])


@router.post(
    "",
    response_model=schemas.WaitlistResponse,
    dependencies=[Depends(enforce_rate_limit)],
)
def join_waitlist(
    payload: schemas.WaitlistRequest,
    db: Session = Depends(get_db),
):
    """
    Capture an email for the monitoring waitlist.

    Addresses are deduplicated case-insensitively; a repeat signup is
    reported as ``added: false`` rather than an error.
    """
    email = payload.email.strip()
    try:
        existing = (
            db.query(models.WaitlistEntry)
            .filter(func.lower(models.WaitlistEntry.email) == email.lower())
            .first()
        )
        if existing:
            return schemas.WaitlistResponse(ok=True, added=False)

        db.add(
            models.WaitlistEntry(
                email=email,
                source=payload.source or "homepage",
                protocol=payload.protocol.value if payload.protocol else None,
                host=payload.host or None,
            )
        )
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("WAITLIST_ERROR: %s", exc)
        return JSONResponse(
            status_code=500,
            content={"ok": False, "error": "Failed to save email"},
        )

    return schemas.WaitlistResponse(ok=True, added=True)
