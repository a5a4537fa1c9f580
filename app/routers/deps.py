"""Shared router dependencies and error translation."""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from app.core.config import settings
from app.db.session import get_db
from app.services.access import (
    Actor,
    AuthenticationRequiredError,
    PermissionDeniedError,
    SurgeryNotFoundError,
    load_actor,
)


def get_actor(request: Request, db: Session = Depends(get_db)) -> Actor:
    try:
        return load_actor(db, request.headers.get(settings.actor_header))
    except AuthenticationRequiredError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc


def http_error_for(exc: Exception) -> HTTPException:
    if isinstance(exc, PermissionDeniedError):
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc))
    if isinstance(exc, SurgeryNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Surgery not found")
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


def parse_flag(value: str | None) -> bool:
    return (value or "").strip().lower() in {"1", "true", "yes"}
