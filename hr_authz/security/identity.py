"""
Identity adapter: bearer token -> user row -> ``Subject``.

Token issuance, refresh and storage belong to the session service; this
module only verifies the signature and expiry of what it is handed.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

import jwt
from fastapi import HTTPException, Request, status
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from hr_authz.core import Subject
from hr_authz.models.security import User
from hr_authz.settings import Settings

logger = logging.getLogger(__name__)

AUTHORIZATION_HEADER = "Authorization"
BEARER_PREFIX = "Bearer"


def extract_bearer_token(request: Request) -> str | None:
    """
    Read ``Authorization: Bearer <token>``.

    Missing header -> None (the caller decides whether that is fatal).
    Present but malformed -> 400.
    """

    raw = request.headers.get(AUTHORIZATION_HEADER)
    if not raw:
        return None

    prefix = f"{BEARER_PREFIX} "
    if not raw.startswith(prefix):
        logger.warning("Invalid Authorization header format path=%s method=%s", request.url.path, request.method)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {AUTHORIZATION_HEADER}. Expected '{BEARER_PREFIX} <token>'.",
        )

    token = raw[len(prefix) :].strip()
    if not token:
        logger.warning("Empty bearer token path=%s method=%s", request.url.path, request.method)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {AUTHORIZATION_HEADER}. Missing token after '{BEARER_PREFIX}'.",
        )
    return token


def issue_token(user_id: int, settings: Settings, expires_minutes: int = 60) -> str:
    """Sign a short-lived access token (used by the login service and tests)."""
    expire = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes)
    payload = {"sub": str(user_id), "exp": expire}
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_user_id(token: str, settings: Settings) -> int:
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError as exc:
        logger.info("Token expired")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token expired") from exc
    except jwt.InvalidTokenError as exc:
        logger.info("Token invalid: %s", type(exc).__name__)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token") from exc

    try:
        return int(payload.get("sub", ""))
    except (TypeError, ValueError) as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token subject") from exc


def load_user(db: Session, user_id: int) -> User:
    user = db.execute(
        select(User).where(User.id == user_id).options(selectinload(User.assigned_departments))
    ).scalar_one_or_none()

    if user is None or not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or inactive user")

    return user


def subject_for_user(user: User) -> Subject:
    # Department rows go through normalization like any other embedded reference.
    return Subject.build(
        user.role,
        is_authenticated=True,
        assigned_departments=user.assigned_departments,
        user_id=user.id,
    )


def resolve_subject(request: Request, db: Session, settings: Settings) -> Subject:
    """The request's subject; anonymous when no credentials were sent."""

    token = extract_bearer_token(request)
    if token is None:
        return Subject.anonymous()

    user = load_user(db, decode_user_id(token, settings))
    return subject_for_user(user)
