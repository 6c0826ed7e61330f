from __future__ import annotations

import os
import secrets
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials


security = HTTPBasic(auto_error=False)

ACTOR_HEADER = "X-Actor"
# AuditLog.actor is String(200).
MAX_ACTOR_LENGTH = 200


def tracker_password() -> Optional[str]:
    """APP_PASSWORD, or None when it is unset or blank (the tracker is then open)."""
    pw = os.environ.get("APP_PASSWORD")
    if pw is None or not pw.strip():
        return None
    return pw


def password_required() -> bool:
    return tracker_password() is not None


def _clean_actor(raw: Optional[str]) -> Optional[str]:
    s = " ".join((raw or "").split())
    return s[:MAX_ACTOR_LENGTH] or None


def fallback_actor() -> str:
    """Who the audit log credits when nobody identified themselves: APP_ACTOR_DEFAULT, else "local"."""
    return _clean_actor(os.environ.get("APP_ACTOR_DEFAULT")) or "local"


def require_actor(
    request: Request,
    credentials: Optional[HTTPBasicCredentials] = Depends(security),
) -> str:
    """
    Resolves the actor written to the audit log for this request.

    Open tracker: the X-Actor header if present, else the fallback actor.
    Password set: HTTP Basic is mandatory, the header is ignored and the
    Basic username (or the fallback actor when it is empty) is used.
    """
    expected = tracker_password()
    if expected is None:
        return _clean_actor(request.headers.get(ACTOR_HEADER)) or fallback_actor()

    if credentials is None or not secrets.compare_digest(credentials.password.encode(), expected.encode()):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Basic"},
        )
    return _clean_actor(credentials.username) or fallback_actor()


def auth_banner_message() -> Optional[str]:
    if password_required():
        return None
    return (
        f"Anyone who can reach this tracker can change expenses as '{fallback_actor()}'. "
        "Set APP_PASSWORD before exposing it beyond this machine."
    )
