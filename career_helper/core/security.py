from __future__ import annotations

import re
from dataclasses import dataclass

from fastapi import Header, HTTPException, status

from career_helper.core.config import settings

_USER_ID_PATTERN = re.compile(r"^[A-Za-z0-9_\-\.:@]{1,128}$")


@dataclass(frozen=True)
class SessionContext:
    """Identity of the signed-in user, passed explicitly into every flow."""

    user_id: str


def check_api_key(x_api_key: str | None) -> None:
    if not settings.api_key:
        return
    if x_api_key != settings.api_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Please provide a valid API key.",
        )


def get_session(
    x_user_id: str | None = Header(default=None, alias="X-User-Id"),
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
) -> SessionContext:
    check_api_key(x_api_key)
    user_id = (x_user_id or "").strip()
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not authenticated.",
        )
    if not _USER_ID_PATTERN.match(user_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid user id.",
        )
    return SessionContext(user_id=user_id)
