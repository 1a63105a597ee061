"""FastAPI dependency resolving the calling user.

Authentication happens upstream of this service; the gateway forwards the
authenticated user's ID in the X-User-Id header.
"""

from __future__ import annotations

from fastapi import Header, HTTPException, status
from loguru import logger


def get_current_user_id(x_user_id: str | None = Header(default=None)) -> str:
    """FastAPI dependency to get the current user ID.

    Raises:
        HTTPException: 401 if the header is missing or blank
    """
    if not x_user_id or not x_user_id.strip():
        logger.warning("Request without X-User-Id header")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing user identity",
        )
    return x_user_id.strip()
