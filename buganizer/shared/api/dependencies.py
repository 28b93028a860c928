"""
Shared API Dependencies
========================

Request-scoped dependencies common to every router.
"""

from typing import Optional
from uuid import UUID

from fastapi import Header

from buganizer.core import AuthenticationException


async def get_current_user_id(
    x_user_id: Optional[str] = Header(default=None, alias="X-User-ID")
) -> UUID:
    """
    Resolve the caller from the ``X-User-ID`` header.

    Token verification happens upstream (gateway); this service only needs
    the caller's id.

    Raises:
        AuthenticationException: If the header is missing or not a UUID
    """
    if not x_user_id:
        raise AuthenticationException("missing X-User-ID header")
    try:
        return UUID(x_user_id)
    except ValueError as e:
        raise AuthenticationException("invalid X-User-ID header") from e
