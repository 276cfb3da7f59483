"""
Authentication for the fake API.

A session is a bearer token that is simply the caller's ``account_id``
(``Authorization: Bearer <account_id>``). Routes either require a session
(``get_current_account``) or accept anonymous callers
(``get_optional_account``).
"""

from __future__ import annotations

from typing import Optional

import structlog
from fastapi import Depends
from fastapi.security import APIKeyHeader
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_session
from app.core.errors import UnauthorizedError
from app.models.account import Account

log = structlog.get_logger()

api_key_header = APIKeyHeader(name="Authorization", auto_error=False)


def parse_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token from an ``Authorization: Bearer ...`` header value."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def get_optional_account(
    authorization: Optional[str] = Depends(api_key_header),
    session: AsyncSession = Depends(get_session),
) -> Optional[Account]:
    """Resolve the caller's account, or ``None`` for anonymous requests."""
    token = parse_bearer_token(authorization)
    if token is None:
        return None
    account = await session.get(Account, token)
    if account is None:
        log.debug("auth.unknown_token")
    return account


async def get_current_account(
    account: Optional[Account] = Depends(get_optional_account),
) -> Account:
    """Require an authenticated session."""
    if account is None:
        raise UnauthorizedError("Authentication required")
    return account
