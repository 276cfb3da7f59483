"""
Account service — account lookup, creation and personal org bookkeeping.
"""

from __future__ import annotations

import re
from typing import Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.models.account import Account
from app.models.base import new_id
from app.models.organization import Organization

log = structlog.get_logger()


def normalize_org_name(value: str) -> str:
    """Turn a username/handle into an org name (lowercase, single hyphens)."""
    name = re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")
    return name or "user"


async def _unused_org_name(base: str, session: AsyncSession) -> str:
    candidate, suffix = base, 1
    while True:
        result = await session.execute(
            select(Organization.org_id).where(Organization.org_name == candidate)
        )
        if result.first() is None:
            return candidate
        suffix += 1
        candidate = f"{base}-{suffix}"


async def get_account(account_id: str, session: AsyncSession) -> Optional[Account]:
    return await session.get(Account, account_id)


async def get_account_by_github_username(
    github_username: str, session: AsyncSession
) -> Optional[Account]:
    result = await session.execute(
        select(Account).where(Account.github_username == github_username)
    )
    return result.scalars().first()


async def get_account_by_email(email: str, session: AsyncSession) -> Optional[Account]:
    result = await session.execute(
        select(Account).where(Account.email == email).order_by(Account.created_at)
    )
    return result.scalars().first()


async def create_account(
    session: AsyncSession,
    *,
    github_username: str,
    email: Optional[str] = None,
    tscircuit_handle: Optional[str] = None,
    account_id: Optional[str] = None,
    personal_org_id: Optional[str] = None,
) -> Account:
    """Create an account together with its personal org."""
    account = Account(
        account_id=account_id or new_id(),
        github_username=github_username,
        email=email,
        tscircuit_handle=tscircuit_handle,
    )
    session.add(account)
    await session.flush()

    org = Organization(
        org_id=personal_org_id or new_id(),
        org_name=await _unused_org_name(normalize_org_name(github_username), session),
        owner_account_id=account.account_id,
        is_personal_org=True,
        github_handle=github_username,
        tscircuit_handle=tscircuit_handle or github_username,
    )
    session.add(org)
    account.personal_org_id = org.org_id
    session.add(account)
    await session.flush()

    log.info(
        "account.created",
        account_id=account.account_id,
        github_username=github_username,
        personal_org_id=org.org_id,
    )
    return account


async def get_personal_org(
    account_id: str, session: AsyncSession
) -> Optional[Organization]:
    result = await session.execute(
        select(Organization)
        .where(
            Organization.owner_account_id == account_id,
            Organization.is_personal_org == True,  # noqa: E712
        )
        .order_by(Organization.created_at)
    )
    return result.scalars().first()


async def reset_personal_org(account: Account, session: AsyncSession) -> Account:
    """Point the account's default org context back at its own personal org."""
    personal = await get_personal_org(account.account_id, session)
    account.personal_org_id = personal.org_id if personal else None
    session.add(account)
    await session.flush()
    log.info(
        "account.personal_org_reset",
        account_id=account.account_id,
        personal_org_id=account.personal_org_id,
    )
    return account
