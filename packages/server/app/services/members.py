"""
Membership service — listing members and add / update / remove flows.

Every mutation requires the caller to hold ``can_manage_org`` on the target
org; checks run before any write so failed requests leave the store as-is.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.errors import InvalidRequestError, NotFoundError
from app.models.account import Account
from app.models.org_account import OrgAccount
from app.models.organization import Organization
from app.services import accounts as account_service
from app.services.organizations import get_managed_org, get_membership
from app.services.permissions import derive_permissions, is_member, is_owner
from fake_snippets_shared.schemas.common import ErrorCode
from fake_snippets_shared.schemas.members import (
    DEFAULT_MEMBER_FLAGS,
    AddMemberRequest,
    OrgMemberResponse,
    RemoveMemberRequest,
    UpdateMemberRequest,
)

log = structlog.get_logger()


def _member_entry(
    org: Organization,
    account: Account,
    membership: Optional[OrgAccount],
    joined_at: datetime,
    include_email: bool,
) -> OrgMemberResponse:
    return OrgMemberResponse(
        org_id=org.org_id,
        account_id=account.account_id,
        github_username=account.github_username,
        tscircuit_handle=account.tscircuit_handle,
        email=account.email if include_email else None,
        is_owner=is_owner(org, account.account_id, membership),
        org_member_permissions=derive_permissions(org, account.account_id, membership),
        joined_at=joined_at,
    )


async def _requester_is_member(
    org: Organization, requester_account_id: Optional[str], session: AsyncSession
) -> bool:
    membership = await get_membership(org.org_id, requester_account_id, session)
    return is_member(org, requester_account_id, membership)


async def list_org_members(
    org: Organization,
    requester_account_id: Optional[str],
    session: AsyncSession,
) -> list[OrgMemberResponse]:
    """All members in join order; the owner is synthesized if it has no edge.

    Emails are only visible to requesters who are members themselves.
    """
    include_email = await _requester_is_member(org, requester_account_id, session)

    result = await session.execute(
        select(OrgAccount, Account)
        .join(Account, Account.account_id == OrgAccount.account_id)
        .where(OrgAccount.org_id == org.org_id)
        .order_by(OrgAccount.created_at)
    )
    members = [
        _member_entry(org, account, membership, membership.created_at, include_email)
        for membership, account in result.all()
    ]

    if not any(m.account_id == org.owner_account_id for m in members):
        owner = await session.get(Account, org.owner_account_id)
        if owner is not None:
            members.append(
                _member_entry(org, owner, None, org.created_at, include_email)
            )
    return members


async def get_org_member(
    org: Organization,
    account_id: str,
    requester_account_id: Optional[str],
    session: AsyncSession,
) -> OrgMemberResponse:
    account = await session.get(Account, account_id)
    membership = await get_membership(org.org_id, account_id, session)
    if account is None or not is_member(org, account_id, membership):
        raise NotFoundError(
            "Member not found in organization", ErrorCode.MEMBER_NOT_FOUND
        )
    include_email = await _requester_is_member(org, requester_account_id, session)
    joined_at = membership.created_at if membership else org.created_at
    return _member_entry(org, account, membership, joined_at, include_email)


async def add_member(
    req: AddMemberRequest, caller: Account, session: AsyncSession
) -> OrgAccount:
    """Add an account to an org (idempotent: an existing edge gets the new flags)."""
    view = await get_managed_org(req.org_id, caller, session)
    org = view.org

    account = None
    if req.account_id:
        account = await account_service.get_account(req.account_id, session)
    if account is None and req.github_username:
        account = await account_service.get_account_by_github_username(
            req.github_username, session
        )
    if account is None:
        raise NotFoundError("Account not found", ErrorCode.ACCOUNT_NOT_FOUND)

    if org.is_personal_org and account.account_id != org.owner_account_id:
        raise InvalidRequestError(
            "Personal organizations cannot have additional members",
            ErrorCode.CANNOT_ADD_MEMBER_TO_PERSONAL_ORG,
        )

    membership = await get_membership(org.org_id, account.account_id, session)
    if membership is None:
        membership = OrgAccount(org_id=org.org_id, account_id=account.account_id)
    membership.can_read_package = req.can_read_package
    membership.can_manage_package = req.can_manage_package
    membership.can_manage_org = req.can_manage_org
    session.add(membership)
    await session.flush()

    log.info(
        "org.member_added",
        org_id=org.org_id,
        account_id=account.account_id,
        added_by=caller.account_id,
    )
    return membership


async def update_member(
    req: UpdateMemberRequest,
    caller: Account,
    session: AsyncSession,
    *,
    replace: bool = False,
) -> OrgAccount:
    """Change a member's flags.

    With ``replace`` the flags not given are reset to the add-member defaults;
    otherwise only the given flags change.
    """
    view = await get_managed_org(req.org_id, caller, session)

    if req.account_id == caller.account_id:
        raise InvalidRequestError(
            "You cannot update your own permissions", ErrorCode.CANNOT_UPDATE_SELF
        )

    membership = await get_membership(view.org.org_id, req.account_id, session)
    if membership is None:
        raise NotFoundError(
            "Member not found in organization", ErrorCode.MEMBER_NOT_FOUND
        )

    patch = req.permission_patch()
    flags = {**DEFAULT_MEMBER_FLAGS, **patch} if replace else patch
    for flag, value in flags.items():
        setattr(membership, flag, value)
    session.add(membership)
    await session.flush()

    log.info(
        "org.member_updated",
        org_id=view.org.org_id,
        account_id=req.account_id,
        flags=flags,
        replace=replace,
    )
    return membership


async def remove_member(
    req: RemoveMemberRequest, caller: Account, session: AsyncSession
) -> None:
    """Drop the membership edge and reset the account's default org context."""
    view = await get_managed_org(req.org_id, caller, session)
    org = view.org

    account = await account_service.get_account(req.account_id, session)
    if account is None:
        raise NotFoundError("Account not found", ErrorCode.ACCOUNT_NOT_FOUND)
    if account.account_id == org.owner_account_id:
        raise InvalidRequestError(
            "The organization owner cannot be removed", ErrorCode.CANNOT_REMOVE_OWNER
        )

    membership = await get_membership(org.org_id, account.account_id, session)
    if membership is not None:
        await session.delete(membership)
        await session.flush()
    await account_service.reset_personal_org(account, session)

    log.info(
        "org.member_removed",
        org_id=org.org_id,
        account_id=account.account_id,
        removed_by=caller.account_id,
        had_membership=membership is not None,
    )
