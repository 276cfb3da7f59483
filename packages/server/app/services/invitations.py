"""
Invitation service — invite by email, look up by token, accept.

No mail is sent; the invite link is written to the log instead.
"""

from __future__ import annotations

import secrets
from datetime import timedelta
from typing import Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.config import Settings
from app.core.errors import ForbiddenError, InvalidRequestError, NotFoundError
from app.models.account import Account
from app.models.base import utcnow
from app.models.org_account import OrgAccount
from app.models.org_invitation import OrgInvitation
from app.models.organization import Organization
from app.services import accounts as account_service
from app.services.organizations import get_managed_org, get_membership
from app.services.permissions import is_member
from fake_snippets_shared.schemas.common import AccountSummary, ErrorCode
from fake_snippets_shared.schemas.invitations import (
    InvitationOrgSummary,
    InvitationResponse,
)
from fake_snippets_shared.schemas.members import DEFAULT_MEMBER_FLAGS

log = structlog.get_logger()


def is_expired(invitation: OrgInvitation) -> bool:
    return (
        invitation.is_pending
        and not invitation.is_revoked
        and invitation.expires_at < utcnow()
    )


def org_summary(org: Organization) -> InvitationOrgSummary:
    return InvitationOrgSummary(
        org_id=org.org_id,
        org_name=org.tscircuit_handle or org.org_name,
        org_display_name=org.org_display_name or org.org_name,
    )


async def describe_invitation(
    invitation: OrgInvitation, session: AsyncSession
) -> InvitationResponse:
    org = await session.get(Organization, invitation.org_id)
    if org is None:
        raise NotFoundError("Organization not found", ErrorCode.ORG_NOT_FOUND)
    inviter = await session.get(Account, invitation.inviter_account_id)
    return InvitationResponse(
        org_invitation_id=invitation.org_invitation_id,
        invitee_email=invitation.invitee_email,
        is_pending=invitation.is_pending,
        is_accepted=invitation.is_accepted,
        is_revoked=invitation.is_revoked,
        is_expired=is_expired(invitation),
        created_at=invitation.created_at,
        expires_at=invitation.expires_at,
        accepted_at=invitation.accepted_at,
        org=org_summary(org),
        inviter=AccountSummary(
            account_id=invitation.inviter_account_id,
            github_username=inviter.github_username if inviter else None,
            tscircuit_handle=inviter.tscircuit_handle if inviter else None,
        ),
    )


async def get_invitation_by_token(
    token: str, session: AsyncSession
) -> Optional[OrgInvitation]:
    result = await session.execute(
        select(OrgInvitation).where(OrgInvitation.invitation_token == token)
    )
    return result.scalars().first()


async def create_invitation(
    org_id: str,
    invitee_email: str,
    caller: Account,
    settings: Settings,
    session: AsyncSession,
) -> OrgInvitation:
    view = await get_managed_org(org_id, caller, session)
    org = view.org

    result = await session.execute(
        select(OrgInvitation).where(
            OrgInvitation.org_id == org.org_id,
            OrgInvitation.invitee_email == invitee_email,
            OrgInvitation.is_pending == True,  # noqa: E712
            OrgInvitation.is_revoked == False,  # noqa: E712
            OrgInvitation.expires_at > utcnow(),
        )
    )
    if result.scalars().first() is not None:
        raise InvalidRequestError(
            "A pending invitation for this email already exists",
            ErrorCode.DUPLICATE_PENDING_INVITATION,
        )

    invitee = await account_service.get_account_by_email(invitee_email, session)
    if invitee is not None:
        membership = await get_membership(org.org_id, invitee.account_id, session)
        if is_member(org, invitee.account_id, membership):
            raise InvalidRequestError(
                "This user is already a member of the organization",
                ErrorCode.ALREADY_MEMBER,
            )

    invitation = OrgInvitation(
        org_id=org.org_id,
        invitee_email=invitee_email,
        inviter_account_id=caller.account_id,
        invitation_token=secrets.token_hex(32),
        expires_at=utcnow() + timedelta(days=settings.invitation_expiry_days),
    )
    session.add(invitation)
    await session.flush()

    log.info(
        "org.invitation_sent",
        org_id=org.org_id,
        invitee_email=invitee_email,
        invite_url=f"{settings.invite_base_url}/orgs/invite?token={invitation.invitation_token}",
        expires_at=invitation.expires_at.isoformat(),
    )
    return invitation


async def list_invitations(
    org_id: str, caller: Account, session: AsyncSession
) -> list[InvitationResponse]:
    """All invitations of an org, newest first."""
    view = await get_managed_org(org_id, caller, session)
    result = await session.execute(
        select(OrgInvitation)
        .where(OrgInvitation.org_id == view.org.org_id)
        .order_by(OrgInvitation.created_at.desc())
    )
    return [await describe_invitation(inv, session) for inv in result.scalars().all()]


async def accept_invitation(
    token: str, caller: Account, session: AsyncSession
) -> tuple[OrgAccount, Organization]:
    invitation = await get_invitation_by_token(token, session)
    if invitation is None:
        raise NotFoundError("Invalid invitation link", ErrorCode.INVITATION_NOT_FOUND)
    if invitation.is_revoked:
        raise InvalidRequestError(
            "This invitation was cancelled", ErrorCode.INVITATION_REVOKED
        )
    if invitation.is_accepted:
        raise InvalidRequestError(
            "You've already joined this organization",
            ErrorCode.INVITATION_ALREADY_ACCEPTED,
        )
    if invitation.expires_at < utcnow():
        raise InvalidRequestError(
            f"This invitation expired on {invitation.expires_at.date().isoformat()}",
            ErrorCode.INVITATION_EXPIRED,
        )
    if invitation.invitee_email and caller.email != invitation.invitee_email:
        raise ForbiddenError(
            f"This invite is for {invitation.invitee_email}. Please log in with that email.",
            ErrorCode.EMAIL_MISMATCH,
        )

    org = await session.get(Organization, invitation.org_id)
    if org is None:
        raise NotFoundError("Organization not found", ErrorCode.ORG_NOT_FOUND)

    membership = await get_membership(org.org_id, caller.account_id, session)
    if is_member(org, caller.account_id, membership):
        raise InvalidRequestError(
            "You're already a member of this organization", ErrorCode.ALREADY_MEMBER
        )

    membership = OrgAccount(
        org_id=org.org_id, account_id=caller.account_id, **DEFAULT_MEMBER_FLAGS
    )
    session.add(membership)

    invitation.is_pending = False
    invitation.is_accepted = True
    invitation.accepted_at = utcnow()
    invitation.accepted_by_account_id = caller.account_id
    session.add(invitation)
    await session.flush()

    log.info("org.invitation_accepted", org_id=org.org_id, account_id=caller.account_id)
    return membership, org
