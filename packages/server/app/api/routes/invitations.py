"""
Organization invitation endpoints.

POST  /api/orgs/invitations/create  — Invite an email address (can_manage_org)
GET   /api/orgs/invitations/list    — List an org's invitations (can_manage_org)
GET   /api/orgs/invitations/get     — Look up an invitation by token (no auth)
POST  /api/orgs/invitations/accept  — Accept an invitation
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import get_current_account
from app.core.config import Settings, get_app_settings
from app.core.database import get_session
from app.core.errors import NotFoundError
from app.core.params import common_params
from app.models.account import Account
from app.services import invitations as invitation_service
from fake_snippets_shared.schemas.common import ErrorCode
from fake_snippets_shared.schemas.invitations import (
    InvitationAcceptRequest,
    InvitationAcceptResponse,
    InvitationCreateRequest,
    InvitationCreateResponse,
    InvitationEnvelope,
    InvitationGetRequest,
    InvitationListRequest,
    InvitationListResponse,
)

router = APIRouter()


@router.post("/create", response_model=InvitationCreateResponse)
async def create_invitation(
    account: Account = Depends(get_current_account),
    params: InvitationCreateRequest = Depends(common_params(InvitationCreateRequest)),
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_app_settings),
):
    invitation = await invitation_service.create_invitation(
        params.org_id, str(params.invitee_email), account, settings, session
    )
    return InvitationCreateResponse(
        org_invitation_id=invitation.org_invitation_id,
        invitation_token=invitation.invitation_token,
        invitee_email=invitation.invitee_email,
        expires_at=invitation.expires_at,
    )


@router.get("/list", response_model=InvitationListResponse)
async def list_invitations(
    account: Account = Depends(get_current_account),
    params: InvitationListRequest = Depends(common_params(InvitationListRequest)),
    session: AsyncSession = Depends(get_session),
):
    invitations = await invitation_service.list_invitations(params.org_id, account, session)
    return InvitationListResponse(invitations=invitations)


@router.get("/get", response_model=InvitationEnvelope)
async def get_invitation(
    params: InvitationGetRequest = Depends(common_params(InvitationGetRequest)),
    session: AsyncSession = Depends(get_session),
):
    invitation = await invitation_service.get_invitation_by_token(params.token, session)
    if invitation is None:
        raise NotFoundError("Invitation not found", ErrorCode.INVITATION_NOT_FOUND)
    return InvitationEnvelope(
        invitation=await invitation_service.describe_invitation(invitation, session)
    )


@router.post("/accept", response_model=InvitationAcceptResponse)
async def accept_invitation(
    account: Account = Depends(get_current_account),
    params: InvitationAcceptRequest = Depends(common_params(InvitationAcceptRequest)),
    session: AsyncSession = Depends(get_session),
):
    membership, org = await invitation_service.accept_invitation(
        params.invitation_token, account, session
    )
    return InvitationAcceptResponse(
        org_account_id=membership.org_account_id,
        org=invitation_service.org_summary(org),
    )
