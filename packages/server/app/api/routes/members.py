"""
Organization membership endpoints.

GET|POST          /api/orgs/add_member     — Add an account to an org
POST|PUT|PATCH    /api/orgs/update_member  — Change a member's permissions
GET|POST          /api/orgs/remove_member  — Remove a member
GET|POST          /api/orgs/list_members   — List members (emails only for members)
GET|POST          /api/orgs/get_member     — Get one member
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import get_current_account, get_optional_account
from app.core.database import get_session
from app.core.params import common_params
from app.models.account import Account
from app.services import members as member_service
from app.services import organizations as org_service
from fake_snippets_shared.schemas.common import EmptyResponse
from fake_snippets_shared.schemas.members import (
    AddMemberRequest,
    GetMemberRequest,
    ListMembersRequest,
    OrgMemberEnvelope,
    OrgMemberListResponse,
    RemoveMemberRequest,
    UpdateMemberRequest,
)

router = APIRouter()


@router.api_route("/add_member", methods=["GET", "POST"], response_model=EmptyResponse)
async def add_member(
    account: Account = Depends(get_current_account),
    params: AddMemberRequest = Depends(common_params(AddMemberRequest)),
    session: AsyncSession = Depends(get_session),
):
    """Add a member (requires can_manage_org). Defaults to read-only access."""
    await member_service.add_member(params, account, session)
    return EmptyResponse()


@router.api_route(
    "/update_member", methods=["POST", "PUT", "PATCH"], response_model=EmptyResponse
)
async def update_member(
    request: Request,
    account: Account = Depends(get_current_account),
    params: UpdateMemberRequest = Depends(common_params(UpdateMemberRequest)),
    session: AsyncSession = Depends(get_session),
):
    """Update a member's permissions. PUT replaces the flag set, POST/PATCH merge."""
    await member_service.update_member(
        params, account, session, replace=request.method == "PUT"
    )
    return EmptyResponse()


@router.api_route("/remove_member", methods=["GET", "POST"], response_model=EmptyResponse)
async def remove_member(
    account: Account = Depends(get_current_account),
    params: RemoveMemberRequest = Depends(common_params(RemoveMemberRequest)),
    session: AsyncSession = Depends(get_session),
):
    """Remove a member and reset their default org to their personal org."""
    await member_service.remove_member(params, account, session)
    return EmptyResponse()


@router.api_route(
    "/list_members", methods=["GET", "POST"], response_model=OrgMemberListResponse
)
async def list_members(
    account: Optional[Account] = Depends(get_optional_account),
    params: ListMembersRequest = Depends(common_params(ListMembersRequest)),
    session: AsyncSession = Depends(get_session),
):
    requester_id = account.account_id if account else None
    view = await org_service.get_org_or_404(
        session,
        org_id=params.org_id,
        org_name=params.org_name,
        viewer_account_id=requester_id,
    )
    members = await member_service.list_org_members(view.org, requester_id, session)
    return OrgMemberListResponse(org_members=members)


@router.api_route("/get_member", methods=["GET", "POST"], response_model=OrgMemberEnvelope)
async def get_member(
    account: Optional[Account] = Depends(get_optional_account),
    params: GetMemberRequest = Depends(common_params(GetMemberRequest)),
    session: AsyncSession = Depends(get_session),
):
    requester_id = account.account_id if account else None
    view = await org_service.get_org_or_404(
        session,
        org_id=params.org_id,
        org_name=params.org_name,
        viewer_account_id=requester_id,
    )
    member = await member_service.get_org_member(
        view.org, params.account_id, requester_id, session
    )
    return OrgMemberEnvelope(org_member=member)
