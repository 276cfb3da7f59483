"""
Organization API endpoints.

GET|POST         /api/orgs/create         — Create a managed org
GET|POST         /api/orgs/get            — Get an org by id / name / handle
GET|POST         /api/orgs/list           — Orgs the caller belongs to
POST|PATCH       /api/orgs/update         — Update display name / handle
POST|DELETE      /api/orgs/delete         — Delete a managed org (owner only)
POST             /api/orgs/search         — Search orgs
POST             /api/orgs/upload_avatar  — Upload an avatar (multipart)
"""

from __future__ import annotations

import base64
from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile

from app.core.auth import get_current_account, get_optional_account
from app.core.config import Settings, get_app_settings
from app.core.database import get_session
from app.core.errors import InvalidRequestError, PayloadTooLargeError
from app.core.params import common_params
from app.models.account import Account
from app.services import organizations as org_service
from fake_snippets_shared.schemas.common import ErrorCode, SuccessResponse
from fake_snippets_shared.schemas.organizations import (
    OrgCreateRequest,
    OrgEnvelope,
    OrgGetRequest,
    OrgIdRequest,
    OrgListResponse,
    OrgSearchRequest,
    OrgUpdateRequest,
)

router = APIRouter()


@router.api_route("/create", methods=["GET", "POST"], response_model=OrgEnvelope)
async def create_org(
    account: Account = Depends(get_current_account),
    params: OrgCreateRequest = Depends(common_params(OrgCreateRequest)),
    session: AsyncSession = Depends(get_session),
):
    """Create a new organization. The creator becomes its owner."""
    view = await org_service.create_org(params, account, session)
    return OrgEnvelope(org=view.to_public())


@router.api_route("/get", methods=["GET", "POST"], response_model=OrgEnvelope)
async def get_org(
    account: Optional[Account] = Depends(get_optional_account),
    params: OrgGetRequest = Depends(common_params(OrgGetRequest)),
    session: AsyncSession = Depends(get_session),
):
    """Get an org, annotated with the caller's permissions (if any)."""
    view = await org_service.get_org_or_404(
        session,
        org_id=params.org_id,
        org_name=params.org_name,
        github_handle=params.github_handle,
        tscircuit_handle=params.tscircuit_handle,
        viewer_account_id=account.account_id if account else None,
    )
    return OrgEnvelope(org=view.to_public())


@router.api_route("/list", methods=["GET", "POST"], response_model=OrgListResponse)
async def list_orgs(
    account: Account = Depends(get_current_account),
    session: AsyncSession = Depends(get_session),
):
    """List orgs the caller owns or is a member of."""
    views = await org_service.list_user_orgs(account.account_id, session)
    return OrgListResponse(orgs=[v.to_public() for v in views])


@router.api_route("/update", methods=["POST", "PATCH"], response_model=OrgEnvelope)
async def update_org(
    account: Account = Depends(get_current_account),
    params: OrgUpdateRequest = Depends(common_params(OrgUpdateRequest)),
    session: AsyncSession = Depends(get_session),
):
    """Update display name or tscircuit handle (requires can_manage_org)."""
    view = await org_service.get_managed_org(params.org_id, account, session)
    view = await org_service.update_org(view, params, account.account_id, session)
    return OrgEnvelope(org=view.to_public())


@router.api_route("/delete", methods=["POST", "DELETE"], response_model=SuccessResponse)
async def delete_org(
    account: Account = Depends(get_current_account),
    params: OrgIdRequest = Depends(common_params(OrgIdRequest)),
    session: AsyncSession = Depends(get_session),
):
    """Delete a managed org (owner only). Personal orgs cannot be deleted."""
    await org_service.delete_org(params.org_id, account, session)
    return SuccessResponse(success=True)


@router.post("/search", response_model=OrgListResponse)
async def search_orgs(
    account: Optional[Account] = Depends(get_optional_account),
    params: OrgSearchRequest = Depends(common_params(OrgSearchRequest)),
    session: AsyncSession = Depends(get_session),
):
    """Case-insensitive search over org name, display name and handle."""
    views = await org_service.search_orgs(
        params.query,
        params.limit,
        account.account_id if account else None,
        session,
    )
    return OrgListResponse(orgs=[v.to_public() for v in views])


@router.post("/upload_avatar", response_model=OrgEnvelope)
async def upload_avatar(
    request: Request,
    account: Account = Depends(get_current_account),
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_app_settings),
):
    """Store an uploaded image as the org avatar (as a data URL)."""
    if not request.headers.get("content-type", "").startswith("multipart/form-data"):
        raise InvalidRequestError("Expected multipart form data", ErrorCode.INVALID_FORM_DATA)
    form = await request.form()

    org_id = form.get("org_id")
    if not isinstance(org_id, str) or not org_id:
        raise InvalidRequestError("org_id is required", ErrorCode.MISSING_ORG_ID)

    view = await org_service.get_managed_org(org_id, account, session)

    avatar = form.get("avatar")
    if not isinstance(avatar, UploadFile):
        raise InvalidRequestError("An avatar file is required", ErrorCode.MISSING_AVATAR)

    mime_type = (avatar.content_type or "").strip() or "image/png"
    if not mime_type.startswith("image/"):
        raise InvalidRequestError("Avatar must be an image", ErrorCode.INVALID_AVATAR_TYPE)

    data = await avatar.read()
    if not data:
        raise InvalidRequestError("Avatar file is empty", ErrorCode.EMPTY_AVATAR)
    if len(data) > settings.max_avatar_bytes:
        raise PayloadTooLargeError("Avatar file is too large", ErrorCode.AVATAR_TOO_LARGE)

    data_url = f"data:{mime_type};base64,{base64.b64encode(data).decode()}"
    view = await org_service.set_org_avatar(view, data_url, account.account_id, session)
    return OrgEnvelope(org=view.to_public())
