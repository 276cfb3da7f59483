"""
Organization service — org lookup, permission-annotated views, CRUD.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import structlog
from sqlalchemy import delete, func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.errors import ForbiddenError, InvalidRequestError, NotFoundError
from app.models.account import Account
from app.models.base import utcnow
from app.models.org_account import OrgAccount
from app.models.org_invitation import OrgInvitation
from app.models.organization import Organization
from app.models.package import Package
from app.services import accounts as account_service
from app.services.permissions import derive_permissions
from fake_snippets_shared.schemas.common import ErrorCode, UserPermissions
from fake_snippets_shared.schemas.organizations import (
    OrgCreateRequest,
    OrgResponse,
    OrgUpdateRequest,
)

log = structlog.get_logger()

NOT_AUTHORIZED_MESSAGE = "You do not have permission to manage this organization"


@dataclass
class OrgView:
    """A stored org plus counts and the viewer's permissions."""

    org: Organization
    member_count: int
    package_count: int
    user_permissions: UserPermissions

    @property
    def can_manage_org(self) -> bool:
        return self.user_permissions.can_manage_org

    def to_public(self) -> OrgResponse:
        org = self.org
        return OrgResponse(
            org_id=org.org_id,
            name=org.org_name,
            display_name=org.org_display_name or org.org_name,
            owner_account_id=org.owner_account_id,
            github_handle=org.github_handle,
            tscircuit_handle=org.tscircuit_handle,
            avatar_url=org.avatar_url,
            is_personal_org=org.is_personal_org,
            member_count=self.member_count,
            package_count=self.package_count,
            can_manage_org=self.can_manage_org,
            user_permissions=self.user_permissions,
            created_at=org.created_at,
        )


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------

async def find_org(
    session: AsyncSession,
    *,
    org_id: Optional[str] = None,
    org_name: Optional[str] = None,
    github_handle: Optional[str] = None,
    tscircuit_handle: Optional[str] = None,
) -> Optional[Organization]:
    """First org (in creation order) matching every given filter."""
    filters = []
    if org_id is not None:
        filters.append(Organization.org_id == org_id)
    if org_name is not None:
        filters.append(Organization.org_name == org_name)
    if github_handle is not None:
        filters.append(Organization.github_handle == github_handle)
    if tscircuit_handle is not None:
        filters.append(Organization.tscircuit_handle == tscircuit_handle)
    if not filters:
        raise ValueError("At least one org filter is required")

    result = await session.execute(
        select(Organization).where(*filters).order_by(Organization.created_at)
    )
    return result.scalars().first()


async def get_membership(
    org_id: str, account_id: Optional[str], session: AsyncSession
) -> Optional[OrgAccount]:
    if account_id is None:
        return None
    result = await session.execute(
        select(OrgAccount).where(
            OrgAccount.org_id == org_id, OrgAccount.account_id == account_id
        )
    )
    return result.scalars().first()


async def count_members(org: Organization, session: AsyncSession) -> int:
    """The owner plus every other account with a membership edge."""
    result = await session.execute(
        select(func.count(func.distinct(OrgAccount.account_id))).where(
            OrgAccount.org_id == org.org_id,
            OrgAccount.account_id != org.owner_account_id,
        )
    )
    return 1 + (result.scalar_one() or 0)


async def count_packages(org_id: str, session: AsyncSession) -> int:
    result = await session.execute(
        select(func.count()).select_from(Package).where(Package.owner_org_id == org_id)
    )
    return result.scalar_one() or 0


async def build_view(
    org: Organization, viewer_account_id: Optional[str], session: AsyncSession
) -> OrgView:
    membership = await get_membership(org.org_id, viewer_account_id, session)
    return OrgView(
        org=org,
        member_count=await count_members(org, session),
        package_count=await count_packages(org.org_id, session),
        user_permissions=derive_permissions(org, viewer_account_id, membership),
    )


async def get_org(
    session: AsyncSession,
    *,
    org_id: Optional[str] = None,
    org_name: Optional[str] = None,
    github_handle: Optional[str] = None,
    tscircuit_handle: Optional[str] = None,
    viewer_account_id: Optional[str] = None,
) -> Optional[OrgView]:
    """Find an org and annotate it for the viewer. Returns None when absent."""
    org = await find_org(
        session,
        org_id=org_id,
        org_name=org_name,
        github_handle=github_handle,
        tscircuit_handle=tscircuit_handle,
    )
    if org is None:
        return None
    return await build_view(org, viewer_account_id, session)


async def get_org_or_404(session: AsyncSession, **kwargs) -> OrgView:
    view = await get_org(session, **kwargs)
    if view is None:
        raise NotFoundError("Organization not found", ErrorCode.ORG_NOT_FOUND)
    return view


async def get_managed_org(
    org_id: str, caller: Account, session: AsyncSession
) -> OrgView:
    """Resolve an org the caller must be able to manage (404, then 403)."""
    view = await get_org_or_404(
        session, org_id=org_id, viewer_account_id=caller.account_id
    )
    if not view.can_manage_org:
        raise ForbiddenError(NOT_AUTHORIZED_MESSAGE, ErrorCode.NOT_AUTHORIZED)
    return view


async def list_user_orgs(account_id: str, session: AsyncSession) -> list[OrgView]:
    """Orgs the account owns or holds a membership edge in."""
    member_of = select(OrgAccount.org_id).where(OrgAccount.account_id == account_id)
    result = await session.execute(
        select(Organization)
        .where(
            or_(
                Organization.owner_account_id == account_id,
                Organization.org_id.in_(member_of),
            )
        )
        .order_by(Organization.created_at)
    )
    return [await build_view(org, account_id, session) for org in result.scalars().all()]


async def search_orgs(
    query: Optional[str],
    limit: int,
    viewer_account_id: Optional[str],
    session: AsyncSession,
) -> list[OrgView]:
    stmt = select(Organization)
    if query:
        needle = f"%{query.lower()}%"
        stmt = stmt.where(
            or_(
                func.lower(Organization.org_name).like(needle),
                func.lower(Organization.org_display_name).like(needle),
                func.lower(Organization.tscircuit_handle).like(needle),
            )
        )
    result = await session.execute(stmt.order_by(Organization.created_at).limit(limit))
    return [
        await build_view(org, viewer_account_id, session)
        for org in result.scalars().all()
    ]


# ---------------------------------------------------------------------------
# Mutation
# ---------------------------------------------------------------------------

async def create_org(
    req: OrgCreateRequest, creator: Account, session: AsyncSession
) -> OrgView:
    """Create a managed org; the creator becomes its owner and first member."""
    if await find_org(session, org_name=req.name):
        raise InvalidRequestError(
            "An organization with this name already exists",
            ErrorCode.ORG_ALREADY_EXISTS,
        )
    if req.tscircuit_handle and await find_org(
        session, tscircuit_handle=req.tscircuit_handle
    ):
        raise InvalidRequestError(
            "An organization with this name already exists",
            ErrorCode.ORG_ALREADY_EXISTS,
        )

    org = Organization(
        org_name=req.name,
        org_display_name=req.display_name,
        owner_account_id=creator.account_id,
        is_personal_org=False,
        tscircuit_handle=req.tscircuit_handle,
    )
    session.add(org)
    await session.flush()

    session.add(
        OrgAccount(
            org_id=org.org_id,
            account_id=creator.account_id,
            is_owner=True,
            can_read_package=True,
            can_manage_package=True,
            can_manage_org=True,
        )
    )
    await session.flush()

    log.info("org.created", org_id=org.org_id, name=org.org_name, owner=creator.account_id)
    return await build_view(org, creator.account_id, session)


async def update_org(
    view: OrgView, req: OrgUpdateRequest, viewer_account_id: str, session: AsyncSession
) -> OrgView:
    """Update display name and/or tscircuit handle. The org name is immutable."""
    org = view.org
    fields = req.model_fields_set
    if "display_name" not in fields and "tscircuit_handle" not in fields:
        return view

    if "tscircuit_handle" in fields and req.tscircuit_handle != org.tscircuit_handle:
        if req.tscircuit_handle:
            duplicate = await find_org(session, tscircuit_handle=req.tscircuit_handle)
            if duplicate and duplicate.org_id != org.org_id:
                raise InvalidRequestError(
                    "An organization with this tscircuit_handle already exists",
                    ErrorCode.ORG_TSCIRCUIT_HANDLE_ALREADY_EXISTS,
                )
        org.tscircuit_handle = req.tscircuit_handle

    if "display_name" in fields:
        trimmed = (req.display_name or "").strip()
        org.org_display_name = trimmed or None

    org.updated_at = utcnow()
    session.add(org)
    await session.flush()

    log.info("org.updated", org_id=org.org_id, fields=sorted(fields - {"org_id"}))
    return await build_view(org, viewer_account_id, session)


async def set_org_avatar(
    view: OrgView, avatar_url: str, viewer_account_id: str, session: AsyncSession
) -> OrgView:
    org = view.org
    org.avatar_url = avatar_url
    org.updated_at = utcnow()
    session.add(org)
    await session.flush()
    log.info("org.avatar_updated", org_id=org.org_id, size=len(avatar_url))
    return await build_view(org, viewer_account_id, session)


async def delete_org(org_id: str, caller: Account, session: AsyncSession) -> None:
    """Delete a managed org. Personal orgs can never be deleted."""
    org = await find_org(session, org_id=org_id)
    if org is None:
        raise NotFoundError("Organization not found", ErrorCode.ORG_NOT_FOUND)
    if org.is_personal_org:
        raise InvalidRequestError(
            "Personal organizations cannot be deleted",
            ErrorCode.CANNOT_DELETE_PERSONAL_ORG,
        )
    if org.owner_account_id != caller.account_id:
        raise ForbiddenError(
            "Only the organization owner can delete it", ErrorCode.NOT_AUTHORIZED
        )

    result = await session.execute(
        select(Account).where(Account.personal_org_id == org.org_id)
    )
    for account in result.scalars().all():
        await account_service.reset_personal_org(account, session)

    await session.execute(delete(OrgInvitation).where(OrgInvitation.org_id == org.org_id))
    await session.execute(delete(OrgAccount).where(OrgAccount.org_id == org.org_id))
    await session.delete(org)
    await session.flush()

    log.info("org.deleted", org_id=org_id, deleted_by=caller.account_id)
