"""
Package ownership — creating packages under an org and moving them between orgs.
"""

from __future__ import annotations

from typing import Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ForbiddenError, InvalidRequestError, NotFoundError
from app.models.account import Account
from app.models.base import utcnow
from app.models.organization import Organization
from app.models.package import Package
from app.services.organizations import find_org, get_membership
from app.services.permissions import derive_permissions, is_owner
from fake_snippets_shared.schemas.common import ErrorCode

log = structlog.get_logger()


def org_handle(org: Organization) -> Optional[str]:
    """Namespace segment used in package names owned by ``org``."""
    return org.tscircuit_handle or org.github_handle


async def create_package(
    session: AsyncSession,
    *,
    owner_org: Organization,
    unscoped_name: str,
    creator_account_id: Optional[str] = None,
    github_repo_full_name: Optional[str] = None,
) -> Package:
    handle = org_handle(owner_org) or owner_org.org_name
    package = Package(
        name=f"{handle}/{unscoped_name}",
        unscoped_name=unscoped_name,
        owner_org_id=owner_org.org_id,
        creator_account_id=creator_account_id,
        github_repo_full_name=github_repo_full_name,
    )
    session.add(package)
    await session.flush()
    log.info("package.created", package_id=package.package_id, name=package.name)
    return package


async def _can_release(org: Optional[Organization], caller: Account, session: AsyncSession) -> bool:
    """Whether the caller may move packages out of ``org``."""
    if org is None:
        return False
    if org.is_personal_org:
        return org.owner_account_id == caller.account_id
    membership = await get_membership(org.org_id, caller.account_id, session)
    return is_owner(org, caller.account_id, membership)


async def transfer_package(
    package_id: str, target_org_id: str, caller: Account, session: AsyncSession
) -> tuple[Package, Organization]:
    package = await session.get(Package, package_id)
    if package is None:
        raise NotFoundError("Package not found", ErrorCode.PACKAGE_NOT_FOUND)

    if package.owner_org_id == target_org_id:
        raise InvalidRequestError(
            "Package is already owned by that organization",
            ErrorCode.PACKAGE_ALREADY_OWNED,
        )

    source_org = await find_org(session, org_id=package.owner_org_id)
    if not await _can_release(source_org, caller, session):
        raise ForbiddenError(
            "You don't have permission to transfer this package", ErrorCode.FORBIDDEN
        )

    target_org = await find_org(session, org_id=target_org_id)
    if target_org is None:
        raise NotFoundError("Organization not found", ErrorCode.ORG_NOT_FOUND)

    membership = await get_membership(target_org.org_id, caller.account_id, session)
    if not derive_permissions(target_org, caller.account_id, membership).can_manage_org:
        raise ForbiddenError(
            "You must be able to manage the organization to transfer a package to it",
            ErrorCode.FORBIDDEN,
        )

    handle = org_handle(target_org)
    if not handle:
        raise InvalidRequestError(
            "Target organization has no handle to scope the package name",
            ErrorCode.INVALID_PACKAGE_NAME,
        )

    previous_org_id = package.owner_org_id
    package.owner_org_id = target_org.org_id
    package.name = f"{handle}/{package.unscoped_name}"
    package.github_repo_full_name = None
    package.updated_at = utcnow()
    session.add(package)
    await session.flush()

    log.info(
        "package.transferred",
        package_id=package.package_id,
        from_org_id=previous_org_id,
        to_org_id=target_org.org_id,
        name=package.name,
    )
    return package, target_org
