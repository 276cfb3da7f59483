"""
Package ownership endpoints.

POST  /api/packages/transfer  — Move a package to another org
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import get_current_account
from app.core.database import get_session
from app.core.params import common_params
from app.models.account import Account
from app.services import packages as package_service
from fake_snippets_shared.schemas.packages import (
    PackageEnvelope,
    PackageResponse,
    PackageTransferRequest,
)

router = APIRouter()


@router.post("/transfer", response_model=PackageEnvelope)
async def transfer_package(
    account: Account = Depends(get_current_account),
    params: PackageTransferRequest = Depends(common_params(PackageTransferRequest)),
    session: AsyncSession = Depends(get_session),
):
    package, target_org = await package_service.transfer_package(
        params.package_id, params.target_org_id, account, session
    )
    return PackageEnvelope(
        package=PackageResponse(
            package_id=package.package_id,
            name=package.name,
            unscoped_name=package.unscoped_name,
            owner_org_id=package.owner_org_id,
            creator_account_id=package.creator_account_id,
            github_repo_full_name=package.github_repo_full_name,
            org_owner_tscircuit_handle=target_org.tscircuit_handle,
            created_at=package.created_at,
            updated_at=package.updated_at,
        )
    )
