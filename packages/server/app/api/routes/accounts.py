"""
Account endpoints.

GET|POST  /api/accounts/get  — The authenticated caller's account
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from app.core.auth import get_current_account
from app.models.account import Account
from fake_snippets_shared.schemas.accounts import AccountEnvelope, AccountResponse

router = APIRouter()


@router.api_route("/get", methods=["GET", "POST"], response_model=AccountEnvelope)
async def get_account(account: Account = Depends(get_current_account)):
    return AccountEnvelope(
        account=AccountResponse(
            account_id=account.account_id,
            github_username=account.github_username,
            tscircuit_handle=account.tscircuit_handle,
            email=account.email,
            personal_org_id=account.personal_org_id,
            created_at=account.created_at,
        )
    )
