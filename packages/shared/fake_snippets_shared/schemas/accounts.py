"""Account schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class AccountResponse(BaseModel):
    account_id: str
    github_username: str
    tscircuit_handle: Optional[str] = None
    email: Optional[str] = None
    personal_org_id: Optional[str] = None
    created_at: datetime


class AccountEnvelope(BaseModel):
    account: AccountResponse
