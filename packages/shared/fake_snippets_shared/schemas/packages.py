"""Package schemas (only what org ownership needs)."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class PackageTransferRequest(BaseModel):
    package_id: str
    target_org_id: str


class PackageResponse(BaseModel):
    package_id: str
    name: str
    unscoped_name: str
    owner_org_id: str
    creator_account_id: Optional[str] = None
    github_repo_full_name: Optional[str] = None
    org_owner_tscircuit_handle: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class PackageEnvelope(BaseModel):
    package: PackageResponse
