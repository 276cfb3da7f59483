"""Organization invitation schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr

from .common import AccountSummary


class InvitationCreateRequest(BaseModel):
    org_id: str
    invitee_email: EmailStr


class InvitationGetRequest(BaseModel):
    token: str


class InvitationListRequest(BaseModel):
    org_id: str


class InvitationAcceptRequest(BaseModel):
    invitation_token: str


class InvitationOrgSummary(BaseModel):
    org_id: str
    org_name: Optional[str] = None
    org_display_name: Optional[str] = None


class InvitationCreateResponse(BaseModel):
    org_invitation_id: str
    invitation_token: str
    invitee_email: str
    expires_at: datetime


class InvitationResponse(BaseModel):
    org_invitation_id: str
    invitee_email: Optional[str] = None
    is_pending: bool
    is_accepted: bool
    is_revoked: bool
    is_expired: bool
    created_at: datetime
    expires_at: datetime
    accepted_at: Optional[datetime] = None
    org: InvitationOrgSummary
    inviter: AccountSummary


class InvitationEnvelope(BaseModel):
    invitation: InvitationResponse


class InvitationListResponse(BaseModel):
    invitations: list[InvitationResponse]


class InvitationAcceptResponse(BaseModel):
    org_account_id: str
    org: InvitationOrgSummary
