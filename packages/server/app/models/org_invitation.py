"""Organization invitation model."""

from datetime import datetime
from typing import Optional

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import new_id, utcnow


class OrgInvitation(SQLModel, table=True):
    __tablename__ = "org_invitations"

    org_invitation_id: str = Field(default_factory=new_id, primary_key=True)
    org_id: str = Field(foreign_key="organizations.org_id", nullable=False, index=True)
    invitee_email: Optional[str] = Field(default=None, index=True)
    inviter_account_id: str = Field(nullable=False)
    invitation_token: str = Field(unique=True, nullable=False, index=True)
    is_pending: bool = Field(default=True, nullable=False)
    is_accepted: bool = Field(default=False, nullable=False)
    is_revoked: bool = Field(default=False, nullable=False)
    created_at: datetime = Field(
        default_factory=utcnow, nullable=False, sa_type=sa.DateTime(timezone=True)
    )
    expires_at: datetime = Field(nullable=False, sa_type=sa.DateTime(timezone=True))
    accepted_at: Optional[datetime] = Field(
        default=None, sa_type=sa.DateTime(timezone=True)
    )
    accepted_by_account_id: Optional[str] = None
