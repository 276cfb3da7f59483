"""Organization membership edge (account <-> org with capability flags)."""

from datetime import datetime

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import new_id, utcnow


class OrgAccount(SQLModel, table=True):
    __tablename__ = "org_accounts"
    __table_args__ = (sa.UniqueConstraint("org_id", "account_id"),)

    org_account_id: str = Field(default_factory=new_id, primary_key=True)
    org_id: str = Field(foreign_key="organizations.org_id", nullable=False, index=True)
    account_id: str = Field(foreign_key="accounts.account_id", nullable=False, index=True)
    is_owner: bool = Field(default=False, nullable=False)
    can_read_package: bool = Field(default=True, nullable=False)
    can_manage_package: bool = Field(default=False, nullable=False)
    can_manage_org: bool = Field(default=False, nullable=False)
    created_at: datetime = Field(
        default_factory=utcnow, nullable=False, sa_type=sa.DateTime(timezone=True)
    )
