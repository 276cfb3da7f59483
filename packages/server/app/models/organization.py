"""Organization model."""

from typing import Optional

from sqlmodel import Field, SQLModel

from .base import TimestampMixin, new_id


class Organization(TimestampMixin, SQLModel, table=True):
    __tablename__ = "organizations"

    org_id: str = Field(default_factory=new_id, primary_key=True)
    org_name: str = Field(unique=True, nullable=False, index=True)
    org_display_name: Optional[str] = None
    owner_account_id: str = Field(foreign_key="accounts.account_id", nullable=False, index=True)
    is_personal_org: bool = Field(default=False, nullable=False)
    avatar_url: Optional[str] = None
    github_handle: Optional[str] = Field(default=None, index=True)
    tscircuit_handle: Optional[str] = Field(default=None, index=True)
