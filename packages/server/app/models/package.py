"""Package model (ownership fields only)."""

from typing import Optional

from sqlmodel import Field, SQLModel

from .base import TimestampMixin, new_id


class Package(TimestampMixin, SQLModel, table=True):
    __tablename__ = "packages"

    package_id: str = Field(default_factory=new_id, primary_key=True)
    name: str = Field(nullable=False, index=True)  # "<handle>/<unscoped_name>"
    unscoped_name: str = Field(nullable=False)
    owner_org_id: str = Field(nullable=False, index=True)
    creator_account_id: Optional[str] = None
    github_repo_full_name: Optional[str] = None
