"""Account model."""

from datetime import datetime
from typing import Optional

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import new_id, utcnow


class Account(SQLModel, table=True):
    __tablename__ = "accounts"

    account_id: str = Field(default_factory=new_id, primary_key=True)
    github_username: str = Field(unique=True, nullable=False, index=True)
    tscircuit_handle: Optional[str] = Field(default=None, index=True)
    email: Optional[str] = Field(default=None, index=True)
    # Weak reference: the account's current default org context.
    personal_org_id: Optional[str] = None
    created_at: datetime = Field(
        default_factory=utcnow, nullable=False, sa_type=sa.DateTime(timezone=True)
    )
