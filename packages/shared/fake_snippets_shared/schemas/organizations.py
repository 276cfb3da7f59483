"""
Organization-related Pydantic schemas shared between the server and clients.

Covers: org name / handle validation, org CRUD requests, the public org view
returned by every org endpoint.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field, model_validator

from .common import UserPermissions


# ---------------------------------------------------------------------------
# Validation rules
# ---------------------------------------------------------------------------

# Lowercase letters and digits, separated by single hyphens.
ORG_NAME_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"
ORG_NAME_MIN_LENGTH = 3
ORG_NAME_MAX_LENGTH = 40

TSCIRCUIT_HANDLE_PATTERN = r"^[A-Za-z0-9](?:[A-Za-z0-9_-]*[A-Za-z0-9])?$"
TSCIRCUIT_HANDLE_MAX_LENGTH = 40

DISPLAY_NAME_MAX_LENGTH = 50


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class OrgCreateRequest(BaseModel):
    name: str = Field(
        ...,
        min_length=ORG_NAME_MIN_LENGTH,
        max_length=ORG_NAME_MAX_LENGTH,
        pattern=ORG_NAME_PATTERN,
        description="Unique, immutable org identifier",
    )
    display_name: Optional[str] = Field(
        None, min_length=1, max_length=DISPLAY_NAME_MAX_LENGTH
    )
    tscircuit_handle: Optional[str] = Field(
        None,
        max_length=TSCIRCUIT_HANDLE_MAX_LENGTH,
        pattern=TSCIRCUIT_HANDLE_PATTERN,
    )


class OrgGetRequest(BaseModel):
    org_id: Optional[str] = None
    org_name: Optional[str] = Field(
        None, validation_alias=AliasChoices("org_name", "name")
    )
    github_handle: Optional[str] = None
    tscircuit_handle: Optional[str] = None

    @model_validator(mode="after")
    def _require_a_filter(self) -> "OrgGetRequest":
        if not any(
            (self.org_id, self.org_name, self.github_handle, self.tscircuit_handle)
        ):
            raise ValueError(
                "One of org_id, org_name, github_handle or tscircuit_handle is required"
            )
        return self


class OrgIdRequest(BaseModel):
    org_id: str


class OrgUpdateRequest(BaseModel):
    org_id: str
    display_name: Optional[str] = Field(None, max_length=DISPLAY_NAME_MAX_LENGTH)
    tscircuit_handle: Optional[str] = Field(
        None,
        max_length=TSCIRCUIT_HANDLE_MAX_LENGTH,
        pattern=TSCIRCUIT_HANDLE_PATTERN,
    )


class OrgSearchRequest(BaseModel):
    query: Optional[str] = Field(None, max_length=100)
    limit: int = Field(default=50, ge=1, le=100)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class OrgResponse(BaseModel):
    """Public view of an organization, annotated for the requesting account."""

    org_id: str
    name: str
    display_name: str
    owner_account_id: str
    github_handle: Optional[str] = None
    tscircuit_handle: Optional[str] = None
    avatar_url: Optional[str] = None
    is_personal_org: bool = False
    member_count: int
    package_count: int
    can_manage_org: bool = False
    user_permissions: UserPermissions
    created_at: datetime


class OrgEnvelope(BaseModel):
    org: OrgResponse


class OrgListResponse(BaseModel):
    orgs: list[OrgResponse]
