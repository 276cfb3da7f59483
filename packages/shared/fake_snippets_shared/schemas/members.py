"""Organization membership schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field, model_serializer, model_validator

from .common import UserPermissions


# Flags an added member gets unless the caller says otherwise.
DEFAULT_MEMBER_FLAGS = {
    "can_read_package": True,
    "can_manage_package": False,
    "can_manage_org": False,
}


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class AddMemberRequest(BaseModel):
    org_id: str
    account_id: Optional[str] = None
    github_username: Optional[str] = None
    can_read_package: bool = True
    can_manage_package: bool = False
    can_manage_org: bool = False

    @model_validator(mode="after")
    def _require_target(self) -> "AddMemberRequest":
        if not self.account_id and not self.github_username:
            raise ValueError("Either account_id or github_username is required")
        return self


class MemberPermissionsPatch(BaseModel):
    can_read_package: Optional[bool] = None
    can_manage_package: Optional[bool] = None
    can_manage_org: Optional[bool] = None


class UpdateMemberRequest(BaseModel):
    """Permission change for one member.

    Flags may be given at the top level or nested under
    ``org_member_permissions``; top-level values win.
    """

    org_id: str
    account_id: str
    can_read_package: Optional[bool] = None
    can_manage_package: Optional[bool] = None
    can_manage_org: Optional[bool] = None
    org_member_permissions: Optional[MemberPermissionsPatch] = None

    def permission_patch(self) -> dict[str, bool]:
        patch: dict[str, bool] = {}
        if self.org_member_permissions is not None:
            patch.update(self.org_member_permissions.model_dump(exclude_none=True))
        for flag in DEFAULT_MEMBER_FLAGS:
            value = getattr(self, flag)
            if value is not None:
                patch[flag] = value
        return patch


class RemoveMemberRequest(BaseModel):
    org_id: str
    account_id: str


class ListMembersRequest(BaseModel):
    org_id: Optional[str] = None
    org_name: Optional[str] = Field(
        None, validation_alias=AliasChoices("org_name", "name")
    )

    @model_validator(mode="after")
    def _require_org(self) -> "ListMembersRequest":
        if not self.org_id and not self.org_name:
            raise ValueError("Either org_id or name is required")
        return self


class GetMemberRequest(ListMembersRequest):
    account_id: str


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class OrgMemberResponse(BaseModel):
    org_id: str
    account_id: str
    github_username: Optional[str] = None
    tscircuit_handle: Optional[str] = None
    email: Optional[str] = None  # omitted for requesters outside the org
    is_owner: bool = False
    org_member_permissions: UserPermissions
    joined_at: datetime

    @model_serializer(mode="wrap")
    def _omit_redacted_email(self, handler):
        data = handler(self)
        if self.email is None:
            data.pop("email", None)
        return data


class OrgMemberListResponse(BaseModel):
    org_members: list[OrgMemberResponse]


class OrgMemberEnvelope(BaseModel):
    org_member: OrgMemberResponse
