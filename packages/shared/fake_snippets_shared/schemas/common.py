from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ErrorCode(str, Enum):
    INVALID_REQUEST = "invalid_request"
    UNAUTHORIZED = "unauthorized"
    NOT_AUTHORIZED = "not_authorized"
    FORBIDDEN = "forbidden"
    INTERNAL_ERROR = "internal_error"

    ORG_NOT_FOUND = "org_not_found"
    ORG_ALREADY_EXISTS = "org_already_exists"
    ORG_TSCIRCUIT_HANDLE_ALREADY_EXISTS = "org_tscircuit_handle_already_exists"
    CANNOT_DELETE_PERSONAL_ORG = "cannot_delete_personal_org"

    ACCOUNT_NOT_FOUND = "account_not_found"
    MEMBER_NOT_FOUND = "member_not_found"
    CANNOT_UPDATE_SELF = "cannot_update_self"
    CANNOT_REMOVE_OWNER = "cannot_remove_owner"
    CANNOT_ADD_MEMBER_TO_PERSONAL_ORG = "cannot_add_member_to_personal_org"

    INVALID_FORM_DATA = "invalid_form_data"
    MISSING_ORG_ID = "missing_org_id"
    MISSING_AVATAR = "missing_avatar"
    INVALID_AVATAR_TYPE = "invalid_avatar_type"
    EMPTY_AVATAR = "empty_avatar"
    AVATAR_TOO_LARGE = "avatar_too_large"

    PACKAGE_NOT_FOUND = "package_not_found"
    PACKAGE_ALREADY_OWNED = "package_already_owned"
    INVALID_PACKAGE_NAME = "invalid_package_name"

    INVITATION_NOT_FOUND = "invitation_not_found"
    INVITATION_REVOKED = "invitation_revoked"
    INVITATION_ALREADY_ACCEPTED = "invitation_already_accepted"
    INVITATION_EXPIRED = "invitation_expired"
    DUPLICATE_PENDING_INVITATION = "duplicate_pending_invitation"
    ALREADY_MEMBER = "already_member"
    EMAIL_MISMATCH = "email_mismatch"


class UserPermissions(BaseModel):
    """Capabilities an account holds on an organization. Derived, never stored."""

    model_config = ConfigDict(frozen=True)

    can_manage_org: bool = False
    can_manage_package: bool = False
    can_read_package: bool = False


FULL_PERMISSIONS = UserPermissions(
    can_manage_org=True, can_manage_package=True, can_read_package=True
)
NO_PERMISSIONS = UserPermissions()


class ErrorDetail(BaseModel):
    error_code: str
    message: str


class ErrorResponse(BaseModel):
    error: ErrorDetail


class EmptyResponse(BaseModel):
    pass


class SuccessResponse(BaseModel):
    success: bool = True


class AccountSummary(BaseModel):
    account_id: Optional[str] = None
    github_username: Optional[str] = None
    tscircuit_handle: Optional[str] = None
