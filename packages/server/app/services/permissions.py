"""
Organization permission derivation.

The only place that knows the owner of an org is implicitly a full member.
Everything that needs a permission view or a membership answer goes through
``derive_permissions`` / ``is_member``.
"""

from __future__ import annotations

from typing import Optional

from app.models.org_account import OrgAccount
from app.models.organization import Organization
from fake_snippets_shared.schemas.common import (
    FULL_PERMISSIONS,
    NO_PERMISSIONS,
    UserPermissions,
)


def is_owner(
    org: Organization,
    account_id: Optional[str],
    membership: Optional[OrgAccount] = None,
) -> bool:
    if account_id is None:
        return False
    if org.owner_account_id == account_id:
        return True
    return membership is not None and membership.is_owner


def is_member(
    org: Organization,
    account_id: Optional[str],
    membership: Optional[OrgAccount] = None,
) -> bool:
    """Owners are members even without a membership edge."""
    if account_id is None:
        return False
    return is_owner(org, account_id, membership) or membership is not None


def derive_permissions(
    org: Organization,
    account_id: Optional[str],
    membership: Optional[OrgAccount] = None,
) -> UserPermissions:
    """Compute the permission view of ``account_id`` on ``org``.

    ``membership`` must be the edge for exactly this (org, account) pair, or
    ``None`` when there is none.
    """
    if account_id is None:
        return NO_PERMISSIONS
    if membership is not None and (
        membership.org_id != org.org_id or membership.account_id != account_id
    ):
        raise ValueError("membership does not belong to this org/account pair")
    if is_owner(org, account_id, membership):
        return FULL_PERMISSIONS
    if membership is not None:
        return UserPermissions(
            can_manage_org=membership.can_manage_org,
            can_manage_package=membership.can_manage_package,
            can_read_package=membership.can_read_package,
        )
    return NO_PERMISSIONS
