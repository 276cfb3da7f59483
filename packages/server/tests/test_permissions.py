"""
Unit tests for permission derivation (no DB needed).
"""

from __future__ import annotations

import pytest

from app.models.org_account import OrgAccount
from app.models.organization import Organization
from app.services.permissions import derive_permissions, is_member, is_owner
from fake_snippets_shared.schemas.common import FULL_PERMISSIONS, NO_PERMISSIONS


def _org(**overrides) -> Organization:
    fields = {
        "org_id": "org-1",
        "org_name": "acme",
        "owner_account_id": "owner",
        "is_personal_org": False,
    }
    fields.update(overrides)
    return Organization(**fields)


def _edge(account_id: str, org_id: str = "org-1", **flags) -> OrgAccount:
    return OrgAccount(org_id=org_id, account_id=account_id, **flags)


class TestDerivePermissions:

    def test_anonymous_gets_nothing(self):
        assert derive_permissions(_org(), None) == NO_PERMISSIONS

    def test_owner_without_edge_gets_everything(self):
        assert derive_permissions(_org(), "owner") == FULL_PERMISSIONS

    def test_owner_flag_on_edge_gets_everything(self):
        edge = _edge("alice", is_owner=True, can_read_package=False)
        assert derive_permissions(_org(), "alice", edge) == FULL_PERMISSIONS

    def test_member_gets_edge_flags(self):
        edge = _edge("alice", can_read_package=True, can_manage_package=True)
        perms = derive_permissions(_org(), "alice", edge)
        assert perms.can_read_package is True
        assert perms.can_manage_package is True
        assert perms.can_manage_org is False

    def test_stranger_gets_nothing(self):
        assert derive_permissions(_org(), "stranger") == NO_PERMISSIONS

    def test_owner_of_another_org_gets_nothing(self):
        other = _org(org_id="org-2", owner_account_id="alice")
        assert derive_permissions(_org(), "alice") == NO_PERMISSIONS
        assert derive_permissions(other, "alice") == FULL_PERMISSIONS

    def test_mismatched_edge_raises(self):
        with pytest.raises(ValueError):
            derive_permissions(_org(), "alice", _edge("bob"))
        with pytest.raises(ValueError):
            derive_permissions(_org(), "alice", _edge("alice", org_id="org-2"))

    def test_permissions_are_immutable(self):
        with pytest.raises(Exception):
            FULL_PERMISSIONS.can_manage_org = False


class TestMembership:

    def test_owner_is_member_without_edge(self):
        assert is_owner(_org(), "owner")
        assert is_member(_org(), "owner")

    def test_edge_makes_member(self):
        assert is_member(_org(), "alice", _edge("alice"))
        assert not is_owner(_org(), "alice", _edge("alice"))

    def test_no_edge_not_member(self):
        assert not is_member(_org(), "alice")

    def test_anonymous_is_never_member(self):
        assert not is_member(_org(), None)
        assert not is_owner(_org(), None)
