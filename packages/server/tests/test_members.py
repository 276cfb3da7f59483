"""
Integration tests for organization membership endpoints.

Tests cover:
- Member listing with email redaction for outsiders
- add / update / remove flows and their error ordering
- Default org context reset on removal
"""

from __future__ import annotations

import pytest
from httpx import AsyncClient

from app.core.database import get_session_context
from app.models.account import Account
from app.models.base import utcnow
from fake_snippets_shared.schemas.common import NO_PERMISSIONS
from fake_snippets_shared.schemas.members import OrgMemberResponse


def _error_code(response) -> str:
    return response.json()["error"]["error_code"]


async def _permissions(client: AsyncClient, org_id: str) -> dict:
    response = await client.get("/api/orgs/get", params={"org_id": org_id})
    return response.json()["org"]["user_permissions"]


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------

class TestListMembers:

    @pytest.mark.asyncio
    async def test_members_see_emails(self, bob_client: AsyncClient, seed):
        response = await bob_client.get(
            "/api/orgs/list_members", params={"org_id": seed.jane_org_id}
        )
        assert response.status_code == 200
        members = {m["account_id"]: m for m in response.json()["org_members"]}
        assert set(members) == {seed.jane_id, seed.bob_id}
        assert members[seed.jane_id]["email"] == "jane@example.com"
        assert members[seed.jane_id]["is_owner"] is True
        assert members[seed.bob_id]["is_owner"] is False
        assert members[seed.bob_id]["org_member_permissions"] == {
            "can_manage_org": False,
            "can_manage_package": False,
            "can_read_package": True,
        }

    @pytest.mark.asyncio
    async def test_non_members_get_redacted_emails(self, client: AsyncClient):
        response = await client.post("/api/orgs/list_members", json={"name": "jane-corp"})
        assert response.status_code == 200
        members = response.json()["org_members"]
        assert len(members) == 2
        assert all("email" not in m for m in members)

    @pytest.mark.asyncio
    async def test_anonymous_gets_redacted_emails(self, anon_client: AsyncClient):
        response = await anon_client.get(
            "/api/orgs/list_members", params={"name": "jane-corp"}
        )
        assert response.status_code == 200
        assert all("email" not in m for m in response.json()["org_members"])

    @pytest.mark.asyncio
    async def test_owner_without_edge_is_listed_once(self, client: AsyncClient, seed):
        org = await client.get(
            "/api/orgs/get", params={"org_id": seed.testuser_personal_org_id}
        )
        created_at = org.json()["org"]["created_at"]

        response = await client.get(
            "/api/orgs/list_members", params={"org_id": seed.testuser_personal_org_id}
        )
        assert response.status_code == 200
        members = response.json()["org_members"]
        assert len(members) == 1
        owner = members[0]
        assert owner["account_id"] == seed.testuser_id
        assert owner["is_owner"] is True
        assert owner["email"] == "testuser@example.com"
        assert owner["org_member_permissions"] == {
            "can_manage_org": True,
            "can_manage_package": True,
            "can_read_package": True,
        }
        assert owner["joined_at"] == created_at

        single = await client.get(
            "/api/orgs/get_member",
            params={
                "org_id": seed.testuser_personal_org_id,
                "account_id": seed.testuser_id,
            },
        )
        assert single.status_code == 200
        assert single.json()["org_member"] == owner

    def test_redacted_email_key_is_omitted(self):
        member = OrgMemberResponse(
            org_id="org-1",
            account_id="account-bob",
            org_member_permissions=NO_PERMISSIONS,
            joined_at=utcnow(),
        )
        data = member.model_dump(mode="json")
        assert "email" not in data
        assert data["org_member_permissions"] == {
            "can_manage_org": False,
            "can_manage_package": False,
            "can_read_package": False,
        }

        visible = member.model_copy(update={"email": "bob@example.com"})
        assert visible.model_dump()["email"] == "bob@example.com"

    @pytest.mark.asyncio
    async def test_missing_org(self, client: AsyncClient):
        response = await client.get("/api/orgs/list_members", params={"org_id": "nope"})
        assert response.status_code == 404
        assert _error_code(response) == "org_not_found"

    @pytest.mark.asyncio
    async def test_org_required(self, client: AsyncClient):
        response = await client.get("/api/orgs/list_members")
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_get_member(self, jane_client: AsyncClient, seed):
        response = await jane_client.get(
            "/api/orgs/get_member",
            params={"org_id": seed.jane_org_id, "account_id": seed.bob_id},
        )
        assert response.status_code == 200
        member = response.json()["org_member"]
        assert member["github_username"] == "bob"
        assert member["email"] == "bob@example.com"

    @pytest.mark.asyncio
    async def test_get_non_member(self, jane_client: AsyncClient, seed):
        response = await jane_client.get(
            "/api/orgs/get_member",
            params={"org_id": seed.jane_org_id, "account_id": seed.testuser_id},
        )
        assert response.status_code == 404
        assert _error_code(response) == "member_not_found"


# ---------------------------------------------------------------------------
# Add
# ---------------------------------------------------------------------------

class TestAddMember:

    @pytest.mark.asyncio
    async def test_add_defaults_to_read_only(
        self, jane_client: AsyncClient, client: AsyncClient, seed
    ):
        response = await jane_client.post(
            "/api/orgs/add_member",
            json={"org_id": seed.jane_org_id, "account_id": seed.testuser_id},
        )
        assert response.status_code == 200
        assert response.json() == {}
        assert await _permissions(client, seed.jane_org_id) == {
            "can_manage_org": False,
            "can_manage_package": False,
            "can_read_package": True,
        }

    @pytest.mark.asyncio
    async def test_add_by_github_username(self, jane_client: AsyncClient, seed):
        response = await jane_client.get(
            "/api/orgs/add_member",
            params={"org_id": seed.jane_org_id, "github_username": "testuser"},
        )
        assert response.status_code == 200

        org = await jane_client.get("/api/orgs/get", params={"org_id": seed.jane_org_id})
        assert org.json()["org"]["member_count"] == 3

    @pytest.mark.asyncio
    async def test_add_is_idempotent(
        self, jane_client: AsyncClient, bob_client: AsyncClient, seed
    ):
        response = await jane_client.post(
            "/api/orgs/add_member",
            json={
                "org_id": seed.jane_org_id,
                "account_id": seed.bob_id,
                "can_manage_package": True,
            },
        )
        assert response.status_code == 200
        assert (await _permissions(bob_client, seed.jane_org_id))["can_manage_package"] is True

        org = await jane_client.get("/api/orgs/get", params={"org_id": seed.jane_org_id})
        assert org.json()["org"]["member_count"] == 2

    @pytest.mark.asyncio
    async def test_member_without_manage_forbidden(self, bob_client: AsyncClient, seed):
        response = await bob_client.post(
            "/api/orgs/add_member",
            json={"org_id": seed.jane_org_id, "account_id": seed.testuser_id},
        )
        assert response.status_code == 403
        assert _error_code(response) == "not_authorized"

    @pytest.mark.asyncio
    async def test_manager_can_add(
        self, jane_client: AsyncClient, bob_client: AsyncClient, seed
    ):
        await jane_client.post(
            "/api/orgs/update_member",
            json={"org_id": seed.jane_org_id, "account_id": seed.bob_id, "can_manage_org": True},
        )
        response = await bob_client.post(
            "/api/orgs/add_member",
            json={"org_id": seed.jane_org_id, "account_id": seed.testuser_id},
        )
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_missing_org_checked_before_permissions(self, bob_client: AsyncClient, seed):
        response = await bob_client.post(
            "/api/orgs/add_member", json={"org_id": "nope", "account_id": seed.testuser_id}
        )
        assert response.status_code == 404
        assert _error_code(response) == "org_not_found"

    @pytest.mark.asyncio
    async def test_unknown_account(self, jane_client: AsyncClient, seed):
        response = await jane_client.post(
            "/api/orgs/add_member", json={"org_id": seed.jane_org_id, "account_id": "ghost"}
        )
        assert response.status_code == 404
        assert _error_code(response) == "account_not_found"

    @pytest.mark.asyncio
    async def test_personal_org_rejects_members(self, jane_client: AsyncClient, seed):
        response = await jane_client.post(
            "/api/orgs/add_member",
            json={"org_id": seed.jane_personal_org_id, "account_id": seed.testuser_id},
        )
        assert response.status_code == 400
        assert _error_code(response) == "cannot_add_member_to_personal_org"

    @pytest.mark.asyncio
    async def test_target_required(self, jane_client: AsyncClient, seed):
        response = await jane_client.post(
            "/api/orgs/add_member", json={"org_id": seed.jane_org_id}
        )
        assert response.status_code == 400
        assert _error_code(response) == "invalid_request"

    @pytest.mark.asyncio
    async def test_requires_auth(self, anon_client: AsyncClient, seed):
        response = await anon_client.post(
            "/api/orgs/add_member",
            json={"org_id": seed.jane_org_id, "account_id": seed.testuser_id},
        )
        assert response.status_code == 401


# ---------------------------------------------------------------------------
# Update
# ---------------------------------------------------------------------------

class TestUpdateMember:

    @pytest.mark.asyncio
    async def test_grant_manage_org(
        self, jane_client: AsyncClient, bob_client: AsyncClient, seed
    ):
        response = await jane_client.post(
            "/api/orgs/update_member",
            json={"org_id": seed.jane_org_id, "account_id": seed.bob_id, "can_manage_org": True},
        )
        assert response.status_code == 200
        assert response.json() == {}

        update = await bob_client.post(
            "/api/orgs/update",
            json={"org_id": seed.jane_org_id, "display_name": "Bob was here"},
        )
        assert update.status_code == 200

    @pytest.mark.asyncio
    async def test_patch_merges_flags(
        self, jane_client: AsyncClient, bob_client: AsyncClient, seed
    ):
        response = await jane_client.patch(
            "/api/orgs/update_member",
            json={
                "org_id": seed.jane_org_id,
                "account_id": seed.bob_id,
                "can_manage_package": True,
            },
        )
        assert response.status_code == 200
        assert await _permissions(bob_client, seed.jane_org_id) == {
            "can_manage_org": False,
            "can_manage_package": True,
            "can_read_package": True,
        }

    @pytest.mark.asyncio
    async def test_put_replaces_flags(
        self, jane_client: AsyncClient, bob_client: AsyncClient, seed
    ):
        await jane_client.post(
            "/api/orgs/update_member",
            json={
                "org_id": seed.jane_org_id,
                "account_id": seed.bob_id,
                "can_manage_package": True,
                "can_read_package": False,
            },
        )
        response = await jane_client.put(
            "/api/orgs/update_member",
            json={"org_id": seed.jane_org_id, "account_id": seed.bob_id, "can_manage_org": True},
        )
        assert response.status_code == 200
        assert await _permissions(bob_client, seed.jane_org_id) == {
            "can_manage_org": True,
            "can_manage_package": False,
            "can_read_package": True,
        }

    @pytest.mark.asyncio
    async def test_nested_permissions(
        self, jane_client: AsyncClient, bob_client: AsyncClient, seed
    ):
        response = await jane_client.post(
            "/api/orgs/update_member",
            json={
                "org_id": seed.jane_org_id,
                "account_id": seed.bob_id,
                "org_member_permissions": {"can_manage_package": True, "can_read_package": False},
                "can_read_package": True,
            },
        )
        assert response.status_code == 200
        perms = await _permissions(bob_client, seed.jane_org_id)
        assert perms["can_manage_package"] is True
        assert perms["can_read_package"] is True

    @pytest.mark.asyncio
    async def test_cannot_update_self(self, jane_client: AsyncClient, seed):
        response = await jane_client.post(
            "/api/orgs/update_member",
            json={"org_id": seed.jane_org_id, "account_id": seed.jane_id, "can_manage_org": False},
        )
        assert response.status_code == 400
        assert _error_code(response) == "cannot_update_self"

    @pytest.mark.asyncio
    async def test_non_member(self, jane_client: AsyncClient, seed):
        response = await jane_client.post(
            "/api/orgs/update_member",
            json={"org_id": seed.jane_org_id, "account_id": seed.testuser_id, "can_manage_org": True},
        )
        assert response.status_code == 404
        assert _error_code(response) == "member_not_found"

    @pytest.mark.asyncio
    async def test_permission_checked_before_self(self, bob_client: AsyncClient, seed):
        response = await bob_client.post(
            "/api/orgs/update_member",
            json={"org_id": seed.jane_org_id, "account_id": seed.bob_id, "can_manage_org": True},
        )
        assert response.status_code == 403
        assert _error_code(response) == "not_authorized"


# ---------------------------------------------------------------------------
# Remove
# ---------------------------------------------------------------------------

class TestRemoveMember:

    @pytest.mark.asyncio
    async def test_remove_member(
        self, jane_client: AsyncClient, bob_client: AsyncClient, seed
    ):
        response = await jane_client.post(
            "/api/orgs/remove_member",
            json={"org_id": seed.jane_org_id, "account_id": seed.bob_id},
        )
        assert response.status_code == 200
        assert response.json() == {}

        assert await _permissions(bob_client, seed.jane_org_id) == {
            "can_manage_org": False,
            "can_manage_package": False,
            "can_read_package": False,
        }
        orgs = await bob_client.get("/api/orgs/list")
        assert {o["name"] for o in orgs.json()["orgs"]} == {"bob"}

    @pytest.mark.asyncio
    async def test_remove_resets_default_org(
        self, app, jane_client: AsyncClient, bob_client: AsyncClient, seed
    ):
        async with get_session_context(app.state.session_factory, app.state.session_lock) as session:
            bob = await session.get(Account, seed.bob_id)
            personal_org_id = bob.personal_org_id
            bob.personal_org_id = seed.jane_org_id
            session.add(bob)

        await jane_client.get(
            "/api/orgs/remove_member",
            params={"org_id": seed.jane_org_id, "account_id": seed.bob_id},
        )

        account = await bob_client.get("/api/accounts/get")
        assert account.json()["account"]["personal_org_id"] == personal_org_id

    @pytest.mark.asyncio
    async def test_cannot_remove_owner(self, jane_client: AsyncClient, seed):
        response = await jane_client.post(
            "/api/orgs/remove_member",
            json={"org_id": seed.jane_org_id, "account_id": seed.jane_id},
        )
        assert response.status_code == 400
        assert _error_code(response) == "cannot_remove_owner"

    @pytest.mark.asyncio
    async def test_non_member_only_resets_default_org(
        self, jane_client: AsyncClient, client: AsyncClient, seed
    ):
        response = await jane_client.post(
            "/api/orgs/remove_member",
            json={"org_id": seed.jane_org_id, "account_id": seed.testuser_id},
        )
        assert response.status_code == 200

        account = await client.get("/api/accounts/get")
        assert account.json()["account"]["personal_org_id"] == seed.testuser_personal_org_id

        org = await jane_client.get("/api/orgs/get", params={"org_id": seed.jane_org_id})
        assert org.json()["org"]["member_count"] == 2

    @pytest.mark.asyncio
    async def test_unknown_account(self, jane_client: AsyncClient, seed):
        response = await jane_client.post(
            "/api/orgs/remove_member",
            json={"org_id": seed.jane_org_id, "account_id": "ghost"},
        )
        assert response.status_code == 404
        assert _error_code(response) == "account_not_found"

    @pytest.mark.asyncio
    async def test_member_without_manage_forbidden(self, bob_client: AsyncClient, seed):
        response = await bob_client.post(
            "/api/orgs/remove_member",
            json={"org_id": seed.jane_org_id, "account_id": seed.bob_id},
        )
        assert response.status_code == 403
