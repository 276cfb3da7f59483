"""
Shared fixtures: a fresh app (and therefore a fresh in-memory store) per test,
seeded with a few accounts and orgs, plus HTTP clients authenticated as each.
"""

from __future__ import annotations

from dataclasses import dataclass

import pytest
from httpx import ASGITransport, AsyncClient

from app.core.config import Settings
from app.core.database import get_session_context, init_db
from app.main import create_app
from app.models.org_account import OrgAccount
from app.services import accounts as account_service
from app.services import packages as package_service
from app.services.organizations import create_org
from fake_snippets_shared.schemas.organizations import OrgCreateRequest


@dataclass
class Seed:
    testuser_id: str
    testuser_personal_org_id: str
    jane_id: str
    jane_personal_org_id: str
    bob_id: str
    jane_org_id: str
    package_id: str


@pytest.fixture
def settings():
    return Settings(seed_on_startup=False, log_level="warning")


@pytest.fixture
async def app(settings):
    app = create_app(settings)
    await init_db(app.state.engine)
    yield app
    await app.state.engine.dispose()


@pytest.fixture
async def seed(app) -> Seed:
    """
    testuser — plain account with an email
    jane     — owns the managed org ``jane-corp`` (handle ``janecorp``)
    bob      — read-only member of ``jane-corp``
    """
    async with get_session_context(app.state.session_factory, app.state.session_lock) as session:
        testuser = await account_service.create_account(
            session,
            account_id="account-1234",
            github_username="testuser",
            email="testuser@example.com",
        )
        jane = await account_service.create_account(
            session,
            account_id="account-jane",
            github_username="jane",
            email="jane@example.com",
        )
        bob = await account_service.create_account(
            session,
            account_id="account-bob",
            github_username="bob",
            email="bob@example.com",
        )
        view = await create_org(
            OrgCreateRequest(
                name="jane-corp", display_name="Jane Corp", tscircuit_handle="janecorp"
            ),
            jane,
            session,
        )
        session.add(OrgAccount(org_id=view.org.org_id, account_id=bob.account_id))
        package = await package_service.create_package(
            session,
            owner_org=await account_service.get_personal_org(testuser.account_id, session),
            unscoped_name="my-board",
            creator_account_id=testuser.account_id,
            github_repo_full_name="testuser/my-board",
        )
        return Seed(
            testuser_id=testuser.account_id,
            testuser_personal_org_id=testuser.personal_org_id,
            jane_id=jane.account_id,
            jane_personal_org_id=jane.personal_org_id,
            bob_id=bob.account_id,
            jane_org_id=view.org.org_id,
            package_id=package.package_id,
        )


def _client(app, account_id=None) -> AsyncClient:
    headers = {"Authorization": f"Bearer {account_id}"} if account_id else {}
    return AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test", headers=headers
    )


@pytest.fixture
async def client(app, seed):
    """Authenticated as testuser."""
    async with _client(app, seed.testuser_id) as ac:
        yield ac


@pytest.fixture
async def jane_client(app, seed):
    async with _client(app, seed.jane_id) as ac:
        yield ac


@pytest.fixture
async def bob_client(app, seed):
    async with _client(app, seed.bob_id) as ac:
        yield ac


@pytest.fixture
async def anon_client(app, seed):
    async with _client(app) as ac:
        yield ac
