"""
Seed the store with development fixtures.

Creates two accounts (``testuser`` and ``jane``), a managed organization
owned by ``testuser`` with ``jane`` as a read-only member, and one package in
that organization. Runs on startup when ``FSA_SEED_ON_STARTUP`` is set.
"""

from __future__ import annotations

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.org_account import OrgAccount
from app.services import accounts as account_service
from app.services import packages as package_service
from app.services.organizations import create_org, get_membership
from fake_snippets_shared.schemas.members import DEFAULT_MEMBER_FLAGS
from fake_snippets_shared.schemas.organizations import OrgCreateRequest

log = structlog.get_logger()

TEST_ACCOUNT_ID = "account-1234"
JANE_ACCOUNT_ID = "account-jane"
TEST_ORG_NAME = "test-organization"


async def seed(session: AsyncSession) -> None:
    """Populate an empty store. Does nothing if the test account already exists."""
    if await account_service.get_account(TEST_ACCOUNT_ID, session) is not None:
        log.info("seed.skipped", reason="already_seeded")
        return

    testuser = await account_service.create_account(
        session,
        account_id=TEST_ACCOUNT_ID,
        github_username="testuser",
        tscircuit_handle="testuser",
        email="testuser@example.com",
    )
    jane = await account_service.create_account(
        session,
        account_id=JANE_ACCOUNT_ID,
        github_username="jane",
        tscircuit_handle="jane",
        email="jane@example.com",
    )

    view = await create_org(
        OrgCreateRequest(
            name=TEST_ORG_NAME,
            display_name="Test Organization",
            tscircuit_handle=TEST_ORG_NAME,
        ),
        testuser,
        session,
    )
    org = view.org

    if await get_membership(org.org_id, jane.account_id, session) is None:
        session.add(
            OrgAccount(org_id=org.org_id, account_id=jane.account_id, **DEFAULT_MEMBER_FLAGS)
        )

    await package_service.create_package(
        session,
        owner_org=org,
        unscoped_name="test-package",
        creator_account_id=testuser.account_id,
    )
    await session.flush()

    log.info(
        "seed.completed",
        accounts=[testuser.account_id, jane.account_id],
        org_id=org.org_id,
    )
