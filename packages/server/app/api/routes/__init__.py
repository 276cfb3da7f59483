"""
API Router

Every endpoint lives under /api and takes its parameters from the query
string and/or a JSON body.
"""

from fastapi import APIRouter

from . import accounts, invitations, members, organizations, packages

router = APIRouter()

router.include_router(organizations.router, prefix="/orgs", tags=["Organizations"])
router.include_router(members.router, prefix="/orgs", tags=["Organization members"])
router.include_router(
    invitations.router, prefix="/orgs/invitations", tags=["Organization invitations"]
)
router.include_router(packages.router, prefix="/packages", tags=["Packages"])
router.include_router(accounts.router, prefix="/accounts", tags=["Accounts"])


@router.get("/", tags=["API"])
async def api_root():
    """API root — returns the available endpoint groups."""
    return {
        "api": "fake-snippets-api",
        "version": "0.1.0",
        "endpoints": [
            "/orgs",
            "/orgs/invitations",
            "/packages",
            "/accounts",
        ],
    }
