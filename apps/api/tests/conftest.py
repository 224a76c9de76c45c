"""
Test configuration and fixtures.

Provides:
- Org, membership, and project builders
- Bearer token minting for authenticated tests
- HTTPX AsyncClient against the ASGI app
"""
from dataclasses import dataclass
from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from app.core.org_context import OrgContext, build_org_context
from app.core.roles import AccountType, EffectiveOrgRole, OrgType
from app.core.security import create_access_token
from app.main import app
from app.schemas.auth import AuthenticatedUser
from app.schemas.org import Organization, OrganizationMember
from app.schemas.project import Project, ProjectCustomer


ORG_ID = "org-team"
OTHER_ORG_ID = "org-other"
USER_ID = "user-1"
OTHER_USER_ID = "user-2"


# =============================================================================
# Builders
# =============================================================================

def make_user(
    user_id: str = USER_ID,
    account_type: AccountType = AccountType.PROVIDER,
    personal_org_id: str | None = None,
) -> AuthenticatedUser:
    return AuthenticatedUser(id=user_id, account_type=account_type, personal_org_id=personal_org_id)


def make_ctx(
    role: EffectiveOrgRole | None,
    org_id: str = ORG_ID,
    is_personal_org: bool = False,
) -> OrgContext:
    """OrgContext built directly, bypassing membership resolution."""
    org_type = OrgType.PERSONAL if is_personal_org else OrgType.TEAM
    return OrgContext(
        org=Organization(id=org_id, type=org_type),
        effective_role=role,
        is_personal_org=is_personal_org,
        is_team_org=not is_personal_org,
    )


def make_project(
    org_id: str = ORG_ID,
    technician_id: str | None = None,
    editor_id: str | None = None,
    project_manager_id: str | None = None,
    customer_user_id: str | None = None,
) -> Project:
    customer = ProjectCustomer(id="cust-1", user_id=customer_user_id) if customer_user_id else None
    return Project(
        id="proj-1",
        org_id=org_id,
        technician_id=technician_id,
        editor_id=editor_id,
        project_manager_id=project_manager_id,
        customer=customer,
    )


# =============================================================================
# Context Fixtures
# =============================================================================

@pytest.fixture
def user() -> AuthenticatedUser:
    return make_user()


@pytest.fixture
def agent_user() -> AuthenticatedUser:
    return make_user(user_id="agent-1", account_type=AccountType.AGENT)


@pytest.fixture
def team_org() -> Organization:
    return Organization(id=ORG_ID, name="Lens & Light Media", type=OrgType.TEAM)


@pytest.fixture
def owner_ctx(user: AuthenticatedUser, team_org: Organization) -> OrgContext:
    membership = OrganizationMember(user_id=user.id, org_id=team_org.id, role="OWNER")
    return build_org_context(user=user, org=team_org, membership=membership)


# =============================================================================
# Auth Fixtures
# =============================================================================

@dataclass
class TestAuth:
    """Test authentication context."""
    user: AuthenticatedUser
    token: str

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


@pytest.fixture
def test_auth(user: AuthenticatedUser) -> TestAuth:
    """Create a bearer token for the default provider-side user."""
    return TestAuth(
        user=user,
        token=create_access_token(user_id=user.id, account_type=user.account_type),
    )


@pytest.fixture
def agent_auth(agent_user: AuthenticatedUser) -> TestAuth:
    return TestAuth(
        user=agent_user,
        token=create_access_token(user_id=agent_user.id, account_type=agent_user.account_type),
    )


# =============================================================================
# Client Fixtures
# =============================================================================

@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Unauthenticated AsyncClient."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as c:
        yield c


@pytest.fixture
async def authed_client(test_auth: TestAuth) -> AsyncGenerator[AsyncClient, None]:
    """AsyncClient with the default user's bearer token."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers=test_auth.headers,
    ) as c:
        yield c


@pytest.fixture
async def agent_client(agent_auth: TestAuth) -> AsyncGenerator[AsyncClient, None]:
    """AsyncClient authenticated as an AGENT account."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers=agent_auth.headers,
    ) as c:
        yield c
