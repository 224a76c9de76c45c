"""Organization and membership snapshots."""

from pydantic import BaseModel, ConfigDict, Field

from app.core.roles import OrgType


class Organization(BaseModel):
    """Tenant boundary."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str | None = None
    type: OrgType = OrgType.TEAM


class OrganizationMember(BaseModel):
    """
    Membership row as stored.

    `role` is kept as the raw stored string (it may be a legacy alias such as
    "dispatcher"); it is normalized when the OrgContext is built.
    """
    model_config = ConfigDict(frozen=True)

    user_id: str
    org_id: str
    role: str


class OrgScopedRequest(BaseModel):
    """
    Base for requests evaluated inside one organization.

    Callers post the org and the caller's membership as they fetched them.
    A personal org is only reachable by its owner.
    """
    org: Organization
    membership: OrganizationMember | None = None
