"""Org context resolution - the authorization scope for one request.

The context is built once per request from the caller's membership and is
never mutated afterwards. Callers must re-fetch membership before building
it; a stale membership cannot be detected here.
"""

from dataclasses import dataclass

from app.core.roles import EffectiveOrgRole, OrgType, normalize_role
from app.schemas.auth import AuthenticatedUser
from app.schemas.org import Organization, OrganizationMember


@dataclass(frozen=True)
class OrgContext:
    """Resolved tenant + role scope for one request."""
    org: Organization
    effective_role: EffectiveOrgRole
    is_personal_org: bool
    is_team_org: bool = False
    is_company_org: bool = False
    membership: OrganizationMember | None = None


def build_org_context(
    user: AuthenticatedUser,
    org: Organization,
    membership: OrganizationMember | None = None,
) -> OrgContext:
    """
    Build the OrgContext for a user acting in an organization.

    Personal orgs: PERSONAL_OWNER if the user owns the org (see
    owns_personal_org), otherwise NONE. Outsiders are turned away before
    this point by resolve_org_context.

    Team/company orgs: the member's role, or NONE without a membership.

    Raises:
        ValueError: If the stored membership role is unknown
    """
    is_personal_org = org.type == OrgType.PERSONAL
    # Only memberships for this user and this org count
    member = membership if belongs_to(membership, user, org) else None

    effective_role = EffectiveOrgRole.NONE
    if is_personal_org:
        if owns_personal_org(user, org, member):
            effective_role = EffectiveOrgRole.PERSONAL_OWNER
    elif member is not None:
        effective_role = normalize_role(member.role)

    return OrgContext(
        org=org,
        effective_role=effective_role,
        is_personal_org=is_personal_org,
        is_team_org=org.type == OrgType.TEAM,
        is_company_org=org.type == OrgType.COMPANY,
        membership=member,
    )


def owns_personal_org(
    user: AuthenticatedUser,
    org: Organization,
    membership: OrganizationMember | None = None,
) -> bool:
    """The user is the org's own member, or the org is the user's personal org."""
    return belongs_to(membership, user, org) or user.personal_org_id == org.id


def belongs_to(
    membership: OrganizationMember | None,
    user: AuthenticatedUser,
    org: Organization,
) -> bool:
    return (
        membership is not None
        and membership.user_id == user.id
        and membership.org_id == org.id
    )
