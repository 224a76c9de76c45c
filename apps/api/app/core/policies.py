"""Canonical access rules for projects and org-level resources.

One table per resource kind. The client permissions mirror evaluates these
tables directly; the server AuthorizationService implements the same rules
per operation, and the two are kept in lockstep by the equivalence tests.

Evaluation order for project actions:
1. Linked AGENT customer (only where the policy allows it), even cross-org
2. Org scope: project.org_id must match the caller's org
3. Personal org: only PERSONAL_OWNER passes
4. Role grant from the table (missing role = deny)
"""

from dataclasses import dataclass
from enum import Enum

from app.core.roles import (
    ADMIN_ROLES,
    CUSTOMER_ADMIN_ROLES,
    MANAGER_ROLES,
    ORDER_CREATOR_ROLES,
    EffectiveOrgRole as R,
)


class Grant(str, Enum):
    """How a role earns a project permission."""
    ALWAYS = "always"
    # PROJECT_MANAGER assigned as project.project_manager_id
    ASSIGNED_MANAGER = "assigned_manager"
    # TECHNICIAN assigned as technician_id, EDITOR assigned as editor_id
    ASSIGNED_SELF = "assigned_self"


class ProjectAction(str, Enum):
    VIEW = "view_project"
    EDIT = "edit_project"
    DELETE = "delete_project"
    CHANGE_CUSTOMER = "change_project_customer"
    MANAGE = "manage_project"  # Deprecated: admin tier only
    UPLOAD_MEDIA = "upload_media"
    UPDATE_OWN_WORK = "update_own_work"
    READ_TEAM_CHAT = "read_team_chat"
    WRITE_TEAM_CHAT = "write_team_chat"
    READ_CUSTOMER_CHAT = "read_customer_chat"
    WRITE_CUSTOMER_CHAT = "write_customer_chat"


class OrgAction(str, Enum):
    MANAGE_ORG_SETTINGS = "manage_org_settings"
    MANAGE_TEAM_MEMBERS = "manage_team_members"
    MANAGE_CUSTOMERS = "manage_customers"
    VIEW_CUSTOMERS = "view_customers"
    VIEW_INQUIRIES = "view_inquiries"
    CONVERT_INQUIRY = "convert_inquiry"
    CREATE_ORDER = "create_order"


@dataclass(frozen=True)
class ProjectPolicy:
    """Role grants for a project action + whether linked customers pass."""

    grants: dict[R, Grant]
    linked_customer: bool = False
    description: str = ""


def _admin_always() -> dict[R, Grant]:
    return {role: Grant.ALWAYS for role in ADMIN_ROLES}


def _manager_always() -> dict[R, Grant]:
    return {role: Grant.ALWAYS for role in MANAGER_ROLES}


_EDIT_GRANTS = {**_admin_always(), R.PROJECT_MANAGER: Grant.ASSIGNED_MANAGER}
_ASSIGNEE_GRANTS = {R.TECHNICIAN: Grant.ASSIGNED_SELF, R.EDITOR: Grant.ASSIGNED_SELF}


PROJECT_POLICIES: dict[ProjectAction, ProjectPolicy] = {
    ProjectAction.VIEW: ProjectPolicy(
        grants={**_manager_always(), **_ASSIGNEE_GRANTS},
        linked_customer=True,
        description="Managers see every project; assignees only their own",
    ),
    ProjectAction.EDIT: ProjectPolicy(
        grants=_EDIT_GRANTS,
        description="Reassign, reschedule, change status, update notes",
    ),
    ProjectAction.DELETE: ProjectPolicy(
        grants=_admin_always(),
        description="Destructive; PROJECT_MANAGER can never delete",
    ),
    ProjectAction.CHANGE_CUSTOMER: ProjectPolicy(
        grants=_admin_always(),
        description="Customer identity is commercial data",
    ),
    ProjectAction.MANAGE: ProjectPolicy(
        grants=_admin_always(),
        description="Legacy check; use EDIT for per-project PM rights",
    ),
    ProjectAction.UPLOAD_MEDIA: ProjectPolicy(
        grants={**_EDIT_GRANTS, **_ASSIGNEE_GRANTS},
        description="Editors of the project plus assigned technician/editor",
    ),
    ProjectAction.UPDATE_OWN_WORK: ProjectPolicy(
        grants={**_EDIT_GRANTS, **_ASSIGNEE_GRANTS},
        description="Limited updates such as marking a shoot complete",
    ),
    ProjectAction.READ_TEAM_CHAT: ProjectPolicy(
        grants={**_manager_always(), **_ASSIGNEE_GRANTS},
        description="Anyone who can view the project as an org member",
    ),
    ProjectAction.WRITE_TEAM_CHAT: ProjectPolicy(
        grants={**_manager_always(), **_ASSIGNEE_GRANTS},
    ),
    ProjectAction.READ_CUSTOMER_CHAT: ProjectPolicy(
        grants=_manager_always(),
        linked_customer=True,
        description="Hidden from technicians and editors",
    ),
    ProjectAction.WRITE_CUSTOMER_CHAT: ProjectPolicy(
        grants=_EDIT_GRANTS,
        linked_customer=True,
    ),
}


ORG_POLICIES: dict[OrgAction, frozenset[R]] = {
    OrgAction.MANAGE_ORG_SETTINGS: ADMIN_ROLES,
    OrgAction.MANAGE_TEAM_MEMBERS: ADMIN_ROLES,
    OrgAction.MANAGE_CUSTOMERS: CUSTOMER_ADMIN_ROLES,
    OrgAction.VIEW_CUSTOMERS: MANAGER_ROLES,
    OrgAction.VIEW_INQUIRIES: MANAGER_ROLES,
    OrgAction.CONVERT_INQUIRY: MANAGER_ROLES,
    OrgAction.CREATE_ORDER: ORDER_CREATOR_ROLES,
}


def get_project_policy(action: ProjectAction) -> ProjectPolicy:
    """Fetch a project policy or raise KeyError."""
    return PROJECT_POLICIES[action]


def get_org_policy(action: OrgAction) -> frozenset[R]:
    """Fetch the roles allowed for an org action or raise KeyError."""
    return ORG_POLICIES[action]
