"""Client-facing permission checks that mirror the AuthorizationService.

These work from the flat Viewer shape a UI holds (user id, org id, role,
personal-org flag, account type) and are evaluated from the canonical rule
tables in app.core.policies.

IMPORTANT: These are for UI gating only. The server AuthorizationService is
authoritative and must return the same answer for every input.
"""

from dataclasses import dataclass

from app.core.org_context import OrgContext
from app.core.policies import (
    ORG_POLICIES,
    PROJECT_POLICIES,
    Grant,
    OrgAction,
    ProjectAction,
)
from app.core.roles import (
    ADMIN_ROLES,
    AccountType,
    EffectiveOrgRole,
    MessageChannel,
    normalize_channel,
)
from app.schemas.auth import AuthenticatedUser
from app.schemas.permissions import ProjectPermissions
from app.schemas.project import Project


@dataclass(frozen=True)
class Viewer:
    """What the client knows about the signed-in user in the selected org."""
    user_id: str | None
    org_id: str | None
    org_role: EffectiveOrgRole | None
    is_personal_org: bool = False
    account_type: AccountType | None = None

    @classmethod
    def from_context(cls, ctx: OrgContext | None, user: AuthenticatedUser | None) -> "Viewer":
        return cls(
            user_id=user.id if user else None,
            org_id=ctx.org.id if ctx else None,
            org_role=ctx.effective_role if ctx else None,
            is_personal_org=ctx.is_personal_org if ctx else False,
            account_type=user.account_type if user else None,
        )

    @property
    def has_role(self) -> bool:
        return self.org_role is not None and self.org_role != EffectiveOrgRole.NONE


# =============================================================================
# Rule evaluation
# =============================================================================

def evaluate_project_action(action: ProjectAction, viewer: Viewer, project: Project | None) -> bool:
    """Evaluate one project action against the canonical policy table."""
    policy = PROJECT_POLICIES[action]

    if policy.linked_customer and is_linked_customer(viewer, project):
        return True

    if project is None or not viewer.has_role or project.org_id != viewer.org_id:
        return False

    if viewer.is_personal_org:
        return viewer.org_role == EffectiveOrgRole.PERSONAL_OWNER

    grant = policy.grants.get(viewer.org_role)
    if grant == Grant.ALWAYS:
        return True
    if grant == Grant.ASSIGNED_MANAGER:
        return is_assigned_project_manager(project, viewer.user_id)
    if grant == Grant.ASSIGNED_SELF:
        if viewer.org_role == EffectiveOrgRole.TECHNICIAN:
            return is_assigned_technician(project, viewer.user_id)
        if viewer.org_role == EffectiveOrgRole.EDITOR:
            return is_assigned_editor(project, viewer.user_id)
    return False


def evaluate_org_action(action: OrgAction, viewer: Viewer) -> bool:
    """Evaluate one org-level action. Personal orgs collapse to PERSONAL_OWNER."""
    if not viewer.has_role:
        return False
    if viewer.is_personal_org:
        return viewer.org_role == EffectiveOrgRole.PERSONAL_OWNER
    return viewer.org_role in ORG_POLICIES[action]


# =============================================================================
# Project permissions
# =============================================================================

def can_view_project(viewer: Viewer, project: Project | None) -> bool:
    return evaluate_project_action(ProjectAction.VIEW, viewer, project)


def can_edit_project(viewer: Viewer, project: Project | None) -> bool:
    return evaluate_project_action(ProjectAction.EDIT, viewer, project)


def can_delete_project(viewer: Viewer, project: Project | None) -> bool:
    return evaluate_project_action(ProjectAction.DELETE, viewer, project)


def can_change_project_customer(viewer: Viewer, project: Project | None) -> bool:
    return evaluate_project_action(ProjectAction.CHANGE_CUSTOMER, viewer, project)


def can_manage_project(viewer: Viewer, project: Project | None) -> bool:
    """Deprecated legacy check (admin tier only). Use can_edit_project."""
    return evaluate_project_action(ProjectAction.MANAGE, viewer, project)


# Reassign, reschedule and status changes share the edit rule
def can_reassign(viewer: Viewer, project: Project | None) -> bool:
    return can_edit_project(viewer, project)


def can_reschedule(viewer: Viewer, project: Project | None) -> bool:
    return can_edit_project(viewer, project)


def can_change_status(viewer: Viewer, project: Project | None) -> bool:
    return can_edit_project(viewer, project)


def can_upload_media(viewer: Viewer, project: Project | None) -> bool:
    return evaluate_project_action(ProjectAction.UPLOAD_MEDIA, viewer, project)


def can_update_own_work_on_project(viewer: Viewer, project: Project | None) -> bool:
    return evaluate_project_action(ProjectAction.UPDATE_OWN_WORK, viewer, project)


# =============================================================================
# Messaging permissions
# =============================================================================

def can_read_team_chat(viewer: Viewer, project: Project | None) -> bool:
    return evaluate_project_action(ProjectAction.READ_TEAM_CHAT, viewer, project)


def can_write_team_chat(viewer: Viewer, project: Project | None) -> bool:
    return evaluate_project_action(ProjectAction.WRITE_TEAM_CHAT, viewer, project)


def can_read_customer_chat(viewer: Viewer, project: Project | None) -> bool:
    return evaluate_project_action(ProjectAction.READ_CUSTOMER_CHAT, viewer, project)


def can_write_customer_chat(viewer: Viewer, project: Project | None) -> bool:
    return evaluate_project_action(ProjectAction.WRITE_CUSTOMER_CHAT, viewer, project)


def can_post_message(viewer: Viewer, project: Project | None, channel: MessageChannel | str) -> bool:
    channel = normalize_channel(channel)
    if channel == MessageChannel.CUSTOMER and is_linked_customer(viewer, project):
        return True
    if channel == MessageChannel.TEAM:
        return can_write_team_chat(viewer, project)
    return can_write_customer_chat(viewer, project)


# =============================================================================
# Org-level permissions
# =============================================================================

def can_manage_org_settings(viewer: Viewer) -> bool:
    return evaluate_org_action(OrgAction.MANAGE_ORG_SETTINGS, viewer)


def can_manage_team_members(viewer: Viewer) -> bool:
    return evaluate_org_action(OrgAction.MANAGE_TEAM_MEMBERS, viewer)


def can_manage_customers(viewer: Viewer) -> bool:
    """PROJECT_MANAGER is intentionally excluded."""
    return evaluate_org_action(OrgAction.MANAGE_CUSTOMERS, viewer)


def can_view_customers(viewer: Viewer) -> bool:
    return evaluate_org_action(OrgAction.VIEW_CUSTOMERS, viewer)


def can_view_inquiries(viewer: Viewer) -> bool:
    return evaluate_org_action(OrgAction.VIEW_INQUIRIES, viewer)


def can_convert_inquiry(viewer: Viewer) -> bool:
    return evaluate_org_action(OrgAction.CONVERT_INQUIRY, viewer)


def can_create_order(viewer: Viewer) -> bool:
    return evaluate_org_action(OrgAction.CREATE_ORDER, viewer)


# =============================================================================
# Role helpers
# =============================================================================

def is_admin(viewer: Viewer) -> bool:
    """OWNER, ADMIN, or PERSONAL_OWNER."""
    if not viewer.has_role:
        return False
    if viewer.is_personal_org:
        return viewer.org_role == EffectiveOrgRole.PERSONAL_OWNER
    return viewer.org_role in ADMIN_ROLES


def is_linked_customer(viewer: Viewer, project: Project | None) -> bool:
    """AGENT account linked as the project's customer (may be in another org)."""
    if project is None or viewer.user_id is None:
        return False
    if viewer.account_type != AccountType.AGENT:
        return False
    return project.customer_user_id == viewer.user_id


def is_assigned_project_manager(project: Project | None, user_id: str | None) -> bool:
    if project is None or user_id is None:
        return False
    return project.project_manager_id == user_id


def is_assigned_technician(project: Project | None, user_id: str | None) -> bool:
    if project is None or user_id is None:
        return False
    return project.technician_id == user_id


def is_assigned_editor(project: Project | None, user_id: str | None) -> bool:
    if project is None or user_id is None:
        return False
    return project.editor_id == user_id


def get_project_permissions(viewer: Viewer, project: Project | None) -> ProjectPermissions:
    """Compute all project permissions for a viewer."""
    return ProjectPermissions(
        can_view_project=can_view_project(viewer, project),
        can_edit_project=can_edit_project(viewer, project),
        can_delete_project=can_delete_project(viewer, project),
        can_change_customer=can_change_project_customer(viewer, project),
        can_reassign=can_reassign(viewer, project),
        can_reschedule=can_reschedule(viewer, project),
        can_change_status=can_change_status(viewer, project),
        can_upload_media=can_upload_media(viewer, project),
        can_update_own_work=can_update_own_work_on_project(viewer, project),
        can_read_team_chat=can_read_team_chat(viewer, project),
        can_write_team_chat=can_write_team_chat(viewer, project),
        can_read_customer_chat=can_read_customer_chat(viewer, project),
        can_write_customer_chat=can_write_customer_chat(viewer, project),
        is_assigned_pm=is_assigned_project_manager(project, viewer.user_id),
        is_assigned_technician=is_assigned_technician(project, viewer.user_id),
        is_assigned_editor=is_assigned_editor(project, viewer.user_id),
    )
