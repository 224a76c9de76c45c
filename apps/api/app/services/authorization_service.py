"""Authorization service - server-side permission decisions.

Every check is a pure, total function of (OrgContext, resource, user) and
returns a bool. Denial is False, never an exception; callers decide whether
False becomes a 403 or a hidden control.

Rules applied by every project check, in order:
- Linked AGENT customer (view + customer chat only), evaluated before the
  org match because the agent is the customer, not an org member
- Org scope: project.org_id must equal ctx.org.id
- Personal org: only PERSONAL_OWNER passes
- Role tiers: admin > project manager > technician/editor

The client mirror in app.core.permissions must agree with this module for
every input.
"""

from collections.abc import Iterable

from app.core.org_context import OrgContext
from app.core.roles import (
    ADMIN_ROLES,
    CUSTOMER_ADMIN_ROLES,
    MANAGER_ROLES,
    ORDER_CREATOR_ROLES,
    AccountType,
    EffectiveOrgRole,
    MessageChannel,
    OrgType,
    normalize_channel,
)
from app.schemas.auth import AuthenticatedUser
from app.schemas.permissions import OrgPermissions, ProjectPermissions
from app.schemas.project import Project


class AuthorizationService:
    """Stateless permission oracle. A single shared instance is safe."""

    # =========================================================================
    # Organization-level permissions
    # =========================================================================

    def can_manage_org_settings(self, ctx: OrgContext | None, user: AuthenticatedUser | None) -> bool:
        return self._has_org_tier(ctx, ADMIN_ROLES)

    def can_manage_team_members(self, ctx: OrgContext | None, user: AuthenticatedUser | None) -> bool:
        return self._has_org_tier(ctx, ADMIN_ROLES)

    def can_manage_customers(self, ctx: OrgContext | None, user: AuthenticatedUser | None) -> bool:
        """
        Create, edit, and delete CRM customer records.

        PROJECT_MANAGER is excluded: customer identity is commercial data.
        """
        return self._has_org_tier(ctx, CUSTOMER_ADMIN_ROLES)

    def can_view_customers(self, ctx: OrgContext | None, user: AuthenticatedUser | None) -> bool:
        """Read-only customer list; PROJECT_MANAGER needs it for project context."""
        return self._has_org_tier(ctx, MANAGER_ROLES)

    def can_view_inquiries(self, ctx: OrgContext | None, user: AuthenticatedUser | None) -> bool:
        return self._has_org_tier(ctx, MANAGER_ROLES)

    def can_convert_inquiry(self, ctx: OrgContext | None, user: AuthenticatedUser | None) -> bool:
        return self._has_org_tier(ctx, MANAGER_ROLES)

    def can_create_order(self, ctx: OrgContext | None, user: AuthenticatedUser | None) -> bool:
        """Orders are projects with a linked customer and calendar event."""
        return self._has_org_tier(ctx, ORDER_CREATOR_ROLES)

    def can_create_organization(self, user: AuthenticatedUser | None, org_type: OrgType) -> bool:
        """
        Any authenticated user can create TEAM or COMPANY orgs.

        PERSONAL orgs are created automatically at registration, never here.
        """
        if user is None:
            return False
        return org_type != OrgType.PERSONAL

    # =========================================================================
    # Project visibility and editing
    # =========================================================================

    def can_view_project(
        self,
        ctx: OrgContext | None,
        project: Project | None,
        user: AuthenticatedUser | None,
    ) -> bool:
        """
        - OWNER/ADMIN/PROJECT_MANAGER: every project in the org
        - TECHNICIAN/EDITOR: only projects they are assigned to
        - Linked AGENT customer: their own project, in any org
        """
        if self._is_linked_customer(project, user):
            return True
        if not self._in_scope(ctx, project):
            return False
        if ctx.is_personal_org:
            return self._is_personal_owner(ctx)
        if ctx.effective_role in MANAGER_ROLES:
            return True
        return self._is_assigned_self(ctx, project, user)

    def can_edit_project(
        self,
        ctx: OrgContext | None,
        project: Project | None,
        user: AuthenticatedUser | None,
    ) -> bool:
        """
        Reassign technician/editor, reschedule, change status, update notes.

        - OWNER/ADMIN: any project in the org
        - PROJECT_MANAGER: only projects where they are project_manager_id
        - TECHNICIAN/EDITOR: never (see can_update_own_work_on_project)
        """
        if not self._in_scope(ctx, project):
            return False
        if ctx.is_personal_org:
            return self._is_personal_owner(ctx)
        if ctx.effective_role in ADMIN_ROLES:
            return True
        if ctx.effective_role == EffectiveOrgRole.PROJECT_MANAGER:
            return self.is_assigned_project_manager(project, user)
        return False

    def can_delete_project(
        self,
        ctx: OrgContext | None,
        project: Project | None,
        user: AuthenticatedUser | None = None,
    ) -> bool:
        """Destructive; admin tier only. PROJECT_MANAGER can never delete."""
        return self._is_admin_in_scope(ctx, project)

    def can_change_project_customer(
        self,
        ctx: OrgContext | None,
        project: Project | None,
        user: AuthenticatedUser | None = None,
    ) -> bool:
        """Customer identity is commercial data; admin tier only."""
        return self._is_admin_in_scope(ctx, project)

    def can_manage_project(
        self,
        ctx: OrgContext | None,
        project: Project | None,
        user: AuthenticatedUser | None = None,
    ) -> bool:
        """
        Deprecated: use can_edit_project.

        Grants the admin tier only and ignores PROJECT_MANAGER, unlike
        can_edit_project which allows the assigned PM. Kept until every
        remaining call site has been audited.
        """
        return self._is_admin_in_scope(ctx, project)

    def can_update_own_work_on_project(
        self,
        ctx: OrgContext | None,
        project: Project | None,
        user: AuthenticatedUser | None,
    ) -> bool:
        """Limited updates such as a technician marking the shoot complete."""
        return self._can_edit_or_is_assignee(ctx, project, user)

    def can_upload_media(
        self,
        ctx: OrgContext | None,
        project: Project | None,
        user: AuthenticatedUser | None,
    ) -> bool:
        """Project editors, plus the assigned technician or editor."""
        return self._can_edit_or_is_assignee(ctx, project, user)

    # =========================================================================
    # Messaging permissions
    # =========================================================================

    def can_read_team_chat(
        self,
        ctx: OrgContext | None,
        project: Project | None,
        user: AuthenticatedUser | None,
    ) -> bool:
        """Managers org-wide; technicians/editors only on projects they can view."""
        if not self._in_scope(ctx, project):
            return False
        if ctx.is_personal_org:
            return self._is_personal_owner(ctx)
        if ctx.effective_role in MANAGER_ROLES:
            return True
        return self._is_assigned_self(ctx, project, user)

    def can_write_team_chat(
        self,
        ctx: OrgContext | None,
        project: Project | None,
        user: AuthenticatedUser | None,
    ) -> bool:
        # Same as read
        return self.can_read_team_chat(ctx, project, user)

    def can_read_customer_chat(
        self,
        ctx: OrgContext | None,
        project: Project | None,
        user: AuthenticatedUser | None,
    ) -> bool:
        """Managers org-wide and the linked customer. Hidden from technicians/editors."""
        if self._is_linked_customer(project, user):
            return True
        if not self._in_scope(ctx, project):
            return False
        if ctx.is_personal_org:
            return self._is_personal_owner(ctx)
        return ctx.effective_role in MANAGER_ROLES

    def can_write_customer_chat(
        self,
        ctx: OrgContext | None,
        project: Project | None,
        user: AuthenticatedUser | None,
    ) -> bool:
        """
        - OWNER/ADMIN: any project's customer chat
        - PROJECT_MANAGER: only projects they manage
        - Linked AGENT customer: their own project, in any org
        """
        if self._is_linked_customer(project, user):
            return True
        if not self._in_scope(ctx, project):
            return False
        if ctx.is_personal_org:
            return self._is_personal_owner(ctx)
        if ctx.effective_role in ADMIN_ROLES:
            return True
        if ctx.effective_role == EffectiveOrgRole.PROJECT_MANAGER:
            return self.is_assigned_project_manager(project, user)
        return False

    def can_post_message(
        self,
        ctx: OrgContext | None,
        project: Project | None,
        channel: MessageChannel | str,
        user: AuthenticatedUser | None,
    ) -> bool:
        """
        Dispatch to the team or customer write check.

        Unknown channel values are treated as team chat. A linked AGENT
        customer posting to the customer channel is allowed before any
        org-scope check.
        """
        channel = normalize_channel(channel)
        if channel == MessageChannel.CUSTOMER and self._is_linked_customer(project, user):
            return True
        if channel == MessageChannel.TEAM:
            return self.can_write_team_chat(ctx, project, user)
        return self.can_write_customer_chat(ctx, project, user)

    # =========================================================================
    # Aggregates
    # =========================================================================

    def get_project_permissions(
        self,
        ctx: OrgContext | None,
        project: Project | None,
        user: AuthenticatedUser | None,
    ) -> ProjectPermissions:
        """All project-level verdicts, in the same shape the client mirror returns."""
        can_edit = self.can_edit_project(ctx, project, user)
        return ProjectPermissions(
            can_view_project=self.can_view_project(ctx, project, user),
            can_edit_project=can_edit,
            can_delete_project=self.can_delete_project(ctx, project, user),
            can_change_customer=self.can_change_project_customer(ctx, project, user),
            can_reassign=can_edit,
            can_reschedule=can_edit,
            can_change_status=can_edit,
            can_upload_media=self.can_upload_media(ctx, project, user),
            can_update_own_work=self.can_update_own_work_on_project(ctx, project, user),
            can_read_team_chat=self.can_read_team_chat(ctx, project, user),
            can_write_team_chat=self.can_write_team_chat(ctx, project, user),
            can_read_customer_chat=self.can_read_customer_chat(ctx, project, user),
            can_write_customer_chat=self.can_write_customer_chat(ctx, project, user),
            is_assigned_pm=self.is_assigned_project_manager(project, user),
            is_assigned_technician=self.is_assigned_technician(project, user),
            is_assigned_editor=self.is_assigned_editor(project, user),
        )

    def get_org_permissions(self, ctx: OrgContext | None, user: AuthenticatedUser | None) -> OrgPermissions:
        role = ctx.effective_role if ctx and ctx.effective_role else EffectiveOrgRole.NONE
        return OrgPermissions(
            effective_role=role.value,
            is_admin=self.is_admin(ctx),
            can_manage_org_settings=self.can_manage_org_settings(ctx, user),
            can_manage_team_members=self.can_manage_team_members(ctx, user),
            can_manage_customers=self.can_manage_customers(ctx, user),
            can_view_customers=self.can_view_customers(ctx, user),
            can_view_inquiries=self.can_view_inquiries(ctx, user),
            can_convert_inquiry=self.can_convert_inquiry(ctx, user),
            can_create_order=self.can_create_order(ctx, user),
        )

    # =========================================================================
    # Utility methods
    # =========================================================================

    def has_org_role(self, ctx: OrgContext | None, allowed_roles: Iterable[EffectiveOrgRole]) -> bool:
        """Raw role membership check for guards; no tier or personal-org logic."""
        if not self._has_role(ctx):
            return False
        return ctx.effective_role in set(allowed_roles)

    def is_admin(self, ctx: OrgContext | None) -> bool:
        """OWNER, ADMIN, or PERSONAL_OWNER (the latter only in a personal org)."""
        return self._has_org_tier(ctx, ADMIN_ROLES)

    def is_assigned_project_manager(self, project: Project | None, user: AuthenticatedUser | None) -> bool:
        if project is None or user is None:
            return False
        return project.project_manager_id == user.id

    def is_assigned_technician(self, project: Project | None, user: AuthenticatedUser | None) -> bool:
        if project is None or user is None:
            return False
        return project.technician_id == user.id

    def is_assigned_editor(self, project: Project | None, user: AuthenticatedUser | None) -> bool:
        if project is None or user is None:
            return False
        return project.editor_id == user.id

    # =========================================================================
    # Internal helpers
    # =========================================================================

    @staticmethod
    def _has_role(ctx: OrgContext | None) -> bool:
        return (
            ctx is not None
            and ctx.effective_role is not None
            and ctx.effective_role != EffectiveOrgRole.NONE
        )

    def _in_scope(self, ctx: OrgContext | None, project: Project | None) -> bool:
        """Caller has a role and the project belongs to the caller's org."""
        if project is None or not self._has_role(ctx):
            return False
        return project.org_id == ctx.org.id

    @staticmethod
    def _is_personal_owner(ctx: OrgContext) -> bool:
        return ctx.effective_role == EffectiveOrgRole.PERSONAL_OWNER

    def _has_org_tier(self, ctx: OrgContext | None, roles: frozenset[EffectiveOrgRole]) -> bool:
        if not self._has_role(ctx):
            return False
        if ctx.is_personal_org:
            return self._is_personal_owner(ctx)
        return ctx.effective_role in roles

    def _is_admin_in_scope(self, ctx: OrgContext | None, project: Project | None) -> bool:
        if not self._in_scope(ctx, project):
            return False
        if ctx.is_personal_org:
            return self._is_personal_owner(ctx)
        return ctx.effective_role in ADMIN_ROLES

    def _is_assigned_self(
        self,
        ctx: OrgContext,
        project: Project,
        user: AuthenticatedUser | None,
    ) -> bool:
        """TECHNICIAN assigned as technician, or EDITOR assigned as editor."""
        if ctx.effective_role == EffectiveOrgRole.TECHNICIAN:
            return self.is_assigned_technician(project, user)
        if ctx.effective_role == EffectiveOrgRole.EDITOR:
            return self.is_assigned_editor(project, user)
        return False

    def _can_edit_or_is_assignee(
        self,
        ctx: OrgContext | None,
        project: Project | None,
        user: AuthenticatedUser | None,
    ) -> bool:
        if not self._in_scope(ctx, project):
            return False
        if self.can_edit_project(ctx, project, user):
            return True
        if ctx.is_personal_org:
            return False
        return self._is_assigned_self(ctx, project, user)

    @staticmethod
    def _is_linked_customer(project: Project | None, user: AuthenticatedUser | None) -> bool:
        """AGENT account linked as the project's customer."""
        if project is None or user is None:
            return False
        if user.account_type != AccountType.AGENT:
            return False
        customer_user_id = project.customer_user_id
        return customer_user_id is not None and customer_user_id == user.id


authorization_service = AuthorizationService()
