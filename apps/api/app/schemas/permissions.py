"""Permission payloads returned to clients."""

from pydantic import BaseModel, ConfigDict


class ProjectPermissions(BaseModel):
    """Every project-level verdict for one viewer and one project."""
    model_config = ConfigDict(frozen=True)

    can_view_project: bool
    can_edit_project: bool
    can_delete_project: bool
    can_change_customer: bool
    can_reassign: bool
    can_reschedule: bool
    can_change_status: bool
    can_upload_media: bool
    can_update_own_work: bool
    can_read_team_chat: bool
    can_write_team_chat: bool
    can_read_customer_chat: bool
    can_write_customer_chat: bool
    is_assigned_pm: bool
    is_assigned_technician: bool
    is_assigned_editor: bool


class OrgPermissions(BaseModel):
    """Org-level verdicts (no project involved)."""
    model_config = ConfigDict(frozen=True)

    effective_role: str
    is_admin: bool
    can_manage_org_settings: bool
    can_manage_team_members: bool
    can_manage_customers: bool
    can_view_customers: bool
    can_view_inquiries: bool
    can_convert_inquiry: bool
    can_create_order: bool
