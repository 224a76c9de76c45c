"""Permissions router - permission decisions for projects and organizations.

Endpoints for:
- Full project permission payloads (what the UI may render)
- Single project checks, optionally enforced as 403
- Org-level permission payloads
"""

import logging
from typing import Callable, Literal

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from app.core.deps import get_current_user, resolve_org_context
from app.core.org_context import OrgContext
from app.core.policies import ProjectAction
from app.core.roles import MessageChannel
from app.core.structured_logging import build_log_context
from app.schemas.auth import AuthenticatedUser
from app.schemas.org import OrgScopedRequest
from app.schemas.permissions import OrgPermissions, ProjectPermissions
from app.schemas.project import Project
from app.services.authorization_service import authorization_service as authz

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/permissions", tags=["Permissions"])

POST_MESSAGE = "post_message"


# =============================================================================
# Schemas
# =============================================================================

class ProjectEvaluateRequest(OrgScopedRequest):
    """Org snapshot + project to evaluate for the token's user."""
    project: Project


class ProjectCheckRequest(ProjectEvaluateRequest):
    action: ProjectAction | Literal["post_message"]
    channel: MessageChannel = MessageChannel.TEAM  # Only used by post_message
    enforce: bool = False  # Respond 403 instead of allowed=false


class ProjectCheckResponse(BaseModel):
    action: str
    allowed: bool


ProjectCheck = Callable[[OrgContext, Project, AuthenticatedUser], bool]

_PROJECT_CHECKS: dict[ProjectAction, ProjectCheck] = {
    ProjectAction.VIEW: authz.can_view_project,
    ProjectAction.EDIT: authz.can_edit_project,
    ProjectAction.DELETE: authz.can_delete_project,
    ProjectAction.CHANGE_CUSTOMER: authz.can_change_project_customer,
    ProjectAction.MANAGE: authz.can_manage_project,
    ProjectAction.UPLOAD_MEDIA: authz.can_upload_media,
    ProjectAction.UPDATE_OWN_WORK: authz.can_update_own_work_on_project,
    ProjectAction.READ_TEAM_CHAT: authz.can_read_team_chat,
    ProjectAction.WRITE_TEAM_CHAT: authz.can_write_team_chat,
    ProjectAction.READ_CUSTOMER_CHAT: authz.can_read_customer_chat,
    ProjectAction.WRITE_CUSTOMER_CHAT: authz.can_write_customer_chat,
}


# =============================================================================
# Endpoints
# =============================================================================

@router.post("/projects/evaluate", response_model=ProjectPermissions)
def evaluate_project_permissions(
    body: ProjectEvaluateRequest,
    user: AuthenticatedUser = Depends(get_current_user),
):
    """Every project-level verdict for the caller, for UI gating."""
    ctx = resolve_org_context(body, user)
    return authz.get_project_permissions(ctx, body.project, user)


@router.post("/projects/check", response_model=ProjectCheckResponse)
def check_project_permission(
    body: ProjectCheckRequest,
    user: AuthenticatedUser = Depends(get_current_user),
):
    """
    Evaluate one action on a project.

    With enforce=true a denial is a 403, for callers that guard an operation
    directly on this answer.
    """
    ctx = resolve_org_context(body, user)

    if body.action == POST_MESSAGE:
        allowed = authz.can_post_message(ctx, body.project, body.channel, user)
        action = POST_MESSAGE
    else:
        allowed = _PROJECT_CHECKS[body.action](ctx, body.project, user)
        action = body.action.value

    if not allowed and body.enforce:
        logger.info(
            "Project permission denied",
            extra=build_log_context(
                user_id=user.id,
                org_id=ctx.org.id,
                project_id=body.project.id,
                action=action,
            ),
        )
        raise HTTPException(
            status_code=403,
            detail=f"Not allowed to {action.replace('_', ' ')}",
        )

    return ProjectCheckResponse(action=action, allowed=allowed)


@router.post("/org/evaluate", response_model=OrgPermissions)
def evaluate_org_permissions(
    body: OrgScopedRequest,
    user: AuthenticatedUser = Depends(get_current_user),
):
    """Org-level verdicts (settings, team, customers, inquiries, orders)."""
    ctx = resolve_org_context(body, user)
    return authz.get_org_permissions(ctx, user)
