"""FastAPI dependencies for authentication and org-context resolution."""

import logging

import jwt
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import ValidationError

from app.core.org_context import OrgContext, build_org_context, owns_personal_org
from app.core.roles import OrgType
from app.core.security import decode_access_token
from app.core.structured_logging import build_log_context
from app.schemas.auth import AuthenticatedUser, TokenPayload
from app.schemas.org import OrgScopedRequest

logger = logging.getLogger(__name__)

# Missing or non-Bearer credentials come through as None and map to 401 below
bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> AuthenticatedUser:
    """
    Get authenticated user from the bearer token.

    Validates:
    - Authorization header exists and uses the Bearer scheme
    - JWT is valid and not expired
    - Claims carry a user id and a known account type

    Raises:
        HTTPException 401: Authentication failed
    """
    if credentials is None:
        raise HTTPException(status_code=401, detail="Not authenticated")

    try:
        payload = TokenPayload.model_validate(decode_access_token(credentials.credentials))
    except (jwt.InvalidTokenError, ValidationError):
        raise HTTPException(status_code=401, detail="Invalid token")

    return AuthenticatedUser.from_token(payload)


def resolve_org_context(body: OrgScopedRequest, user: AuthenticatedUser) -> OrgContext:
    """
    Build the OrgContext for this request from the posted org snapshot.

    The caller is responsible for posting a fresh membership snapshot.

    Raises:
        HTTPException 403: Personal org the user does not own, or a stored
            role that is not a known role
    """
    if body.org.type == OrgType.PERSONAL and not owns_personal_org(user, body.org, body.membership):
        logger.warning(
            "Personal org access denied",
            extra=build_log_context(user_id=user.id, org_id=body.org.id),
        )
        raise HTTPException(
            status_code=403,
            detail="You do not have access to this personal organization",
        )

    try:
        return build_org_context(user=user, org=body.org, membership=body.membership)
    except ValueError:
        logger.warning(
            "Unknown membership role",
            extra=build_log_context(user_id=user.id, org_id=body.org.id),
        )
        raise HTTPException(
            status_code=403,
            detail=f"Unknown role '{body.membership.role}'. Contact administrator.",
        )
