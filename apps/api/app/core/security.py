"""Security utilities for bearer access tokens.

Tokens are issued by the identity service; this API only verifies them.
create_access_token exists for service-to-service calls and tests.
"""

from datetime import datetime, timedelta, timezone

import jwt

from app.core.config import settings
from app.core.roles import AccountType


def create_access_token(
    user_id: str,
    account_type: AccountType | str,
    email: str | None = None,
    name: str | None = None,
    personal_org_id: str | None = None,
) -> str:
    """
    Create a signed access JWT.

    Always signs with the current secret (JWT_SECRET).
    """
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "account_type": account_type.value if isinstance(account_type, AccountType) else account_type,
        "iat": now,
        "exp": now + timedelta(hours=settings.JWT_EXPIRES_HOURS),
    }
    if email:
        payload["email"] = email
    if name:
        payload["name"] = name
    if personal_org_id:
        payload["personal_org_id"] = personal_org_id
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    """
    Decode and verify an access JWT.

    Tries current secret first, then previous (for rotation support).

    Raises:
        jwt.InvalidTokenError: If token invalid with all secrets
    """
    last_error: jwt.InvalidTokenError | None = None
    for secret in settings.jwt_secrets:
        try:
            return jwt.decode(token, secret, algorithms=[settings.JWT_ALGORITHM])
        except jwt.InvalidTokenError as e:
            last_error = e
    raise last_error  # type: ignore[misc]
