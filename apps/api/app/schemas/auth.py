"""Authentication-related Pydantic schemas."""

from pydantic import BaseModel, ConfigDict

from app.core.roles import AccountType


class TokenPayload(BaseModel):
    """Decoded JWT payload structure."""
    sub: str  # user_id
    account_type: AccountType
    email: str | None = None
    name: str | None = None
    personal_org_id: str | None = None


class AuthenticatedUser(BaseModel):
    """
    Identity of the caller, resolved from the bearer token.

    Issued by the identity provider; read-only to the authorization core.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    account_type: AccountType
    email: str | None = None
    name: str | None = None
    personal_org_id: str | None = None

    @classmethod
    def from_token(cls, payload: TokenPayload) -> "AuthenticatedUser":
        return cls(
            id=payload.sub,
            account_type=payload.account_type,
            email=payload.email,
            name=payload.name,
            personal_org_id=payload.personal_org_id,
        )

    @property
    def is_agent(self) -> bool:
        return self.account_type == AccountType.AGENT
