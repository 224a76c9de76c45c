"""Organization roles, account types, and role tiers.

EffectiveOrgRole is the closed set of roles used for every authorization
decision. Stored membership roles (including legacy lowercase aliases) are
normalized exactly once, in normalize_role(), when an OrgContext is built.
"""

from enum import Enum


class EffectiveOrgRole(str, Enum):
    """
    Role used for authorization decisions.

    - PERSONAL_OWNER: Synthetic role for the single member of a personal org
    - OWNER / ADMIN: Full administrative access within the org
    - PROJECT_MANAGER: Org-wide visibility, edits only projects they manage
    - TECHNICIAN / EDITOR: Only projects they are assigned to
    - AGENT: External customer, access comes from the customer link
    - NONE: No membership (every check resolves to False)
    """
    PERSONAL_OWNER = "PERSONAL_OWNER"
    OWNER = "OWNER"
    ADMIN = "ADMIN"
    PROJECT_MANAGER = "PROJECT_MANAGER"
    TECHNICIAN = "TECHNICIAN"
    EDITOR = "EDITOR"
    AGENT = "AGENT"
    NONE = "NONE"

    @classmethod
    def has_value(cls, value: str) -> bool:
        """Check if value is a canonical role."""
        return value in cls._value2member_map_


class OrgType(str, Enum):
    """Tenant types."""
    PERSONAL = "PERSONAL"
    TEAM = "TEAM"
    COMPANY = "COMPANY"


class AccountType(str, Enum):
    """Account side of a user (customer vs provider)."""
    AGENT = "AGENT"
    PROVIDER = "PROVIDER"
    COMPANY = "COMPANY"


class MessageChannel(str, Enum):
    """Project chat channels."""
    TEAM = "team"
    CUSTOMER = "customer"


# Stored roles that predate the current role names
LEGACY_ROLE_ALIASES: dict[str, EffectiveOrgRole] = {
    "DISPATCHER": EffectiveOrgRole.PROJECT_MANAGER,
    "PHOTOGRAPHER": EffectiveOrgRole.TECHNICIAN,
}


def normalize_role(value: "EffectiveOrgRole | str | None") -> EffectiveOrgRole:
    """
    Normalize a stored role string to an EffectiveOrgRole.

    Case-folds once and resolves legacy aliases. Missing or blank values
    mean no role.

    Raises:
        ValueError: If the value is not a known role or alias
    """
    if isinstance(value, EffectiveOrgRole):
        return value
    if value is None or not str(value).strip():
        return EffectiveOrgRole.NONE

    key = str(value).strip().upper()
    if EffectiveOrgRole.has_value(key):
        return EffectiveOrgRole(key)
    if key in LEGACY_ROLE_ALIASES:
        return LEGACY_ROLE_ALIASES[key]
    raise ValueError(f"Unknown role: {value}")


def normalize_channel(channel: "MessageChannel | str | None") -> MessageChannel:
    """Anything other than "customer" is the team channel."""
    if isinstance(channel, MessageChannel):
        return channel
    if channel is not None and str(channel).strip().lower() == MessageChannel.CUSTOMER.value:
        return MessageChannel.CUSTOMER
    return MessageChannel.TEAM


# =============================================================================
# Role tiers
# =============================================================================

# Full administrative privileges (edit any project, delete, change customers)
ADMIN_ROLES = frozenset({
    EffectiveOrgRole.PERSONAL_OWNER,
    EffectiveOrgRole.OWNER,
    EffectiveOrgRole.ADMIN,
})

# Org-wide operational visibility (all projects, customer list, inquiries)
MANAGER_ROLES = ADMIN_ROLES | {EffectiveOrgRole.PROJECT_MANAGER}

# Can create orders (projects with linked customer and calendar event)
ORDER_CREATOR_ROLES = MANAGER_ROLES

# Can manage CRM customer records. PROJECT_MANAGER is excluded: customer
# identity is commercial data, not operational.
CUSTOMER_ADMIN_ROLES = ADMIN_ROLES

# Self-scoped roles that only see projects they are assigned to
ASSIGNEE_ROLES = frozenset({EffectiveOrgRole.TECHNICIAN, EffectiveOrgRole.EDITOR})
