"""Pydantic schemas for API request/response models."""

from app.schemas.auth import AuthenticatedUser, TokenPayload
from app.schemas.dispatch import (
    JobRequest,
    RankingFactors,
    Technician,
    TechnicianRanking,
)
from app.schemas.org import Organization, OrganizationMember, OrgScopedRequest
from app.schemas.permissions import OrgPermissions, ProjectPermissions
from app.schemas.project import Project, ProjectCustomer
