"""Service layer modules."""

from app.services.authorization_service import AuthorizationService, authorization_service
from app.services.ranking_service import rank_by_priority, rank_photographers, rank_technicians

__all__ = [
    "AuthorizationService",
    "authorization_service",
    "rank_by_priority",
    "rank_photographers",
    "rank_technicians",
]
