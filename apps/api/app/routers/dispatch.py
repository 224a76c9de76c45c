"""Dispatch router - technician recommendations for a job."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field, field_validator

from app.core.deps import get_current_user, resolve_org_context
from app.core.structured_logging import build_log_context
from app.schemas.auth import AuthenticatedUser
from app.schemas.dispatch import JobRequest, RankingPriority, Technician, TechnicianRanking
from app.schemas.org import OrgScopedRequest
from app.services import ranking_service
from app.services.authorization_service import authorization_service as authz

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/dispatch", tags=["Dispatch"])


class RankingRequest(OrgScopedRequest):
    job: JobRequest
    technicians: list[Technician] = Field(default_factory=list)
    preferred_vendor_ids: list[str] = Field(default_factory=list)
    # When set, sort by these keys instead of the composite score
    priority_order: list[RankingPriority] | None = Field(None, min_length=1, max_length=3)

    @field_validator("priority_order")
    @classmethod
    def validate_priority_order(cls, v: list[RankingPriority] | None) -> list[RankingPriority] | None:
        """Each sort key may appear once."""
        if v is not None and len(set(v)) != len(v):
            raise ValueError("priority_order keys must be distinct")
        return v


class RankingResponse(BaseModel):
    rankings: list[TechnicianRanking]
    recommended_ids: list[str]


@router.post("/rankings", response_model=RankingResponse)
def rank_technicians(
    body: RankingRequest,
    user: AuthenticatedUser = Depends(get_current_user),
):
    """
    Rank candidate technicians for a job.

    Requires order-creation rights in the org. Inactive technicians are
    omitted from the response.
    """
    ctx = resolve_org_context(body, user)
    if not authz.can_create_order(ctx, user):
        logger.info(
            "Dispatch ranking denied",
            extra=build_log_context(user_id=user.id, org_id=ctx.org.id, action="rank_technicians"),
        )
        raise HTTPException(status_code=403, detail="Not allowed to dispatch jobs in this organization")

    if body.priority_order is not None:
        rankings = ranking_service.rank_by_priority(
            body.technicians,
            body.job,
            priority_order=body.priority_order,
            preferred_vendor_ids=body.preferred_vendor_ids,
        )
    else:
        rankings = ranking_service.rank_technicians(
            body.technicians,
            body.job,
            preferred_vendor_ids=body.preferred_vendor_ids,
        )

    logger.debug(
        "Ranked %d of %d technicians",
        len(rankings),
        len(body.technicians),
        extra=build_log_context(user_id=user.id, org_id=ctx.org.id, action="rank_technicians"),
    )
    return RankingResponse(
        rankings=rankings,
        recommended_ids=[r.provider.id for r in rankings if r.recommended],
    )
