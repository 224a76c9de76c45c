"""Pydantic schemas for dispatch ranking (technicians, job requests, rankings)."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ProviderStatus(str, Enum):
    """Provider profiles are never deleted, only toggled inactive."""
    ACTIVE = "active"
    INACTIVE = "inactive"


class MediaType(str, Enum):
    """Media types a job can request."""
    PHOTO = "photo"
    VIDEO = "video"
    AERIAL = "aerial"
    TWILIGHT = "twilight"


class RankingPriority(str, Enum):
    """Sort keys for the interactive find-technician flow."""
    AVAILABILITY = "availability"
    DISTANCE = "distance"
    SCORE = "score"


# =============================================================================
# Inputs
# =============================================================================

class GeoPoint(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class AvailabilitySlot(BaseModel):
    date: str  # YYYY-MM-DD, compared as a string
    available: bool = False


class Reliability(BaseModel):
    """Counters updated by job-completion feedback."""
    on_time_rate: float = Field(0.0, ge=0, le=1)
    no_shows: int = Field(0, ge=0)
    total_jobs: int = Field(0, ge=0)


class Skills(BaseModel):
    """Skill ratings on a 1-5 scale. Missing ratings are not counted."""
    residential: float | None = Field(None, ge=0, le=5)
    video: float | None = Field(None, ge=0, le=5)
    aerial: float | None = Field(None, ge=0, le=5)
    twilight: float | None = Field(None, ge=0, le=5)
    commercial: float | None = Field(None, ge=0, le=5)


class Technician(BaseModel):
    """Provider profile as supplied by the persistence layer."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str | None = None
    company_id: str | None = None
    status: ProviderStatus = ProviderStatus.ACTIVE
    home_location: GeoPoint
    availability: list[AvailabilitySlot] = Field(default_factory=list)
    reliability: Reliability = Field(default_factory=Reliability)
    skills: Skills = Field(default_factory=Skills)
    preferred_clients: list[str] = Field(default_factory=list)


class JobRequest(BaseModel):
    """Shoot to dispatch. `media_type` values outside MediaType are ignored by skill matching."""
    organization_id: str
    location: GeoPoint
    scheduled_date: str
    media_type: list[str] = Field(default_factory=list)


# =============================================================================
# Outputs
# =============================================================================

class RankingFactors(BaseModel):
    """Per-factor scores on a 0-100 scale, plus the raw distance."""
    availability: float
    distance: float
    distance_km: float
    reliability: float
    skill_match: float
    preferred_relationship: float


class TechnicianRanking(BaseModel):
    """One scored candidate. Recomputed per request, never persisted."""
    provider: Technician
    score: float
    factors: RankingFactors
    recommended: bool
    rank: int | None = None
