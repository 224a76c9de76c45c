"""Ranking service - technician recommendations for job dispatch.

Each active provider gets five factor scores on a 0-100 scale, combined with
fixed weights into a composite score:

    availability            30%  (exact-date match)
    preferred relationship  25%  (preferred vendor or preferred client)
    reliability             20%  (on-time rate minus no-show rate)
    distance                15%  (Haversine, bucketed)
    skill match             10%  (average 1-5 rating x 20)

The weights are a business contract; recommendation thresholds downstream
depend on them. Nothing here does I/O or keeps state between calls.
"""

import math
from collections.abc import Iterable, Sequence

from app.schemas.dispatch import (
    JobRequest,
    MediaType,
    ProviderStatus,
    RankingFactors,
    RankingPriority,
    Technician,
    TechnicianRanking,
)


EARTH_RADIUS_KM = 6371.0

WEIGHTS: dict[str, float] = {
    "availability": 0.30,
    "preferred_relationship": 0.25,
    "reliability": 0.20,
    "distance": 0.15,
    "skill_match": 0.10,
}

# (max distance in km, score); anything beyond the last bucket scores 0
DISTANCE_BUCKETS: tuple[tuple[float, float], ...] = (
    (5.0, 100.0),
    (15.0, 75.0),
    (30.0, 50.0),
    (50.0, 25.0),
)

RECOMMENDATION_MIN_SCORE = 60.0
NEUTRAL_SCORE = 50.0

SKILL_FOR_MEDIA_TYPE: dict[str, str] = {
    MediaType.PHOTO.value: "residential",
    MediaType.VIDEO.value: "video",
    MediaType.AERIAL.value: "aerial",
    MediaType.TWILIGHT.value: "twilight",
}

DEFAULT_PRIORITY_ORDER: tuple[RankingPriority, ...] = (
    RankingPriority.AVAILABILITY,
    RankingPriority.DISTANCE,
    RankingPriority.SCORE,
)


# =============================================================================
# Factor scoring
# =============================================================================

def calculate_distance(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in kilometers (Haversine)."""
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def score_distance(distance_km: float) -> float:
    """Step function: <=5km 100, <=15km 75, <=30km 50, <=50km 25, else 0."""
    for max_km, score in DISTANCE_BUCKETS:
        if distance_km <= max_km:
            return score
    return 0.0


def score_availability(technician: Technician, requested_date: str) -> float:
    """100 if the first entry for exactly this date is marked available, else 0."""
    for slot in technician.availability:
        if slot.date == requested_date:
            return 100.0 if slot.available else 0.0
    return 0.0


def score_reliability(technician: Technician) -> float:
    """On-time rate minus no-show rate, clamped to [0, 100]. New providers get 50."""
    reliability = technician.reliability
    if reliability.total_jobs == 0:
        return NEUTRAL_SCORE

    no_show_penalty = (reliability.no_shows / reliability.total_jobs) * 100
    score = reliability.on_time_rate * 100 - no_show_penalty
    return max(0.0, min(100.0, score))


def score_skill_match(technician: Technician, job: JobRequest) -> float:
    """Average rating for the requested media types, scaled to 0-100. No match scores 50."""
    total = 0.0
    count = 0
    for media_type in job.media_type:
        skill_key = SKILL_FOR_MEDIA_TYPE.get(media_type)
        if skill_key is None:
            continue
        rating = getattr(technician.skills, skill_key)
        if rating is not None:
            total += rating
            count += 1

    if count == 0:
        return NEUTRAL_SCORE
    return (total / count) * 20


def score_preferred_relationship(
    technician: Technician,
    job: JobRequest,
    preferred_vendor_ids: Iterable[str] = (),
) -> float:
    """100 if the provider's company is a preferred vendor or the client is a preferred client."""
    if technician.company_id and technician.company_id in set(preferred_vendor_ids):
        return 100.0
    if job.organization_id in technician.preferred_clients:
        return 100.0
    return 0.0


def score_factors(
    technician: Technician,
    job: JobRequest,
    preferred_vendor_ids: Iterable[str] = (),
) -> RankingFactors:
    """All five factor scores for one provider and job."""
    distance_km = calculate_distance(
        technician.home_location.lat,
        technician.home_location.lng,
        job.location.lat,
        job.location.lng,
    )
    return RankingFactors(
        availability=score_availability(technician, job.scheduled_date),
        distance=score_distance(distance_km),
        distance_km=distance_km,
        reliability=score_reliability(technician),
        skill_match=score_skill_match(technician, job),
        preferred_relationship=score_preferred_relationship(technician, job, preferred_vendor_ids),
    )


def composite_score(factors: RankingFactors) -> float:
    return (
        factors.availability * WEIGHTS["availability"]
        + factors.preferred_relationship * WEIGHTS["preferred_relationship"]
        + factors.reliability * WEIGHTS["reliability"]
        + factors.distance * WEIGHTS["distance"]
        + factors.skill_match * WEIGHTS["skill_match"]
    )


def is_recommended(score: float, factors: RankingFactors) -> bool:
    """Availability is a hard gate: an unavailable provider is never recommended."""
    return score >= RECOMMENDATION_MIN_SCORE and factors.availability == 100


# =============================================================================
# Ranking
# =============================================================================

def _score_active(
    technicians: Iterable[Technician],
    job: JobRequest,
    preferred_vendor_ids: Sequence[str],
) -> list[tuple[Technician, RankingFactors, float]]:
    scored = []
    for technician in technicians:
        if technician.status != ProviderStatus.ACTIVE:
            continue
        factors = score_factors(technician, job, preferred_vendor_ids)
        scored.append((technician, factors, composite_score(factors)))
    return scored


def rank_technicians(
    technicians: Iterable[Technician],
    job: JobRequest,
    preferred_vendor_ids: Iterable[str] = (),
) -> list[TechnicianRanking]:
    """
    Rank active providers for a job by composite score, highest first.

    Inactive providers are left out entirely. Ties keep input order.
    """
    scored = _score_active(technicians, job, list(preferred_vendor_ids))
    rankings = [
        TechnicianRanking(
            provider=technician,
            score=score,
            factors=factors,
            recommended=is_recommended(score, factors),
        )
        for technician, factors, score in scored
    ]
    # sorted() is stable, so equal scores keep their input order
    return sorted(rankings, key=lambda ranking: -ranking.score)


# Legacy name from before providers were called technicians
rank_photographers = rank_technicians


def rank_by_priority(
    technicians: Iterable[Technician],
    job: JobRequest,
    priority_order: Sequence[RankingPriority | str] = DEFAULT_PRIORITY_ORDER,
    preferred_vendor_ids: Iterable[str] = (),
) -> list[TechnicianRanking]:
    """
    Rank active providers by a caller-chosen sort order over the same factors.

    Keys: availability (available first), distance (closest first, raw km),
    score (highest composite first). Later keys break ties of earlier ones;
    full ties keep input order. Only the first-ranked provider can be
    recommended, and only if it passes the usual gate.

    Raises:
        ValueError: If priority_order is empty, repeats a key, or contains an
            unknown key
    """
    priorities = [RankingPriority(priority) for priority in priority_order]
    if not priorities:
        raise ValueError("priority_order must name at least one key")
    if len(set(priorities)) != len(priorities):
        raise ValueError("priority_order keys must be distinct")
    scored = _score_active(technicians, job, list(preferred_vendor_ids))

    def sort_key(item: tuple[Technician, RankingFactors, float]) -> tuple[float, ...]:
        _, factors, score = item
        key = []
        for priority in priorities:
            if priority == RankingPriority.AVAILABILITY:
                key.append(-factors.availability)
            elif priority == RankingPriority.DISTANCE:
                key.append(factors.distance_km)
            else:
                key.append(-score)
        return tuple(key)

    ordered = sorted(scored, key=sort_key)
    return [
        TechnicianRanking(
            provider=technician,
            score=score,
            factors=factors,
            recommended=index == 0 and is_recommended(score, factors),
            rank=index + 1,
        )
        for index, (technician, factors, score) in enumerate(ordered)
    ]
