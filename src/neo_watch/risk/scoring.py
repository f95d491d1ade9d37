"""Heuristic NEO risk scoring.

Outputs an integer score (0-100) and a level: LOW / MEDIUM / HIGH / CRITICAL.
Points are additive, then capped at 100:

- hazard flag: 40
- closest-approach miss distance: 30 / 20 / 10 / 5
- average diameter: 20 / 15 / 10 / 5
- relative velocity of the first close-approach record: 10 / 7 / 5 / 3

Distance and velocity read different records: the closest
approach for distance, the first listed approach for velocity.
"""
from neo_watch.db import RiskLevel
from neo_watch.providers.neows.models import CloseApproach, NeoObject
from neo_watch.schemas import RiskAnalysis, RiskFactors

MAX_SCORE = 100
HAZARD_POINTS = 40

# (upper bound inclusive in AU, points)
DISTANCE_TIERS: tuple[tuple[float, int], ...] = ((0.05, 30), (0.10, 20), (0.20, 10))
DISTANCE_FLOOR = 5

# (lower bound exclusive in meters, points)
DIAMETER_TIERS: tuple[tuple[float, int], ...] = ((1000.0, 20), (500.0, 15), (100.0, 10))
DIAMETER_FLOOR = 5

# (lower bound exclusive in km/s, points)
VELOCITY_TIERS: tuple[tuple[float, int], ...] = ((30.0, 10), (20.0, 7), (10.0, 5))
VELOCITY_FLOOR = 3

# (lower bound inclusive, level), highest first
LEVEL_TIERS: tuple[tuple[int, RiskLevel], ...] = (
    (75, RiskLevel.CRITICAL),
    (50, RiskLevel.HIGH),
    (25, RiskLevel.MEDIUM),
)


def level_for(score: int) -> RiskLevel:
    """Map a score to its tier; each tier includes its lower bound."""
    for threshold, level in LEVEL_TIERS:
        if score >= threshold:
            return level
    return RiskLevel.LOW


def distance_points(miss_distance_au: float | None) -> int:
    if miss_distance_au is None:
        return 0
    for bound, points in DISTANCE_TIERS:
        if miss_distance_au <= bound:
            return points
    return DISTANCE_FLOOR


def diameter_points(diameter_m: float | None) -> int:
    if diameter_m is None:
        return 0
    for bound, points in DIAMETER_TIERS:
        if diameter_m > bound:
            return points
    return DIAMETER_FLOOR


def velocity_points(velocity_km_s: float | None) -> int:
    if velocity_km_s is None:
        return 0
    for bound, points in VELOCITY_TIERS:
        if velocity_km_s > bound:
            return points
    return VELOCITY_FLOOR


def _velocity(approach: CloseApproach | None) -> float | None:
    return approach.velocity_km_s if approach is not None else None


def score(neo: NeoObject) -> RiskAnalysis:
    """Compute the risk analysis for one object. Pure: no I/O, no clock."""
    closest = neo.closest_approach
    diameter = neo.average_diameter_m

    total = (
        (HAZARD_POINTS if neo.is_potentially_hazardous else 0)
        + distance_points(closest.miss_distance_au if closest else None)
        + diameter_points(diameter)
        + velocity_points(_velocity(neo.first_approach))
    )
    capped = min(total, MAX_SCORE)

    return RiskAnalysis(
        score=capped,
        level=level_for(capped),
        factors=RiskFactors(
            is_hazardous=neo.is_potentially_hazardous,
            miss_distance_au=closest.miss_distance_au if closest else None,
            diameter_m=diameter,
            velocity_km_s=_velocity(closest),
            close_approach_date=closest.approach_date if closest else None,
        ),
    )
