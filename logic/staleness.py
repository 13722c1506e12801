"""Cache policy deciding whether a stored daily pick can be reused."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from logic.geo import haversine_km
from models.daily_pick import DailyPick

STALENESS_THRESHOLD_KM = 10.0


class CacheDecision(str, Enum):
    MISS = "miss"
    FORCED = "forced"
    STALE = "stale"
    FRESH = "fresh"


@dataclass(frozen=True)
class StalenessResult:
    """Outcome of the cache check plus the facts that drove it."""

    decision: CacheDecision
    reason: str
    distance_km: Optional[float] = None

    @property
    def needs_regeneration(self) -> bool:
        return self.decision is not CacheDecision.FRESH


def evaluate_staleness(
    existing: DailyPick | None,
    current_latitude: float,
    current_longitude: float,
    force_refresh: bool = False,
) -> StalenessResult:
    """Classify a stored pick against the caller's current position.

    The date is already part of the lookup key, so only location drift and
    snapshot completeness are checked here. Drift strictly greater than
    ``STALENESS_THRESHOLD_KM`` makes the pick stale.
    """

    if existing is None:
        return StalenessResult(CacheDecision.MISS, "no_record")
    if force_refresh:
        return StalenessResult(CacheDecision.FORCED, "force_refresh")

    snapshot = existing.weather_snapshot
    if snapshot is None or not snapshot.has_coordinates:
        return StalenessResult(CacheDecision.STALE, "missing_coordinates")

    distance = haversine_km(
        snapshot.latitude,
        snapshot.longitude,
        current_latitude,
        current_longitude,
    )
    if distance > STALENESS_THRESHOLD_KM:
        return StalenessResult(CacheDecision.STALE, "location_drift", distance_km=distance)
    return StalenessResult(CacheDecision.FRESH, "within_threshold", distance_km=distance)


__all__ = ["CacheDecision", "STALENESS_THRESHOLD_KM", "StalenessResult", "evaluate_staleness"]
