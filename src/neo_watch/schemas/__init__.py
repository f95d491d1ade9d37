"""Pydantic schemas for API and runtime use. Not persisted to DB."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from neo_watch.db import AlertType, RiskLevel, Severity


class RiskFactors(BaseModel):
    """Inputs behind a risk score, describing the closest approach."""

    is_hazardous: bool
    miss_distance_au: float | None = None
    diameter_m: float | None = None
    velocity_km_s: float | None = None
    close_approach_date: str | None = None


class RiskAnalysis(BaseModel):
    """Deterministic 0-100 risk score, its tier, and the factor breakdown."""

    model_config = ConfigDict(frozen=True)

    score: int = Field(ge=0, le=100)
    level: RiskLevel
    factors: RiskFactors


class AlertSettings(BaseModel):
    notify_on_approach: bool
    distance_threshold_au: float


class WatchRequest(BaseModel):
    """Body of POST /watchlist."""

    model_config = ConfigDict(populate_by_name=True)

    external_id: str = Field(alias="externalId", min_length=1)


class AlertSettingsUpdate(BaseModel):
    """Body of PUT /watchlist/{id}/alerts; omitted fields are left unchanged."""

    model_config = ConfigDict(populate_by_name=True)

    notify_on_approach: bool | None = Field(default=None, alias="notifyOnApproach")
    distance_threshold_au: float | None = Field(
        default=None, alias="distanceThresholdAU", gt=0
    )


class WatchedItemRead(BaseModel):
    """Watchlist entry as returned to its owner."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    external_id: str
    name: str
    snapshot: dict
    risk_score: int
    risk_level: RiskLevel
    alert_settings: AlertSettings
    added_at: datetime
    last_checked_at: datetime

    @classmethod
    def from_item(cls, item) -> "WatchedItemRead":  # noqa: ANN001
        return cls(
            id=item.id,
            external_id=item.external_id,
            name=item.name,
            snapshot=item.snapshot,
            risk_score=item.risk_score,
            risk_level=item.risk_level,
            alert_settings=AlertSettings(
                notify_on_approach=item.notify_on_approach,
                distance_threshold_au=item.distance_threshold_au,
            ),
            added_at=item.added_at,
            last_checked_at=item.last_checked_at,
        )


class AlertRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    external_id: str
    object_name: str
    alert_type: AlertType
    message: str
    severity: Severity
    is_read: bool
    created_at: datetime


class ChatMessageRead(BaseModel):
    """Chat message as pushed to room subscribers."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    author_id: str
    author_name: str
    room_id: str
    body: str
    created_at: datetime


class TickSummary(BaseModel):
    """Outcome of one reconciliation pass over all watched items."""

    total: int = 0
    succeeded: int = 0
    failed: int = 0
    alerts_created: int = 0
    load_failed: bool = False
    started_at: datetime
    finished_at: datetime | None = None


class SchedulerStatus(BaseModel):
    enabled: bool
    running: bool
    interval_seconds: float
    last_summary: TickSummary | None = None


__all__ = [
    "AlertRead",
    "AlertSettings",
    "AlertSettingsUpdate",
    "ChatMessageRead",
    "RiskAnalysis",
    "RiskFactors",
    "SchedulerStatus",
    "TickSummary",
    "WatchRequest",
    "WatchedItemRead",
]
