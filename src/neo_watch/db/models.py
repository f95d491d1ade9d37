"""Database models for NEO Watch.

Only user state is persisted: watched objects with their last provider
snapshot, the per-user alert log, and the chat message log. Provider feeds
are fetched on demand and never stored.
"""
from datetime import datetime
from enum import Enum
from typing import Any

from sqlalchemy import JSON, Column, UniqueConstraint
from sqlmodel import Field, SQLModel

from neo_watch.utils import utcnow

DEFAULT_DISTANCE_THRESHOLD_AU = 0.05
MAX_CHAT_BODY_LENGTH = 500


class RiskLevel(str, Enum):
    """Categorical risk tier derived from the 0-100 score."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class AlertType(str, Enum):
    CLOSE_APPROACH = "CLOSE_APPROACH"
    RISK_INCREASE = "RISK_INCREASE"
    NEW_DATA = "NEW_DATA"
    CUSTOM = "CUSTOM"


class Severity(str, Enum):
    INFO = "INFO"
    WARNING = "WARNING"
    CRITICAL = "CRITICAL"


class WatchedItem(SQLModel, table=True):
    """A user's subscription to ongoing monitoring of one NEO."""

    __tablename__ = "watched_item"
    __table_args__ = (
        UniqueConstraint("owner_id", "external_id", name="uq_watched_item_owner_object"),
    )

    id: int | None = Field(default=None, primary_key=True)
    owner_id: str = Field(index=True)
    external_id: str = Field(index=True)
    name: str
    snapshot: dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    risk_score: int = Field(default=0, ge=0, le=100)
    risk_level: RiskLevel = Field(default=RiskLevel.LOW)
    notify_on_approach: bool = Field(default=True)
    distance_threshold_au: float = Field(default=DEFAULT_DISTANCE_THRESHOLD_AU)
    added_at: datetime = Field(default_factory=utcnow)
    last_checked_at: datetime = Field(default_factory=utcnow)


class Alert(SQLModel, table=True):
    """Per-user notification. Immutable apart from is_read."""

    __tablename__ = "alert"

    id: int | None = Field(default=None, primary_key=True)
    owner_id: str = Field(index=True)
    external_id: str
    object_name: str
    alert_type: AlertType
    message: str
    severity: Severity = Field(default=Severity.INFO)
    is_read: bool = Field(default=False)
    created_at: datetime = Field(default_factory=utcnow, index=True)


class ChatMessage(SQLModel, table=True):
    """One message in a room's append-only log."""

    __tablename__ = "chat_message"

    id: int | None = Field(default=None, primary_key=True)
    author_id: str
    author_name: str
    room_id: str = Field(index=True)
    body: str = Field(max_length=MAX_CHAT_BODY_LENGTH)
    created_at: datetime = Field(default_factory=utcnow)
