"""Database package: models and session management."""
from neo_watch.db.models import (Alert, AlertType, ChatMessage, RiskLevel,
                                 Severity, WatchedItem)

__all__ = [
    "Alert",
    "AlertType",
    "ChatMessage",
    "RiskLevel",
    "Severity",
    "WatchedItem",
]
