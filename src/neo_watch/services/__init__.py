"""Service layer: asteroid browsing, watch reconciliation, and chat relay."""
from neo_watch.services.asteroids import AsteroidService
from neo_watch.services.chat_relay import GENERAL_ROOM, ChatRelay
from neo_watch.services.reconciliation import ReconciliationScheduler

__all__ = [
    "AsteroidService",
    "ChatRelay",
    "GENERAL_ROOM",
    "ReconciliationScheduler",
]
