"""API routers for NEO Watch.

Includes routes for:
- /asteroids - NeoWs feed, lookup and browse, annotated with risk analysis
- /watchlist - the caller's watched objects and alert preferences
- /alerts - the caller's notifications
- /scheduler - manual reconciliation trigger and status
- /chat/ws - WebSocket chat rooms keyed by object id
"""
from neo_watch.routers.alerts import router as alerts_router
from neo_watch.routers.asteroids import router as asteroids_router
from neo_watch.routers.chat import router as chat_router
from neo_watch.routers.scheduler import router as scheduler_router
from neo_watch.routers.watchlist import router as watchlist_router

__all__ = [
    "alerts_router",
    "asteroids_router",
    "chat_router",
    "scheduler_router",
    "watchlist_router",
]
