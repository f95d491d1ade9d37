"""FastAPI dependency injection: app.state.container holds singletons; Depends() resolves them.

create_app() (main.py) attaches the container; these getters are used by Depends().
"""
from typing import Annotated

from fastapi import Depends, Request, WebSocket
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from neo_watch.auth import Principal, decode_principal
from neo_watch.container import Container
from neo_watch.services import (AsteroidService, ChatRelay,
                                ReconciliationScheduler)
from neo_watch.stores import AlertStore, WatchlistStore

_bearer = HTTPBearer(auto_error=False)


def get_container(request: Request) -> Container:
    return request.app.state.container


def get_asteroid_service(request: Request) -> AsteroidService:
    """Resolve the asteroid browsing service."""
    return get_container(request).asteroid_service()


def get_watchlist_store(request: Request) -> WatchlistStore:
    return get_container(request).watchlist_store()


def get_alert_store(request: Request) -> AlertStore:
    return get_container(request).alert_store()


def get_scheduler(request: Request) -> ReconciliationScheduler:
    return get_container(request).scheduler()


def get_chat_relay_ws(websocket: WebSocket) -> ChatRelay:
    """Resolve the chat relay for WebSocket routes."""
    return websocket.scope["app"].state.container.chat_relay()


def get_current_principal(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> Principal:
    """Principal from the bearer token; AuthError (401) if missing or invalid."""
    config = get_container(request).config
    token = credentials.credentials if credentials is not None else None
    return decode_principal(token, config.jwt_secret(), config.jwt_algorithm())


# Type aliases for route injection
AsteroidServiceDep = Annotated[AsteroidService, Depends(get_asteroid_service)]
WatchlistStoreDep = Annotated[WatchlistStore, Depends(get_watchlist_store)]
AlertStoreDep = Annotated[AlertStore, Depends(get_alert_store)]
SchedulerDep = Annotated[ReconciliationScheduler, Depends(get_scheduler)]
ChatRelayWs = Annotated[ChatRelay, Depends(get_chat_relay_ws)]
CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]
