"""DI container. Build with init_container(); routes resolve services through deps.py."""
from dependency_injector import containers, providers

from neo_watch.db.sessions import DEFAULT_DATABASE_URL, create_db_engine
from neo_watch.providers import NeoWsGateway
from neo_watch.services import (AsteroidService, ChatRelay,
                                ReconciliationScheduler)
from neo_watch.services.reconciliation import DEFAULT_INTERVAL_SECONDS
from neo_watch.stores import AlertStore, ChatStore, WatchlistStore


class Container(containers.DeclarativeContainer):
    config = providers.Configuration()

    engine = providers.Singleton(
        create_db_engine,
        config.database_url,
        echo=config.sql_echo,
    )

    gateway = providers.Singleton(
        NeoWsGateway,
        api_key=config.nasa_api_key,
        base_url=config.neows_base_url,
        timeout=config.neows_timeout,
    )

    watchlist_store = providers.Singleton(WatchlistStore, engine, gateway)
    alert_store = providers.Singleton(AlertStore, engine)
    chat_store = providers.Singleton(ChatStore, engine)

    asteroid_service = providers.Singleton(AsteroidService, gateway)

    scheduler = providers.Singleton(
        ReconciliationScheduler,
        gateway,
        watchlist_store,
        interval_seconds=config.scheduler_interval_seconds,
        max_concurrency=config.scheduler_max_concurrency,
    )

    chat_relay = providers.Singleton(ChatRelay, chat_store)


def init_container() -> Container:
    """Create the container and load configuration from the environment."""
    container = Container()
    config = container.config
    config.nasa_api_key.from_env("NASA_API_KEY", default="DEMO_KEY")
    config.neows_base_url.from_env("NEOWS_BASE_URL", default=NeoWsGateway.BASE_URL)
    config.neows_timeout.from_env("NEOWS_TIMEOUT", default=30.0, as_=float)
    config.database_url.from_env("DATABASE_URL", default=DEFAULT_DATABASE_URL)
    config.sql_echo.from_env("SQL_ECHO", default="0", as_=lambda v: v == "1")
    config.jwt_secret.from_env("JWT_SECRET", default="change-me")
    config.jwt_algorithm.from_env("JWT_ALGORITHM", default="HS256")
    config.scheduler_enabled.from_env("SCHEDULER_ENABLED", default="1", as_=lambda v: v == "1")
    config.scheduler_interval_seconds.from_env(
        "SCHEDULER_INTERVAL_SECONDS", default=DEFAULT_INTERVAL_SECONDS, as_=float
    )
    config.scheduler_max_concurrency.from_env("SCHEDULER_MAX_CONCURRENCY", default=5, as_=int)
    return container
