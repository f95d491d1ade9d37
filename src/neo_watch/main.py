"""Main module for the NEO Watch service."""
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from neo_watch.container import Container, init_container
from neo_watch.db.sessions import init_db
from neo_watch.error_mapper import DomainErrorMapper
from neo_watch.routers import (alerts_router, asteroids_router, chat_router,
                               scheduler_router, watchlist_router)
from neo_watch.utils import utcnow

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI):
    """Create tables and start the reconciliation timer; stop it and close the gateway on shutdown."""
    container: Container = fastapi_app.state.container
    init_db(container.engine())

    scheduler = container.scheduler()
    if container.config.scheduler_enabled():
        scheduler.start()

    yield

    await scheduler.stop()
    try:
        await container.gateway().close()
    except Exception as exc:  # pylint: disable=broad-except
        logger.warning("Error closing gateway: %s", exc)


def create_app(container: Container | None = None) -> FastAPI:
    """Build the FastAPI app around a container (a fresh env-configured one by default)."""
    fastapi_app = FastAPI(
        title="NEO Watch",
        description="Near-Earth-object browsing, risk scoring, watchlists, alerts and chat",
        version="0.1.0",
        lifespan=lifespan,
    )
    fastapi_app.state.container = container or init_container()

    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    DomainErrorMapper().install(fastapi_app)

    fastapi_app.include_router(asteroids_router)
    fastapi_app.include_router(watchlist_router)
    fastapi_app.include_router(alerts_router)
    fastapi_app.include_router(scheduler_router)
    fastapi_app.include_router(chat_router)

    @fastapi_app.get("/health")
    def health():
        """Return health check status."""
        return {"status": "ok", "timestamp": utcnow().isoformat()}

    return fastapi_app


app = create_app()


def run():
    """Run the server (uvicorn). Use for the `start` console script."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    uvicorn.run("neo_watch.main:app", host="127.0.0.1", port=8000)
