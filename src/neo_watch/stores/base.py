"""Shared session handling for SQL-backed stores."""
import logging
from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from neo_watch.db.sessions import session_scope
from neo_watch.errors import StorageFault

logger = logging.getLogger(__name__)


class SqlStore:
    """Base for stores: one short-lived session per operation.

    Database errors leave a store only as StorageFault; domain errors raised
    inside the session (NotFound, AlreadyWatched) roll back and pass through.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    @contextmanager
    def _session(self, action: str) -> Generator[Session, None, None]:
        try:
            with session_scope(self._engine) as session:
                yield session
        except SQLAlchemyError as exc:
            logger.error("%s: storage failure during %s: %s", type(self).__name__, action, exc)
            raise StorageFault(f"Storage unavailable while trying to {action}") from exc
