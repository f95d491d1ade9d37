"""Watchlist store: per-user watched objects with their last snapshot and risk."""
import asyncio
import logging
from collections.abc import Sequence
from typing import Any

from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlmodel import select

from neo_watch.db import Alert, RiskLevel, WatchedItem
from neo_watch.errors import AlreadyWatched, NotFound
from neo_watch.providers import NeoGatewayABC, NeoObject
from neo_watch.risk import score
from neo_watch.stores.base import SqlStore
from neo_watch.utils import utcnow

logger = logging.getLogger(__name__)


class WatchlistStore(SqlStore):
    """Persisted (owner, object) subscriptions, unique per pair.

    Owners create, list, re-configure and delete their items; only the
    reconciliation scheduler rewrites snapshots (update_snapshot).
    """

    def __init__(self, engine: Engine, gateway: NeoGatewayABC) -> None:
        super().__init__(engine)
        self._gateway = gateway

    async def add(self, owner_id: str, external_id: str) -> WatchedItem:
        """Watch an object: fetch a fresh snapshot, score it, persist it.

        Raises:
            AlreadyWatched: The owner already watches this object.
            ProviderError: The snapshot could not be fetched or parsed.
        """
        if await asyncio.to_thread(self._find, owner_id, external_id) is not None:
            raise AlreadyWatched(f"Object '{external_id}' is already on the watchlist")

        payload = await self._gateway.fetch_by_id(external_id)
        neo = NeoObject.from_payload(payload)
        analysis = score(neo)

        item = WatchedItem(
            owner_id=owner_id,
            external_id=external_id,
            name=neo.name,
            snapshot=payload,
            risk_score=analysis.score,
            risk_level=analysis.level,
        )
        await asyncio.to_thread(self._insert, item)
        logger.info("Owner %s now watches %s (%s, score=%s)", owner_id, external_id, neo.name, item.risk_score)
        return item

    def get(self, owner_id: str, item_id: int) -> WatchedItem:
        """Return one of the owner's items. Raises NotFound if absent or not owned."""
        with self._session("get watched item") as session:
            return self._owned(session, owner_id, item_id)

    def remove(self, owner_id: str, item_id: int) -> None:
        """Stop watching. Raises NotFound if absent or not owned."""
        with self._session("remove watched item") as session:
            item = self._owned(session, owner_id, item_id)
            session.delete(item)

    def list_for_owner(self, owner_id: str) -> list[WatchedItem]:
        """All of the owner's items, most recently added first."""
        with self._session("list watchlist") as session:
            statement = (
                select(WatchedItem)
                .where(WatchedItem.owner_id == owner_id)
                .order_by(WatchedItem.added_at.desc(), WatchedItem.id.desc())
            )
            return list(session.exec(statement).all())

    def list_all(self) -> list[WatchedItem]:
        """Every watched item regardless of owner."""
        with self._session("load all watched items") as session:
            return list(session.exec(select(WatchedItem).order_by(WatchedItem.id)).all())

    def update_preferences(
        self,
        owner_id: str,
        item_id: int,
        *,
        notify_on_approach: bool | None = None,
        distance_threshold_au: float | None = None,
    ) -> WatchedItem:
        """Partially update alert preferences; None leaves a field unchanged."""
        with self._session("update alert preferences") as session:
            item = self._owned(session, owner_id, item_id)
            if notify_on_approach is not None:
                item.notify_on_approach = notify_on_approach
            if distance_threshold_au is not None:
                item.distance_threshold_au = distance_threshold_au
            session.add(item)
            return item

    def update_snapshot(
        self,
        item_id: int,
        snapshot: dict[str, Any],
        risk_score: int,
        risk_level: RiskLevel,
        alerts: Sequence[Alert] = (),
    ) -> WatchedItem:
        """Overwrite snapshot and risk, and stamp last_checked_at. Scheduler only.

        Alerts raised by the same check are inserted in the same transaction:
        they are stored only if the snapshot write commits.

        Raises:
            NotFound: The item was removed since it was loaded. Nothing is written.
        """
        with self._session("update snapshot") as session:
            item = session.get(WatchedItem, item_id)
            if item is None:
                raise NotFound(f"Watched item {item_id} no longer exists")
            item.snapshot = snapshot
            item.risk_score = risk_score
            item.risk_level = risk_level
            item.last_checked_at = utcnow()
            session.add(item)
            session.add_all(alerts)
            return item

    def _insert(self, item: WatchedItem) -> None:
        with self._session("add watched item") as session:
            session.add(item)
            try:
                session.flush()
            except IntegrityError as exc:
                # Lost a race with a concurrent add of the same pair.
                raise AlreadyWatched(
                    f"Object '{item.external_id}' is already on the watchlist"
                ) from exc

    def _find(self, owner_id: str, external_id: str) -> WatchedItem | None:
        with self._session("look up watched item") as session:
            statement = select(WatchedItem).where(
                WatchedItem.owner_id == owner_id,
                WatchedItem.external_id == external_id,
            )
            return session.exec(statement).first()

    @staticmethod
    def _owned(session, owner_id: str, item_id: int) -> WatchedItem:  # noqa: ANN001
        item = session.get(WatchedItem, item_id)
        if item is None or item.owner_id != owner_id:
            raise NotFound("Watched item not found")
        return item
