"""Reconciliation scheduler: periodic re-check of every watched object.

Each tick loads all watched items, re-fetches each object from the provider,
re-scores it, raises alerts on risk escalation or close approach, and stores
the fresh snapshot together with those alerts in one transaction. Items are
isolated from each other: one item's failure is logged and counted, never
propagated. Store calls run in worker threads, off the event loop.
"""
import asyncio
import contextlib
import logging

from neo_watch.db import Alert, AlertType, RiskLevel, Severity, WatchedItem
from neo_watch.errors import NeoWatchError, ProviderError, StorageFault
from neo_watch.providers import NeoGatewayABC, NeoObject
from neo_watch.risk import score
from neo_watch.schemas import RiskAnalysis, TickSummary
from neo_watch.stores import WatchlistStore
from neo_watch.utils import utcnow

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 6 * 60 * 60
RISK_INCREASE_MARGIN = 10


def build_alerts(
    item: WatchedItem, analysis: RiskAnalysis, previous_score: int
) -> list[Alert]:
    """Alerts for one item given its fresh analysis. Both triggers are independent."""
    alerts: list[Alert] = []

    if analysis.score > previous_score + RISK_INCREASE_MARGIN:
        alerts.append(
            Alert(
                owner_id=item.owner_id,
                external_id=item.external_id,
                object_name=item.name,
                alert_type=AlertType.RISK_INCREASE,
                message=f"Risk level increased for {item.name}. New risk score: {analysis.score}",
                severity=(
                    Severity.CRITICAL
                    if analysis.level == RiskLevel.CRITICAL
                    else Severity.WARNING
                ),
            )
        )

    miss_distance = analysis.factors.miss_distance_au
    if (
        item.notify_on_approach
        and miss_distance is not None
        and miss_distance <= item.distance_threshold_au
    ):
        alerts.append(
            Alert(
                owner_id=item.owner_id,
                external_id=item.external_id,
                object_name=item.name,
                alert_type=AlertType.CLOSE_APPROACH,
                message=(
                    f"{item.name} is approaching within {miss_distance:.4f} AU "
                    f"on {analysis.factors.close_approach_date}"
                ),
                severity=Severity.WARNING,
            )
        )

    return alerts


class ReconciliationScheduler:
    """Runs a reconciliation tick on a fixed interval, never two at once.

    Construct with its collaborators, then start() from the app lifespan and
    stop() on shutdown. run_tick() runs one pass directly (tests, manual
    trigger); a trigger that arrives while a tick is running is skipped.
    """

    def __init__(
        self,
        gateway: NeoGatewayABC,
        watchlist_store: WatchlistStore,
        *,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
        max_concurrency: int = 5,
    ) -> None:
        """Initialize the scheduler.

        Args:
            gateway: Provider gateway used to re-fetch each object.
            watchlist_store: Source of watched items and sink for fresh snapshots
                and the alerts they raise.
            interval_seconds: Delay between ticks (default 6 hours).
            max_concurrency: Upper bound on items checked at the same time.
        """
        self._gateway = gateway
        self._watchlist = watchlist_store
        self._interval = interval_seconds
        self._max_concurrency = max(1, max_concurrency)
        self._tick_lock = asyncio.Lock()
        self._task: asyncio.Task | None = None
        self._last_summary: TickSummary | None = None

    @property
    def interval_seconds(self) -> float:
        return self._interval

    @property
    def running(self) -> bool:
        """True while a tick is in progress."""
        return self._tick_lock.locked()

    @property
    def started(self) -> bool:
        """True while the background timer loop is alive."""
        return self._task is not None and not self._task.done()

    @property
    def last_summary(self) -> TickSummary | None:
        return self._last_summary

    def start(self) -> None:
        """Start the background timer loop. No-op if already started."""
        if self.started:
            return
        self._task = asyncio.create_task(self._run_forever(), name="neo-reconciliation")
        logger.info("Reconciliation scheduler started (every %ss)", self._interval)

    async def stop(self) -> None:
        """Cancel the timer loop; an in-flight tick is abandoned."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        logger.info("Reconciliation scheduler stopped")

    async def run_tick(self) -> TickSummary | None:
        """Run one full pass now. Returns None if a tick is already running."""
        if self._tick_lock.locked():
            logger.warning("Reconciliation tick already running; trigger skipped")
            return None
        async with self._tick_lock:
            summary = await self._tick()
            self._last_summary = summary
            return summary

    async def _run_forever(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                await self.run_tick()
            except Exception:  # pylint: disable=broad-except
                logger.exception("Reconciliation tick crashed")

    async def _tick(self) -> TickSummary:
        started_at = utcnow()
        logger.info("Reconciliation tick started")
        try:
            items = await asyncio.to_thread(self._watchlist.list_all)
        except StorageFault as exc:
            # Nothing to process; the next scheduled tick tries again.
            logger.error("Reconciliation tick aborted, could not load watched items: %s", exc)
            return TickSummary(load_failed=True, started_at=started_at, finished_at=utcnow())

        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def bounded(item: WatchedItem) -> int | None:
            async with semaphore:
                return await self._check_item(item)

        results = await asyncio.gather(*(bounded(item) for item in items))

        failed = sum(1 for r in results if r is None)
        summary = TickSummary(
            total=len(items),
            succeeded=len(items) - failed,
            failed=failed,
            alerts_created=sum(r for r in results if r is not None),
            started_at=started_at,
            finished_at=utcnow(),
        )
        logger.info(
            "Reconciliation tick finished: %s items, %s ok, %s failed, %s alerts",
            summary.total,
            summary.succeeded,
            summary.failed,
            summary.alerts_created,
        )
        return summary

    async def _check_item(self, item: WatchedItem) -> int | None:
        """Check one item. Returns alerts created, or None if the check failed."""
        try:
            payload = await self._gateway.fetch_by_id(item.external_id)
            neo = NeoObject.from_payload(payload)
        except ProviderError as exc:
            logger.warning(
                "Check failed for watched item %s (owner %s, object %s): %s",
                item.id, item.owner_id, item.external_id, exc,
            )
            return None
        except Exception:  # pylint: disable=broad-except
            logger.exception(
                "Unexpected error fetching watched item %s (owner %s, object %s)",
                item.id, item.owner_id, item.external_id,
            )
            return None

        try:
            analysis = score(neo)
            previous_score = item.risk_score
            alerts = build_alerts(item, analysis, previous_score)
            await asyncio.to_thread(
                self._watchlist.update_snapshot,
                item.id,
                payload,
                analysis.score,
                analysis.level,
                alerts,
            )
        except NeoWatchError as exc:
            logger.error(
                "Could not persist check for watched item %s (owner %s, object %s): %s",
                item.id, item.owner_id, item.external_id, exc,
            )
            return None
        except Exception:  # pylint: disable=broad-except
            logger.exception(
                "Unexpected error checking watched item %s (owner %s, object %s)",
                item.id, item.owner_id, item.external_id,
            )
            return None

        if alerts:
            logger.info(
                "Watched item %s (owner %s): score %s -> %s, %s alert(s)",
                item.id, item.owner_id, previous_score, analysis.score, len(alerts),
            )
        return len(alerts)
