"""Operational routes for the reconciliation scheduler (manual trigger and status)."""
from fastapi import APIRouter, HTTPException

from neo_watch.deps import CurrentPrincipal, SchedulerDep
from neo_watch.schemas import SchedulerStatus, TickSummary

router = APIRouter(prefix="/scheduler", tags=["scheduler"])


@router.get("/status", response_model=SchedulerStatus)
def scheduler_status(scheduler: SchedulerDep, _: CurrentPrincipal) -> SchedulerStatus:
    return SchedulerStatus(
        enabled=scheduler.started,
        running=scheduler.running,
        interval_seconds=scheduler.interval_seconds,
        last_summary=scheduler.last_summary,
    )


@router.post("/run", response_model=TickSummary)
async def run_now(scheduler: SchedulerDep, _: CurrentPrincipal) -> TickSummary:
    """Run one reconciliation tick now. 409 if a tick is already in progress."""
    summary = await scheduler.run_tick()
    if summary is None:
        raise HTTPException(status_code=409, detail="A reconciliation tick is already running")
    return summary
