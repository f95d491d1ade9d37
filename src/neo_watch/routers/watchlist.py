"""Watchlist routes: the caller's watched objects and their alert preferences."""
from fastapi import APIRouter, status

from neo_watch.deps import CurrentPrincipal, WatchlistStoreDep
from neo_watch.schemas import (AlertSettingsUpdate, WatchedItemRead,
                               WatchRequest)

router = APIRouter(prefix="/watchlist", tags=["watchlist"])


@router.get("", response_model=list[WatchedItemRead])
def list_watchlist(store: WatchlistStoreDep, principal: CurrentPrincipal) -> list[WatchedItemRead]:
    """Get the caller's watched objects, most recently added first."""
    return [WatchedItemRead.from_item(item) for item in store.list_for_owner(principal.id)]


@router.post("", response_model=WatchedItemRead, status_code=status.HTTP_201_CREATED)
async def watch(
    body: WatchRequest,
    store: WatchlistStoreDep,
    principal: CurrentPrincipal,
) -> WatchedItemRead:
    """Start watching an object. 409 if already watched."""
    item = await store.add(principal.id, body.external_id)
    return WatchedItemRead.from_item(item)


@router.get("/{item_id}", response_model=WatchedItemRead)
def get_watched(item_id: int, store: WatchlistStoreDep, principal: CurrentPrincipal) -> WatchedItemRead:
    return WatchedItemRead.from_item(store.get(principal.id, item_id))


@router.delete("/{item_id}")
def unwatch(item_id: int, store: WatchlistStoreDep, principal: CurrentPrincipal) -> dict[str, str]:
    """Stop watching an object."""
    store.remove(principal.id, item_id)
    return {"message": "Removed from watchlist"}


@router.put("/{item_id}/alerts", response_model=WatchedItemRead)
def update_alert_settings(
    item_id: int,
    body: AlertSettingsUpdate,
    store: WatchlistStoreDep,
    principal: CurrentPrincipal,
) -> WatchedItemRead:
    """Update notifyOnApproach and/or distanceThresholdAU; omitted fields are kept."""
    item = store.update_preferences(
        principal.id,
        item_id,
        notify_on_approach=body.notify_on_approach,
        distance_threshold_au=body.distance_threshold_au,
    )
    return WatchedItemRead.from_item(item)
