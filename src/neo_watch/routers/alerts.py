"""Alert routes: the caller's notifications and their read state."""
from fastapi import APIRouter, Query

from neo_watch.deps import AlertStoreDep, CurrentPrincipal
from neo_watch.schemas import AlertRead

router = APIRouter(prefix="/alerts", tags=["alerts"])


@router.get("", response_model=list[AlertRead])
def list_alerts(
    store: AlertStoreDep,
    principal: CurrentPrincipal,
    unread: bool = Query(default=False, description="Only unread alerts"),
) -> list[AlertRead]:
    """Get the caller's alerts, newest first (at most 100)."""
    return [AlertRead.model_validate(a) for a in store.list_for_user(principal.id, unread_only=unread)]


@router.get("/unread-count")
def unread_count(store: AlertStoreDep, principal: CurrentPrincipal) -> dict[str, int]:
    return {"unread": store.unread_count(principal.id)}


@router.put("/read-all")
def mark_all_read(store: AlertStoreDep, principal: CurrentPrincipal) -> dict[str, int | str]:
    updated = store.mark_all_read(principal.id)
    return {"message": "All alerts marked as read", "updated": updated}


@router.put("/{alert_id}/read", response_model=AlertRead)
def mark_read(alert_id: int, store: AlertStoreDep, principal: CurrentPrincipal) -> AlertRead:
    return AlertRead.model_validate(store.mark_read(principal.id, alert_id))


@router.delete("/{alert_id}")
def delete_alert(alert_id: int, store: AlertStoreDep, principal: CurrentPrincipal) -> dict[str, str]:
    store.delete(principal.id, alert_id)
    return {"message": "Alert deleted"}
