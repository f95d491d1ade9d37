"""Alert store: append-only per-user notification log with read state."""
from sqlalchemy import func
from sqlmodel import select

from neo_watch.db import Alert
from neo_watch.errors import NotFound
from neo_watch.stores.base import SqlStore

ALERT_LIST_LIMIT = 100


class AlertStore(SqlStore):
    """Per-user alerts. Only is_read ever changes after creation."""

    def create(self, alert: Alert) -> Alert:
        with self._session("create alert") as session:
            session.add(alert)
            return alert

    def list_for_user(self, owner_id: str, unread_only: bool = False) -> list[Alert]:
        """Newest first, at most the 100 most recent."""
        with self._session("list alerts") as session:
            statement = select(Alert).where(Alert.owner_id == owner_id)
            if unread_only:
                statement = statement.where(Alert.is_read == False)  # noqa: E712
            statement = statement.order_by(Alert.created_at.desc(), Alert.id.desc()).limit(
                ALERT_LIST_LIMIT
            )
            return list(session.exec(statement).all())

    def unread_count(self, owner_id: str) -> int:
        with self._session("count unread alerts") as session:
            statement = select(func.count()).select_from(Alert).where(
                Alert.owner_id == owner_id, Alert.is_read == False  # noqa: E712
            )
            return session.exec(statement).one()

    def mark_read(self, owner_id: str, alert_id: int) -> Alert:
        """Raises NotFound if absent or not owned."""
        with self._session("mark alert read") as session:
            alert = self._owned(session, owner_id, alert_id)
            alert.is_read = True
            session.add(alert)
            return alert

    def mark_all_read(self, owner_id: str) -> int:
        """Flip every unread alert of the owner; returns how many changed."""
        with self._session("mark all alerts read") as session:
            unread = session.exec(
                select(Alert).where(Alert.owner_id == owner_id, Alert.is_read == False)  # noqa: E712
            ).all()
            for alert in unread:
                alert.is_read = True
                session.add(alert)
            return len(unread)

    def delete(self, owner_id: str, alert_id: int) -> None:
        """Raises NotFound if absent or not owned."""
        with self._session("delete alert") as session:
            session.delete(self._owned(session, owner_id, alert_id))

    @staticmethod
    def _owned(session, owner_id: str, alert_id: int) -> Alert:  # noqa: ANN001
        alert = session.get(Alert, alert_id)
        if alert is None or alert.owner_id != owner_id:
            raise NotFound("Alert not found")
        return alert
