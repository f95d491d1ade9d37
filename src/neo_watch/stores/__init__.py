"""SQL-backed stores for watchlists, alerts and chat messages."""
from neo_watch.stores.alerts import ALERT_LIST_LIMIT, AlertStore
from neo_watch.stores.chat import ChatStore
from neo_watch.stores.watchlist import WatchlistStore

__all__ = ["ALERT_LIST_LIMIT", "AlertStore", "ChatStore", "WatchlistStore"]
