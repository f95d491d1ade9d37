"""Domain exceptions shared by stores, services and the provider gateway."""


class NeoWatchError(Exception):
    """Base class for all NEO Watch domain errors."""


class ProviderError(NeoWatchError):
    """External data provider unreachable, rejected the call, or sent invalid data.

    Attributes:
        status_code: Upstream HTTP status when the provider answered, else None.
        timeout: True when the call timed out.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        timeout: bool = False,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.timeout = timeout


class NotFound(NeoWatchError):
    """Record absent or not owned by the caller."""


class AlreadyWatched(NeoWatchError):
    """The (owner, external object) pair is already on the watchlist."""


class InvalidMessage(NeoWatchError):
    """Chat message body failed validation."""


class StorageFault(NeoWatchError):
    """Underlying persistence unavailable or failed."""
