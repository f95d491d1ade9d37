"""Abstract base class for NEO data provider gateways."""
from abc import ABC, abstractmethod
from typing import Any


class NeoGatewayABC(ABC):
    """Base interface for the external astronomical data source.

    Every operation returns the provider's native JSON document or raises
    ProviderError (network failure, non-2xx response, malformed payload).
    Gateways never retry; retry policy belongs to callers.
    """

    @abstractmethod
    async def fetch_feed(self, start_date: str, end_date: str) -> dict[str, Any]:
        """Fetch objects with close approaches between two dates.

        Args:
            start_date: First day of the window (YYYY-MM-DD).
            end_date: Last day of the window (YYYY-MM-DD).

        Returns:
            Feed document; ``near_earth_objects`` maps each date to a list of objects.
        """

    @abstractmethod
    async def fetch_by_id(self, external_id: str) -> dict[str, Any]:
        """Look up one object by its provider id.

        Args:
            external_id: Provider object id (e.g. "3542519").

        Returns:
            The object document, including its close-approach records.
        """

    @abstractmethod
    async def browse(self, page: int = 0, size: int = 20) -> dict[str, Any]:
        """Page through the provider's overall object catalogue.

        Args:
            page: Zero-based page number.
            size: Page size.

        Returns:
            Browse document; ``near_earth_objects`` is a list of objects.
        """

    async def close(self) -> None:
        """Clean up resources (connections, clients).

        Override in subclasses if cleanup is needed.
        """

    async def __aenter__(self) -> "NeoGatewayABC":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        """Async context manager exit - calls close()."""
        await self.close()
