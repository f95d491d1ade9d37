"""NASA NeoWs gateway for near-Earth-object data."""
import logging
import os
from typing import Any
from urllib.parse import quote

import httpx

from neo_watch.errors import ProviderError
from neo_watch.providers.core import NeoGatewayABC
from neo_watch.providers.neows.models import (NeoWsBrowseParams,
                                              NeoWsFeedParams)

logger = logging.getLogger(__name__)


class NeoWsGateway(NeoGatewayABC):
    """Gateway to NASA's Near Earth Object Web Service.

    The API key travels in the ``X-Api-Key`` header so it never shows up in
    request URLs, and therefore never in error messages or logs. Failures of
    any kind surface as ProviderError; nothing is retried here.
    """

    BASE_URL = "https://api.nasa.gov/neo/rest/v1"

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str = BASE_URL,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the NeoWs gateway.

        Args:
            api_key: api.nasa.gov key. Defaults to NASA_API_KEY env var, then DEMO_KEY.
            base_url: NeoWs REST root.
            timeout: Per-request timeout in seconds.
            transport: Optional httpx transport (tests use httpx.MockTransport).
        """
        self._api_key = api_key or os.getenv("NASA_API_KEY") or "DEMO_KEY"
        headers = {"Accept": "application/json", "X-Api-Key": self._api_key}
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def fetch_feed(self, start_date: str, end_date: str) -> dict[str, Any]:
        """Fetch the close-approach feed for a date window (NeoWs allows up to 7 days)."""
        params = NeoWsFeedParams(start_date=start_date, end_date=end_date).model_dump()
        data = await self._get("/feed", params=params)
        if not isinstance(data.get("near_earth_objects"), dict):
            raise ProviderError("Malformed feed payload: 'near_earth_objects' missing")
        return data

    async def fetch_by_id(self, external_id: str) -> dict[str, Any]:
        """Look up one object by NeoWs id."""
        return await self._get(f"/neo/{quote(str(external_id), safe='')}")

    async def browse(self, page: int = 0, size: int = 20) -> dict[str, Any]:
        """Fetch one page of the overall NEO catalogue."""
        params = NeoWsBrowseParams(page=page, size=size).model_dump()
        data = await self._get("/neo/browse", params=params)
        if not isinstance(data.get("near_earth_objects"), list):
            raise ProviderError("Malformed browse payload: 'near_earth_objects' missing")
        return data

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """GET a NeoWs path and return its JSON object, mapping every failure to ProviderError."""
        try:
            response = await self._client.get(path, params=params)
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            logger.warning("NeoWs request to %s timed out", path)
            raise ProviderError(f"Request to NeoWs timed out ({path})", timeout=True) from exc
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            logger.warning("NeoWs returned HTTP %s for %s", status, path)
            raise ProviderError(
                f"NeoWs returned HTTP {status} for {path}", status_code=status
            ) from exc
        except httpx.HTTPError as exc:
            logger.warning("NeoWs request to %s failed: %s", path, type(exc).__name__)
            raise ProviderError(f"NeoWs unreachable ({path})") from exc

        try:
            data = response.json()
        except ValueError as exc:
            logger.warning("NeoWs sent a non-JSON body for %s", path)
            raise ProviderError(f"Malformed payload from NeoWs ({path})") from exc
        if not isinstance(data, dict):
            raise ProviderError(f"Malformed payload from NeoWs ({path}): expected an object")
        return data
