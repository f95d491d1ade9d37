"""Asteroid browsing: provider documents annotated with a risk analysis."""
from datetime import date
from typing import Any

from neo_watch.errors import ProviderError
from neo_watch.providers import NeoGatewayABC, NeoObject
from neo_watch.risk import score
from neo_watch.utils import parse_date, today_iso


def annotate(payload: dict[str, Any]) -> dict[str, Any]:
    """Copy of a provider object with an embedded ``risk_analysis``."""
    analysis = score(NeoObject.from_payload(payload))
    return payload | {"risk_analysis": analysis.model_dump(mode="json")}


class AsteroidService:
    """Thin service over the gateway; every returned object carries its risk analysis."""

    def __init__(self, gateway: NeoGatewayABC) -> None:
        self._gateway = gateway

    async def feed(
        self,
        start_date: str | date | None = None,
        end_date: str | date | None = None,
    ) -> dict[str, Any]:
        """Feed for a date window; both ends default to today."""
        start = parse_date(start_date) or today_iso()
        end = parse_date(end_date) or today_iso()
        data = await self._gateway.fetch_feed(start, end)
        by_day: dict[str, list[dict[str, Any]]] = {}
        for day, objects in data["near_earth_objects"].items():
            if not isinstance(objects, list):
                raise ProviderError(f"Malformed feed payload for {day}")
            by_day[day] = [annotate(obj) for obj in objects]
        return data | {"near_earth_objects": by_day}

    async def lookup(self, external_id: str) -> dict[str, Any]:
        return annotate(await self._gateway.fetch_by_id(external_id))

    async def browse(self, page: int = 0, size: int = 20) -> dict[str, Any]:
        data = await self._gateway.browse(page, size)
        return data | {"near_earth_objects": [annotate(obj) for obj in data["near_earth_objects"]]}
