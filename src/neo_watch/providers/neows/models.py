"""Models for the NeoWs provider (NEO value object and API params)."""
from typing import Any

from pydantic import (BaseModel, ConfigDict, PrivateAttr, ValidationError,
                      field_validator)

from neo_watch.errors import ProviderError


class _ProviderValue(BaseModel):
    """Read-only view over a fragment of a provider document."""

    model_config = ConfigDict(frozen=True, extra="ignore")


class MissDistance(_ProviderValue):
    astronomical: float
    kilometers: float | None = None


class RelativeVelocity(_ProviderValue):
    kilometers_per_second: float


class CloseApproach(_ProviderValue):
    """One close-approach event; NeoWs sends the numbers as strings."""

    close_approach_date: str | None = None
    close_approach_date_full: str | None = None
    miss_distance: MissDistance
    relative_velocity: RelativeVelocity
    orbiting_body: str | None = None

    @property
    def miss_distance_au(self) -> float:
        return self.miss_distance.astronomical

    @property
    def velocity_km_s(self) -> float:
        return self.relative_velocity.kilometers_per_second

    @property
    def approach_date(self) -> str | None:
        """Full timestamp when the provider has one, else the plain date."""
        return self.close_approach_date_full or self.close_approach_date


class DiameterRange(_ProviderValue):
    estimated_diameter_min: float
    estimated_diameter_max: float


class EstimatedDiameter(_ProviderValue):
    meters: DiameterRange | None = None


class NeoObject(_ProviderValue):
    """Read-only value object over a NeoWs near-Earth-object document.

    Exposes the fields the risk engine needs under stable names; everything
    else the provider sends is kept untouched in ``raw``.
    """

    id: str
    name: str
    is_potentially_hazardous_asteroid: bool = False
    estimated_diameter: EstimatedDiameter | None = None
    close_approach_data: tuple[CloseApproach, ...] = ()

    _raw: dict[str, Any] = PrivateAttr(default_factory=dict)

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_str(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) else value

    @field_validator("close_approach_data", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return () if value is None else value

    @classmethod
    def from_payload(cls, payload: Any) -> "NeoObject":
        """Parse a provider document. Raises ProviderError when it is malformed."""
        if not isinstance(payload, dict):
            raise ProviderError("Malformed NEO payload: expected an object")
        try:
            neo = cls.model_validate(payload)
        except ValidationError as exc:
            ref = payload.get("id", "<unknown>")
            raise ProviderError(
                f"Malformed NEO payload for '{ref}': {exc.error_count()} invalid field(s)"
            ) from exc
        neo._raw = payload
        return neo

    @property
    def raw(self) -> dict[str, Any]:
        """The provider document this object was parsed from."""
        return self._raw

    @property
    def is_potentially_hazardous(self) -> bool:
        return self.is_potentially_hazardous_asteroid

    @property
    def average_diameter_m(self) -> float | None:
        """Mean of the provider's min/max diameter estimate in meters."""
        if self.estimated_diameter is None or self.estimated_diameter.meters is None:
            return None
        meters = self.estimated_diameter.meters
        return (meters.estimated_diameter_min + meters.estimated_diameter_max) / 2

    @property
    def close_approaches(self) -> tuple[CloseApproach, ...]:
        return self.close_approach_data

    @property
    def first_approach(self) -> CloseApproach | None:
        return self.close_approach_data[0] if self.close_approach_data else None

    @property
    def closest_approach(self) -> CloseApproach | None:
        """Record with the smallest miss distance; the earliest record wins ties."""
        closest: CloseApproach | None = None
        for approach in self.close_approach_data:
            if closest is None or approach.miss_distance_au < closest.miss_distance_au:
                closest = approach
        return closest


class NeoWsFeedParams(BaseModel):
    """Params for /feed (fetch_feed)."""

    start_date: str
    end_date: str


class NeoWsBrowseParams(BaseModel):
    """Params for /neo/browse (browse)."""

    page: int = 0
    size: int = 20
