"""Shared fixtures: per-test SQLite database, fake NeoWs gateway, stores, API client."""
from typing import Any

import jwt
import pytest
from dependency_injector import providers
from fastapi.testclient import TestClient

from neo_watch.container import init_container
from neo_watch.db.sessions import create_db_engine, init_db
from neo_watch.errors import ProviderError
from neo_watch.main import create_app
from neo_watch.providers import NeoGatewayABC
from neo_watch.stores import AlertStore, ChatStore, WatchlistStore

JWT_SECRET = "neo-watch-test-secret-0123456789abcdef"


def approach(
    miss_au: float | str,
    velocity_km_s: float | str = "12.5",
    date_full: str | None = "2026-Oct-20 12:00",
    date: str = "2026-10-20",
) -> dict[str, Any]:
    """One close_approach_data record, numbers as strings the way NeoWs sends them."""
    record = {
        "close_approach_date": date,
        "miss_distance": {"astronomical": str(miss_au), "kilometers": "1000000.0"},
        "relative_velocity": {"kilometers_per_second": str(velocity_km_s)},
        "orbiting_body": "Earth",
    }
    if date_full is not None:
        record["close_approach_date_full"] = date_full
    return record


def neo_payload(
    neo_id: str = "3542519",
    name: str = "(2010 PK9)",
    hazardous: bool = False,
    approaches: list[dict[str, Any]] | None = None,
    diameter_m: tuple[float, float] | None = (80.0, 80.0),
) -> dict[str, Any]:
    """A NeoWs object document."""
    payload: dict[str, Any] = {
        "id": neo_id,
        "neo_reference_id": neo_id,
        "name": name,
        "nasa_jpl_url": f"https://ssd.jpl.nasa.gov/tools/sbdb_lookup.html#/?sstr={neo_id}",
        "absolute_magnitude_h": 21.3,
        "is_potentially_hazardous_asteroid": hazardous,
        "close_approach_data": approaches if approaches is not None else [approach("0.15", "8.0")],
    }
    if diameter_m is not None:
        payload["estimated_diameter"] = {
            "meters": {
                "estimated_diameter_min": diameter_m[0],
                "estimated_diameter_max": diameter_m[1],
            }
        }
    return payload


class FakeGateway(NeoGatewayABC):
    """In-memory gateway: serves configured payloads, fails on demand, records calls."""

    def __init__(self, payloads: dict[str, dict[str, Any]] | None = None) -> None:
        self.payloads: dict[str, dict[str, Any]] = dict(payloads or {})
        self.failing: set[str] = set()
        self.calls: list[str] = []

    async def fetch_feed(self, start_date: str, end_date: str) -> dict[str, Any]:
        self.calls.append(f"feed:{start_date}:{end_date}")
        return {
            "element_count": len(self.payloads),
            "near_earth_objects": {start_date: list(self.payloads.values())},
        }

    async def fetch_by_id(self, external_id: str) -> dict[str, Any]:
        self.calls.append(external_id)
        if external_id in self.failing:
            raise ProviderError(f"NeoWs returned HTTP 503 for /neo/{external_id}", status_code=503)
        if external_id not in self.payloads:
            raise ProviderError(f"NeoWs returned HTTP 404 for /neo/{external_id}", status_code=404)
        return self.payloads[external_id]

    async def browse(self, page: int = 0, size: int = 20) -> dict[str, Any]:
        self.calls.append(f"browse:{page}:{size}")
        objects = list(self.payloads.values())[page * size:(page + 1) * size]
        return {
            "page": {"size": size, "number": page, "total_elements": len(self.payloads)},
            "near_earth_objects": objects,
        }


@pytest.fixture
def engine(tmp_path):
    """Fresh SQLite file with all tables; store calls run on several threads at once."""
    db_engine = create_db_engine(f"sqlite:///{tmp_path / 'neo_watch.db'}")
    init_db(db_engine)
    yield db_engine
    db_engine.dispose()


@pytest.fixture
def gateway():
    return FakeGateway(
        {
            "3542519": neo_payload("3542519", "(2010 PK9)"),
            "2000433": neo_payload(
                "2000433",
                "433 Eros",
                hazardous=True,
                approaches=[approach("0.03", "35.0")],
                diameter_m=(1100.0, 1300.0),
            ),
        }
    )


@pytest.fixture
def watchlist_store(engine, gateway):
    return WatchlistStore(engine, gateway)


@pytest.fixture
def alert_store(engine):
    return AlertStore(engine)


@pytest.fixture
def chat_store(engine):
    return ChatStore(engine)


@pytest.fixture
def container(engine, gateway):
    """Env-configured container with database, gateway and auth pinned for tests."""
    test_container = init_container()
    test_container.engine.override(providers.Object(engine))
    test_container.gateway.override(providers.Object(gateway))
    test_container.config.jwt_secret.from_value(JWT_SECRET)
    test_container.config.jwt_algorithm.from_value("HS256")
    test_container.config.scheduler_enabled.from_value(False)
    return test_container


@pytest.fixture
def client(container):
    with TestClient(create_app(container)) as test_client:
        yield test_client


def make_token(user_id: str, name: str | None = None, secret: str = JWT_SECRET) -> str:
    return jwt.encode({"sub": user_id, "name": name or user_id}, secret, algorithm="HS256")


def auth_headers(user_id: str, name: str | None = None) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(user_id, name)}"}
