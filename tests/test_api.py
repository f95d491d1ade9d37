"""HTTP and WebSocket tests against the FastAPI app with a fake gateway and in-memory database."""
from datetime import datetime, timedelta, timezone

import jwt
import pytest
from fastapi import WebSocketDisconnect

from conftest import JWT_SECRET, auth_headers, make_token
from neo_watch.db import Alert, AlertType
from neo_watch.utils import today_iso

ALICE = auth_headers("alice", "Alice")
BOB = auth_headers("bob", "Bob")


# ============================================================
# HEALTH AND AUTH
# ============================================================

def test_health_needs_no_token(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert "timestamp" in response.json()


@pytest.mark.parametrize("path", ["/watchlist", "/alerts", "/asteroids/browse", "/scheduler/status"])
def test_missing_token_is_401(client, path):
    response = client.get(path)
    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"


def test_bad_and_expired_tokens_are_401(client):
    forged = make_token("alice", secret="some-other-secret-0123456789abcdefgh")
    response = client.get("/watchlist", headers={"Authorization": f"Bearer {forged}"})
    assert response.status_code == 401

    expired = jwt.encode(
        {"sub": "alice", "exp": datetime.now(timezone.utc) - timedelta(minutes=5)},
        JWT_SECRET,
        algorithm="HS256",
    )
    response = client.get("/watchlist", headers={"Authorization": f"Bearer {expired}"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Token expired"


def test_token_without_subject_is_401(client):
    token = jwt.encode({"name": "nobody"}, JWT_SECRET, algorithm="HS256")
    response = client.get("/alerts", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


# ============================================================
# ASTEROIDS
# ============================================================

def test_feed_annotates_every_object(client, gateway):
    response = client.get(
        "/asteroids/feed",
        params={"start_date": "2026-10-19", "end_date": "2026-10-20"},
        headers=ALICE,
    )
    assert response.status_code == 200
    objects = response.json()["near_earth_objects"]["2026-10-19"]
    scores = {obj["id"]: obj["risk_analysis"]["score"] for obj in objects}
    assert scores == {"3542519": 18, "2000433": 100}
    eros = next(obj for obj in objects if obj["id"] == "2000433")
    assert eros["risk_analysis"]["level"] == "CRITICAL"
    assert eros["risk_analysis"]["factors"]["miss_distance_au"] == pytest.approx(0.03)
    assert gateway.calls == ["feed:2026-10-19:2026-10-20"]


def test_feed_dates_default_to_today(client, gateway):
    assert client.get("/asteroids/feed", headers=ALICE).status_code == 200
    today = today_iso()
    assert gateway.calls == [f"feed:{today}:{today}"]


def test_feed_rejects_bad_dates(client):
    response = client.get("/asteroids/feed", params={"start_date": "yesterday"}, headers=ALICE)
    assert response.status_code == 422


def test_browse(client):
    response = client.get("/asteroids/browse", params={"page": 0, "size": 1}, headers=ALICE)
    assert response.status_code == 200
    body = response.json()
    assert len(body["near_earth_objects"]) == 1
    assert "risk_analysis" in body["near_earth_objects"][0]
    assert body["page"]["number"] == 0

    assert client.get("/asteroids/browse", params={"size": 0}, headers=ALICE).status_code == 422


def test_lookup(client):
    response = client.get("/asteroids/3542519", headers=ALICE)
    assert response.status_code == 200
    body = response.json()
    assert body["name"] == "(2010 PK9)"
    assert body["risk_analysis"] == {
        "score": 18,
        "level": "LOW",
        "factors": {
            "is_hazardous": False,
            "miss_distance_au": 0.15,
            "diameter_m": 80.0,
            "velocity_km_s": 8.0,
            "close_approach_date": "2026-Oct-20 12:00",
        },
    }


def test_provider_errors_map_to_gateway_statuses(client, gateway):
    assert client.get("/asteroids/404404", headers=ALICE).status_code == 404

    gateway.failing.add("3542519")
    response = client.get("/asteroids/3542519", headers=ALICE)
    assert response.status_code == 502
    assert response.json()["detail"] == "NeoWs error"


# ============================================================
# WATCHLIST
# ============================================================

def watch(client, external_id, headers=ALICE):
    return client.post("/watchlist", json={"externalId": external_id}, headers=headers)


def test_watch_and_list(client):
    response = watch(client, "2000433")
    assert response.status_code == 201
    item = response.json()
    assert item["external_id"] == "2000433"
    assert item["name"] == "433 Eros"
    assert item["risk_score"] == 100
    assert item["risk_level"] == "CRITICAL"
    assert item["alert_settings"] == {"notify_on_approach": True, "distance_threshold_au": 0.05}
    assert item["snapshot"]["id"] == "2000433"

    watch(client, "3542519")
    listed = client.get("/watchlist", headers=ALICE).json()
    assert [i["external_id"] for i in listed] == ["3542519", "2000433"]
    assert client.get("/watchlist", headers=BOB).json() == []


def test_watch_twice_is_409(client):
    assert watch(client, "3542519").status_code == 201
    response = watch(client, "3542519")
    assert response.status_code == 409
    assert watch(client, "3542519", headers=BOB).status_code == 201


def test_watch_unknown_object_is_404(client):
    assert watch(client, "404404").status_code == 404
    assert client.get("/watchlist", headers=ALICE).json() == []


def test_items_are_private_to_their_owner(client):
    item_id = watch(client, "3542519").json()["id"]

    assert client.get(f"/watchlist/{item_id}", headers=ALICE).status_code == 200
    assert client.get(f"/watchlist/{item_id}", headers=BOB).status_code == 404
    assert client.delete(f"/watchlist/{item_id}", headers=BOB).status_code == 404

    response = client.delete(f"/watchlist/{item_id}", headers=ALICE)
    assert response.status_code == 200
    assert response.json() == {"message": "Removed from watchlist"}
    assert client.delete(f"/watchlist/{item_id}", headers=ALICE).status_code == 404


def test_update_alert_settings(client):
    item_id = watch(client, "3542519").json()["id"]

    response = client.put(
        f"/watchlist/{item_id}/alerts", json={"distanceThresholdAU": 0.2}, headers=ALICE
    )
    assert response.status_code == 200
    assert response.json()["alert_settings"] == {
        "notify_on_approach": True,
        "distance_threshold_au": 0.2,
    }

    response = client.put(
        f"/watchlist/{item_id}/alerts", json={"notifyOnApproach": False}, headers=ALICE
    )
    assert response.json()["alert_settings"] == {
        "notify_on_approach": False,
        "distance_threshold_au": 0.2,
    }

    bad = client.put(f"/watchlist/{item_id}/alerts", json={"distanceThresholdAU": 0}, headers=ALICE)
    assert bad.status_code == 422
    other = client.put(f"/watchlist/{item_id}/alerts", json={"notifyOnApproach": True}, headers=BOB)
    assert other.status_code == 404


# ============================================================
# SCHEDULER AND ALERTS
# ============================================================

def test_manual_tick_raises_alerts_for_the_owner(client):
    watch(client, "2000433")

    response = client.post("/scheduler/run", headers=ALICE)
    assert response.status_code == 200
    summary = response.json()
    assert summary["total"] == 1
    assert summary["succeeded"] == 1
    assert summary["alerts_created"] == 1

    alerts = client.get("/alerts", headers=ALICE).json()
    assert len(alerts) == 1
    assert alerts[0]["alert_type"] == "CLOSE_APPROACH"
    assert alerts[0]["object_name"] == "433 Eros"
    assert alerts[0]["is_read"] is False
    assert client.get("/alerts", headers=BOB).json() == []

    status = client.get("/scheduler/status", headers=ALICE).json()
    assert status["enabled"] is False
    assert status["running"] is False
    assert status["last_summary"]["alerts_created"] == 1


def test_alert_read_state(client, container):
    store = container.alert_store()
    created = [
        store.create(
            Alert(
                owner_id="alice",
                external_id="3542519",
                object_name="(2010 PK9)",
                alert_type=AlertType.NEW_DATA,
                message=f"update {n}",
            )
        )
        for n in range(3)
    ]

    assert client.get("/alerts/unread-count", headers=ALICE).json() == {"unread": 3}

    response = client.put(f"/alerts/{created[0].id}/read", headers=ALICE)
    assert response.status_code == 200
    assert response.json()["is_read"] is True
    assert client.put(f"/alerts/{created[0].id}/read", headers=BOB).status_code == 404

    unread = client.get("/alerts", params={"unread": True}, headers=ALICE).json()
    assert {a["id"] for a in unread} == {created[1].id, created[2].id}

    response = client.put("/alerts/read-all", headers=ALICE)
    assert response.json() == {"message": "All alerts marked as read", "updated": 2}
    assert client.get("/alerts/unread-count", headers=ALICE).json() == {"unread": 0}

    response = client.delete(f"/alerts/{created[1].id}", headers=ALICE)
    assert response.json() == {"message": "Alert deleted"}
    assert client.delete(f"/alerts/{created[1].id}", headers=ALICE).status_code == 404
    assert len(client.get("/alerts", headers=ALICE).json()) == 2


# ============================================================
# CHAT
# ============================================================

def chat_url(user_id: str, name: str) -> str:
    return f"/chat/ws?token={make_token(user_id, name)}"


def test_chat_rejects_bad_token(client):
    with client.websocket_connect("/chat/ws?token=garbage") as ws:
        with pytest.raises(WebSocketDisconnect) as exc_info:
            ws.receive_json()
    assert exc_info.value.code == 4401


def test_chat_rejects_missing_token(client):
    with client.websocket_connect("/chat/ws") as ws:
        with pytest.raises(WebSocketDisconnect) as exc_info:
            ws.receive_json()
    assert exc_info.value.code == 4401


def test_chat_room_flow(client):
    with client.websocket_connect(chat_url("alice", "Alice")) as alice:
        alice.send_json({"event": "join-room", "roomId": "2000433"})
        assert alice.receive_json() == {"event": "room-history", "data": []}

        alice.send_json({"event": "send-message", "roomId": "2000433", "body": "Eros again"})
        frame = alice.receive_json()
        assert frame["event"] == "new-message"
        assert frame["data"]["body"] == "Eros again"
        assert frame["data"]["author_id"] == "alice"
        assert frame["data"]["author_name"] == "Alice"
        assert frame["data"]["room_id"] == "2000433"

        with client.websocket_connect(chat_url("bob", "Bob")) as bob:
            bob.send_json({"event": "join-room", "roomId": "2000433"})
            history = bob.receive_json()
            assert history["event"] == "room-history"
            assert [m["body"] for m in history["data"]] == ["Eros again"]

            bob.send_json({"event": "send-message", "roomId": "2000433", "body": "saw it"})
            assert bob.receive_json()["data"]["body"] == "saw it"
            from_bob = alice.receive_json()
            assert from_bob["event"] == "new-message"
            assert from_bob["data"]["author_name"] == "Bob"


def test_chat_errors_go_to_the_sender(client):
    with client.websocket_connect(chat_url("alice", "Alice")) as ws:
        ws.send_json({"event": "send-message", "roomId": "general", "body": "x" * 501})
        frame = ws.receive_json()
        assert frame["event"] == "send-error"
        assert "500" in frame["data"]["reason"]

        ws.send_json({"event": "send-message", "roomId": "general", "body": ""})
        assert ws.receive_json()["event"] == "send-error"

        ws.send_json({"event": "shout", "roomId": "general"})
        assert ws.receive_json()["event"] == "send-error"

        ws.send_text("not json")
        assert ws.receive_json()["event"] == "send-error"

        ws.send_json({"event": "join-room", "roomId": "general"})
        assert ws.receive_json() == {"event": "room-history", "data": []}


def test_chat_leave_room(client):
    with client.websocket_connect(chat_url("alice", "Alice")) as alice, \
            client.websocket_connect(chat_url("bob", "Bob")) as bob:
        alice.send_json({"event": "join-room", "roomId": "general"})
        alice.receive_json()
        alice.send_json({"event": "leave-room", "roomId": "general"})
        # frames are handled in order; the error reply confirms the leave was applied
        alice.send_json({"event": "ping"})
        assert alice.receive_json()["event"] == "send-error"

        bob.send_json({"event": "join-room", "roomId": "general"})
        bob.receive_json()
        bob.send_json({"event": "send-message", "roomId": "general", "body": "hello?"})
        assert bob.receive_json()["data"]["body"] == "hello?"

        # alice left, so the next frame she sees is the history of a fresh join
        alice.send_json({"event": "join-room", "roomId": "general"})
        history = alice.receive_json()
        assert history["event"] == "room-history"
        assert [m["body"] for m in history["data"]] == ["hello?"]
