"""Integration tests for the notification websocket and diagnostics routes."""

from __future__ import annotations

import pathlib
import sys
import time

import pytest

pytest.importorskip("httpx")

ROOT = pathlib.Path(__file__).resolve().parents[4]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from starlette.websockets import WebSocketDisconnect

from reelhub.infrastructure.database import build_engine, initialize_database
from reelhub.infrastructure.notifications import SqlAlchemyNotificationGateway
from reelhub.infrastructure.security import create_access_token
from reelhub.main import create_app


def _wait_for(predicate, timeout: float = 3.0) -> None:
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError("condition not met in time")
        time.sleep(0.02)


def _ws_url(user_id: int) -> str:
    return f"/notifications/ws?token={create_access_token({'sub': str(user_id)})}"


def _auth_headers(user_id: int) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token({'sub': str(user_id)})}"}


@pytest.fixture()
def gateway(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'notifications.db'}")
    initialize_database(engine)
    yield SqlAlchemyNotificationGateway(sessionmaker(bind=engine, autoflush=False))
    engine.dispose()


@pytest.fixture()
def client(gateway):
    app = create_app(gateway=gateway)
    with TestClient(app) as test_client:
        yield test_client


def _hub(client: TestClient):
    return client.app.state.notification_hub


def test_websocket_without_token_is_rejected(client: TestClient) -> None:
    with pytest.raises(WebSocketDisconnect) as excinfo:
        with client.websocket_connect("/notifications/ws"):
            pass
    assert excinfo.value.code == 1008


def test_websocket_with_invalid_token_is_rejected(client: TestClient) -> None:
    with pytest.raises(WebSocketDisconnect) as excinfo:
        with client.websocket_connect("/notifications/ws?token=not-a-jwt"):
            pass
    assert excinfo.value.code == 1008


def test_live_notification_reaches_the_socket(client: TestClient) -> None:
    hub = _hub(client)
    with client.websocket_connect(_ws_url(7)) as websocket:
        _wait_for(lambda: 7 in hub.list_connected_users())

        hub.deliver(7, {"type": "banned", "text": "Your account has been banned by a moderator"})

        assert websocket.receive_json() == {
            "type": "banned",
            "text": "Your account has been banned by a moderator",
        }

    _wait_for(lambda: 7 not in hub.list_connected_users())


def test_client_ping_is_answered_with_pong(client: TestClient) -> None:
    with client.websocket_connect(_ws_url(3)) as websocket:
        websocket.send_text("not json")
        websocket.send_json({"type": "ping"})
        assert websocket.receive_json() == {"type": "pong"}


def test_closed_socket_falls_back_to_storage(client: TestClient, gateway) -> None:
    hub = _hub(client)
    with client.websocket_connect(_ws_url(17)):
        _wait_for(lambda: 17 in hub.list_connected_users())

    _wait_for(lambda: 17 not in hub.list_connected_users())
    hub.deliver(17, {"type": "follow", "text": "Ann started following you"})

    _wait_for(lambda: len(gateway.list_pending(17)) == 1)
    assert gateway.list_pending(17)[0].type == "follow"


def test_binary_frames_are_ignored(client: TestClient) -> None:
    with client.websocket_connect(_ws_url(5)) as websocket:
        websocket.send_bytes(b"\x00\x01")
        websocket.send_json({"type": "ping"})
        assert websocket.receive_json() == {"type": "pong"}


def test_offline_notification_is_flushed_on_reconnect(client: TestClient, gateway) -> None:
    hub = _hub(client)
    payload = {"type": "follow", "text": "Ann started following you"}

    hub.deliver(99, payload)
    _wait_for(lambda: len(gateway.list_pending(99)) == 1)

    response = client.get("/notifications/pending", headers=_auth_headers(99))
    assert response.status_code == 200
    assert [item["type"] for item in response.json()] == ["follow"]

    with client.websocket_connect(_ws_url(99)) as websocket:
        assert websocket.receive_json() == payload
        _wait_for(lambda: gateway.list_pending(99) == [])


def test_connected_users_endpoint(client: TestClient) -> None:
    hub = _hub(client)
    assert client.get("/notifications/connected").status_code == 401

    with client.websocket_connect(_ws_url(21)):
        _wait_for(lambda: 21 in hub.list_connected_users())
        response = client.get("/notifications/connected", headers=_auth_headers(1))

    assert response.status_code == 200
    assert response.json() == {"user_ids": [21], "count": 1}


def test_health_reports_connected_users(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "connected_users": 0}
