"""Endpoints and websocket handler for realtime notifications."""

from __future__ import annotations

import json
import logging

from anyio import to_thread
from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from reelhub.config import get_settings
from reelhub.domain.entities import NotificationRecord, OutboundEnvelope
from reelhub.infrastructure.notifications import (
    PONG_MESSAGE,
    NotificationGateway,
    NotificationHub,
)
from reelhub.infrastructure.security import user_id_from_token
from reelhub.interfaces.api.dependencies import (
    get_current_user_id,
    get_notification_gateway,
    get_notification_hub,
)
from reelhub.interfaces.api.schemas import (
    ClientMessage,
    ConnectedUsersRead,
    PendingNotificationRead,
)

router = APIRouter(prefix="/notifications", tags=["notifications"])

logger = logging.getLogger(__name__)

POLICY_VIOLATION = 1008


def _record_to_schema(record: NotificationRecord) -> PendingNotificationRead:
    return PendingNotificationRead(
        id=record.id or 0,
        user_id=record.user_id,
        type=record.type,
        data=record.data,
        created_at=record.created_at,
    )


def _origin_allowed(websocket: WebSocket) -> bool:
    allowed = get_settings().allowed_origins
    if not allowed:
        return True
    return websocket.headers.get("origin") in allowed


@router.get("/connected", response_model=ConnectedUsersRead)
def list_connected_users(
    hub: NotificationHub = Depends(get_notification_hub),
    _: int = Depends(get_current_user_id),
) -> ConnectedUsersRead:
    """Return the users that currently have a live notification socket."""

    user_ids = sorted(hub.list_connected_users())
    return ConnectedUsersRead(user_ids=user_ids, count=len(user_ids))


@router.get("/pending", response_model=list[PendingNotificationRead])
async def list_pending_notifications(
    gateway: NotificationGateway = Depends(get_notification_gateway),
    user_id: int = Depends(get_current_user_id),
) -> list[PendingNotificationRead]:
    """Return the authenticated user's notifications not delivered yet."""

    records = await to_thread.run_sync(gateway.list_pending, user_id)
    return [_record_to_schema(record) for record in records]


@router.websocket("/ws")
async def notifications_websocket(websocket: WebSocket) -> None:
    """Websocket endpoint that streams notifications to the authenticated user."""

    if not _origin_allowed(websocket):
        await websocket.close(code=POLICY_VIOLATION)
        return
    try:
        user_id = user_id_from_token(websocket.query_params.get("token"))
    except ValueError:
        await websocket.close(code=POLICY_VIOLATION)
        return

    hub: NotificationHub = websocket.app.state.notification_hub
    await websocket.accept()
    connection = hub.register(user_id, websocket)
    try:
        await hub.flush_pending(user_id, connection)
        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                break
            raw = frame.get("text")
            if raw is None:
                continue
            try:
                message = ClientMessage.model_validate(json.loads(raw))
            except (ValueError, ValidationError):
                continue

            if message.type == "ping":
                connection.enqueue(OutboundEnvelope(data=PONG_MESSAGE))
    except WebSocketDisconnect:
        pass
    except Exception:
        logger.exception("Notification socket of user %s failed", user_id)
        raise
    finally:
        hub.deregister(user_id, connection)
