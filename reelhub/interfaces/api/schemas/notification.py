"""Pydantic models describing notification payloads."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ClientMessage(BaseModel):
    """Message received from a notification websocket client."""

    model_config = ConfigDict(extra="allow")

    type: str = Field(default="unknown", description="Message discriminator")


class ConnectedUsersRead(BaseModel):
    """Users that currently hold at least one live notification socket."""

    user_ids: list[int]
    count: int


class PendingNotificationRead(BaseModel):
    """A stored notification still waiting to reach the user."""

    id: int
    user_id: int
    type: str
    data: str
    created_at: datetime | None = None


__all__ = ["ClientMessage", "ConnectedUsersRead", "PendingNotificationRead"]
