from fastapi import APIRouter, Depends

from reelhub.infrastructure.notifications import NotificationHub
from reelhub.interfaces.api.dependencies import get_notification_hub

router = APIRouter()


@router.get("/health")
async def health(hub: NotificationHub = Depends(get_notification_hub)) -> dict[str, object]:
    return {"status": "ok", "connected_users": len(hub.list_connected_users())}
